"""
Backend Router — Repositories & Analysis
==========================================

GET    /api/repositories                         — List repositories (?unassigned=true)
POST   /api/repositories                         — Register a repository
POST   /api/repositories/analyze                 — Start a DevOps analysis
GET    /api/repositories/analysis/{id}           — Analysis status
GET    /api/repositories/analyses                — All analyses of the caller
GET    /api/repositories/{owner}/{name}/summary  — Latest completed analysis
DELETE /api/repositories/analysis/{id}           — Delete an analysis
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, Field

from backend.config import current_user, get_analyzer, get_cipher, get_store
from backend.crypto import EncryptionError, TokenCipher
from backend.errors import to_http
from backend.models import Repository
from backend.store import InMemoryStore, StoreError
from devops_analyzer.engine import RepositoryAnalyzer
from devops_analyzer.github_fetcher import parse_repo_url
from devops_analyzer.models import AnalysisState

logger = logging.getLogger("backend.repositories")
router = APIRouter(prefix="/api/repositories", tags=["Repositories"])


# ─────────────────────────────────────────────────────────────────────────────
# Request Models
# ─────────────────────────────────────────────────────────────────────────────
class RegisterRepositoryRequest(BaseModel):
    repo_url: str = Field(..., min_length=1, description="GitHub repository URL or owner/name")
    description: Optional[str] = None
    is_private: bool = False
    default_branch: str = "main"
    project_id: Optional[str] = None


class AnalyzeRequest(BaseModel):
    repo_url: str = Field(..., min_length=1, description="GitHub repository URL")


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────
def _resolve_full_name(repo_url: str) -> str:
    full_name = parse_repo_url(repo_url)
    if full_name:
        return full_name
    raise HTTPException(status_code=400, detail="Invalid repository URL format")


def _project_token(store: InMemoryStore, cipher: TokenCipher, project_id: Optional[str]) -> Optional[str]:
    """Decrypted GitHub token of a project, if it has one."""
    if not project_id:
        return None
    try:
        project = store.get_project(project_id)
    except StoreError:
        return None
    if not project.github_token:
        return None
    try:
        return cipher.decrypt_github_token(project.github_token)
    except EncryptionError as exc:
        logger.warning("Could not decrypt GitHub token for project %s: %s", project_id, exc)
        return None


async def _run_and_mark(
    analyzer: RepositoryAnalyzer,
    store: InMemoryStore,
    analysis_id: str,
    token: Optional[str],
    repository_id: Optional[str],
) -> None:
    status = await analyzer.run_analysis(analysis_id, token=token)
    if repository_id and status.status == AnalysisState.COMPLETED:
        try:
            store.update_repository(repository_id, last_analyzed=status.completed_at)
        except StoreError as exc:
            logger.warning("Could not mark repository %s as analyzed: %s", repository_id, exc)


# ─────────────────────────────────────────────────────────────────────────────
# Endpoints
# ─────────────────────────────────────────────────────────────────────────────
@router.get("")
async def list_repositories(
    unassigned: bool = False,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    repositories = store.list_repositories(user_id, unassigned=unassigned)
    return {"success": True, "repositories": [r.model_dump(mode="json") for r in repositories]}


@router.post("", status_code=201)
async def register_repository(
    req: RegisterRepositoryRequest,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    """Register a GitHub repository for the caller."""
    full_name = _resolve_full_name(req.repo_url)
    try:
        if req.project_id:
            store.get_project(req.project_id, user_id)
        repository = store.add_repository(Repository(
            user_id=user_id,
            full_name=full_name,
            name=full_name.split("/", 1)[1],
            description=req.description,
            is_private=req.is_private,
            default_branch=req.default_branch,
            clone_url=f"https://github.com/{full_name}.git",
            project_id=req.project_id,
        ))
    except StoreError as exc:
        raise to_http(exc)
    return {"success": True, "repository": repository.model_dump(mode="json")}


@router.post("/analyze")
async def start_analysis(
    req: AnalyzeRequest,
    background: BackgroundTasks,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
    analyzer: RepositoryAnalyzer = Depends(get_analyzer),
    cipher: TokenCipher = Depends(get_cipher),
):
    """Start a DevOps readiness analysis; poll /analysis/{id} for progress."""
    full_name = parse_repo_url(req.repo_url)
    repository = store.find_repository(user_id, full_name) if full_name else None
    project_id = repository.project_id if repository else None

    try:
        status = analyzer.start_analysis(req.repo_url, user_id=user_id, project_id=project_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    token = _project_token(store, cipher, project_id)
    background.add_task(
        _run_and_mark, analyzer, store, status.analysis_id, token,
        repository.id if repository else None,
    )
    logger.info("Analysis %s queued for %s (user %s)", status.analysis_id, status.repo_id, user_id)

    return {
        "success": True,
        "analysis": {
            "analysis_id": status.analysis_id,
            "repo_id": status.repo_id,
            "status": status.status.value,
            "progress": status.progress,
            "current_step": status.current_step,
            "started_at": status.started_at.isoformat(),
        },
    }


@router.get("/analysis/{analysis_id}")
async def get_analysis(
    analysis_id: str,
    user_id: str = Depends(current_user),
    analyzer: RepositoryAnalyzer = Depends(get_analyzer),
):
    status = analyzer.get_status(analysis_id)
    if status is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    if status.user_id != user_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return {"success": True, "analysis": status.model_dump(mode="json")}


@router.get("/analyses")
async def list_analyses(
    user_id: str = Depends(current_user),
    analyzer: RepositoryAnalyzer = Depends(get_analyzer),
):
    analyses = analyzer.list_analyses(user_id)
    return {"success": True, "analyses": [a.model_dump(mode="json") for a in analyses]}


@router.get("/{owner}/{name}/summary")
async def get_summary(
    owner: str,
    name: str,
    user_id: str = Depends(current_user),
    analyzer: RepositoryAnalyzer = Depends(get_analyzer),
):
    """Latest completed analysis of owner/name."""
    summary = analyzer.get_summary(f"{owner}/{name}", user_id)
    if summary is None:
        raise HTTPException(status_code=404, detail="No completed analysis found for repository")
    return {"success": True, "summary": summary.model_dump(mode="json")}


@router.delete("/analysis/{analysis_id}")
async def delete_analysis(
    analysis_id: str,
    user_id: str = Depends(current_user),
    analyzer: RepositoryAnalyzer = Depends(get_analyzer),
):
    status = analyzer.get_status(analysis_id)
    if status is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    if status.user_id != user_id:
        raise HTTPException(status_code=403, detail="Access denied")

    analyzer.delete_analysis(analysis_id)
    return {"success": True, "message": "Analysis deleted successfully"}
