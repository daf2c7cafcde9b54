"""
Backend Router — Project Settings
===================================

GET    /api/projects/{id}/settings               — Settings (token presence only)
PATCH  /api/projects/{id}/settings               — Update allowed settings
POST   /api/projects/{id}/settings/github-token  — Store an encrypted GitHub token
DELETE /api/projects/{id}/settings/github-token  — Remove the GitHub token
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from backend.config import current_user, get_cipher, get_store
from backend.crypto import TokenCipher
from backend.errors import to_http
from backend.models import Project, utcnow
from backend.store import InMemoryStore, StoreError

logger = logging.getLogger("backend.project_settings")
router = APIRouter(prefix="/api/projects", tags=["Project Settings"])

GITHUB_TOKEN_PATTERN = re.compile(r"^gh[pousr]_[A-Za-z0-9_]{36,255}$")

SETTINGS_FIELDS = (
    "id", "name", "description", "default_environments", "multi_cloud",
    "tags", "icon", "color", "github_token_updated_at",
)
NULLABLE_FIELDS = {"description", "icon", "color"}


class SettingsUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    default_environments: Optional[list[str]] = None
    multi_cloud: Optional[bool] = None
    tags: Optional[list[str]] = None
    icon: Optional[str] = None
    color: Optional[str] = None


class GitHubTokenRequest(BaseModel):
    token: str = Field(..., min_length=1)


def _settings(project: Project) -> dict[str, Any]:
    data = project.model_dump(mode="json", include=set(SETTINGS_FIELDS))
    data["has_github_token"] = bool(project.github_token)
    return data


@router.get("/{project_id}/settings")
async def get_settings(
    project_id: str,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    try:
        project = store.get_project(project_id, user_id)
    except StoreError as exc:
        raise to_http(exc)
    return {"success": True, "settings": _settings(project)}


@router.patch("/{project_id}/settings")
async def update_settings(
    project_id: str,
    req: SettingsUpdateRequest,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    """Apply the allowed settings fields; anything else in the body is ignored."""
    changes = {
        field: value
        for field, value in req.model_dump(exclude_unset=True).items()
        if value is not None or field in NULLABLE_FIELDS
    }
    try:
        project = store.update_project(project_id, user_id, **changes)
    except StoreError as exc:
        raise to_http(exc)
    return {"success": True, "project": _settings(project)}


@router.post("/{project_id}/settings/github-token")
async def set_github_token(
    project_id: str,
    req: GitHubTokenRequest,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
    cipher: TokenCipher = Depends(get_cipher),
):
    if not GITHUB_TOKEN_PATTERN.match(req.token):
        raise HTTPException(status_code=400, detail="Invalid GitHub token format")

    try:
        store.get_project(project_id, user_id)
        project = store.update_project(
            project_id,
            user_id,
            github_token=cipher.encrypt_github_token(req.token),
            github_token_updated_at=utcnow(),
        )
    except StoreError as exc:
        raise to_http(exc)

    logger.info("GitHub token updated for project %s", project_id)
    return {
        "success": True,
        "message": "GitHub token updated successfully",
        "github_token_updated_at": project.github_token_updated_at.isoformat(),
    }


@router.delete("/{project_id}/settings/github-token")
async def remove_github_token(
    project_id: str,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    try:
        store.update_project(project_id, user_id, github_token=None, github_token_updated_at=None)
    except StoreError as exc:
        raise to_http(exc)
    logger.info("GitHub token removed for project %s", project_id)
    return {"success": True, "message": "GitHub token removed successfully"}
