"""
Backend Router — Projects
===========================

GET    /api/projects                              — Projects of the caller
POST   /api/projects                              — Create a project
GET    /api/projects/{id}                         — Project with its connections and repositories
PUT    /api/projects/{id}                         — Update a project
DELETE /api/projects/{id}                         — Delete a project
GET    /api/projects/{id}/cloud-connections       — Connections of a project
POST   /api/projects/{id}/cloud-connections       — Add a validated connection
GET    /api/projects/{id}/repositories            — Repositories in a project
POST   /api/projects/{id}/repositories            — Assign a repository
DELETE /api/projects/{id}/repositories/{repo_id}  — Un-assign a repository
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from backend.config import current_user, get_cipher, get_store
from backend.crypto import TokenCipher
from backend.errors import to_http
from backend.models import DEFAULT_ENVIRONMENTS, Project
from backend.routers.cloud import ConnectionFields, create_validated_connection
from backend.store import InMemoryStore, StoreError

logger = logging.getLogger("backend.projects")
router = APIRouter(prefix="/api/projects", tags=["Projects"])


# ─────────────────────────────────────────────────────────────────────────────
# Request Models
# ─────────────────────────────────────────────────────────────────────────────
class CreateProjectRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=50, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = Field(default=None, max_length=500)
    default_environments: list[str] = Field(default_factory=lambda: list(DEFAULT_ENVIRONMENTS))
    multi_cloud: bool = False
    tags: list[str] = Field(default_factory=list)
    icon: Optional[str] = None
    color: Optional[str] = None


class UpdateProjectRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    default_environments: Optional[list[str]] = None
    multi_cloud: Optional[bool] = None
    tags: Optional[list[str]] = None
    icon: Optional[str] = None
    color: Optional[str] = None


class AssignRepositoryRequest(BaseModel):
    repository_id: str = Field(..., min_length=1)


# ─────────────────────────────────────────────────────────────────────────────
# Endpoints
# ─────────────────────────────────────────────────────────────────────────────
@router.get("")
async def list_projects(
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    projects = []
    for project in store.list_projects(user_id):
        data = project.public()
        data["cloud_connection_count"] = len(store.list_connections(project.id))
        data["repository_count"] = len(store.list_repositories(user_id, project_id=project.id))
        projects.append(data)
    return {"success": True, "projects": projects}


@router.post("", status_code=201)
async def create_project(
    req: CreateProjectRequest,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    try:
        project = store.create_project(Project(user_id=user_id, **req.model_dump()))
    except StoreError as exc:
        raise to_http(exc)
    return {"success": True, "project": project.public()}


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    try:
        project = store.get_project(project_id, user_id)
    except StoreError as exc:
        raise to_http(exc)

    data = project.public()
    data["cloud_connections"] = [c.public() for c in store.list_connections(project_id)]
    data["repositories"] = [
        r.model_dump(mode="json") for r in store.list_repositories(user_id, project_id=project_id)
    ]
    return {"success": True, "project": data}


@router.put("/{project_id}")
async def update_project(
    project_id: str,
    req: UpdateProjectRequest,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    changes = req.model_dump(exclude_none=True)
    try:
        project = store.update_project(project_id, user_id, **changes)
    except StoreError as exc:
        raise to_http(exc)
    return {"success": True, "project": project.public()}


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    """Delete a project, its cloud connections, and un-assign its repositories."""
    try:
        store.delete_project(project_id, user_id)
    except StoreError as exc:
        raise to_http(exc)
    return {"success": True, "message": "Project deleted successfully"}


@router.get("/{project_id}/cloud-connections")
async def list_project_connections(
    project_id: str,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    try:
        store.get_project(project_id, user_id)
    except StoreError as exc:
        raise to_http(exc)
    return {"success": True, "connections": [c.public() for c in store.list_connections(project_id)]}


@router.post("/{project_id}/cloud-connections", status_code=201)
async def add_project_connection(
    project_id: str,
    req: ConnectionFields,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
    cipher: TokenCipher = Depends(get_cipher),
):
    try:
        store.get_project(project_id, user_id)
        connection = await create_validated_connection(store, cipher, project_id, req)
    except StoreError as exc:
        raise to_http(exc)
    return {"success": True, "connection": connection.public()}


@router.get("/{project_id}/repositories")
async def list_project_repositories(
    project_id: str,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    try:
        store.get_project(project_id, user_id)
    except StoreError as exc:
        raise to_http(exc)
    repositories = store.list_repositories(user_id, project_id=project_id)
    return {"success": True, "repositories": [r.model_dump(mode="json") for r in repositories]}


@router.post("/{project_id}/repositories")
async def assign_repository(
    project_id: str,
    req: AssignRepositoryRequest,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    try:
        store.get_project(project_id, user_id)
        repository = store.get_repository(req.repository_id, user_id)
        if repository.project_id == project_id:
            raise HTTPException(status_code=409, detail="Repository is already in this project")
        repository = store.update_repository(repository.id, project_id=project_id)
    except StoreError as exc:
        raise to_http(exc)
    logger.info("Repository %s assigned to project %s", repository.full_name, project_id)
    return {"success": True, "repository": repository.model_dump(mode="json")}


@router.delete("/{project_id}/repositories/{repository_id}")
async def unassign_repository(
    project_id: str,
    repository_id: str,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    try:
        store.get_project(project_id, user_id)
        repository = store.get_repository(repository_id, user_id)
        if repository.project_id != project_id:
            raise HTTPException(status_code=404, detail="Repository is not in this project")
        repository = store.update_repository(repository_id, project_id=None)
    except StoreError as exc:
        raise to_http(exc)
    return {"success": True, "repository": repository.model_dump(mode="json")}
