"""
Backend Router — Deployments
==============================

GET  /api/deployments               — Deployments of the caller
POST /api/deployments               — Record a deployment request
GET  /api/deployments/{id}          — One deployment
POST /api/deployments/{id}/destroy  — Mark a deployment destroyed

Deployments are records only; no infrastructure is provisioned.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from backend.config import current_user, get_store
from backend.errors import to_http
from backend.models import Deployment, DeploymentStatus, Environment, utcnow
from backend.store import InMemoryStore, StoreError

logger = logging.getLogger("backend.deployments")
router = APIRouter(prefix="/api/deployments", tags=["Deployments"])


class CreateDeploymentRequest(BaseModel):
    repository_id: str = Field(..., min_length=1)
    cloud_connection_id: str = Field(..., min_length=1)
    environment: Environment
    region: str = Field(..., min_length=1)
    terraform_version: Optional[str] = None
    variables: dict[str, Any] = Field(default_factory=dict)


@router.get("")
async def list_deployments(
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    deployments = store.list_deployments(user_id)
    return {"success": True, "deployments": [d.model_dump(mode="json") for d in deployments]}


@router.post("", status_code=201)
async def create_deployment(
    req: CreateDeploymentRequest,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    """Record a pending deployment of a repository to a cloud connection."""
    try:
        repository = store.get_repository(req.repository_id, user_id)
        connection = store.get_connection(req.cloud_connection_id, user_id)
        deployment = store.add_deployment(Deployment(
            user_id=user_id,
            repository_id=repository.id,
            cloud_connection_id=connection.id,
            name=f"{repository.name}-{req.environment.value}",
            environment=req.environment,
            provider=connection.provider,
            region=req.region,
            terraform_version=req.terraform_version,
            variables=req.variables,
        ))
    except StoreError as exc:
        raise to_http(exc)
    return {"success": True, "deployment": deployment.model_dump(mode="json")}


@router.get("/{deployment_id}")
async def get_deployment(
    deployment_id: str,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    try:
        deployment = store.get_deployment(deployment_id, user_id)
    except StoreError as exc:
        raise to_http(exc)
    return {"success": True, "deployment": deployment.model_dump(mode="json")}


@router.post("/{deployment_id}/destroy")
async def destroy_deployment(
    deployment_id: str,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    try:
        deployment = store.get_deployment(deployment_id, user_id)
        if deployment.status == DeploymentStatus.DESTROYED:
            raise HTTPException(status_code=409, detail="Deployment already destroyed")
        deployment = store.update_deployment(
            deployment_id, status=DeploymentStatus.DESTROYED, destroyed_at=utcnow()
        )
    except StoreError as exc:
        raise to_http(exc)
    logger.info("Deployment %s destroyed", deployment_id)
    return {"success": True, "deployment": deployment.model_dump(mode="json")}
