"""
Backend Router — Cloud Connections
====================================

GET    /api/cloud/connections/{project_id}       — Connections of a project
POST   /api/cloud/connections                    — Validate, encrypt and store credentials
POST   /api/cloud/connections/{id}/test          — Re-validate stored credentials
PUT    /api/cloud/connections/{id}               — Update a connection
DELETE /api/cloud/connections/{id}               — Delete a connection
GET    /api/cloud/providers/{provider}/regions   — Static region list
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from backend.config import current_user, get_cipher, get_store
from backend.crypto import EncryptionError, TokenCipher
from backend.errors import to_http
from backend.models import CloudConnection, ConnectionStatus, utcnow
from backend.store import InMemoryStore, StoreError
from cloud_verification import UnsupportedProviderError, regions_for, resolve_provider, verify_credentials

logger = logging.getLogger("backend.cloud")
router = APIRouter(prefix="/api/cloud", tags=["Cloud"])


# ─────────────────────────────────────────────────────────────────────────────
# Request Models
# ─────────────────────────────────────────────────────────────────────────────
class ConnectionFields(BaseModel):
    provider: str = Field(..., description="aws, gcp or azure")
    name: str = Field(..., min_length=1, max_length=100)
    config: dict[str, Any] = Field(..., description="Provider credentials")
    region: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=500)
    tags: list[str] = Field(default_factory=list)
    is_default: bool = False


class CreateConnectionRequest(ConnectionFields):
    project_id: str = Field(..., min_length=1)


class UpdateConnectionRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    config: Optional[dict[str, Any]] = None
    region: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=500)
    is_default: Optional[bool] = None


# ─────────────────────────────────────────────────────────────────────────────
# Shared
# ─────────────────────────────────────────────────────────────────────────────
async def create_validated_connection(
    store: InMemoryStore,
    cipher: TokenCipher,
    project_id: str,
    fields: ConnectionFields,
) -> CloudConnection:
    """Validate credentials, encrypt them and store a connected connection.

    Raises HTTPException(400) for an unsupported provider or invalid
    credentials, and StoreError for store conflicts.
    """
    try:
        provider = resolve_provider(fields.provider)
    except UnsupportedProviderError:
        raise HTTPException(status_code=400, detail="Unsupported provider. Supported providers: aws, gcp, azure")

    result = await verify_credentials(provider, fields.config)
    if not result.valid:
        raise HTTPException(status_code=400, detail=f"Invalid credentials: {result.error}")

    return store.add_connection(CloudConnection(
        project_id=project_id,
        provider=provider,
        name=fields.name,
        status=ConnectionStatus.CONNECTED,
        last_validated=utcnow(),
        config=cipher.encrypt_credentials(fields.config),
        region=fields.region,
        description=fields.description,
        tags=fields.tags,
        is_default=fields.is_default,
    ))


# ─────────────────────────────────────────────────────────────────────────────
# Endpoints
# ─────────────────────────────────────────────────────────────────────────────
@router.get("/connections/{project_id}")
async def list_connections(
    project_id: str,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    try:
        store.get_project(project_id, user_id)
    except StoreError as exc:
        raise to_http(exc)
    connections = store.list_connections(project_id)
    return {"success": True, "connections": [c.public() for c in connections]}


@router.post("/connections", status_code=201)
async def create_connection(
    req: CreateConnectionRequest,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
    cipher: TokenCipher = Depends(get_cipher),
):
    """Validate provider credentials and store them encrypted."""
    try:
        store.get_project(req.project_id, user_id)
        connection = await create_validated_connection(store, cipher, req.project_id, req)
    except StoreError as exc:
        raise to_http(exc)
    return {"success": True, "connection": connection.public()}


@router.post("/connections/{connection_id}/test")
async def test_connection(
    connection_id: str,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
    cipher: TokenCipher = Depends(get_cipher),
):
    """Re-validate the stored credentials and record the outcome."""
    try:
        connection = store.get_connection(connection_id, user_id)
    except StoreError as exc:
        raise to_http(exc)

    try:
        config = cipher.decrypt_credentials(connection.config)
    except EncryptionError as exc:
        logger.error("Stored credentials for %s could not be decrypted: %s", connection_id, exc, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to decrypt stored credentials")

    result = await verify_credentials(connection.provider, config)
    updated = store.update_connection(
        connection_id,
        status=ConnectionStatus.CONNECTED if result.valid else ConnectionStatus.ERROR,
        last_validated=utcnow(),
        error_message=None if result.valid else result.error,
    )
    logger.info("Connection %s tested: %s", connection_id, updated.status.value)

    return {
        "success": True,
        "valid": result.valid,
        "error": result.error,
        "details": result.details,
        "connection": updated.public(),
    }


@router.put("/connections/{connection_id}")
async def update_connection(
    connection_id: str,
    req: UpdateConnectionRequest,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
    cipher: TokenCipher = Depends(get_cipher),
):
    try:
        connection = store.get_connection(connection_id, user_id)
    except StoreError as exc:
        raise to_http(exc)

    changes: dict[str, Any] = {}
    if req.name:
        changes["name"] = req.name
    if req.region:
        changes["region"] = req.region
    if req.description is not None:
        changes["description"] = req.description
    if req.is_default is not None:
        changes["is_default"] = req.is_default

    if req.config:
        result = await verify_credentials(connection.provider, req.config)
        if not result.valid:
            raise HTTPException(status_code=400, detail=f"Invalid credentials: {result.error}")
        changes.update(
            config=cipher.encrypt_credentials(req.config),
            status=ConnectionStatus.CONNECTED,
            last_validated=utcnow(),
            error_message=None,
        )

    try:
        updated = store.update_connection(connection_id, **changes)
    except StoreError as exc:
        raise to_http(exc)
    return {"success": True, "connection": updated.public()}


@router.delete("/connections/{connection_id}")
async def delete_connection(
    connection_id: str,
    user_id: str = Depends(current_user),
    store: InMemoryStore = Depends(get_store),
):
    try:
        store.get_connection(connection_id, user_id)
        store.delete_connection(connection_id)
    except StoreError as exc:
        raise to_http(exc)
    return {"success": True, "message": "Cloud connection deleted successfully"}


@router.get("/providers/{provider}/regions")
async def list_regions(provider: str):
    try:
        regions = regions_for(provider)
    except UnsupportedProviderError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"success": True, "regions": [r.model_dump() for r in regions]}
