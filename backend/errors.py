"""
Backend — Error Translation
=============================

Maps domain exceptions onto HTTP status codes for the routers.
"""

from __future__ import annotations

from fastapi import HTTPException

from backend.crypto import EncryptionError
from backend.store import AccessDeniedError, ConflictError, NotFoundError, StoreError
from cloud_verification import UnsupportedProviderError


def to_http(exc: Exception) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, AccessDeniedError):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, (UnsupportedProviderError, ValueError)):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, (StoreError, EncryptionError)):
        return HTTPException(status_code=500, detail=str(exc))
    return HTTPException(status_code=502, detail=str(exc))
