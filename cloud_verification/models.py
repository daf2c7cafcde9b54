"""
Cloud Verification — Data Models
==================================

Provider identifiers and the result shape shared by every
credential verifier.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class CloudProvider(str, Enum):
    AWS = "aws"
    GCP = "gcp"
    AZURE = "azure"


class CredentialValidation(BaseModel):
    """Outcome of validating one set of provider credentials."""
    valid: bool
    error: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def failure(cls, error: str) -> "CredentialValidation":
        return cls(valid=False, error=error)


class Region(BaseModel):
    id: str
    name: str
