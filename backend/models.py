"""
Backend — Record Models
=========================

Projects, repositories, cloud connections and deployments as held by
the record store. Request/response shapes live beside their routers.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from cloud_verification.models import CloudProvider


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────
class ProjectStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class ConnectionStatus(str, Enum):
    PENDING = "pending"
    CONNECTED = "connected"
    ERROR = "error"


class Environment(str, Enum):
    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


class DeploymentStatus(str, Enum):
    PENDING = "pending"
    DEPLOYING = "deploying"
    DEPLOYED = "deployed"
    FAILED = "failed"
    DESTROYED = "destroyed"


DEFAULT_ENVIRONMENTS = ["dev", "staging", "prod"]


# ─────────────────────────────────────────────────────────────────────────────
# Records
# ─────────────────────────────────────────────────────────────────────────────
class Project(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    name: str
    slug: str
    description: Optional[str] = None
    default_environments: list[str] = Field(default_factory=lambda: list(DEFAULT_ENVIRONMENTS))
    multi_cloud: bool = False
    status: ProjectStatus = ProjectStatus.ACTIVE
    tags: list[str] = Field(default_factory=list)
    icon: Optional[str] = None
    color: Optional[str] = None
    github_token: Optional[str] = Field(default=None, description="Encrypted GitHub token")
    github_token_updated_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def public(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", exclude={"github_token"})
        data["has_github_token"] = bool(self.github_token)
        return data


class Repository(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    full_name: str
    name: str
    description: Optional[str] = None
    is_private: bool = False
    default_branch: str = "main"
    clone_url: Optional[str] = None
    project_id: Optional[str] = None
    last_analyzed: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class CloudConnection(BaseModel):
    id: str = Field(default_factory=new_id)
    project_id: str
    provider: CloudProvider
    name: str
    status: ConnectionStatus = ConnectionStatus.PENDING
    last_validated: Optional[datetime] = None
    error_message: Optional[str] = None
    config: str = Field(..., description="Encrypted provider credentials")
    region: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    is_default: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def public(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude={"config"})


class Deployment(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    repository_id: str
    cloud_connection_id: str
    name: str
    environment: Environment
    provider: CloudProvider
    region: str
    status: DeploymentStatus = DeploymentStatus.PENDING
    terraform_version: Optional[str] = None
    variables: dict[str, Any] = Field(default_factory=dict)
    destroyed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
