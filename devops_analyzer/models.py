"""
DevOps Analyzer — Data Models
===============================

Shared Pydantic models for repository fetching, checklist scoring and
analysis tracking. These models are the data layer between the fetcher,
the checklist scorer, the pipeline and the HTTP API.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────
class ChecklistStatus(str, Enum):
    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"


class Complexity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AnalysisState(str, Enum):
    PENDING = "pending"
    FETCHING = "fetching"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"


# ─────────────────────────────────────────────────────────────────────────────
# Repository Models
# ─────────────────────────────────────────────────────────────────────────────
class RepoFile(BaseModel):
    """A fetched source file."""
    path: str
    content: str
    size: int = 0
    language: str = "text"
    sha: str = ""


class RepoMetadata(BaseModel):
    """Aggregate facts about a fetched repository, derived once per fetch."""
    owner: str
    name: str
    full_name: str
    description: str = ""
    language: str = ""
    languages: dict[str, int] = Field(default_factory=dict)
    topics: list[str] = []
    default_branch: str = "main"
    has_dockerfile: bool = False
    has_kubernetes: bool = False
    has_ci: bool = False
    package_managers: list[str] = []
    frameworks: list[str] = []
    total_files: int = 0
    total_size: int = 0


class FetchResult(BaseModel):
    files: list[RepoFile] = []
    metadata: RepoMetadata


# ─────────────────────────────────────────────────────────────────────────────
# Checklist Models
# ─────────────────────────────────────────────────────────────────────────────
class ChecklistItem(BaseModel):
    """One independently scored checklist category."""
    id: str
    category: str
    title: str
    detected: Optional[str] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    reasoning: str = ""
    recommendations: list[str] = []
    status: ChecklistStatus = ChecklistStatus.PENDING


class DevOpsAnalysis(BaseModel):
    """Output of the checklist scorer."""
    repo_id: str
    checklist: list[ChecklistItem] = []
    overall_score: int = Field(ge=0, le=100)
    recommendations: list[str] = []
    estimated_complexity: Complexity
    deployment_readiness: float = Field(ge=0.0, le=100.0)

    def item(self, item_id: str) -> Optional[ChecklistItem]:
        for entry in self.checklist:
            if entry.id == item_id:
                return entry
        return None


# ─────────────────────────────────────────────────────────────────────────────
# Analysis Tracking Models
# ─────────────────────────────────────────────────────────────────────────────
class AnalysisStats(BaseModel):
    total_files: int
    analysis_score: int


class AnalysisStatus(BaseModel):
    """Progress and outcome of one repository analysis."""
    analysis_id: str
    repo_id: str
    user_id: Optional[str] = None
    project_id: Optional[str] = None
    status: AnalysisState = AnalysisState.PENDING
    progress: int = Field(default=0, ge=0, le=100)
    current_step: str = ""
    error: Optional[str] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    metadata: Optional[RepoMetadata] = None
    devops_analysis: Optional[DevOpsAnalysis] = None
    stats: Optional[AnalysisStats] = None

    @property
    def finished(self) -> bool:
        return self.status in (AnalysisState.COMPLETED, AnalysisState.FAILED)


class RepositorySummary(BaseModel):
    repo_id: str
    analysis_id: str
    completed_at: Optional[datetime] = None
    metadata: Optional[RepoMetadata] = None
    devops_analysis: Optional[DevOpsAnalysis] = None
