"""DevOps Analyzer — Package."""

from devops_analyzer.checklist import DevOpsAnalyzer
from devops_analyzer.engine import RepositoryAnalyzer
from devops_analyzer.github_fetcher import GitHubFetcher, parse_repo_url
from devops_analyzer.models import (
    AnalysisState,
    AnalysisStatus,
    ChecklistItem,
    DevOpsAnalysis,
    RepoFile,
    RepoMetadata,
)

__all__ = [
    "AnalysisState",
    "AnalysisStatus",
    "ChecklistItem",
    "DevOpsAnalysis",
    "DevOpsAnalyzer",
    "GitHubFetcher",
    "RepoFile",
    "RepoMetadata",
    "RepositoryAnalyzer",
    "parse_repo_url",
]
