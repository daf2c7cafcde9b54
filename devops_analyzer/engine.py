"""
DevOps Analyzer — Analysis Pipeline
=====================================

Drives one repository analysis from URL to checklist result and keeps
track of every analysis it has started.

Lifecycle:
    pending → fetching → analyzing → completed
                      ↘           ↘ failed

Statuses are kept in memory, keyed by analysis id. Each step updates
progress (0–100) and a human-readable current step.
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Optional

from devops_analyzer.checklist import DevOpsAnalyzer
from devops_analyzer.github_fetcher import GitHubFetcher, parse_repo_url
from devops_analyzer.models import (
    AnalysisState,
    AnalysisStats,
    AnalysisStatus,
    RepositorySummary,
)

logger = logging.getLogger("devops_analyzer.engine")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class RepositoryAnalyzer:
    """Repository analysis orchestrator.

    Usage:
        analyzer = RepositoryAnalyzer()
        status = analyzer.start_analysis("https://github.com/owner/repo", user_id="u1")
        await analyzer.run_analysis(status.analysis_id)
        analyzer.get_status(status.analysis_id).devops_analysis.overall_score
    """

    def __init__(
        self,
        fetcher: Optional[GitHubFetcher] = None,
        checklist: Optional[DevOpsAnalyzer] = None,
    ) -> None:
        self.fetcher = fetcher or GitHubFetcher()
        self.checklist = checklist or DevOpsAnalyzer()
        self._statuses: dict[str, AnalysisStatus] = {}
        self._lock = threading.Lock()

    # ── Lifecycle ────────────────────────────────────────────────────
    def start_analysis(
        self,
        repo_url: str,
        user_id: Optional[str] = None,
        project_id: Optional[str] = None,
        analysis_id: Optional[str] = None,
    ) -> AnalysisStatus:
        """Register a pending analysis. Call run_analysis() to execute it."""
        repo_id = parse_repo_url(repo_url)
        if not repo_id:
            raise ValueError("Invalid repository URL format")

        status = AnalysisStatus(
            analysis_id=analysis_id or str(uuid.uuid4()),
            repo_id=repo_id,
            user_id=user_id,
            project_id=project_id,
            current_step="Initializing analysis",
            started_at=_now(),
        )
        self._save(status)
        logger.info("Registered analysis %s for %s", status.analysis_id, repo_id)
        return status.model_copy(deep=True)

    async def run_analysis(self, analysis_id: str, token: Optional[str] = None) -> AnalysisStatus:
        """Fetch and score the repository of a registered analysis.

        Failures are recorded on the status (state ``failed``, message in
        ``error``) rather than raised, so callers running this in the
        background can poll for the outcome.
        """
        status = self.get_status(analysis_id)
        if status is None:
            raise KeyError(f"Unknown analysis: {analysis_id}")

        owner, repo = status.repo_id.split("/", 1)
        try:
            self._update(status, AnalysisState.FETCHING, 10, "Fetching repository files")
            fetched = await self.fetcher.fetch_repository(owner, repo, token=token)

            status.metadata = fetched.metadata
            self._update(status, AnalysisState.FETCHING, 25, f"Fetched {len(fetched.files)} files")

            self._update(status, AnalysisState.ANALYZING, 80, "Analyzing DevOps requirements")
            devops = self.checklist.analyze(status.repo_id, fetched.metadata, fetched.files)

            status.devops_analysis = devops
            self._update(status, AnalysisState.ANALYZING, 95, "Finalizing analysis")

            status.completed_at = _now()
            status.stats = AnalysisStats(
                total_files=len(fetched.files),
                analysis_score=devops.overall_score,
            )
            self._update(status, AnalysisState.COMPLETED, 100, "Analysis completed")
            logger.info(
                "Completed analysis for %s with score: %d",
                status.repo_id, devops.overall_score,
            )
        except Exception as exc:
            logger.error("Analysis failed for %s: %s", status.repo_id, exc, exc_info=True)
            status.error = str(exc) or exc.__class__.__name__
            self._update(status, AnalysisState.FAILED, 0, "Analysis failed")

        return status.model_copy(deep=True)

    async def analyze(
        self,
        repo_url: str,
        user_id: Optional[str] = None,
        project_id: Optional[str] = None,
        token: Optional[str] = None,
    ) -> AnalysisStatus:
        """Start and run an analysis in one call."""
        status = self.start_analysis(repo_url, user_id=user_id, project_id=project_id)
        return await self.run_analysis(status.analysis_id, token=token)

    # ── Queries ──────────────────────────────────────────────────────
    def get_status(self, analysis_id: str) -> Optional[AnalysisStatus]:
        with self._lock:
            status = self._statuses.get(analysis_id)
            return status.model_copy(deep=True) if status else None

    def list_analyses(self, user_id: Optional[str] = None) -> list[AnalysisStatus]:
        with self._lock:
            statuses = [
                s.model_copy(deep=True)
                for s in self._statuses.values()
                if user_id is None or s.user_id == user_id
            ]
        return sorted(statuses, key=lambda s: s.started_at, reverse=True)

    def get_summary(self, repo_id: str, user_id: Optional[str] = None) -> Optional[RepositorySummary]:
        """Latest completed analysis of a repository."""
        completed = [
            s for s in self.list_analyses(user_id)
            if s.repo_id.lower() == repo_id.lower() and s.status == AnalysisState.COMPLETED
        ]
        if not completed:
            return None

        latest = max(completed, key=lambda s: s.completed_at or s.started_at)
        return RepositorySummary(
            repo_id=latest.repo_id,
            analysis_id=latest.analysis_id,
            completed_at=latest.completed_at,
            metadata=latest.metadata,
            devops_analysis=latest.devops_analysis,
        )

    def delete_analysis(self, analysis_id: str) -> bool:
        with self._lock:
            removed = self._statuses.pop(analysis_id, None)
        if removed is not None:
            logger.info("Deleted analysis %s for repository %s", analysis_id, removed.repo_id)
        return removed is not None

    # ── Internals ────────────────────────────────────────────────────
    def _save(self, status: AnalysisStatus, create: bool = True) -> None:
        with self._lock:
            # A deleted analysis stays deleted even if its run is still going
            if create or status.analysis_id in self._statuses:
                self._statuses[status.analysis_id] = status.model_copy(deep=True)

    def _update(self, status: AnalysisStatus, state: AnalysisState, progress: int, step: str) -> None:
        status.status = state
        status.progress = progress
        status.current_step = step
        self._save(status, create=False)
        logger.info("Analysis %s: %s (%d%%)", status.analysis_id, step, progress)
