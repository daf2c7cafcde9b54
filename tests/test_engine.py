"""
Tests for the analysis pipeline and its status tracking.
"""

import asyncio

import pytest

from devops_analyzer.engine import RepositoryAnalyzer
from devops_analyzer.models import AnalysisState


def test_start_analysis_registers_pending_status(analyzer):
    status = analyzer.start_analysis("https://github.com/acme/shop", user_id="u1", project_id="p1")

    assert status.repo_id == "acme/shop"
    assert status.status == AnalysisState.PENDING
    assert status.progress == 0
    assert status.user_id == "u1"
    assert status.project_id == "p1"
    assert analyzer.get_status(status.analysis_id) is not None


def test_start_analysis_rejects_bad_url(analyzer):
    with pytest.raises(ValueError, match="Invalid repository URL format"):
        analyzer.start_analysis("definitely not a url")


def test_run_analysis_completes(analyzer):
    status = analyzer.start_analysis("https://github.com/acme/shop", user_id="u1")
    result = asyncio.run(analyzer.run_analysis(status.analysis_id))

    assert result.status == AnalysisState.COMPLETED
    assert result.progress == 100
    assert result.current_step == "Analysis completed"
    assert result.completed_at is not None
    assert result.metadata.full_name == "acme/shop"
    assert result.devops_analysis.overall_score == 74
    assert result.stats.total_files == 5
    assert result.stats.analysis_score == 74
    assert result.finished

    stored = analyzer.get_status(status.analysis_id)
    assert stored.status == AnalysisState.COMPLETED


def test_progress_steps_are_recorded(analyzer, monkeypatch):
    seen = []
    original = analyzer._update

    def spy(status, state, progress, step):
        seen.append((state, progress, step))
        original(status, state, progress, step)

    monkeypatch.setattr(analyzer, "_update", spy)
    status = analyzer.start_analysis("acme/shop")
    asyncio.run(analyzer.run_analysis(status.analysis_id))

    assert [p for _, p, _ in seen] == [10, 25, 80, 95, 100]
    assert seen[1][2] == "Fetched 5 files"
    assert seen[-1][0] == AnalysisState.COMPLETED


def test_failed_fetch_is_recorded_not_raised(analyzer):
    status = analyzer.start_analysis("https://github.com/acme/missing")
    result = asyncio.run(analyzer.run_analysis(status.analysis_id))

    assert result.status == AnalysisState.FAILED
    assert result.progress == 0
    assert "Repository not found" in result.error
    assert result.devops_analysis is None
    assert result.finished


def test_run_unknown_analysis(analyzer):
    with pytest.raises(KeyError):
        asyncio.run(analyzer.run_analysis("nope"))


def test_statuses_are_copies(analyzer):
    status = analyzer.start_analysis("acme/shop")
    status.progress = 99
    assert analyzer.get_status(status.analysis_id).progress == 0


def test_list_and_summary(analyzer):
    first = asyncio.run(analyzer.analyze("acme/shop", user_id="u1"))
    second = asyncio.run(analyzer.analyze("https://github.com/acme/shop", user_id="u1"))
    asyncio.run(analyzer.analyze("acme/shop", user_id="u2"))

    mine = analyzer.list_analyses("u1")
    assert {s.analysis_id for s in mine} == {first.analysis_id, second.analysis_id}
    assert len(analyzer.list_analyses()) == 3

    summary = analyzer.get_summary("ACME/Shop", user_id="u1")
    assert summary is not None
    assert summary.repo_id == "acme/shop"
    assert summary.analysis_id in {first.analysis_id, second.analysis_id}
    assert summary.devops_analysis.overall_score == 74


def test_summary_ignores_failed_analyses(analyzer):
    asyncio.run(analyzer.analyze("acme/missing", user_id="u1"))
    assert analyzer.get_summary("acme/missing", user_id="u1") is None


def test_delete_analysis(analyzer):
    status = analyzer.start_analysis("acme/shop")
    assert analyzer.delete_analysis(status.analysis_id) is True
    assert analyzer.get_status(status.analysis_id) is None
    assert analyzer.delete_analysis(status.analysis_id) is False


def test_deleted_analysis_is_not_resurrected_by_its_run(fetcher):
    analyzer = RepositoryAnalyzer(fetcher=fetcher)
    status = analyzer.start_analysis("acme/shop")
    original_fetch = fetcher.fetch_repository

    async def fetch_then_delete(owner, repo, token=None):
        analyzer.delete_analysis(status.analysis_id)
        return await original_fetch(owner, repo, token=token)

    fetcher.fetch_repository = fetch_then_delete
    asyncio.run(analyzer.run_analysis(status.analysis_id))

    assert analyzer.get_status(status.analysis_id) is None
