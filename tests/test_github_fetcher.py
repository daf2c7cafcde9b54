"""
Tests for repository fetching: URL parsing, file selection, metadata
derivation and GitHub error handling.
"""

import asyncio

import pytest

from devops_analyzer.github_fetcher import (
    GitHubFetcher,
    GitHubFetchError,
    GitHubRateLimitError,
    RepositoryNotFoundError,
    detect_frameworks,
    detect_language,
    detect_package_managers,
    is_code_file,
    parse_repo_url,
)
from devops_analyzer.models import RepoFile


class TestParseRepoUrl:
    def test_https_url(self):
        assert parse_repo_url("https://github.com/acme/shop") == "acme/shop"

    def test_git_suffix_is_stripped(self):
        assert parse_repo_url("https://github.com/acme/shop.git") == "acme/shop"

    def test_deep_link(self):
        assert parse_repo_url("https://github.com/acme/shop/tree/main/src") == "acme/shop"

    def test_shorthand(self):
        assert parse_repo_url("acme/shop") == "acme/shop"

    def test_invalid(self):
        assert parse_repo_url("not a repository") is None
        assert parse_repo_url("") is None


class TestFileSelection:
    def test_code_files(self):
        assert is_code_file("src/app.py")
        assert is_code_file("Dockerfile")
        assert is_code_file("docker/api.Dockerfile")
        assert is_code_file("Makefile")
        assert is_code_file("infra/main.tf")

    def test_excluded_directories(self):
        assert not is_code_file("node_modules/react/index.js")
        assert not is_code_file("dist/bundle.js")
        assert not is_code_file("app/__pycache__/mod.py")

    def test_binary_and_unknown_files(self):
        assert not is_code_file("assets/logo.png")
        assert not is_code_file("Jenkinsfile")

    def test_language_detection(self):
        assert detect_language("src/app.tsx") == "typescript"
        assert detect_language("main.tf") == "terraform"
        assert detect_language("notes.txt") == "text"


class TestMetadataSignals:
    def test_package_managers_from_root_manifests(self):
        files = [
            RepoFile(path="package.json", content="{}"),
            RepoFile(path="requirements.txt", content="flask"),
            RepoFile(path="services/api/go.mod", content="module api"),
        ]
        assert detect_package_managers(files) == ["npm", "pip"]

    def test_frameworks_from_content(self):
        files = [
            RepoFile(path="app.py", content="from fastapi import FastAPI\nimport redis"),
            RepoFile(path="db.py", content="engine = create_engine('postgresql://db')"),
        ]
        assert detect_frameworks(files) == ["FastAPI", "PostgreSQL", "Redis"]

    def test_frontend_frameworks_also_match_paths(self):
        files = [RepoFile(path="src/components/Vue/Button.ts", content="export {}")]
        assert detect_frameworks(files) == ["Vue"]


def test_fetch_repository(fetcher):
    result = asyncio.run(fetcher.fetch_repository("acme", "shop"))

    paths = {f.path for f in result.files}
    assert paths == {
        "Dockerfile",
        "package.json",
        ".github/workflows/ci.yml",
        "k8s/deployment.yaml",
        "src/server.js",
    }

    meta = result.metadata
    assert meta.full_name == "acme/shop"
    assert meta.description == "Sample repository"
    assert meta.languages == {"JavaScript": 5000, "Dockerfile": 100}
    assert meta.has_dockerfile and meta.has_ci and meta.has_kubernetes
    assert meta.package_managers == ["npm"]
    assert meta.frameworks == ["React", "Express", "MongoDB"]
    assert meta.total_files == 5
    assert meta.total_size == sum(f.size for f in result.files)


def test_fetched_content_is_decoded(fetcher):
    result = asyncio.run(fetcher.fetch_repository("acme", "shop"))
    server = next(f for f in result.files if f.path == "src/server.js")
    assert "helmet" in server.content
    assert server.language == "javascript"
    assert server.sha == "sha-src_server.js"


def test_failed_blob_is_skipped(fake_github, fetcher):
    fake_github.blob_errors.add("Dockerfile")
    result = asyncio.run(fetcher.fetch_repository("acme", "shop"))

    assert "Dockerfile" not in {f.path for f in result.files}
    assert result.metadata.total_files == 4
    assert result.metadata.has_dockerfile is False


def test_blob_without_inline_content_is_skipped(fake_github, fetcher):
    fake_github.uninlined_blobs.add("Dockerfile")
    result = asyncio.run(fetcher.fetch_repository("acme", "shop"))

    assert "Dockerfile" not in {f.path for f in result.files}
    assert result.metadata.total_files == 4


def test_pause_between_batches_only(fake_github, monkeypatch):
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr("devops_analyzer.github_fetcher.asyncio.sleep", fake_sleep)
    fetcher = GitHubFetcher(batch_size=2, batch_delay=1.5, transport=fake_github.transport)
    result = asyncio.run(fetcher.fetch_repository("acme", "shop"))

    assert len(result.files) == 5
    assert delays == [1.5, 1.5]


def test_single_batch_does_not_pause(fake_github, monkeypatch):
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr("devops_analyzer.github_fetcher.asyncio.sleep", fake_sleep)
    fetcher = GitHubFetcher(batch_size=10, batch_delay=1.5, transport=fake_github.transport)
    asyncio.run(fetcher.fetch_repository("acme", "shop"))

    assert delays == []


def test_oversized_files_are_not_downloaded(fake_github, fetcher):
    fake_github.add_repo("acme/big", {"data.json": "x" * 1_000_000, "app.py": "print(1)"})
    result = asyncio.run(fetcher.fetch_repository("acme", "big"))
    assert [f.path for f in result.files] == ["app.py"]


def test_missing_repository(fetcher):
    with pytest.raises(RepositoryNotFoundError):
        asyncio.run(fetcher.fetch_repository("acme", "missing"))


def test_rate_limited(fake_github, fetcher):
    fake_github.status_overrides["acme/shop"] = 403
    with pytest.raises(GitHubRateLimitError):
        asyncio.run(fetcher.fetch_repository("acme", "shop"))


def test_server_error(fake_github, fetcher):
    fake_github.status_overrides["acme/shop"] = 500
    with pytest.raises(GitHubFetchError):
        asyncio.run(fetcher.fetch_repository("acme", "shop"))


def test_per_call_token_overrides_default(fake_github):
    fetcher = GitHubFetcher("default-token", batch_delay=0, transport=fake_github.transport)
    asyncio.run(fetcher.fetch_repository("acme", "shop", token="project-token"))
    assert all(r.headers["Authorization"] == "token project-token" for r in fake_github.requests)


def test_anonymous_requests_carry_no_auth(fake_github, fetcher):
    asyncio.run(fetcher.fetch_repository("acme", "shop"))
    assert all("Authorization" not in r.headers for r in fake_github.requests)


def test_batch_size_must_be_positive():
    with pytest.raises(ValueError):
        GitHubFetcher(batch_size=0)
