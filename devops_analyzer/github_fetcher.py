"""
DevOps Analyzer — GitHub Fetcher
==================================

Fetches a repository through the GitHub REST API: repository info,
language breakdown, the recursive file tree and the content of every
code file. Works without authentication (60 req/hr) or with a token
for 5000 req/hr.

Blob downloads run in fixed-size concurrent batches with a pause
between batches to stay under the secondary rate limits.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import re
from typing import Any, Optional

import httpx

from devops_analyzer.models import FetchResult, RepoFile, RepoMetadata
from devops_analyzer.rules import (
    CI_PATH_FRAGMENTS,
    CODE_EXTENSIONS,
    CODE_FILENAME_SUFFIXES,
    DEFAULT_LANGUAGE,
    EXCLUDED_PATH_FRAGMENTS,
    EXTENSION_LANGUAGE_MAP,
    FRAMEWORK_SIGNALS,
    FRONTEND_FRAMEWORKS,
    FetchLimits,
    KUBERNETES_PATH_FRAGMENTS,
    PACKAGE_MANAGER_FILES,
)

logger = logging.getLogger("devops_analyzer.github")

GITHUB_API = "https://api.github.com"

_REPO_URL_PATTERNS = (
    re.compile(r"github\.com/([^/]+)/([^/]+?)(?:\.git)?(?:/.*)?$"),
    re.compile(r"^([^/]+)/([^/]+)$"),
)


# ─────────────────────────────────────────────────────────────────────────────
# Errors
# ─────────────────────────────────────────────────────────────────────────────
class GitHubFetchError(Exception):
    """Raised when a repository cannot be fetched."""


class RepositoryNotFoundError(GitHubFetchError):
    pass


class GitHubRateLimitError(GitHubFetchError):
    pass


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────
def parse_repo_url(url: str) -> Optional[str]:
    """Extract "owner/repo" from a GitHub URL.

    Accepts:
        https://github.com/owner/repo
        https://github.com/owner/repo.git
        https://github.com/owner/repo/tree/main/src
        owner/repo

    Returns None when the URL matches none of these forms.
    """
    url = (url or "").strip()
    for pattern in _REPO_URL_PATTERNS:
        match = pattern.search(url)
        if match:
            owner, repo = match.group(1), match.group(2)
            if repo.endswith(".git"):
                repo = repo[:-4]
            if owner and repo:
                return f"{owner}/{repo}"
    return None


def _headers(token: Optional[str]) -> dict[str, str]:
    """Build request headers, optionally with auth token."""
    headers = {"Accept": "application/vnd.github.v3+json"}
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


def _extension(path: str) -> str:
    # Text from the last dot; paths without a dot are their own extension
    idx = path.rfind(".")
    return path[idx:] if idx >= 0 else path


def is_code_file(path: str) -> bool:
    if any(fragment in path for fragment in EXCLUDED_PATH_FRAGMENTS):
        return False
    return _extension(path) in CODE_EXTENSIONS or path.endswith(CODE_FILENAME_SUFFIXES)


def detect_language(path: str) -> str:
    return EXTENSION_LANGUAGE_MAP.get(_extension(path), DEFAULT_LANGUAGE)


def detect_package_managers(files: list[RepoFile]) -> list[str]:
    """Package managers implied by root-level manifests."""
    paths = {f.path for f in files}
    return [
        manager
        for manifests, manager in PACKAGE_MANAGER_FILES
        if any(m in paths for m in manifests)
    ]


def detect_frameworks(files: list[RepoFile]) -> list[str]:
    """Frameworks and databases referenced anywhere in the fetched files."""
    content = " ".join(f.content.lower() for f in files)
    paths = [f.path.lower() for f in files]

    frameworks: list[str] = []
    for name, keywords in FRAMEWORK_SIGNALS:
        hit = any(kw in content for kw in keywords)
        if not hit and name in FRONTEND_FRAMEWORKS:
            hit = any(kw in p for p in paths for kw in keywords)
        if hit:
            frameworks.append(name)
    return frameworks


def build_metadata(
    owner: str,
    repo: str,
    repo_data: dict[str, Any],
    languages: dict[str, int],
    files: list[RepoFile],
) -> RepoMetadata:
    """Derive repository metadata from the API payloads and fetched files."""
    return RepoMetadata(
        owner=owner,
        name=repo,
        full_name=f"{owner}/{repo}",
        description=repo_data.get("description") or "",
        language=repo_data.get("language") or "",
        languages=languages,
        topics=repo_data.get("topics") or [],
        default_branch=repo_data.get("default_branch") or "main",
        has_dockerfile=any("dockerfile" in f.path.lower() for f in files),
        has_kubernetes=any(
            frag in f.path for f in files for frag in KUBERNETES_PATH_FRAGMENTS
        ),
        has_ci=any(frag in f.path for f in files for frag in CI_PATH_FRAGMENTS),
        package_managers=detect_package_managers(files),
        frameworks=detect_frameworks(files),
        total_files=len(files),
        total_size=sum(f.size for f in files),
    )


# ─────────────────────────────────────────────────────────────────────────────
# GitHub Fetcher
# ─────────────────────────────────────────────────────────────────────────────
class GitHubFetcher:
    """Downloads a repository's code files and derives its metadata."""

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        base_url: str = GITHUB_API,
        batch_size: int = FetchLimits.BATCH_SIZE,
        batch_delay: float = FetchLimits.BATCH_DELAY_SECONDS,
        timeout: float = FetchLimits.REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.timeout = timeout
        self._transport = transport

    async def fetch_repository(
        self,
        owner: str,
        repo: str,
        token: Optional[str] = None,
    ) -> FetchResult:
        """Fetch repository files and metadata.

        A per-call token (e.g. a project's own GitHub token) takes
        precedence over the fetcher's default token.
        """
        logger.info("Fetching repository: %s/%s", owner, repo)

        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=_headers(token or self.token),
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            repo_data = await self._get_repo(client, owner, repo)
            languages = await self._get_languages(client, owner, repo)
            branch = repo_data.get("default_branch") or "main"
            tree = await self._get_tree(client, owner, repo, branch)

            candidates = [
                item for item in tree
                if item.get("type") == "blob"
                and is_code_file(item.get("path") or "")
                and (item.get("size") or 0) < FetchLimits.MAX_FILE_SIZE
            ]
            logger.info(
                "%s/%s: %d of %d tree entries selected for download",
                owner, repo, len(candidates), len(tree),
            )

            files = await self._download_blobs(client, owner, repo, candidates)

        metadata = build_metadata(owner, repo, repo_data, languages, files)
        logger.info("Successfully fetched %d files from %s/%s", len(files), owner, repo)
        return FetchResult(files=files, metadata=metadata)

    async def _get_repo(self, client: httpx.AsyncClient, owner: str, repo: str) -> dict[str, Any]:
        resp = await client.get(f"/repos/{owner}/{repo}")
        if resp.status_code == 404:
            raise RepositoryNotFoundError(f"Repository not found: {owner}/{repo}")
        if resp.status_code == 403:
            raise GitHubRateLimitError("GitHub API rate limit exceeded or access denied")
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise GitHubFetchError(f"Failed to fetch {owner}/{repo}: {exc}") from exc
        return resp.json()

    async def _get_languages(self, client: httpx.AsyncClient, owner: str, repo: str) -> dict[str, int]:
        resp = await client.get(f"/repos/{owner}/{repo}/languages")
        if resp.status_code != 200:
            logger.warning("Languages unavailable for %s/%s (HTTP %d)", owner, repo, resp.status_code)
            return {}
        return resp.json()

    async def _get_tree(
        self, client: httpx.AsyncClient, owner: str, repo: str, branch: str,
    ) -> list[dict[str, Any]]:
        resp = await client.get(
            f"/repos/{owner}/{repo}/git/trees/{branch}",
            params={"recursive": "true"},
        )
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise GitHubFetchError(f"Failed to read tree of {owner}/{repo}@{branch}: {exc}") from exc
        data = resp.json()
        if data.get("truncated"):
            logger.warning("Tree of %s/%s is truncated; some files will be missing", owner, repo)
        return data.get("tree", [])

    async def _download_blobs(
        self,
        client: httpx.AsyncClient,
        owner: str,
        repo: str,
        entries: list[dict[str, Any]],
    ) -> list[RepoFile]:
        files: list[RepoFile] = []
        for start in range(0, len(entries), self.batch_size):
            batch = entries[start:start + self.batch_size]
            results = await asyncio.gather(
                *(self._download_blob(client, owner, repo, entry) for entry in batch)
            )
            files.extend(f for f in results if f is not None)

            if start + self.batch_size < len(entries) and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)
        return files

    async def _download_blob(
        self,
        client: httpx.AsyncClient,
        owner: str,
        repo: str,
        entry: dict[str, Any],
    ) -> Optional[RepoFile]:
        path = entry["path"]
        try:
            resp = await client.get(f"/repos/{owner}/{repo}/git/blobs/{entry['sha']}")
            resp.raise_for_status()
            raw = base64.b64decode(resp.json()["content"])
        except (httpx.HTTPError, binascii.Error, TypeError, ValueError, KeyError) as exc:
            logger.warning("Failed to fetch file %s: %s", path, exc)
            return None

        return RepoFile(
            path=path,
            content=raw.decode("utf-8", errors="replace"),
            size=entry.get("size") or 0,
            language=detect_language(path),
            sha=entry["sha"],
        )
