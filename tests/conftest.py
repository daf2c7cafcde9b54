"""
Shared fixtures: an in-memory fake of the GitHub REST API served
through httpx.MockTransport, and a TestClient wired to fresh singletons.
"""

import base64

import httpx
import pytest
from fastapi.testclient import TestClient

from backend.config import get_analyzer, get_cipher, get_store
from backend.crypto import TokenCipher
from backend.main import app
from backend.store import InMemoryStore
from devops_analyzer.engine import RepositoryAnalyzer
from devops_analyzer.github_fetcher import GitHubFetcher


SAMPLE_FILES = {
    "Dockerfile": "FROM node:20-alpine\nCOPY . .\nCMD [\"node\", \"src/server.js\"]\n",
    "package.json": '{"dependencies": {"react": "^18", "express": "^4", "mongoose": "^8"}}',
    ".github/workflows/ci.yml": "on: push\njobs:\n  test:\n    runs-on: ubuntu-latest\n",
    "k8s/deployment.yaml": "kind: Deployment\nresources:\n  limits:\n    cpu: 500m\n",
    "src/server.js": "const helmet = require('helmet');\nconst logger = console;\nhttps.createServer();\n",
}


class FakeGitHub:
    """Serves repositories from a dict of {"owner/name": {path: content}}."""

    def __init__(self) -> None:
        self.repos: dict[str, dict] = {}
        self.blob_errors: set[str] = set()
        self.uninlined_blobs: set[str] = set()
        self.status_overrides: dict[str, int] = {}
        self.requests: list[httpx.Request] = []

    def add_repo(self, full_name: str, files: dict[str, str], **repo_data) -> None:
        self.repos[full_name] = {"files": dict(files), "meta": repo_data}

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.strip("/").split("/")
        if len(parts) < 3 or parts[0] != "repos":
            return httpx.Response(404, json={"message": "Not Found"})

        full_name = f"{parts[1]}/{parts[2]}"
        if full_name in self.status_overrides:
            return httpx.Response(self.status_overrides[full_name], json={"message": "error"})
        repo = self.repos.get(full_name)
        if repo is None:
            return httpx.Response(404, json={"message": "Not Found"})

        files = repo["files"]
        meta = repo["meta"]
        rest = parts[3:]

        if not rest:
            return httpx.Response(200, json={
                "full_name": full_name,
                "description": meta.get("description", "Sample repository"),
                "language": meta.get("language", "JavaScript"),
                "topics": meta.get("topics", []),
                "default_branch": meta.get("default_branch", "main"),
            })
        if rest == ["languages"]:
            return httpx.Response(200, json=meta.get("languages", {"JavaScript": 1200}))
        if rest[:2] == ["git", "trees"]:
            tree = [{"path": "src", "type": "tree", "sha": "dir"}]
            tree += [
                {"path": path, "type": "blob", "sha": self._sha(path), "size": len(content)}
                for path, content in files.items()
            ]
            return httpx.Response(200, json={"tree": tree, "truncated": False})
        if rest[:2] == ["git", "blobs"]:
            for path, content in files.items():
                if self._sha(path) == rest[2]:
                    if path in self.blob_errors:
                        return httpx.Response(500, json={"message": "boom"})
                    if path in self.uninlined_blobs:
                        return httpx.Response(200, json={"content": None, "encoding": "none"})
                    encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
                    return httpx.Response(200, json={"content": encoded, "encoding": "base64"})
        return httpx.Response(404, json={"message": "Not Found"})

    @staticmethod
    def _sha(path: str) -> str:
        return "sha-" + path.replace("/", "_")


@pytest.fixture
def fake_github():
    github = FakeGitHub()
    github.add_repo("acme/shop", SAMPLE_FILES, languages={"JavaScript": 5000, "Dockerfile": 100})
    return github


@pytest.fixture
def fetcher(fake_github):
    return GitHubFetcher(batch_size=2, batch_delay=0, transport=fake_github.transport)


@pytest.fixture
def analyzer(fetcher):
    return RepositoryAnalyzer(fetcher=fetcher)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def cipher():
    return TokenCipher("test-encryption-key")


@pytest.fixture
def client(store, analyzer, cipher):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_analyzer] = lambda: analyzer
    app.dependency_overrides[get_cipher] = lambda: cipher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
