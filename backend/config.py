"""
Backend — Shared Configuration
================================

Environment settings, shared singletons, and the caller-identity
dependency used by every router.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import Header

from backend.crypto import TokenCipher
from backend.store import InMemoryStore
from devops_analyzer.engine import RepositoryAnalyzer
from devops_analyzer.github_fetcher import GITHUB_API, GitHubFetcher
from devops_analyzer.rules import FetchLimits

logger = logging.getLogger("backend.config")

# ─────────────────────────────────────────────────────────────────────────────
# Load .env
# ─────────────────────────────────────────────────────────────────────────────
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# ─────────────────────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────────────────────
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN") or None
GITHUB_API_URL = os.getenv("GITHUB_API_URL", GITHUB_API)
ENCRYPTION_KEY = os.getenv("ENCRYPTION_KEY", "your-32-character-secret-key-here!")
FETCH_BATCH_SIZE = int(os.getenv("FETCH_BATCH_SIZE", FetchLimits.BATCH_SIZE))
FETCH_BATCH_DELAY = float(os.getenv("FETCH_BATCH_DELAY", FetchLimits.BATCH_DELAY_SECONDS))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
DEFAULT_USER_ID = os.getenv("DEFAULT_USER_ID", "local-user")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# ─────────────────────────────────────────────────────────────────────────────
# Singletons
# ─────────────────────────────────────────────────────────────────────────────
_store: InMemoryStore | None = None
_analyzer: RepositoryAnalyzer | None = None
_cipher: TokenCipher | None = None


def get_store() -> InMemoryStore:
    """Lazy-init the record store."""
    global _store
    if _store is None:
        _store = InMemoryStore()
        logger.info("Record store initialized")
    return _store


def get_analyzer() -> RepositoryAnalyzer:
    """Lazy-init the repository analyzer."""
    global _analyzer
    if _analyzer is None:
        fetcher = GitHubFetcher(
            GITHUB_TOKEN,
            base_url=GITHUB_API_URL,
            batch_size=FETCH_BATCH_SIZE,
            batch_delay=FETCH_BATCH_DELAY,
        )
        _analyzer = RepositoryAnalyzer(fetcher=fetcher)
        logger.info(
            "Repository analyzer initialized (api=%s, authenticated=%s)",
            GITHUB_API_URL, bool(GITHUB_TOKEN),
        )
    return _analyzer


def get_cipher() -> TokenCipher:
    """Lazy-init the secret cipher."""
    global _cipher
    if _cipher is None:
        _cipher = TokenCipher(ENCRYPTION_KEY)
    return _cipher


def current_user(x_user_id: str | None = Header(default=None)) -> str:
    """Caller identity from the X-User-Id header."""
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()
    return DEFAULT_USER_ID
