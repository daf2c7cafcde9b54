"""
Deploy.AI — Analyze a Repository
==================================

Runs the full DevOps readiness analysis for one GitHub repository and
prints the report.

Usage:
    python analyze_repo.py https://github.com/owner/repo
    python analyze_repo.py owner/repo --json
    python analyze_repo.py https://github.com/owner/repo --token ghp_... --output report.txt

A GITHUB_TOKEN in the environment (or .env) is used when --token is
not given. Exits with status 1 when the analysis fails.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from devops_analyzer.engine import RepositoryAnalyzer
from devops_analyzer.github_fetcher import GitHubFetcher
from devops_analyzer.models import AnalysisState, AnalysisStatus
from devops_analyzer.report import render_report, status_to_json
from devops_analyzer.rules import FetchLimits

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("analyze_repo")


# ─────────────────────────────────────────────────────────────────────────────
# Main logic
# ─────────────────────────────────────────────────────────────────────────────
def analyze(
    repo_url: str,
    token: Optional[str] = None,
    batch_delay: float = FetchLimits.BATCH_DELAY_SECONDS,
) -> AnalysisStatus:
    """Run one analysis to completion."""
    fetcher = GitHubFetcher(token, batch_delay=batch_delay)
    analyzer = RepositoryAnalyzer(fetcher=fetcher)
    return asyncio.run(analyzer.analyze(repo_url))


# ─────────────────────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────────────────────
def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="analyze_repo",
        description="Analyze a GitHub repository's DevOps readiness",
    )
    parser.add_argument(
        "repo_url",
        type=str,
        help="GitHub repository URL or owner/name",
    )
    parser.add_argument(
        "--token", "-t",
        type=str,
        default=None,
        help="GitHub token (defaults to $GITHUB_TOKEN)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full analysis as JSON",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write the output to a file instead of stdout",
    )
    parser.add_argument(
        "--batch-delay",
        type=float,
        default=FetchLimits.BATCH_DELAY_SECONDS,
        help="Seconds to wait between download batches",
    )

    args = parser.parse_args(argv)
    load_dotenv(Path(__file__).parent / ".env")
    token = args.token or os.getenv("GITHUB_TOKEN") or None

    try:
        status = analyze(args.repo_url, token=token, batch_delay=args.batch_delay)
    except ValueError as exc:
        logger.error("Fatal: %s", exc)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)

    output = status_to_json(status) if args.json else render_report(status)
    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        logger.info("Report written to %s", args.output)
    else:
        print(output)

    if status.status != AnalysisState.COMPLETED:
        sys.exit(1)


if __name__ == "__main__":
    main()
