"""
DevOps Analyzer — Report
==========================

Renders a finished analysis status as a plain-text summary or as JSON.
"""

from __future__ import annotations

import json

from devops_analyzer.models import AnalysisState, AnalysisStatus
from devops_analyzer.rules import readiness_label


def status_to_json(status: AnalysisStatus, indent: int = 2) -> str:
    return json.dumps(status.model_dump(mode="json"), indent=indent)


def render_report(status: AnalysisStatus) -> str:
    """Human summary of an analysis."""
    lines = [f"Repository: {status.repo_id}", f"Status: {status.status.value}"]

    if status.status == AnalysisState.FAILED:
        lines.append(f"Error: {status.error}")
        return "\n".join(lines)

    meta = status.metadata
    if meta is not None:
        lines.append(f"Description: {meta.description or '-'}")
        lines.append(f"Primary language: {meta.language or '-'}")
        lines.append(f"Languages: {', '.join(meta.languages) or '-'}")
        lines.append(f"Frameworks: {', '.join(meta.frameworks) or '-'}")
        lines.append(f"Package managers: {', '.join(meta.package_managers) or '-'}")
        lines.append(f"Files analyzed: {meta.total_files} ({meta.total_size} bytes)")
        lines.append(f"Dockerfile: {meta.has_dockerfile}")
        lines.append(f"CI: {meta.has_ci}")
        lines.append(f"Kubernetes: {meta.has_kubernetes}")
        lines.append("")

    devops = status.devops_analysis
    if devops is None:
        return "\n".join(lines)

    lines.append(f"Overall score: {devops.overall_score}/100")
    lines.append(
        f"Deployment readiness: {devops.deployment_readiness:.1f}% "
        f"({readiness_label(devops.deployment_readiness)})"
    )
    lines.append(f"Estimated complexity: {devops.estimated_complexity.value}")
    lines.append("")

    lines.append("Checklist:")
    category = None
    for item in devops.checklist:
        if item.category != category:
            category = item.category
            lines.append(f"  {category}")
        lines.append(f"    - {item.title}: {item.detected or 'n/a'} ({item.confidence:.0%})")
        if item.reasoning:
            lines.append(f"        {item.reasoning}")
    lines.append("")

    if devops.recommendations:
        lines.append("Recommendations:")
        for rec in devops.recommendations:
            lines.append(f"- {rec}")

    return "\n".join(lines)
