"""
DevOps Analyzer — Readiness Checklist
=======================================

Scores a fetched repository against a fixed checklist of DevOps
categories. Every item is an independent keyword/path heuristic that
yields a detected label and a fixed confidence; the item confidences
are averaged into the overall score.

Deployment readiness is a separate weighted sum of three
infrastructure signals (Dockerfile, CI, Kubernetes) plus a bonus for
well-covered configuration items.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Iterable

from devops_analyzer.models import (
    ChecklistItem,
    ChecklistStatus,
    Complexity,
    DevOpsAnalysis,
    RepoFile,
    RepoMetadata,
)
from devops_analyzer.rules import (
    ANALYSIS_FAILED_REASONING,
    BACKEND_FRAMEWORKS,
    CHECKLIST_TEMPLATE,
    DATABASES,
    ENVIRONMENT_PATH_KEYWORDS,
    FILE_STORAGE_CONTENT_KEYWORDS,
    FRONTEND_FRAMEWORKS,
    GITOPS_CONTENT_KEYWORDS,
    GITOPS_PATH_KEYWORDS,
    INGRESS_CONTENT_KEYWORDS,
    LOAD_BALANCER_CONTENT_KEYWORDS,
    LOGGING_CONTENT_KEYWORDS,
    MONITORING_CONTENT_KEYWORDS,
    PERSISTENT_DATABASES,
    RESOURCE_CONTENT_KEYWORDS,
    SECRETS_CONTENT_KEYWORDS,
    SECRETS_PATH_KEYWORDS,
    SECURITY_CONTENT_KEYWORDS,
    SECURITY_PATH_KEYWORDS,
    TLS_CONTENT_KEYWORDS,
    ComplexityThresholds,
    ReadinessWeights,
)

logger = logging.getLogger("devops_analyzer.checklist")

Heuristic = Callable[[ChecklistItem, RepoMetadata, list[RepoFile]], None]


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────
def _content_has(files: list[RepoFile], keywords: Iterable[str]) -> bool:
    keywords = tuple(keywords)
    return any(kw in f.content for f in files for kw in keywords)


def _path_has(files: list[RepoFile], keywords: Iterable[str]) -> bool:
    keywords = tuple(keywords)
    return any(kw in f.path for f in files for kw in keywords)


def _set(item: ChecklistItem, detected: str, confidence: float, reasoning: str) -> None:
    item.detected = detected
    item.confidence = confidence
    item.reasoning = reasoning


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def size_complexity(metadata: RepoMetadata) -> int:
    """Files plus a weight per detected framework."""
    return metadata.total_files + len(metadata.frameworks) * ComplexityThresholds.FRAMEWORK_WEIGHT


# ─────────────────────────────────────────────────────────────────────────────
# Checklist Analyzer
# ─────────────────────────────────────────────────────────────────────────────
class DevOpsAnalyzer:
    """Runs the readiness checklist over a fetched repository.

    Usage:
        analyzer = DevOpsAnalyzer()
        analysis = analyzer.analyze("owner/repo", fetch.metadata, fetch.files)
    """

    def __init__(self) -> None:
        self._heuristics: dict[str, Heuristic] = {
            "app_type": self._analyze_application_type,
            "traffic_scale": self._analyze_traffic_scale,
            "database_req": self._analyze_database_requirements,
            "security_posture": self._analyze_security_posture,
            "secrets_mgmt": self._analyze_secrets_management,
            "ssl_tls": self._analyze_ssl_tls,
            "cluster_arch": self._analyze_cluster_architecture,
            "networking_req": self._analyze_networking,
            "storage_req": self._analyze_storage,
            "observability": self._analyze_observability,
            "logging": self._analyze_logging,
            "backup_dr": self._analyze_backup_dr,
            "cicd": self._analyze_cicd,
            "gitops": self._analyze_gitops,
            "environments": self._analyze_environments,
            "cost_optimization": self._analyze_cost_optimization,
            "resource_mgmt": self._analyze_resource_management,
        }

    def analyze(
        self,
        repo_id: str,
        metadata: RepoMetadata,
        files: list[RepoFile],
    ) -> DevOpsAnalysis:
        """Score every checklist item and aggregate the results."""
        logger.info("Starting DevOps analysis for repository: %s", repo_id)

        checklist = self.initialize_checklist()
        for item in checklist:
            item.status = ChecklistStatus.ANALYZING
            heuristic = self._heuristics.get(item.id)
            try:
                if heuristic is not None:
                    heuristic(item, metadata, files)
            except Exception:
                logger.error("Error analyzing %s", item.id, exc_info=True)
                item.confidence = 0.0
                item.reasoning = ANALYSIS_FAILED_REASONING
            item.status = ChecklistStatus.COMPLETED

        analysis = DevOpsAnalysis(
            repo_id=repo_id,
            checklist=checklist,
            overall_score=self.overall_score(checklist),
            recommendations=self.overall_recommendations(metadata),
            estimated_complexity=self.estimate_complexity(metadata),
            deployment_readiness=self.deployment_readiness(checklist, metadata),
        )

        logger.info(
            "Completed DevOps analysis for %s with score: %d (readiness %.1f%%)",
            repo_id, analysis.overall_score, analysis.deployment_readiness,
        )
        return analysis

    @staticmethod
    def initialize_checklist() -> list[ChecklistItem]:
        return [
            ChecklistItem(
                id=template["id"],
                category=template["category"],
                title=template["title"],
                recommendations=list(template["recommendations"]),
            )
            for template in CHECKLIST_TEMPLATE
        ]

    # ── Aggregation ──────────────────────────────────────────────────
    @staticmethod
    def overall_score(checklist: list[ChecklistItem]) -> int:
        if not checklist:
            return 0
        mean = sum(item.confidence for item in checklist) / len(checklist)
        return _round_half_up(mean * 100)

    @staticmethod
    def deployment_readiness(checklist: list[ChecklistItem], metadata: RepoMetadata) -> float:
        w = ReadinessWeights
        score = 0.0
        if metadata.has_dockerfile:
            score += w.DOCKERFILE
        if metadata.has_ci:
            score += w.CI
        if metadata.has_kubernetes:
            score += w.KUBERNETES

        configured = [
            item for item in checklist
            if item.id in w.CONFIG_ITEMS and item.confidence > w.CONFIG_CONFIDENCE_THRESHOLD
        ]
        score += (len(configured) / len(w.CONFIG_ITEMS)) * w.CONFIG_BONUS
        return min(float(w.MAX), score)

    @staticmethod
    def estimate_complexity(metadata: RepoMetadata) -> Complexity:
        score = size_complexity(metadata) + len(metadata.languages) * ComplexityThresholds.LANGUAGE_WEIGHT
        if score > ComplexityThresholds.HIGH:
            return Complexity.HIGH
        if score > ComplexityThresholds.MEDIUM:
            return Complexity.MEDIUM
        return Complexity.LOW

    @staticmethod
    def overall_recommendations(metadata: RepoMetadata) -> list[str]:
        recommendations: list[str] = []

        if metadata.has_dockerfile:
            recommendations.append("✅ Application is containerized and ready for Kubernetes deployment")
        else:
            recommendations.append("🔧 Add Dockerfile for containerization")

        if metadata.has_ci:
            recommendations.append("✅ CI/CD pipeline detected")
        else:
            recommendations.append("🔧 Setup CI/CD pipeline for automated deployments")

        if metadata.has_kubernetes:
            recommendations.append("✅ Kubernetes configurations found")
        else:
            recommendations.append("🔧 Add Kubernetes manifests for deployment")

        return recommendations

    # ── Application Architecture ─────────────────────────────────────
    @staticmethod
    def _analyze_application_type(item, metadata, files) -> None:
        frontend = [f for f in metadata.frameworks if f in FRONTEND_FRAMEWORKS]
        backend = [f for f in metadata.frameworks if f in BACKEND_FRAMEWORKS]

        if frontend and backend:
            _set(item, "Full-Stack Application", 0.9,
                 f"Detected both frontend ({', '.join(frontend)}) and backend ({', '.join(backend)}) frameworks")
        elif backend:
            _set(item, "API Service", 0.8, f"Detected backend frameworks: {', '.join(backend)}")
        elif frontend:
            _set(item, "Frontend Application", 0.8, f"Detected frontend frameworks: {', '.join(frontend)}")
        else:
            _set(item, "Unknown", 0.3, "Could not determine application type from detected frameworks")

    @staticmethod
    def _analyze_traffic_scale(item, metadata, files) -> None:
        score = size_complexity(metadata)
        if score > ComplexityThresholds.HIGH:
            _set(item, "High Traffic", 0.7,
                 f"Large codebase ({metadata.total_files} files) with multiple frameworks suggests high-scale application")
        elif score > ComplexityThresholds.MEDIUM:
            _set(item, "Medium Traffic", 0.6,
                 f"Moderate codebase size ({metadata.total_files} files) suggests medium-scale application")
        else:
            _set(item, "Low Traffic", 0.6,
                 f"Small codebase ({metadata.total_files} files) suggests low-scale application")

    @staticmethod
    def _analyze_database_requirements(item, metadata, files) -> None:
        databases = [f for f in metadata.frameworks if f in DATABASES]
        if not databases:
            _set(item, "No Database", 0.7, "No database frameworks detected in codebase")
        elif "Redis" in databases and len(databases) > 1:
            _set(item, "SQL + Cache", 0.9,
                 f"Detected databases: {', '.join(databases)} - includes caching layer")
        elif "MongoDB" in databases:
            _set(item, "NoSQL Database", 0.9, f"Detected NoSQL database: {', '.join(databases)}")
        else:
            _set(item, "SQL Database", 0.9, f"Detected SQL database: {', '.join(databases)}")

    # ── Security & Compliance ────────────────────────────────────────
    @staticmethod
    def _analyze_security_posture(item, metadata, files) -> None:
        if _path_has(files, SECURITY_PATH_KEYWORDS) or _content_has(files, SECURITY_CONTENT_KEYWORDS):
            _set(item, "Enhanced Security", 0.7, "Detected security-related files and configurations")
        else:
            _set(item, "Basic Security", 0.6,
                 "No specific security configurations detected, basic security recommended")

    @staticmethod
    def _analyze_secrets_management(item, metadata, files) -> None:
        if _content_has(files, SECRETS_CONTENT_KEYWORDS):
            _set(item, "External Secrets", 0.8, "Detected external secrets management references")
        elif _path_has(files, SECRETS_PATH_KEYWORDS):
            _set(item, "Environment Variables", 0.7, "Detected environment variable usage for secrets")
        else:
            _set(item, "Basic Secrets", 0.5, "No specific secrets management detected")

    @staticmethod
    def _analyze_ssl_tls(item, metadata, files) -> None:
        if _content_has(files, TLS_CONTENT_KEYWORDS):
            _set(item, "HTTPS Configured", 0.7, "Detected HTTPS/SSL/TLS references in codebase")
        else:
            _set(item, "HTTP Only", 0.6, "No HTTPS configuration detected, SSL/TLS setup needed")

    # ── Infrastructure & Networking ──────────────────────────────────
    @staticmethod
    def _analyze_cluster_architecture(item, metadata, files) -> None:
        if metadata.has_kubernetes:
            _set(item, "Kubernetes Ready", 0.9, "Kubernetes configurations detected in repository")
        elif metadata.has_dockerfile:
            _set(item, "Container Ready", 0.8, "Docker configuration detected, ready for containerization")
        else:
            _set(item, "Traditional Deployment", 0.6, "No container or Kubernetes configurations detected")

    @staticmethod
    def _analyze_networking(item, metadata, files) -> None:
        if _content_has(files, INGRESS_CONTENT_KEYWORDS + LOAD_BALANCER_CONTENT_KEYWORDS):
            _set(item, "Advanced Networking", 0.8,
                 "Detected ingress controllers or load balancer configurations")
        else:
            _set(item, "Basic Networking", 0.6, "Standard networking requirements detected")

    @staticmethod
    def _analyze_storage(item, metadata, files) -> None:
        has_database = any(f in PERSISTENT_DATABASES for f in metadata.frameworks)
        has_file_storage = _content_has(files, FILE_STORAGE_CONTENT_KEYWORDS)

        if has_database and has_file_storage:
            _set(item, "Database + File Storage", 0.9, "Detected both database and file storage requirements")
        elif has_database:
            _set(item, "Database Storage", 0.8, "Detected database storage requirements")
        elif has_file_storage:
            _set(item, "File Storage", 0.7, "Detected file storage requirements")
        else:
            _set(item, "No Persistent Storage", 0.7, "No persistent storage requirements detected")

    # ── Monitoring & Operations ──────────────────────────────────────
    @staticmethod
    def _analyze_observability(item, metadata, files) -> None:
        if _content_has(files, MONITORING_CONTENT_KEYWORDS):
            _set(item, "Advanced Monitoring", 0.8, "Detected monitoring and observability tools")
        else:
            _set(item, "Basic Monitoring", 0.6, "No advanced monitoring detected, basic setup recommended")

    @staticmethod
    def _analyze_logging(item, metadata, files) -> None:
        if _content_has(files, LOGGING_CONTENT_KEYWORDS):
            _set(item, "Structured Logging", 0.8, "Detected logging frameworks and structured logging")
        else:
            _set(item, "Basic Logging", 0.6, "No structured logging detected, basic setup recommended")

    @staticmethod
    def _analyze_backup_dr(item, metadata, files) -> None:
        if any(f in PERSISTENT_DATABASES for f in metadata.frameworks):
            _set(item, "Database Backups", 0.7, "Database detected, backup strategy required")
        else:
            _set(item, "Stateless Application", 0.8, "No persistent data detected, minimal backup requirements")

    # ── Development & Deployment ─────────────────────────────────────
    @staticmethod
    def _analyze_cicd(item, metadata, files) -> None:
        if metadata.has_ci:
            _set(item, "CI/CD Configured", 0.9, "CI/CD pipeline configurations detected")
        else:
            _set(item, "No CI/CD", 0.8, "No CI/CD configurations detected, setup required")

    @staticmethod
    def _analyze_gitops(item, metadata, files) -> None:
        if _content_has(files, GITOPS_CONTENT_KEYWORDS) or _path_has(files, GITOPS_PATH_KEYWORDS):
            _set(item, "GitOps Ready", 0.9, "GitOps tools and configurations detected")
        else:
            _set(item, "Manual Deployment", 0.7, "No GitOps configurations detected")

    @staticmethod
    def _analyze_environments(item, metadata, files) -> None:
        if _path_has(files, ENVIRONMENT_PATH_KEYWORDS):
            _set(item, "Multi-Environment", 0.8, "Multiple environment configurations detected")
        else:
            _set(item, "Single Environment", 0.7, "No multi-environment setup detected")

    # ── Cost & Resource Management ───────────────────────────────────
    @staticmethod
    def _analyze_cost_optimization(item, metadata, files) -> None:
        if size_complexity(metadata) > ComplexityThresholds.HIGH:
            _set(item, "Performance-First", 0.7, "Large application requires performance optimization")
        else:
            _set(item, "Cost-Aware", 0.7, "Standard application, cost optimization recommended")

    @staticmethod
    def _analyze_resource_management(item, metadata, files) -> None:
        if _content_has(files, RESOURCE_CONTENT_KEYWORDS):
            _set(item, "Resource Limits Configured", 0.9,
                 "Resource limits and requests detected in configurations")
        else:
            _set(item, "Basic Resources", 0.6, "No resource management configurations detected")
