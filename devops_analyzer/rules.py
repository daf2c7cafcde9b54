"""
DevOps Analyzer — Heuristic Rules & Tables
============================================

Every file filter, keyword table, checklist template, confidence
threshold and readiness weight used by the analyzer is defined here.
No magic numbers elsewhere.
"""

from __future__ import annotations

# ─────────────────────────────────────────────────────────────────────────────
# File Selection
# ─────────────────────────────────────────────────────────────────────────────
CODE_EXTENSIONS: frozenset[str] = frozenset({
    ".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".go", ".rs", ".cpp", ".c", ".h",
    ".cs", ".php", ".rb", ".swift", ".kt", ".scala", ".clj", ".hs", ".ml", ".fs",
    ".sh", ".bash", ".zsh", ".ps1", ".bat", ".cmd",
    ".yaml", ".yml", ".json", ".toml", ".ini", ".cfg", ".conf",
    ".sql", ".graphql", ".proto", ".thrift",
    ".html", ".css", ".scss", ".sass", ".less",
    ".md", ".rst", ".txt", ".dockerfile", "Dockerfile",
    ".tf", ".hcl", ".nomad",
})

# Suffixes accepted even without a known extension
CODE_FILENAME_SUFFIXES: tuple[str, ...] = ("Dockerfile", "Makefile")

EXCLUDED_PATH_FRAGMENTS: tuple[str, ...] = (
    "node_modules/", "vendor/", ".git/", "dist/", "build/", "target/",
    ".next/", ".nuxt/", "coverage/", "__pycache__/", ".pytest_cache/",
    "venv/", "env/", ".env/", "logs/", "tmp/", "temp/",
)

EXTENSION_LANGUAGE_MAP: dict[str, str] = {
    ".js": "javascript",
    ".ts": "typescript",
    ".jsx": "javascript",
    ".tsx": "typescript",
    ".py": "python",
    ".java": "java",
    ".go": "go",
    ".rs": "rust",
    ".cpp": "cpp",
    ".c": "c",
    ".h": "c",
    ".cs": "csharp",
    ".php": "php",
    ".rb": "ruby",
    ".swift": "swift",
    ".kt": "kotlin",
    ".scala": "scala",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
    ".sql": "sql",
    ".html": "html",
    ".css": "css",
    ".scss": "scss",
    ".md": "markdown",
    ".sh": "bash",
    ".bash": "bash",
    ".tf": "terraform",
    ".hcl": "hcl",
}

DEFAULT_LANGUAGE = "text"


class FetchLimits:
    """Limits applied while downloading a repository."""

    MAX_FILE_SIZE = 1_000_000        # bytes, files at or above are skipped
    BATCH_SIZE = 10                  # blobs downloaded concurrently
    BATCH_DELAY_SECONDS = 1.0        # pause between batches
    REQUEST_TIMEOUT = 15.0


# ─────────────────────────────────────────────────────────────────────────────
# Repository Metadata Signals
# ─────────────────────────────────────────────────────────────────────────────
KUBERNETES_PATH_FRAGMENTS: tuple[str, ...] = ("k8s/", "kubernetes/", ".yaml")

CI_PATH_FRAGMENTS: tuple[str, ...] = (
    ".github/workflows/",
    ".gitlab-ci.yml",
    "Jenkinsfile",
)

# Root-level manifest → package manager, in detection order
PACKAGE_MANAGER_FILES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("package.json",), "npm"),
    (("yarn.lock",), "yarn"),
    (("pnpm-lock.yaml",), "pnpm"),
    (("requirements.txt", "pyproject.toml"), "pip"),
    (("Pipfile",), "pipenv"),
    (("poetry.lock",), "poetry"),
    (("go.mod",), "go"),
    (("Cargo.toml",), "cargo"),
    (("pom.xml",), "maven"),
    (("build.gradle",), "gradle"),
)

FRONTEND_FRAMEWORKS: tuple[str, ...] = ("React", "Vue", "Angular", "Next.js", "Nuxt.js")
BACKEND_FRAMEWORKS: tuple[str, ...] = ("Express", "NestJS", "FastAPI", "Django", "Flask", "Spring")
DATABASES: tuple[str, ...] = ("MongoDB", "PostgreSQL", "MySQL", "Redis")
PERSISTENT_DATABASES: tuple[str, ...] = ("MongoDB", "PostgreSQL", "MySQL")

# Framework → keywords searched in lowercase file content.
# Frontend frameworks also match on lowercase file paths.
FRAMEWORK_SIGNALS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("React", ("react",)),
    ("Vue", ("vue",)),
    ("Angular", ("angular",)),
    ("Next.js", ("next",)),
    ("Nuxt.js", ("nuxt",)),
    ("Express", ("express", "fastify")),
    ("NestJS", ("nestjs", "@nestjs")),
    ("FastAPI", ("fastapi", "uvicorn")),
    ("Django", ("django", "django.")),
    ("Flask", ("flask", "from flask")),
    ("Spring", ("spring", "springframework")),
    ("MongoDB", ("mongodb", "mongoose")),
    ("PostgreSQL", ("postgresql", "postgres")),
    ("MySQL", ("mysql",)),
    ("Redis", ("redis",)),
)


# ─────────────────────────────────────────────────────────────────────────────
# Checklist Template
# ─────────────────────────────────────────────────────────────────────────────
CHECKLIST_TEMPLATE: tuple[dict, ...] = (
    {
        "id": "app_type",
        "category": "Application Architecture",
        "title": "Application Type & Scale",
        "recommendations": ["Identify application architecture", "Determine scaling requirements"],
    },
    {
        "id": "traffic_scale",
        "category": "Application Architecture",
        "title": "Expected Traffic & Scaling",
        "recommendations": ["Configure auto-scaling", "Set resource limits"],
    },
    {
        "id": "database_req",
        "category": "Application Architecture",
        "title": "Database Requirements",
        "recommendations": ["Setup database connections", "Configure backup strategies"],
    },
    {
        "id": "security_posture",
        "category": "Security & Compliance",
        "title": "Security Posture",
        "recommendations": ["Implement security policies", "Configure RBAC"],
    },
    {
        "id": "secrets_mgmt",
        "category": "Security & Compliance",
        "title": "Secrets Management",
        "recommendations": ["Setup secrets management", "Configure rotation policies"],
    },
    {
        "id": "ssl_tls",
        "category": "Security & Compliance",
        "title": "SSL/TLS Configuration",
        "recommendations": ["Configure certificate management", "Setup TLS termination"],
    },
    {
        "id": "cluster_arch",
        "category": "Infrastructure & Networking",
        "title": "Cluster Architecture",
        "recommendations": ["Design cluster topology", "Configure networking"],
    },
    {
        "id": "networking_req",
        "category": "Infrastructure & Networking",
        "title": "Networking Requirements",
        "recommendations": ["Setup ingress controllers", "Configure load balancing"],
    },
    {
        "id": "storage_req",
        "category": "Infrastructure & Networking",
        "title": "Storage Requirements",
        "recommendations": ["Configure persistent volumes", "Setup backup strategies"],
    },
    {
        "id": "observability",
        "category": "Monitoring & Operations",
        "title": "Observability Level",
        "recommendations": ["Setup monitoring stack", "Configure alerting"],
    },
    {
        "id": "logging",
        "category": "Monitoring & Operations",
        "title": "Logging Strategy",
        "recommendations": ["Configure log aggregation", "Setup log retention"],
    },
    {
        "id": "backup_dr",
        "category": "Monitoring & Operations",
        "title": "Backup & Disaster Recovery",
        "recommendations": ["Setup backup schedules", "Configure DR procedures"],
    },
    {
        "id": "cicd",
        "category": "Development & Deployment",
        "title": "CI/CD Integration",
        "recommendations": ["Setup CI/CD pipelines", "Configure automated testing"],
    },
    {
        "id": "gitops",
        "category": "Development & Deployment",
        "title": "GitOps Configuration",
        "recommendations": ["Setup GitOps workflows", "Configure sync policies"],
    },
    {
        "id": "environments",
        "category": "Development & Deployment",
        "title": "Environment Strategy",
        "recommendations": ["Setup environment separation", "Configure promotion workflows"],
    },
    {
        "id": "cost_optimization",
        "category": "Cost & Resource Management",
        "title": "Cost Optimization",
        "recommendations": ["Configure resource limits", "Setup cost monitoring"],
    },
    {
        "id": "resource_mgmt",
        "category": "Cost & Resource Management",
        "title": "Resource Management",
        "recommendations": ["Setup resource quotas", "Configure auto-scaling"],
    },
)


# ─────────────────────────────────────────────────────────────────────────────
# Keyword Tables (case-sensitive, matched against raw content or paths)
# ─────────────────────────────────────────────────────────────────────────────
SECURITY_PATH_KEYWORDS = ("security", "auth", "rbac")
SECURITY_CONTENT_KEYWORDS = ("helmet", "cors")
SECRETS_PATH_KEYWORDS = (".env", "secrets")
SECRETS_CONTENT_KEYWORDS = ("vault", "secret")
TLS_CONTENT_KEYWORDS = ("https", "ssl", "tls")
INGRESS_CONTENT_KEYWORDS = ("ingress", "nginx")
LOAD_BALANCER_CONTENT_KEYWORDS = ("loadbalancer", "alb")
FILE_STORAGE_CONTENT_KEYWORDS = ("upload", "storage")
MONITORING_CONTENT_KEYWORDS = ("prometheus", "grafana", "monitoring")
LOGGING_CONTENT_KEYWORDS = ("winston", "logger", "log")
GITOPS_CONTENT_KEYWORDS = ("argocd", "flux")
GITOPS_PATH_KEYWORDS = ("gitops",)
ENVIRONMENT_PATH_KEYWORDS = ("env", "config", "staging", "prod")
RESOURCE_CONTENT_KEYWORDS = ("resources:", "limits:", "requests:")


# ─────────────────────────────────────────────────────────────────────────────
# Scoring Weights & Thresholds
# ─────────────────────────────────────────────────────────────────────────────
class ComplexityThresholds:
    """Size-based complexity scoring shared by several checklist items."""

    FRAMEWORK_WEIGHT = 10
    LANGUAGE_WEIGHT = 5
    HIGH = 200
    MEDIUM = 50


class ReadinessWeights:
    """Deployment readiness: infrastructure signals plus a config bonus."""

    DOCKERFILE = 30
    CI = 25
    KUBERNETES = 25
    CONFIG_BONUS = 20
    CONFIG_ITEMS = ("secrets_mgmt", "ssl_tls", "observability")
    CONFIG_CONFIDENCE_THRESHOLD = 0.7   # strictly greater than
    MAX = 100


ANALYSIS_FAILED_REASONING = "Analysis failed due to error"


def readiness_label(score: float) -> str:
    """Return human-readable deployment readiness label."""
    if score >= 80:
        return "Ready"
    if score >= 50:
        return "Partially Ready"
    if score >= 25:
        return "Needs Work"
    return "Not Ready"
