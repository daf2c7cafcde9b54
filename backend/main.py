"""
Deploy.AI — FastAPI Backend
=============================

REST API for repository DevOps analysis, projects, cloud connections
and deployment records.

Routers:
    /api/repositories  — Register repositories, run and query analyses
    /api/projects      — Projects, their settings, connections and repositories
    /api/cloud         — Cloud credential validation and storage
    /api/deployments   — Deployment records

Run:
    uvicorn backend.main:app --reload --port 8000
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.config import CORS_ORIGINS, LOG_LEVEL
from backend.routers import cloud, deployments, project_settings, projects, repositories

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s  %(levelname)-8s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("backend")

VERSION = "1.0.0"

# ─────────────────────────────────────────────────────────────────────────────
# FastAPI App
# ─────────────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="Deploy.AI API",
    description="Repository DevOps readiness analysis and cloud deployment management",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(repositories.router)
app.include_router(projects.router)
app.include_router(project_settings.router)
app.include_router(cloud.router)
app.include_router(deployments.router)


# ─────────────────────────────────────────────────────────────────────────────
# Endpoints
# ─────────────────────────────────────────────────────────────────────────────
@app.get("/")
async def root():
    return {
        "name": "Deploy.AI API",
        "version": VERSION,
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    return {"status": "ok", "version": VERSION}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("backend.main:app", host="0.0.0.0", port=8000, reload=False)
