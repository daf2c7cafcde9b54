"""
Backend — Record Store
========================

Thread-safe in-process storage for projects, repositories, cloud
connections and deployments.

Rules enforced here:
    • Project slugs are unique across all users
    • A user registers a repository full name at most once
    • Connection names are unique within a project
    • Deleting a project deletes its connections and un-assigns its
      repositories

Lookups that take a ``user_id`` raise AccessDeniedError when the record
belongs to someone else.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional, TypeVar

from pydantic import BaseModel

from backend.models import CloudConnection, Deployment, Project, Repository, utcnow

logger = logging.getLogger("backend.store")

RecordT = TypeVar("RecordT", bound=BaseModel)


class StoreError(Exception):
    pass


class NotFoundError(StoreError):
    pass


class ConflictError(StoreError):
    pass


class AccessDeniedError(StoreError):
    pass


class InMemoryStore:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._projects: dict[str, Project] = {}
        self._repositories: dict[str, Repository] = {}
        self._connections: dict[str, CloudConnection] = {}
        self._deployments: dict[str, Deployment] = {}

    # ── Helpers ──────────────────────────────────────────────────────
    @staticmethod
    def _lookup(table: dict[str, RecordT], record_id: str, label: str) -> RecordT:
        record = table.get(record_id)
        if record is None:
            raise NotFoundError(f"{label} not found")
        return record

    @staticmethod
    def _check_owner(record: Any, user_id: Optional[str], label: str) -> None:
        if user_id is not None and record.user_id != user_id:
            raise AccessDeniedError(f"Access denied to {label.lower()}")

    @staticmethod
    def _apply(record: RecordT, changes: dict[str, Any]) -> RecordT:
        updated = record.model_copy(update={**changes, "updated_at": utcnow()})
        return type(record).model_validate(updated.model_dump())

    # ── Projects ─────────────────────────────────────────────────────
    def create_project(self, project: Project) -> Project:
        with self._lock:
            if any(p.slug == project.slug for p in self._projects.values()):
                raise ConflictError("Project slug already exists")
            self._projects[project.id] = project.model_copy(deep=True)
        logger.info("Project created: %s (%s)", project.slug, project.id)
        return project.model_copy(deep=True)

    def get_project(self, project_id: str, user_id: Optional[str] = None) -> Project:
        with self._lock:
            project = self._lookup(self._projects, project_id, "Project")
            self._check_owner(project, user_id, "Project")
            return project.model_copy(deep=True)

    def list_projects(self, user_id: str) -> list[Project]:
        with self._lock:
            projects = [p.model_copy(deep=True) for p in self._projects.values() if p.user_id == user_id]
        return sorted(projects, key=lambda p: p.created_at, reverse=True)

    def update_project(self, project_id: str, user_id: Optional[str] = None, **changes: Any) -> Project:
        with self._lock:
            project = self._lookup(self._projects, project_id, "Project")
            self._check_owner(project, user_id, "Project")
            updated = self._apply(project, changes)
            self._projects[project_id] = updated
            return updated.model_copy(deep=True)

    def delete_project(self, project_id: str, user_id: Optional[str] = None) -> None:
        with self._lock:
            project = self._lookup(self._projects, project_id, "Project")
            self._check_owner(project, user_id, "Project")

            dropped = [cid for cid, c in self._connections.items() if c.project_id == project_id]
            for cid in dropped:
                del self._connections[cid]

            for rid, repo in self._repositories.items():
                if repo.project_id == project_id:
                    self._repositories[rid] = self._apply(repo, {"project_id": None})

            del self._projects[project_id]
        logger.info("Project deleted: %s (%d connections removed)", project_id, len(dropped))

    # ── Repositories ─────────────────────────────────────────────────
    def add_repository(self, repository: Repository) -> Repository:
        with self._lock:
            for existing in self._repositories.values():
                if existing.user_id == repository.user_id and existing.full_name == repository.full_name:
                    raise ConflictError("Repository already registered")
            self._repositories[repository.id] = repository.model_copy(deep=True)
        logger.info("Repository registered: %s", repository.full_name)
        return repository.model_copy(deep=True)

    def get_repository(self, repository_id: str, user_id: Optional[str] = None) -> Repository:
        with self._lock:
            repo = self._lookup(self._repositories, repository_id, "Repository")
            self._check_owner(repo, user_id, "Repository")
            return repo.model_copy(deep=True)

    def find_repository(self, user_id: str, full_name: str) -> Optional[Repository]:
        with self._lock:
            for repo in self._repositories.values():
                if repo.user_id == user_id and repo.full_name.lower() == full_name.lower():
                    return repo.model_copy(deep=True)
        return None

    def list_repositories(
        self,
        user_id: str,
        project_id: Optional[str] = None,
        unassigned: bool = False,
    ) -> list[Repository]:
        with self._lock:
            repos = [
                r.model_copy(deep=True)
                for r in self._repositories.values()
                if r.user_id == user_id
                and (project_id is None or r.project_id == project_id)
                and (not unassigned or r.project_id is None)
            ]
        return sorted(repos, key=lambda r: r.updated_at, reverse=True)

    def update_repository(self, repository_id: str, **changes: Any) -> Repository:
        with self._lock:
            repo = self._lookup(self._repositories, repository_id, "Repository")
            updated = self._apply(repo, changes)
            self._repositories[repository_id] = updated
            return updated.model_copy(deep=True)

    # ── Cloud connections ────────────────────────────────────────────
    def add_connection(self, connection: CloudConnection) -> CloudConnection:
        with self._lock:
            self._lookup(self._projects, connection.project_id, "Project")
            for existing in self._connections.values():
                if existing.project_id == connection.project_id and existing.name == connection.name:
                    raise ConflictError("A connection with this name already exists in the project")
            self._connections[connection.id] = connection.model_copy(deep=True)
        logger.info("Cloud connection created: %s (%s)", connection.name, connection.provider.value)
        return connection.model_copy(deep=True)

    def get_connection(self, connection_id: str, user_id: Optional[str] = None) -> CloudConnection:
        """Connection by id; ownership is checked through its project."""
        with self._lock:
            connection = self._lookup(self._connections, connection_id, "Cloud connection")
            if user_id is not None:
                project = self._lookup(self._projects, connection.project_id, "Project")
                self._check_owner(project, user_id, "Cloud connection")
            return connection.model_copy(deep=True)

    def list_connections(self, project_id: str) -> list[CloudConnection]:
        with self._lock:
            connections = [c.model_copy(deep=True) for c in self._connections.values() if c.project_id == project_id]
        return sorted(connections, key=lambda c: c.created_at, reverse=True)

    def update_connection(self, connection_id: str, **changes: Any) -> CloudConnection:
        with self._lock:
            connection = self._lookup(self._connections, connection_id, "Cloud connection")
            new_name = changes.get("name")
            if new_name and new_name != connection.name:
                for other in self._connections.values():
                    if other.id != connection_id and other.project_id == connection.project_id and other.name == new_name:
                        raise ConflictError("A connection with this name already exists in the project")
            updated = self._apply(connection, changes)
            self._connections[connection_id] = updated
            return updated.model_copy(deep=True)

    def delete_connection(self, connection_id: str) -> None:
        with self._lock:
            self._lookup(self._connections, connection_id, "Cloud connection")
            del self._connections[connection_id]
        logger.info("Cloud connection deleted: %s", connection_id)

    # ── Deployments ──────────────────────────────────────────────────
    def add_deployment(self, deployment: Deployment) -> Deployment:
        with self._lock:
            self._deployments[deployment.id] = deployment.model_copy(deep=True)
        logger.info("Deployment created: %s", deployment.name)
        return deployment.model_copy(deep=True)

    def get_deployment(self, deployment_id: str, user_id: Optional[str] = None) -> Deployment:
        with self._lock:
            deployment = self._lookup(self._deployments, deployment_id, "Deployment")
            self._check_owner(deployment, user_id, "Deployment")
            return deployment.model_copy(deep=True)

    def list_deployments(self, user_id: str) -> list[Deployment]:
        with self._lock:
            deployments = [d.model_copy(deep=True) for d in self._deployments.values() if d.user_id == user_id]
        return sorted(deployments, key=lambda d: d.created_at, reverse=True)

    def update_deployment(self, deployment_id: str, **changes: Any) -> Deployment:
        with self._lock:
            deployment = self._lookup(self._deployments, deployment_id, "Deployment")
            updated = self._apply(deployment, changes)
            self._deployments[deployment_id] = updated
            return updated.model_copy(deep=True)
