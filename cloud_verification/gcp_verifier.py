"""
Cloud Verification — GCP Verifier
===================================

Validates the shape of a GCP service account key. No API call is
made; a structurally valid key is accepted.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from cloud_verification.models import CredentialValidation

logger = logging.getLogger("cloud_verification.gcp")

REQUIRED_KEY_FIELDS = ("type", "project_id", "private_key")


class GCPVerifier:
    """Verifies GCP service account credentials."""

    async def verify(self, config: dict[str, Any]) -> CredentialValidation:
        project_id = config.get("project_id")
        key = config.get("service_account_key")

        if not project_id or not key:
            return CredentialValidation.failure(
                "Missing required fields: project_id, service_account_key"
            )

        if isinstance(key, str):
            try:
                key = json.loads(key)
            except json.JSONDecodeError:
                logger.warning("Service account key for %s is not valid JSON", project_id)
                return CredentialValidation.failure("Invalid service account key format")

        if not isinstance(key, dict):
            return CredentialValidation.failure("Invalid service account key format")

        if not all(key.get(field) for field in REQUIRED_KEY_FIELDS):
            return CredentialValidation.failure("Invalid service account key structure")

        return CredentialValidation(
            valid=True,
            details={"project_id": key["project_id"], "key_type": key["type"]},
        )
