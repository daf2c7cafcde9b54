"""
Cloud Verification — Azure Verifier
=====================================

Validates that a service principal's fields are present. No API call
is made.
"""

from __future__ import annotations

from typing import Any

from cloud_verification.models import CredentialValidation

REQUIRED_FIELDS = ("subscription_id", "tenant_id", "client_id", "client_secret")


class AzureVerifier:
    """Verifies Azure service principal credentials."""

    async def verify(self, config: dict[str, Any]) -> CredentialValidation:
        if not all(field in config and config[field] is not None for field in REQUIRED_FIELDS):
            return CredentialValidation.failure(
                "Missing required fields: " + ", ".join(REQUIRED_FIELDS)
            )

        values = {field: str(config[field]).strip() for field in REQUIRED_FIELDS}
        if not all(values.values()):
            return CredentialValidation.failure("All credential fields must be non-empty")

        return CredentialValidation(
            valid=True,
            details={
                "subscription_id": values["subscription_id"],
                "tenant_id": values["tenant_id"],
                "client_id": values["client_id"][:8] + "...",
            },
        )
