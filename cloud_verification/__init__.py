"""
Cloud Verification — Package
==============================

Validates cloud provider credentials before they are stored, and
publishes the static region catalogue for each provider.

Usage:
    from cloud_verification import verify_credentials
    result = await verify_credentials("aws", {"access_key_id": ..., ...})
"""

from __future__ import annotations

import logging
from typing import Any

from cloud_verification.aws_verifier import AWSVerifier
from cloud_verification.azure_verifier import AzureVerifier
from cloud_verification.gcp_verifier import GCPVerifier
from cloud_verification.models import CloudProvider, CredentialValidation, Region

logger = logging.getLogger("cloud_verification")


class UnsupportedProviderError(ValueError):
    """Raised for a provider name outside aws / gcp / azure."""


_VERIFIERS = {
    CloudProvider.AWS: AWSVerifier(),
    CloudProvider.GCP: GCPVerifier(),
    CloudProvider.AZURE: AzureVerifier(),
}

PROVIDER_REGIONS: dict[CloudProvider, list[Region]] = {
    CloudProvider.AWS: [
        Region(id="us-east-1", name="US East (N. Virginia)"),
        Region(id="us-east-2", name="US East (Ohio)"),
        Region(id="us-west-1", name="US West (N. California)"),
        Region(id="us-west-2", name="US West (Oregon)"),
        Region(id="eu-west-1", name="Europe (Ireland)"),
        Region(id="eu-west-2", name="Europe (London)"),
        Region(id="eu-central-1", name="Europe (Frankfurt)"),
        Region(id="ap-southeast-1", name="Asia Pacific (Singapore)"),
        Region(id="ap-southeast-2", name="Asia Pacific (Sydney)"),
        Region(id="ap-northeast-1", name="Asia Pacific (Tokyo)"),
    ],
    CloudProvider.GCP: [
        Region(id="us-central1", name="Iowa (us-central1)"),
        Region(id="us-east1", name="South Carolina (us-east1)"),
        Region(id="us-west1", name="Oregon (us-west1)"),
        Region(id="europe-west1", name="Belgium (europe-west1)"),
        Region(id="europe-west2", name="London (europe-west2)"),
        Region(id="asia-east1", name="Taiwan (asia-east1)"),
        Region(id="asia-southeast1", name="Singapore (asia-southeast1)"),
    ],
    CloudProvider.AZURE: [
        Region(id="eastus", name="East US"),
        Region(id="eastus2", name="East US 2"),
        Region(id="westus", name="West US"),
        Region(id="westus2", name="West US 2"),
        Region(id="centralus", name="Central US"),
        Region(id="northeurope", name="North Europe"),
        Region(id="westeurope", name="West Europe"),
        Region(id="eastasia", name="East Asia"),
        Region(id="southeastasia", name="Southeast Asia"),
    ],
}


def resolve_provider(provider: str | CloudProvider) -> CloudProvider:
    """Map a provider name (any case) to a CloudProvider."""
    if isinstance(provider, CloudProvider):
        return provider
    try:
        return CloudProvider(str(provider).strip().lower())
    except ValueError:
        raise UnsupportedProviderError(f"Unsupported provider: {provider}") from None


async def verify_credentials(
    provider: str | CloudProvider,
    config: dict[str, Any],
) -> CredentialValidation:
    """Run the matching verifier for *provider* against *config*."""
    resolved = resolve_provider(provider)
    result = await _VERIFIERS[resolved].verify(config or {})
    logger.info("Credential check for %s: %s", resolved.value, "valid" if result.valid else "invalid")
    return result


def regions_for(provider: str | CloudProvider) -> list[Region]:
    return list(PROVIDER_REGIONS[resolve_provider(provider)])


__all__ = [
    "CloudProvider",
    "CredentialValidation",
    "PROVIDER_REGIONS",
    "Region",
    "UnsupportedProviderError",
    "regions_for",
    "resolve_provider",
    "verify_credentials",
]
