"""
Cloud Verification — AWS Verifier
===================================

Validates AWS access keys by making a real, read-only EC2
DescribeRegions call with them.

Checks:
    • Access key id and secret are present
    • The keys (and optional session token) authenticate
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from cloud_verification.models import CredentialValidation

logger = logging.getLogger("cloud_verification.aws")

DEFAULT_REGION = "us-east-1"
TEXT_FIELDS = ("access_key_id", "secret_access_key", "session_token", "region")


class AWSVerifier:
    """Verifies AWS credentials."""

    async def verify(self, config: dict[str, Any]) -> CredentialValidation:
        non_text = [f for f in TEXT_FIELDS if config.get(f) is not None and not isinstance(config[f], str)]
        if non_text:
            return CredentialValidation.failure(
                f"Credential fields must be strings: {', '.join(non_text)}"
            )

        access_key_id = (config.get("access_key_id") or "").strip()
        secret_access_key = (config.get("secret_access_key") or "").strip()
        session_token = (config.get("session_token") or "").strip()
        region = (config.get("region") or "").strip() or DEFAULT_REGION

        if not access_key_id or not secret_access_key:
            return CredentialValidation.failure(
                "Missing required fields: access_key_id, secret_access_key"
            )

        try:
            regions = await asyncio.to_thread(
                self._describe_regions, access_key_id, secret_access_key, session_token, region
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("AWS credentials validation failed: %s", exc)
            return CredentialValidation.failure(str(exc) or "Failed to validate AWS credentials")

        return CredentialValidation(
            valid=True,
            details={
                "regions_found": len(regions),
                "tested_region": region,
                "credential_type": "temporary" if session_token else "permanent",
            },
        )

    @staticmethod
    def _describe_regions(
        access_key_id: str,
        secret_access_key: str,
        session_token: str,
        region: str,
    ) -> list[dict[str, Any]]:
        kwargs: dict[str, Any] = {
            "region_name": region,
            "aws_access_key_id": access_key_id,
            "aws_secret_access_key": secret_access_key,
        }
        if session_token:
            kwargs["aws_session_token"] = session_token

        ec2 = boto3.client("ec2", **kwargs)
        response = ec2.describe_regions()
        return response.get("Regions", [])
