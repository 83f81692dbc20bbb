"""boto3 client construction."""

from __future__ import annotations

from typing import Any, Optional

import boto3
from botocore.config import Config

# Standard-mode retries cover throttling inside each API call
_CLIENT_CONFIG = Config(retries={"max_attempts": 5, "mode": "standard"})


def create_boto_client(
    service_name: str,
    region_name: Optional[str] = None,
    profile_name: Optional[str] = None,
) -> Any:
    """Create a boto3 client for a service.

    Args:
        service_name: AWS service name (e.g., "ec2")
        region_name: AWS region (optional, session default otherwise)
        profile_name: AWS profile name (optional)

    Returns:
        boto3 client
    """
    session = boto3.Session(profile_name=profile_name, region_name=region_name)
    return session.client(service_name, config=_CLIENT_CONFIG)
