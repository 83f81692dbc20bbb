"""AWS backend: tagged resources as a sweepable collection.

Resources are enumerated through the Resource Groups Tagging API and keyed by
ARN. Each resource exposes ``arn``, ``service``, ``resource_type``,
``region``, ``name`` (the ``Name`` tag, falling back to the short id) and
``tags``, so duplicates can be grouped by ``name`` and cleaned up with the
same orchestrator used for any other collection.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from botocore.exceptions import ClientError

from ..aws.client import create_boto_client
from ..errors import ResourceNotFound, TransientRemovalError
from ..models.resource import Resource

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = frozenset(
    {
        "InvalidInstanceID.NotFound",
        "InvalidVolume.NotFound",
        "InvalidGroup.NotFound",
        "InvalidSnapshot.NotFound",
        "InvalidKeyPair.NotFound",
        "NoSuchEntity",
        "NoSuchBucket",
        "NotFound",
        "NotFoundException",
        "ResourceNotFoundException",
        "DBInstanceNotFound",
        "FileSystemNotFound",
        "CacheClusterNotFound",
        "LoadBalancerNotFound",
    }
)

TRANSIENT_CODES = frozenset(
    {
        "DependencyViolation",
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
    }
)


@dataclass(frozen=True)
class ParsedArn:
    """Components of an ARN relevant to deletion."""

    service: str
    region: str
    resource_type: str
    resource_id: str

    @property
    def type_key(self) -> str:
        return f"{self.service}:{self.resource_type}"


def parse_arn(arn: str) -> ParsedArn:
    """Split an ARN into service, region, resource type and resource id.

    Handles ``type/id``, ``type:id`` and bare ``id`` resource parts.

    Raises:
        ValueError: If the string is not an ARN
    """
    parts = arn.split(":", 5)
    if len(parts) != 6 or parts[0] != "arn":
        raise ValueError(f"Invalid ARN: {arn}")

    _, _, service, region, _, resource = parts
    positions = [i for i in (resource.find("/"), resource.find(":")) if i >= 0]
    if positions:
        cut = min(positions)
        resource_type, resource_id = resource[:cut], resource[cut + 1 :]
    else:
        resource_type, resource_id = "", resource

    if resource_type == "log-group" and resource_id.endswith(":*"):
        resource_id = resource_id[:-2]

    return ParsedArn(service=service, region=region, resource_type=resource_type, resource_id=resource_id)


class AwsTaggedResourceSource:
    """Enumerates tagged resources via the Resource Groups Tagging API.

    Attributes:
        regions: Regions enumerated when no scope is given
        profile_name: AWS profile name (optional)
        resource_type_filters: Tagging API type filters (e.g., ["ec2:instance"])
    """

    def __init__(
        self,
        regions: Optional[Sequence[str]] = None,
        profile_name: Optional[str] = None,
        resource_type_filters: Optional[Sequence[str]] = None,
    ) -> None:
        self.regions = list(regions or [])
        self.profile_name = profile_name
        self.resource_type_filters = list(resource_type_filters or [])

    async def list_resources(self, scope: Optional[str] = None) -> list[Resource]:
        """List tagged resources; ``scope`` is a region overriding ``regions``."""
        regions = [scope] if scope else (self.regions or [None])
        resources: list[Resource] = []
        for region in regions:
            resources.extend(await asyncio.to_thread(self._list_region, region))
        return resources

    def _list_region(self, region: Optional[str]) -> list[Resource]:
        client = create_boto_client(
            service_name="resourcegroupstaggingapi",
            region_name=region,
            profile_name=self.profile_name,
        )
        params: dict[str, Any] = {}
        if self.resource_type_filters:
            params["ResourceTypeFilters"] = self.resource_type_filters

        resources = []
        paginator = client.get_paginator("get_resources")
        for page in paginator.paginate(**params):
            for mapping in page.get("ResourceTagMappingList", []):
                resources.append(self._to_resource(mapping))

        logger.debug(f"Found {len(resources)} tagged resources in {region or 'default region'}")
        return resources

    @staticmethod
    def _to_resource(mapping: dict) -> Resource:
        arn = mapping["ResourceARN"]
        parsed = parse_arn(arn)
        tags = {t["Key"]: t["Value"] for t in mapping.get("Tags", [])}
        return Resource(
            id=arn,
            attributes={
                "arn": arn,
                "service": parsed.service,
                "resource_type": parsed.type_key,
                "region": parsed.region,
                "name": tags.get("Name", parsed.resource_id),
                "tags": tags,
            },
        )


class AwsResourceRemover:
    """Deletes AWS resources by ARN.

    Maps ``service:type`` keys to their boto3 deletion methods. Blocking boto3
    calls run in a worker thread.
    """

    # Deletion method mapping: service:type -> (client service, method, id_field)
    DELETION_METHODS = {
        "ec2:instance": ("ec2", "terminate_instances", "InstanceIds"),
        "ec2:security-group": ("ec2", "delete_security_group", "GroupId"),
        "ec2:volume": ("ec2", "delete_volume", "VolumeId"),
        "ec2:snapshot": ("ec2", "delete_snapshot", "SnapshotId"),
        "ec2:key-pair": ("ec2", "delete_key_pair", "KeyPairId"),
        "s3:": ("s3", "delete_bucket", "Bucket"),
        "lambda:function": ("lambda", "delete_function", "FunctionName"),
        "dynamodb:table": ("dynamodb", "delete_table", "TableName"),
        "rds:db": ("rds", "delete_db_instance", "DBInstanceIdentifier"),
        "sns:": ("sns", "delete_topic", "TopicArn"),
        "secretsmanager:secret": ("secretsmanager", "delete_secret", "SecretId"),
        "logs:log-group": ("logs", "delete_log_group", "logGroupName"),
        "elasticloadbalancing:loadbalancer": ("elbv2", "delete_load_balancer", "LoadBalancerArn"),
        "elasticfilesystem:file-system": ("efs", "delete_file_system", "FileSystemId"),
        "elasticache:cluster": ("elasticache", "delete_cache_cluster", "CacheClusterId"),
        "kms:key": ("kms", "schedule_key_deletion", "KeyId"),
    }

    def __init__(self, profile_name: Optional[str] = None, default_region: Optional[str] = None) -> None:
        """Initialize AWS remover.

        Args:
            profile_name: AWS profile name (optional)
            default_region: Region used for ARNs without one, such as S3 (optional)
        """
        self.profile_name = profile_name
        self.default_region = default_region

    async def remove_resource(self, resource_id: str) -> tuple[bool, Optional[str]]:
        return await asyncio.to_thread(self._delete, resource_id)

    def _delete(self, arn: str) -> tuple[bool, Optional[str]]:
        try:
            parsed = parse_arn(arn)
        except ValueError as e:
            return False, str(e)

        if parsed.type_key not in self.DELETION_METHODS:
            error_msg = f"Unsupported resource type: {parsed.type_key}"
            logger.warning(error_msg)
            return False, error_msg

        service, method, id_field = self.DELETION_METHODS[parsed.type_key]
        client = create_boto_client(
            service_name=service,
            region_name=parsed.region or self.default_region,
            profile_name=self.profile_name,
        )
        params = self._build_deletion_params(parsed.type_key, id_field, parsed.resource_id, arn)

        try:
            getattr(client, method)(**params)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            error_message = e.response.get("Error", {}).get("Message", str(e))

            if error_code in NOT_FOUND_CODES:
                raise ResourceNotFound(arn, f"{error_code}: {error_message}") from e
            if error_code in TRANSIENT_CODES:
                raise TransientRemovalError(f"{error_code}: {error_message}") from e

            logger.error(f"Failed to delete {arn}: {error_code} - {error_message}")
            return False, f"{error_code}: {error_message}"

        return True, None

    @staticmethod
    def _build_deletion_params(type_key: str, id_field: str, resource_id: str, arn: str) -> dict[str, Any]:
        """Build deletion parameters for the boto3 call."""
        # Plural form indicates a list parameter
        if id_field.endswith("Ids"):
            return {id_field: [resource_id]}

        if "Arn" in id_field or type_key == "secretsmanager:secret":
            params: dict[str, Any] = {id_field: arn}
        else:
            params = {id_field: resource_id}

        if type_key == "rds:db":
            params.update(SkipFinalSnapshot=True, DeleteAutomatedBackups=True)
        elif type_key == "kms:key":
            params["PendingWindowInDays"] = 7
        elif type_key == "secretsmanager:secret":
            params["ForceDeleteWithoutRecovery"] = True

        return params
