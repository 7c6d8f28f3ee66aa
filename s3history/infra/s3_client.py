"""
S3 client infrastructure for s3history.

Provides a thin abstraction over boto3 so that:
- The rest of the code never touches boto3 response dicts
- Backend failures surface as StorageError / ConfigError
- Tests can substitute an in-memory client with the same methods
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError, ProfileNotFound

from ..config import DEFAULT_REGION
from ..exit_codes import ConfigError, StorageError

logger = logging.getLogger(__name__)


@dataclass
class ObjectListing:
    """Keys returned by a single listing call."""
    keys: List[str]
    truncated: bool = False


@dataclass
class StoredVersion:
    """One entry from a version listing."""
    key: str
    version_id: str
    last_modified: datetime


class S3Client:
    """
    Abstraction over the S3 calls the replay needs.

    Example:
        s3 = S3Client.from_profile(profile="work", region="eu-west-1")
        listing = s3.list_objects("my-bucket")
        for key in listing.keys:
            print(key)
    """

    def __init__(self, client: Any):
        """
        Initialize S3Client.

        Args:
            client: A boto3 S3 client (or anything with the same methods)
        """
        self._client = client

    @classmethod
    def from_profile(
        cls,
        profile: Optional[str] = None,
        region: str = DEFAULT_REGION,
        endpoint_url: Optional[str] = None,
        max_attempts: int = 3,
        connect_timeout: int = 10,
        read_timeout: int = 60,
    ) -> 'S3Client':
        """
        Build a client from a named credential profile.

        Raises:
            ConfigError: If the profile or credentials cannot be resolved
        """
        boto_config = BotoConfig(
            region_name=region,
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            retries={'max_attempts': max_attempts, 'mode': 'standard'},
        )
        try:
            session = boto3.Session(profile_name=profile or None, region_name=region)
            client = session.client('s3', endpoint_url=endpoint_url or None, config=boto_config)
        except ProfileNotFound as e:
            raise ConfigError(f"AWS profile not found: {profile}") from e
        except BotoCoreError as e:
            raise ConfigError(
                f"Couldn't load AWS configuration. Have you set up your AWS account? ({e})"
            ) from e

        logger.debug(f"Created S3 client (profile={profile or 'default'}, region={region})")
        return cls(client)

    def list_objects(self, bucket: str) -> ObjectListing:
        """
        List the keys in a bucket with a single ListObjectsV2 call.

        Raises:
            StorageError: If the listing call fails
        """
        try:
            response = self._client.list_objects_v2(Bucket=bucket)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"ListObjectsV2 failed while querying {bucket}: {e}") from e

        keys = [item['Key'] for item in response.get('Contents', [])]
        return ObjectListing(keys=keys, truncated=bool(response.get('IsTruncated', False)))

    def list_object_versions(self, bucket: str, prefix: str) -> List[StoredVersion]:
        """
        List stored versions for every key starting with prefix.

        Delete markers are not included.

        Raises:
            StorageError: If the listing call fails
        """
        try:
            response = self._client.list_object_versions(Bucket=bucket, Prefix=prefix)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"ListObjectVersions failed for {bucket}/{prefix}: {e}") from e

        return [
            StoredVersion(
                key=item['Key'],
                version_id=item.get('VersionId') or 'null',
                last_modified=item['LastModified'],
            )
            for item in response.get('Versions', [])
        ]

    def get_object(self, bucket: str, key: str, version_id: str) -> bytes:
        """
        Fetch the content of one version of an object.

        Raises:
            StorageError: If the object cannot be fetched or read
        """
        try:
            response = self._client.get_object(Bucket=bucket, Key=key, VersionId=version_id)
            body = response['Body']
            try:
                return body.read()
            finally:
                body.close()
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Couldn't get object {bucket}:{key}@{version_id}: {e}") from e
