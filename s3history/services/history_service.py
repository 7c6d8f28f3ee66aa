"""
History collection service for s3history.

Turns the live contents of a bucket into an ordered sequence of
changesets:

    list_objects -> list_versions -> sort_versions -> group_changesets

Object listing failures are fatal. Version listing failures are isolated
per object: the object is logged, recorded and skipped.
"""

import logging
from dataclasses import dataclass, field
from typing import Generator, Iterable, List

from ..domain.operation import FailurePolicy, KeyMatch, VersionFailure
from ..domain.version import Changeset, ObjectRef, VersionRecord
from ..exit_codes import StorageError
from ..infra.s3_client import S3Client

logger = logging.getLogger(__name__)


@dataclass
class VersionListing:
    """Versions collected across all objects, plus the objects that failed."""
    records: List[VersionRecord] = field(default_factory=list)
    failures: List[VersionFailure] = field(default_factory=list)


class HistoryService:
    """
    Collects the version history of a bucket.

    Example:
        service = HistoryService(S3Client.from_profile())
        objects = service.list_objects("my-bucket")
        listing = service.list_versions(objects, "/tmp/out")
        for changeset in group_changesets(sort_versions(listing.records)):
            print(changeset.timestamp, changeset.paths)
    """

    version_policy = FailurePolicy.ISOLATING

    def __init__(self, s3: S3Client, key_match: KeyMatch = KeyMatch.EXACT):
        """
        Initialize HistoryService.

        Args:
            s3: Storage client
            key_match: Whether version listings must match the key exactly
                or may include other keys sharing it as a prefix
        """
        self.s3 = s3
        self.key_match = key_match
        self.truncated = False

    def list_objects(self, bucket: str) -> List[ObjectRef]:
        """
        List the objects currently in a bucket.

        Only the first page the backend returns is used; a truncated
        listing is reported with a warning.

        Raises:
            StorageError: If the listing call fails
        """
        listing = self.s3.list_objects(bucket)
        self.truncated = listing.truncated
        if listing.truncated:
            logger.warning(
                f"Listing of {bucket} was truncated after {len(listing.keys)} keys; "
                "objects beyond the first page will not be replayed"
            )

        objects = []
        for key in listing.keys:
            if key.endswith('/'):
                logger.debug(f"Skipping folder placeholder {bucket}/{key}")
                continue
            objects.append(ObjectRef(key=key, bucket=bucket))
        return objects

    def list_versions(self, objects: Iterable[ObjectRef], repository_root: str) -> VersionListing:
        """
        Collect every stored version of every object.

        A failure for one object is logged and recorded, and the remaining
        objects are still listed.

        Args:
            objects: Objects to look up
            repository_root: Output directory carried on each record

        Returns:
            VersionListing with records in enumeration order
        """
        listing = VersionListing()

        for obj in objects:
            try:
                versions = self.s3.list_object_versions(obj.bucket, obj.key)
            except StorageError as e:
                logger.error(f"Couldn't list versions of {obj.bucket}/{obj.key}: {e}")
                listing.failures.append(VersionFailure(bucket=obj.bucket, key=obj.key, error=str(e)))
                continue

            for version in versions:
                if self.key_match == KeyMatch.EXACT and version.key != obj.key:
                    continue
                listing.records.append(VersionRecord(
                    key=version.key,
                    bucket=obj.bucket,
                    version_id=version.version_id,
                    last_modified=version.last_modified,
                    repository_root=repository_root,
                ))

        return listing


def sort_versions(records: Iterable[VersionRecord]) -> List[VersionRecord]:
    """Stable ascending sort by modification time."""
    return sorted(records, key=lambda record: record.last_modified)


def group_changesets(records: Iterable[VersionRecord]) -> Generator[Changeset, None, None]:
    """
    Partition sorted records into changesets.

    A new changeset starts whenever a record's timestamp is strictly after
    the timestamp the current changeset started at. Input must already be
    sorted ascending.
    """
    boundary = None
    pending: List[VersionRecord] = []

    for record in records:
        if boundary is None:
            boundary = record.last_modified
        if record.last_modified > boundary:
            yield Changeset(timestamp=boundary, members=pending)
            pending = []
            boundary = record.last_modified
        pending.append(record)

    if pending:
        yield Changeset(timestamp=boundary, members=pending)
