"""
Object and version domain objects for s3history.

An ObjectRef names a live key in a bucket. A VersionRecord is one stored
revision of that key. A Changeset is a run of VersionRecords that share a
modification timestamp and are replayed as a single commit.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List


@dataclass(frozen=True)
class ObjectRef:
    """A live object in a bucket."""
    key: str
    bucket: str


@dataclass(frozen=True)
class VersionRecord:
    """
    One historical revision of one object.

    repository_root is carried per record so the materializer can compute
    a destination without outside context. The repository itself lives at
    ``repository_root/bucket``, which makes ``key`` the path relative to
    the working tree.
    """
    key: str
    bucket: str
    version_id: str
    last_modified: datetime
    repository_root: str

    @property
    def local_path(self) -> str:
        """Absolute on-disk path the version is written to."""
        return os.path.abspath(os.path.join(self.repository_root, self.bucket, self.key))

    @property
    def repo_relative_path(self) -> str:
        """Path used when staging against the working tree root."""
        return self.key

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'bucket': self.bucket,
            'version_id': self.version_id,
            'last_modified': self.last_modified.isoformat(),
        }


@dataclass
class Changeset:
    """Ordered VersionRecords replayed as one commit."""
    timestamp: datetime
    members: List[VersionRecord] = field(default_factory=list)

    @property
    def commit_date(self) -> datetime:
        """Date used for the commit: the last member's modification time."""
        return self.members[-1].last_modified

    @property
    def paths(self) -> List[str]:
        return [member.repo_relative_path for member in self.members]

    def __len__(self) -> int:
        return len(self.members)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp.isoformat(),
            'files': self.paths,
            'versions': [m.version_id for m in self.members],
        }

