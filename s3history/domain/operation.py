"""
Operation result domain objects for s3history.

Provides the failure policy vocabulary shared by the pipeline components
and the result types reported back to the CLI.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional


class FailurePolicy(Enum):
    """How a component reacts to a failed backend call."""
    ISOLATING = "isolating"  # log, skip the item, keep going
    FATAL = "fatal"          # abort the whole run


class KeyMatch(Enum):
    """How version listings are matched against the object key."""
    EXACT = "exact"
    PREFIX = "prefix"


@dataclass
class VersionFailure:
    """An object whose versions could not be listed."""
    bucket: str
    key: str
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {'bucket': self.bucket, 'key': self.key, 'error': self.error}


@dataclass
class CommitResult:
    """Result of replaying one changeset."""
    sha: str
    date: str
    message: str
    files: List[str] = field(default_factory=list)
    dry_run: bool = False

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'type': 'commit',
            'sha': self.sha,
            'date': self.date,
            'message': self.message,
            'files': self.files,
        }
        if self.dry_run:
            result['dry_run'] = True
        return result


@dataclass
class ReplaySummary:
    """
    Summary of a replay run.

    Collects counts from the listing stages and the commits created
    by the replayer.
    """
    bucket: str
    repository: Optional[str] = None
    objects: int = 0
    versions: int = 0
    changesets: int = 0
    commits: int = 0
    truncated: bool = False
    dry_run: bool = False
    version_failures: List[VersionFailure] = field(default_factory=list)
    details: List[CommitResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if every object's versions were listed."""
        return not self.version_failures

    def add_commit(self, result: CommitResult) -> None:
        self.details.append(result)
        self.commits += 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': 'summary',
            'bucket': self.bucket,
            'repository': self.repository,
            'objects': self.objects,
            'versions': self.versions,
            'changesets': self.changesets,
            'commits': self.commits,
            'truncated': self.truncated,
            'dry_run': self.dry_run,
            'version_failures': [f.to_dict() for f in self.version_failures],
        }
