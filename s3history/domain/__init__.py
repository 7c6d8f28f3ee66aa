"""
Domain layer for s3history.

Contains pure domain objects with no I/O or side effects:
- ObjectRef: A live key in a bucket
- VersionRecord: One stored revision of an object
- Changeset: Versions replayed together as one commit
- ReplaySummary / CommitResult: What a replay run produced
"""

from .version import ObjectRef, VersionRecord, Changeset
from .operation import (
    FailurePolicy,
    KeyMatch,
    VersionFailure,
    CommitResult,
    ReplaySummary,
)

__all__ = [
    'ObjectRef',
    'VersionRecord',
    'Changeset',
    'FailurePolicy',
    'KeyMatch',
    'VersionFailure',
    'CommitResult',
    'ReplaySummary',
]
