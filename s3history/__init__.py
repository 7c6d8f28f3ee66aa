"""
s3history - Replay the version history of an S3 bucket as git commits.

Lists every stored version of every object in a versioned bucket, orders
them by modification time, groups versions written at the same instant
into one changeset, and commits each changeset to a local git repository
with the original modification time as its author date.

Quick Start:
    import s3history

    summary = s3history.replay_bucket("my-bucket", output_dir="/tmp/history")
    print(summary.commits, summary.repository)

Domain Objects:
    ObjectRef - A live key in a bucket
    VersionRecord - One stored revision of an object
    Changeset - Versions committed together

Services:
    HistoryService - Object and version listing
    Materializer - Version download
    ReplayService - Repository setup and commit replay
"""

__version__ = "0.1.0"

# High-level API
from .api import replay_bucket, build_s3_client

# Domain objects
from .domain import (
    ObjectRef,
    VersionRecord,
    Changeset,
    FailurePolicy,
    KeyMatch,
    CommitResult,
    ReplaySummary,
)

# Services and clients (for advanced use)
from .services import (
    HistoryService,
    Materializer,
    ReplayService,
    ReplayOptions,
    sort_versions,
    group_changesets,
)
from .infra import GitClient, S3Client

# Configuration
from .config import load_config

__all__ = [
    "__version__",
    "replay_bucket",
    "build_s3_client",
    "ObjectRef",
    "VersionRecord",
    "Changeset",
    "FailurePolicy",
    "KeyMatch",
    "CommitResult",
    "ReplaySummary",
    "HistoryService",
    "Materializer",
    "ReplayService",
    "ReplayOptions",
    "sort_versions",
    "group_changesets",
    "GitClient",
    "S3Client",
    "load_config",
]
