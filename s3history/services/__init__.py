"""
Service layer for s3history.

Contains the replay pipeline that orchestrates domain objects and
infrastructure:
- HistoryService: Object and version listing
- Materializer: Downloads a version into the working tree
- ReplayService: Opens the repository and replays changesets as commits

Services are the primary API for commands to use.
"""

from .history_service import HistoryService, VersionListing, sort_versions, group_changesets
from .materializer import Materializer
from .replay_service import ReplayService, ReplayOptions, RepositoryHandle

__all__ = [
    'HistoryService',
    'VersionListing',
    'sort_versions',
    'group_changesets',
    'Materializer',
    'ReplayService',
    'ReplayOptions',
    'RepositoryHandle',
]
