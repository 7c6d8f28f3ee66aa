"""
Infrastructure layer for s3history.

Contains abstractions for external systems:
- GitClient: Git command execution
- S3Client: S3 listing and object retrieval

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, GitCommit
from .s3_client import S3Client, ObjectListing, StoredVersion

__all__ = [
    'GitClient',
    'GitCommit',
    'S3Client',
    'ObjectListing',
    'StoredVersion',
]
