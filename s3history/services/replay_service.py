"""
Replay service for s3history.

Orchestrates a full run: open the output repository, collect and group the
bucket's version history, then replay each changeset as one commit whose
author and committer date equal the original modification time.
Used by the `s3history replay` command and by `s3history.replay_bucket`.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, Any, Generator, Iterable, Optional

from ..config import (
    DEFAULT_AUTHOR_EMAIL,
    DEFAULT_AUTHOR_NAME,
    DEFAULT_MESSAGE_FORMAT,
    load_config,
)
from ..domain.operation import CommitResult, FailurePolicy, KeyMatch, ReplaySummary
from ..domain.version import Changeset
from ..exit_codes import ConfigError, MaterializeError, ReplayError
from ..infra.git_client import GitClient
from ..infra.s3_client import S3Client
from .history_service import HistoryService, group_changesets, sort_versions
from .materializer import Materializer

logger = logging.getLogger(__name__)


@dataclass
class ReplayOptions:
    """Options for a replay run."""
    output_dir: str = "."
    key_match: KeyMatch = KeyMatch.EXACT
    author_name: str = DEFAULT_AUTHOR_NAME
    author_email: str = DEFAULT_AUTHOR_EMAIL
    message_format: str = DEFAULT_MESSAGE_FORMAT
    dry_run: bool = False

    @classmethod
    def from_config(cls, config: Dict[str, Any], **overrides) -> 'ReplayOptions':
        """Build options from the ``replay`` config section plus CLI overrides."""
        section = config.get('replay', {})
        try:
            key_match = KeyMatch(section.get('key_match', KeyMatch.EXACT.value))
        except ValueError as e:
            raise ConfigError(f"Invalid replay.key_match: {section.get('key_match')!r}") from e

        options = cls(
            key_match=key_match,
            author_name=section.get('author_name') or DEFAULT_AUTHOR_NAME,
            author_email=section.get('author_email') or DEFAULT_AUTHOR_EMAIL,
            message_format=section.get('message_format') or DEFAULT_MESSAGE_FORMAT,
        )
        for name, value in overrides.items():
            if value is not None:
                setattr(options, name, value)
        return options


@dataclass
class RepositoryHandle:
    """An opened repository and its working tree."""
    working_tree: str
    git: GitClient


class ReplayService:
    """
    Replays the version history of a bucket into a git repository.

    Example:
        service = ReplayService(S3Client.from_profile(), GitClient(),
                                ReplayOptions(output_dir="/tmp/out"))

        for commit in service.run("my-bucket"):
            print(commit.sha, commit.files)

        summary = service.last_result
        print(f"Created {summary.commits} commits")
    """

    policy = FailurePolicy.FATAL

    def __init__(
        self,
        s3: S3Client,
        git_client: Optional[GitClient] = None,
        options: Optional[ReplayOptions] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize ReplayService.

        Args:
            s3: Storage client
            git_client: GitClient instance (creates new if None)
            options: Replay options (built from config if None)
            config: Configuration dict (loads default if None)
        """
        self.config = config if config is not None else load_config()
        self.s3 = s3
        self.git = git_client or GitClient(timeout=self.config.get('git', {}).get('timeout', 60))
        self.options = options or ReplayOptions.from_config(self.config)
        self.history = HistoryService(s3, key_match=self.options.key_match)
        self.materializer = Materializer(s3)
        self.last_result: Optional[ReplaySummary] = None

    def repository_path(self, bucket: str) -> str:
        return os.path.abspath(os.path.join(self.options.output_dir, bucket))

    def open_repository(self, bucket: str) -> RepositoryHandle:
        """
        Open the repository at ``<output_dir>/<bucket>``, creating it if needed.

        Raises:
            ConfigError: If the directory cannot be created or initialized
        """
        repo_path = self.repository_path(bucket)

        if not os.path.exists(repo_path):
            try:
                os.makedirs(repo_path, mode=0o777)
            except OSError as e:
                raise ConfigError(f"Unable to create directories {repo_path}: {e}") from e

        if self.git.is_git_repo(repo_path):
            logger.info(f"Reusing existing repository at {repo_path}")
        else:
            if not self.git.init(repo_path):
                raise ConfigError(f"Unable to git init in the {repo_path} folder")
            logger.info(f"Initialized repository at {repo_path}")

        return RepositoryHandle(working_tree=repo_path, git=self.git)

    def run(self, bucket: str) -> Generator[CommitResult, None, None]:
        """
        Replay a bucket end to end.

        Yields one CommitResult per changeset. The summary is available
        as ``last_result`` once the generator is exhausted, and also while
        it is running.

        Raises:
            ConfigError: If the repository cannot be opened
            StorageError: If the bucket cannot be listed
            MaterializeError / ReplayError: If a changeset cannot be replayed
        """
        summary = ReplaySummary(bucket=bucket, dry_run=self.options.dry_run)
        self.last_result = summary

        handle = None
        if not self.options.dry_run:
            handle = self.open_repository(bucket)
            summary.repository = handle.working_tree

        objects = self.history.list_objects(bucket)
        summary.objects = len(objects)
        summary.truncated = self.history.truncated

        listing = self.history.list_versions(objects, os.path.abspath(self.options.output_dir))
        summary.versions = len(listing.records)
        summary.version_failures = listing.failures

        changesets = group_changesets(sort_versions(listing.records))

        if handle is None:
            for changeset in changesets:
                summary.changesets += 1
                yield CommitResult(
                    sha="",
                    date=changeset.commit_date.isoformat(),
                    message=self.commit_message(changeset),
                    files=changeset.paths,
                    dry_run=True,
                )
            return

        yield from self.replay(changesets, handle)

    def replay(
        self,
        changesets: Iterable[Changeset],
        handle: RepositoryHandle,
    ) -> Generator[CommitResult, None, None]:
        """
        Replay changesets strictly in order, one commit each.

        The first failure aborts the replay. Commits made before it are
        left in place.
        """
        summary = self.last_result
        if summary is None:
            summary = self.last_result = ReplaySummary(bucket="", repository=handle.working_tree)

        for changeset in changesets:
            summary.changesets += 1
            try:
                result = self.apply_changeset(changeset, handle)
            except (MaterializeError, ReplayError):
                logger.error(
                    f"Error applying changes for {len(changeset)} objects; "
                    f"{summary.commits} commits were created before the failure"
                )
                raise
            summary.add_commit(result)
            yield result

    def commit_message(self, changeset: Changeset) -> str:
        return self.options.message_format.format(timestamp=changeset.commit_date)

    def apply_changeset(self, changeset: Changeset, handle: RepositoryHandle) -> CommitResult:
        """
        Materialize, stage and commit one changeset.

        Raises:
            MaterializeError: If a member cannot be downloaded
            ReplayError: If staging, committing or persisting fails
        """
        files = []
        for record in changeset.members:
            files.append(self.materializer.materialize(record))
            if not handle.git.add(handle.working_tree, [record.repo_relative_path]):
                raise ReplayError(f"Error staging object {record.local_path}")

        message = self.commit_message(changeset)
        sha = handle.git.commit(
            handle.working_tree,
            message,
            self.options.author_name,
            self.options.author_email,
            changeset.commit_date,
        )
        if not sha:
            raise ReplayError(f"Error committing {len(changeset)} objects to stage")

        if not handle.git.has_commit(handle.working_tree, sha):
            raise ReplayError(f"Error committing objects to repo: {sha} not found")

        logger.info("Successfully applied commit with the following files:\n\t" + "\n\t".join(files))
        return CommitResult(
            sha=sha,
            date=changeset.commit_date.isoformat(),
            message=message,
            files=changeset.paths,
        )
