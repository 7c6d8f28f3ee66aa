"""
Git client infrastructure for s3history.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic
"""

import os
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, List, Tuple
from pathlib import Path
import logging

logger = logging.getLogger(__name__)


@dataclass
class GitCommit:
    """A git commit with metadata."""
    hash: str
    date: datetime
    author: str
    email: str
    message: str
    parents: List[str]


def format_git_date(when: datetime) -> str:
    """
    Format a datetime in git's internal "<epoch> <offset>" date format.

    Naive datetimes are taken to be UTC.
    """
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return f"{int(when.timestamp())} +0000"


class GitClient:
    """
    Abstraction over git commands.

    Example:
        client = GitClient()
        client.init("/tmp/bucket")
        client.add("/tmp/bucket", ["a.txt"])
        sha = client.commit("/tmp/bucket", "msg", "me", "me@example.com", when)
    """

    def __init__(self, timeout: int = 60):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: 60)
        """
        self.timeout = timeout

    def _run(
        self,
        args: List[str],
        cwd: str,
        env: Optional[Dict[str, str]] = None,
    ) -> Tuple[Optional[str], int]:
        """
        Run a git command.

        Args:
            args: Arguments after ``git``
            cwd: Working directory
            env: Extra environment variables

        Returns:
            Tuple of (stdout, returncode)
        """
        cmd = ['git'] + args
        run_env = None
        if env:
            run_env = os.environ.copy()
            run_env.update(env)

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=run_env,
            )
            if result.returncode != 0 and result.stderr:
                logger.debug(f"git {' '.join(args)}: {result.stderr.strip()}")
            output = result.stdout
            return output.strip() if output else None, result.returncode

        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            return None, -1
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            return None, -1

    def is_git_repo(self, path: str) -> bool:
        """Check if path is the top of a git working tree."""
        return (Path(path) / ".git").exists()

    def init(self, path: str) -> bool:
        """
        Initialize a new repository.

        Returns:
            True if successful
        """
        _, code = self._run(['init'], cwd=path)
        return code == 0

    def add(self, path: str, paths: List[str]) -> bool:
        """
        Stage paths relative to the working tree root.

        Paths are literal, so keys like ``:name`` or ``*.txt`` are not
        read as pathspec magic or globs.

        Returns:
            True if successful
        """
        _, code = self._run(['--literal-pathspecs', 'add', '-f', '--'] + list(paths), cwd=path)
        return code == 0

    def commit(
        self,
        path: str,
        message: str,
        author_name: str,
        author_email: str,
        when: datetime,
    ) -> Optional[str]:
        """
        Commit the index with an explicit author and committer date.

        Returns:
            The new commit hash, or None if the commit failed
        """
        date = format_git_date(when)
        env = {
            'GIT_AUTHOR_NAME': author_name,
            'GIT_AUTHOR_EMAIL': author_email,
            'GIT_AUTHOR_DATE': date,
            'GIT_COMMITTER_NAME': author_name,
            'GIT_COMMITTER_EMAIL': author_email,
            'GIT_COMMITTER_DATE': date,
        }
        _, code = self._run(
            ['-c', 'commit.gpgsign=false', 'commit', '--allow-empty', '--no-verify', '-q', '-m', message],
            cwd=path,
            env=env,
        )
        if code != 0:
            return None
        return self.head(path)

    def head(self, path: str) -> Optional[str]:
        """Get the commit hash HEAD points to."""
        output, code = self._run(['rev-parse', '--verify', '-q', 'HEAD'], cwd=path)
        if code == 0 and output:
            return output.strip()
        return None

    def has_commit(self, path: str, sha: str) -> bool:
        """Check that a commit object exists in the object store."""
        _, code = self._run(['cat-file', '-e', f'{sha}^{{commit}}'], cwd=path)
        return code == 0

    def log(self, path: str, limit: Optional[int] = None) -> List[GitCommit]:
        """
        Get commit log, newest first.

        Args:
            path: Path to git repository
            limit: Maximum commits to return

        Returns:
            List of GitCommit objects
        """
        args = ['log', '--format=%H|%aI|%an|%ae|%P|%s']
        if limit:
            args += ['-n', str(limit)]

        output, code = self._run(args, cwd=path)
        if code != 0 or not output:
            return []

        commits = []
        for line in output.strip().split('\n'):
            if not line or '|' not in line:
                continue

            parts = line.split('|', 5)
            if len(parts) < 6:
                continue

            commit_hash, date_str, author, email, parents, message = (p.strip() for p in parts)

            try:
                date = datetime.fromisoformat(date_str.replace('Z', '+00:00'))
            except ValueError:
                logger.debug(f"Unparseable commit date {date_str!r} for {commit_hash}")
                continue

            commits.append(GitCommit(
                hash=commit_hash,
                date=date,
                author=author,
                email=email,
                message=message,
                parents=parents.split() if parents else [],
            ))

        return commits
