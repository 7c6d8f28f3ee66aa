"""
Tests for the GitClient wrapper, against a real git executable.
"""

import subprocess
from datetime import datetime, timezone, timedelta
from unittest.mock import patch

import pytest

from conftest import requires_git
from s3history.infra.git_client import GitClient, format_git_date

WHEN = datetime(2022, 3, 4, 5, 6, 7, tzinfo=timezone.utc)


class TestFormatGitDate:
    """Tests for format_git_date."""

    def test_utc_datetime(self):
        assert format_git_date(WHEN) == f"{int(WHEN.timestamp())} +0000"

    def test_naive_datetime_is_utc(self):
        assert format_git_date(WHEN.replace(tzinfo=None)) == format_git_date(WHEN)

    def test_offset_datetime_is_normalised(self):
        shifted = WHEN.astimezone(timezone(timedelta(hours=-7)))
        assert format_git_date(shifted) == format_git_date(WHEN)


@requires_git
class TestGitClient:
    """Tests for GitClient operations on a scratch repository."""

    @pytest.fixture
    def repo(self, tmp_path):
        client = GitClient()
        assert client.init(str(tmp_path))
        return client, tmp_path

    def test_init_creates_repository(self, repo):
        client, path = repo
        assert client.is_git_repo(str(path))

    def test_is_git_repo_false_for_plain_directory(self, tmp_path):
        assert not GitClient().is_git_repo(str(tmp_path))

    def test_head_is_none_before_first_commit(self, repo):
        client, path = repo
        assert client.head(str(path)) is None

    def test_commit_uses_explicit_author_and_date(self, repo):
        client, path = repo
        (path / "a.txt").write_text("a")

        assert client.add(str(path), ["a.txt"])
        sha = client.commit(str(path), "Modification on x", "bot", "bot@example.com", WHEN)

        assert sha == client.head(str(path))
        assert client.has_commit(str(path), sha)

        commits = client.log(str(path))
        assert len(commits) == 1
        assert commits[0].hash == sha
        assert commits[0].author == "bot"
        assert commits[0].email == "bot@example.com"
        assert commits[0].date == WHEN
        assert commits[0].message == "Modification on x"
        assert commits[0].parents == []

        committer = subprocess.run(
            ["git", "log", "-1", "--format=%cI|%cn"], cwd=path, capture_output=True, text=True
        ).stdout.strip()
        assert committer == f"{WHEN.isoformat()}|bot"

    def test_log_is_newest_first_with_parents(self, repo):
        client, path = repo
        (path / "a.txt").write_text("1")
        client.add(str(path), ["a.txt"])
        first = client.commit(str(path), "one", "bot", "bot@example.com", WHEN)
        (path / "a.txt").write_text("2")
        client.add(str(path), ["a.txt"])
        second = client.commit(str(path), "two | with pipe", "bot", "bot@example.com", WHEN + timedelta(hours=1))

        commits = client.log(str(path))

        assert [c.hash for c in commits] == [second, first]
        assert commits[0].parents == [first]
        assert commits[0].message == "two | with pipe"
        assert len(client.log(str(path), limit=1)) == 1

    def test_add_missing_path_fails(self, repo):
        client, path = repo
        assert client.add(str(path), ["does-not-exist.txt"]) is False

    def test_add_treats_paths_literally(self, repo):
        client, path = repo
        (path / ":notes.txt").write_text("n")
        (path / "a.txt").write_text("a")

        assert client.add(str(path), [":notes.txt"])
        staged = subprocess.run(
            ["git", "diff", "--cached", "--name-only"],
            cwd=path, capture_output=True, text=True, check=True,
        ).stdout.split()
        assert staged == [":notes.txt"]

    def test_has_commit_false_for_unknown_sha(self, repo):
        client, path = repo
        assert client.has_commit(str(path), "0" * 40) is False


class TestGitClientErrors:
    """Tests for command failures that never reach git."""

    def test_timeout_returns_failure(self, tmp_path):
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired("git", 1)):
            assert GitClient(timeout=1).init(str(tmp_path)) is False

    def test_missing_executable_returns_failure(self, tmp_path):
        with patch("subprocess.run", side_effect=FileNotFoundError("git")):
            assert GitClient().head(str(tmp_path)) is None
