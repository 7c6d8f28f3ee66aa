"""
Tests for the s3history command line interface.
"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from conftest import at, requires_git
from s3history import progress as progress_module
from s3history.cli import cli
from s3history.exit_codes import API_ERROR, CONFIG_ERROR, PARTIAL_SUCCESS, REPLAY_ERROR, USAGE_ERROR


def json_lines(output):
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


@pytest.fixture
def runner(isolated_home):
    return CliRunner()


@pytest.fixture
def patched_s3(s3):
    with patch("s3history.commands.replay.build_s3_client", return_value=s3) as build:
        yield build


class TestHelp:
    """Help and usage errors."""

    def test_group_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "replay" in result.output

    def test_replay_help_lists_options(self, runner):
        result = runner.invoke(cli, ["replay", "--help"])
        assert result.exit_code == 0
        for option in ("--bucket", "--output", "--profile", "--region", "--dry-run"):
            assert option in result.output

    def test_missing_bucket_is_usage_error(self, runner, patched_s3, tmp_path):
        output_dir = tmp_path / "out"
        output_dir.mkdir()

        result = runner.invoke(cli, ["replay", "--output", str(output_dir)])

        assert result.exit_code == USAGE_ERROR
        assert "Usage:" in result.output
        assert "--bucket" in result.output
        patched_s3.assert_not_called()
        assert list(output_dir.iterdir()) == []


@requires_git
class TestReplayCommand:
    """The replay command end to end with a fake S3 backend."""

    def test_streams_commits_then_summary(self, runner, backend, patched_s3, tmp_path):
        backend.put("bkt", "a.txt", "a", at(0))
        backend.put("bkt", "b.txt", "b", at(0))
        backend.put("bkt", "a.txt", "a2", at(5))

        result = runner.invoke(cli, ["replay", "-b", "bkt", "-o", str(tmp_path)])

        assert result.exit_code == 0, result.output
        items = json_lines(result.output)
        assert [i["type"] for i in items] == ["commit", "commit", "summary"]
        assert items[0]["files"] == ["a.txt", "b.txt"]
        assert items[1]["files"] == ["a.txt"]
        assert items[2]["commits"] == 2
        assert items[2]["repository"] == str(tmp_path / "bkt")

    def test_passes_profile_and_region(self, runner, patched_s3, tmp_path):
        result = runner.invoke(cli, [
            "replay", "-b", "bkt", "-o", str(tmp_path), "--profile", "work", "--region", "eu-west-1",
        ])

        assert result.exit_code == 0, result.output
        _, kwargs = patched_s3.call_args
        assert kwargs["profile"] == "work"
        assert kwargs["region"] == "eu-west-1"

    def test_partial_version_failure_exit_code(self, runner, backend, patched_s3, tmp_path):
        backend.put("bkt", "a.txt", "a", at(0))
        backend.put("bkt", "b.txt", "b", at(1))
        backend.fail_versions_for = {"b.txt"}

        result = runner.invoke(cli, ["replay", "-b", "bkt", "-o", str(tmp_path)])

        assert result.exit_code == PARTIAL_SUCCESS
        items = json_lines(result.output)
        assert items[-2]["type"] == "summary"
        assert items[-2]["version_failures"][0]["key"] == "b.txt"
        assert items[-1]["type"] == "PartialSuccessError"
        assert items[-1]["failed"] == 1

    def test_download_failure_exit_code(self, runner, backend, patched_s3, tmp_path):
        bad = backend.put("bkt", "a.txt", "a", at(0))
        backend.fail_get_for = {bad}

        result = runner.invoke(cli, ["replay", "-b", "bkt", "-o", str(tmp_path)])

        assert result.exit_code == REPLAY_ERROR
        assert json_lines(result.output)[-1]["type"] == "MaterializeError"

    def test_pretty_output(self, runner, backend, patched_s3, tmp_path):
        backend.put("bkt", "a.txt", "a", at(0))

        result = runner.invoke(cli, ["replay", "-b", "bkt", "-o", str(tmp_path), "--pretty"])

        assert result.exit_code == 0, result.output
        assert "a.txt" in result.output
        assert "1 commits" in result.output

    def test_quiet_suppresses_data(self, runner, backend, patched_s3, tmp_path):
        backend.put("bkt", "a.txt", "a", at(0))

        result = runner.invoke(cli, ["replay", "-b", "bkt", "-o", str(tmp_path), "-q"])

        assert result.exit_code == 0
        assert json_lines(result.output) == []
        assert (tmp_path / "bkt" / "a.txt").exists()


class TestReplayCommandWithoutGit:
    """Paths that fail or stop before any git command runs."""

    def test_listing_failure_exit_code(self, runner, backend, patched_s3, tmp_path):
        backend.fail_list_objects = True

        result = runner.invoke(cli, ["replay", "-b", "bkt", "-o", str(tmp_path), "--dry-run"])

        assert result.exit_code == API_ERROR
        assert json_lines(result.output)[-1]["type"] == "StorageError"

    def test_credentials_failure_exit_code(self, runner, tmp_path):
        from s3history.exit_codes import ConfigError
        with patch("s3history.commands.replay.build_s3_client", side_effect=ConfigError("AWS profile not found: nope")):
            result = runner.invoke(cli, ["replay", "-b", "bkt", "-o", str(tmp_path), "--profile", "nope"])

        assert result.exit_code == CONFIG_ERROR
        assert not (tmp_path / "bkt").exists()

    def test_dry_run_yaml(self, runner, backend, patched_s3, tmp_path):
        backend.put("bkt", "a.txt", "a", at(0))

        result = runner.invoke(cli, ["replay", "-b", "bkt", "-o", str(tmp_path), "--dry-run", "-f", "yaml"])

        assert result.exit_code == 0, result.output
        assert "dry_run: true" in result.output
        assert not (tmp_path / "bkt").exists()

    def test_truncated_listing_warns_on_stderr(self, runner, backend, patched_s3, tmp_path, monkeypatch):
        monkeypatch.setattr(progress_module, "_progress", None)
        backend.put("bkt", "a.txt", "a", at(0))
        backend.truncated = True

        result = runner.invoke(cli, ["replay", "-b", "bkt", "-o", str(tmp_path), "--dry-run", "-v"])

        assert result.exit_code == 0, result.output
        assert "WARNING: Only the first listing page of bkt was replayed (1 objects)" in result.output
        assert json_lines(result.output)[-1]["truncated"] is True


class TestConfigCommand:
    """Tests for `s3history config`."""

    def test_show(self, runner):
        result = runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 0
        config = json.loads(result.output)
        assert config["aws"]["region"] == "us-west-2"

    def test_show_path(self, runner, isolated_home):
        result = runner.invoke(cli, ["config", "show", "--path"])
        assert json.loads(result.output)["config_path"] == str(isolated_home / ".s3history" / "config.json")

    def test_init_writes_defaults_once(self, runner, isolated_home):
        first = runner.invoke(cli, ["config", "init"])
        second = runner.invoke(cli, ["config", "init"])

        assert first.exit_code == 0
        assert (isolated_home / ".s3history" / "config.json").exists()
        assert second.exit_code != 0
        assert "already exists" in second.output
