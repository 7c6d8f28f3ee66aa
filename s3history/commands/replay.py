"""
Handles the 'replay' command: turn a versioned S3 bucket into a git repo.

This command follows our design principles:
- Default output is JSONL streaming, one object per commit then a summary
- --pretty flag for human-readable table output
- Progress and log messages go to stderr
"""

import click

from ..api import build_s3_client
from ..cli_utils import standard_command, add_common_options
from ..config import load_config, configure_logging
from ..domain import KeyMatch
from ..exit_codes import PartialSuccessError
from ..render import render_commits_table, render_summary
from ..services import ReplayOptions, ReplayService


def _partial_failure(summary):
    failed = len(summary.version_failures)
    return PartialSuccessError(
        f"Versions of {failed} object(s) could not be listed and were skipped",
        succeeded=summary.objects - failed,
        failed=failed,
    )


def _warn_truncated(progress, summary):
    if summary.truncated:
        progress.warning(
            f"Only the first listing page of {summary.bucket} was replayed ({summary.objects} objects)"
        )


@click.command("replay")
@click.option("-b", "--bucket", required=True, help="The S3 bucket you'd like to turn into a git repo")
@click.option("-o", "--output", "output_dir", default=".",
              type=click.Path(file_okay=False),
              help="Directory to create the git repo in. Defaults to the current directory")
@click.option("--profile", default=None, help="The AWS profile to use. Defaults to the default credential chain")
@click.option("--region", default=None, help="The AWS region to use. Defaults to us-west-2")
@click.option("--endpoint-url", default=None, help="Custom endpoint for S3-compatible storage")
@click.option("--key-match", type=click.Choice([m.value for m in KeyMatch]), default=None,
              help="Keep only versions of the exact key, or everything sharing its prefix")
@add_common_options('dry_run', 'pretty', 'format', 'verbose', 'quiet')
@standard_command
def replay_handler(bucket, output_dir, profile, region, endpoint_url, key_match,
                   dry_run, pretty, progress, quiet, verbose, **kwargs):
    """
    Replay every stored version of every object in BUCKET as git commits.

    The repository is created at OUTPUT/BUCKET, or reused if it already
    exists. Versions sharing a modification time become one commit whose
    author date is that time.

    \b
    Examples:
        s3history replay --bucket my-bucket
        s3history replay -b my-bucket -o ~/history --profile work --pretty
        s3history replay -b my-bucket --dry-run -f yaml
    """
    config = load_config()
    configure_logging(config, verbose=verbose)

    s3 = build_s3_client(config, profile=profile, region=region, endpoint_url=endpoint_url)
    options = ReplayOptions.from_config(
        config,
        output_dir=output_dir,
        key_match=KeyMatch(key_match) if key_match else None,
        dry_run=dry_run,
    )
    service = ReplayService(s3, options=options, config=config)

    progress(f"Replaying s3://{bucket} into {service.repository_path(bucket)}")

    if pretty:
        commits = list(service.run(bucket))
        title = "Planned commits" if dry_run else "Replayed commits"
        render_commits_table(commits, title=title)
        render_summary(service.last_result)
        _warn_truncated(progress, service.last_result)
        if not service.last_result.success:
            raise _partial_failure(service.last_result)
        return None

    def generate():
        for commit in service.run(bucket):
            progress(f"{commit.date} {', '.join(commit.files)}")
            yield commit.to_dict()

        summary = service.last_result
        yield summary.to_dict()
        _warn_truncated(progress, summary)
        if not summary.success:
            raise _partial_failure(summary)
        if dry_run:
            progress.success(f"{summary.changesets} commits planned for {bucket}")
        else:
            progress.success(f"{summary.commits} commits replayed from {bucket}")

    return generate()
