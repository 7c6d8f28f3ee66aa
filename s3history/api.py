"""
High-level Python API for s3history.

Example:
    import s3history

    summary = s3history.replay_bucket("my-bucket", output_dir="/tmp/history")
    print(summary.commits, "commits in", summary.repository)

    # Or with an already built client
    s3 = s3history.S3Client.from_profile(profile="work", region="eu-west-1")
    summary = s3history.replay_bucket("my-bucket", s3=s3)
"""

from typing import Any, Dict, Optional
import logging

from .config import DEFAULT_REGION, load_config
from .domain import KeyMatch, ReplaySummary
from .infra import GitClient, S3Client
from .services import ReplayOptions, ReplayService

logger = logging.getLogger(__name__)


def build_s3_client(
    config: Dict[str, Any],
    profile: Optional[str] = None,
    region: Optional[str] = None,
    endpoint_url: Optional[str] = None,
) -> S3Client:
    """Create an S3Client from the ``aws`` config section and explicit overrides."""
    aws = config.get('aws', {})
    return S3Client.from_profile(
        profile=profile or aws.get('profile') or None,
        region=region or aws.get('region') or DEFAULT_REGION,
        endpoint_url=endpoint_url or aws.get('endpoint_url') or None,
        max_attempts=aws.get('max_attempts', 3),
        connect_timeout=aws.get('connect_timeout', 10),
        read_timeout=aws.get('read_timeout', 60),
    )


def replay_bucket(
    bucket: str,
    output_dir: str = ".",
    s3: Optional[S3Client] = None,
    git_client: Optional[GitClient] = None,
    key_match: Optional[KeyMatch] = None,
    dry_run: bool = False,
    config: Optional[Dict[str, Any]] = None,
) -> ReplaySummary:
    """
    Replay a bucket's version history into ``<output_dir>/<bucket>``.

    Args:
        bucket: Bucket to replay
        output_dir: Directory the repository is created in
        s3: Storage client (built from config if None)
        git_client: GitClient instance (creates new if None)
        key_match: Override ``replay.key_match`` from config
        dry_run: Plan the commits without downloading or writing anything
        config: Full config dict (loads default if None)

    Returns:
        ReplaySummary for the run
    """
    config = config or load_config()
    s3 = s3 or build_s3_client(config)
    options = ReplayOptions.from_config(
        config,
        output_dir=output_dir,
        key_match=key_match,
        dry_run=dry_run,
    )
    service = ReplayService(s3, git_client=git_client, options=options, config=config)
    for _ in service.run(bucket):
        pass
    return service.last_result
