#!/usr/bin/env python3

import click

from s3history.commands.replay import replay_handler
from s3history.commands.config import config_cmd


@click.group()
@click.version_option(package_name="s3history")
def cli():
    """s3history - Replay the version history of an S3 bucket as git commits.

    Every stored version of every object becomes part of a commit whose
    author date is the time the version was written.
    """
    pass


cli.add_command(replay_handler, name='replay')
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
