#!/usr/bin/env python3
"""
Diarist Pipeline CLI
--------------------

Command-line interface for the diary/blog content pipeline.

Command Groups:
    - Diary: identify, build-diary
    - Posts: encrypt-post, render-post

Usage:
    # Inspect how filenames are parsed
    diarist identify 2024-01-15 "2024-01-15 到 2024-01-20.md"

    # Write dist/api/diary/<n>.json
    diarist build-diary

    # Protect a post (password from --password or front matter)
    diarist encrypt-post src/data/blog/secret.md

    # Render a post (decrypting it first when protected)
    diarist render-post src/data/blog/secret.md --password hunter2
"""
from __future__ import annotations

import click
from pathlib import Path

from diarist.core.paths import LOG_DIR
from diarist.core.cli import setup_logger


@click.group()
@click.option(
    "--log-dir",
    type=click.Path(),
    default=str(LOG_DIR),
    help="Directory for log files",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, log_dir: str, verbose: bool) -> None:
    """Diarist content pipeline"""
    ctx.ensure_object(dict)
    ctx.obj["log_dir"] = Path(log_dir)
    ctx.obj["verbose"] = verbose
    ctx.obj["logger"] = setup_logger(Path(log_dir), "pipeline", verbose=verbose)


# Import and register commands from submodules
from .diary import identify, build_diary
from .posts import encrypt_post, render_post

cli.add_command(identify)
cli.add_command(build_diary)
cli.add_command(encrypt_post)
cli.add_command(render_post)


if __name__ == "__main__":
    cli(obj={})
