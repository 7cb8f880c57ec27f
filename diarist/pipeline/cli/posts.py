"""
Protected Post Commands
-----------------------

Commands for password-protected blog posts.

Commands:
    - encrypt-post: Replace a post body with an encrypted payload
    - render-post: Render a post to HTML, decrypting it when protected
"""
from __future__ import annotations

import click
from pathlib import Path

from diarist.core.paths import ATTACHMENT_DIR
from diarist.core.logging_manager import DiaristLogger, handle_cli_error
from diarist.pipeline.context import PipelineContext
from diarist.protected.crypto import encrypt_post_file
from diarist.protected.render import render_post_file


@click.command("encrypt-post")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-p",
    "--password",
    default=None,
    help="Password (defaults to the 'password' front matter field)",
)
@click.pass_context
def encrypt_post(ctx: click.Context, file: str, password: str) -> None:
    """
    Encrypt a post in place.

    The body moves into an 'encrypted' front matter payload and the
    plaintext password field is removed.
    """
    logger: DiaristLogger = ctx.obj["logger"]

    try:
        payload = encrypt_post_file(Path(file), password=password, logger=logger)
        click.echo(f"🔒 Encrypted {file} ({payload.alg}, {payload.iterations} iterations)")
    except Exception as e:
        handle_cli_error(ctx, e, "encrypt_post", additional_context={"file": file})


@click.command("render-post")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("-p", "--password", default=None, help="Password for protected posts")
@click.option(
    "-a",
    "--attachment-dir",
    type=click.Path(),
    default=str(ATTACHMENT_DIR),
    help="Attachment root used to resolve embeds",
)
@click.pass_context
def render_post(
    ctx: click.Context, file: str, password: str, attachment_dir: str
) -> None:
    """
    Print the HTML of a post.

    Protected posts need --password; a wrong password is reported as an
    AuthenticationError.
    """
    logger: DiaristLogger = ctx.obj["logger"]

    try:
        context = PipelineContext.from_attachment_dir(Path(attachment_dir), logger=logger)
        click.echo(render_post_file(Path(file), context, password=password))
    except Exception as e:
        handle_cli_error(ctx, e, "render_post", additional_context={"file": file})


__all__ = ["encrypt_post", "render_post"]
