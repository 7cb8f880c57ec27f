"""
Diary Commands
--------------

Commands for diary identifiers and the paginated diary API.

Commands:
    - identify: Show how identifiers are parsed
    - build-diary: Write /api/diary/<n>.json pages from diary markdown
"""
from __future__ import annotations

import json

import click
from pathlib import Path

from diarist.core.paths import API_DIARY_DIR, DATA_DIR
from diarist.core.settings import ITEMS_PER_PAGE
from diarist.core.logging_manager import DiaristLogger, handle_cli_error
from diarist.dataclasses.diary_identifier import parse_diary_identifier
from diarist.diary.builder import DiaryBuilder
from diarist.pipeline.context import PipelineContext


@click.command("identify")
@click.argument("identifiers", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of text")
def identify(identifiers: tuple, as_json: bool) -> None:
    """
    Parse diary identifiers (filenames) and print their dates.

    Unparseable identifiers fall back to 1970-01-01.
    """
    metas = [parse_diary_identifier(identifier) for identifier in identifiers]

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "rawId": meta.raw_id,
                        "startDate": meta.start_date,
                        "endDate": meta.end_date,
                        "isRange": meta.is_range,
                        "quarterKey": meta.quarter_key,
                        "sortKey": meta.sort_key,
                    }
                    for meta in metas
                ],
                ensure_ascii=False,
                indent=2,
            )
        )
        return

    for meta in metas:
        span = f"{meta.start_date} → {meta.end_date}" if meta.is_range else meta.start_date
        click.echo(f"{meta.raw_id}: {span} ({meta.quarter_key})")


@click.command("build-diary")
@click.option(
    "-d",
    "--data-dir",
    type=click.Path(),
    default=str(DATA_DIR),
    help="Content directory holding diary/ and attachment/",
)
@click.option(
    "-o",
    "--out-dir",
    type=click.Path(),
    default=str(API_DIARY_DIR),
    help="Output directory for page JSON files",
)
@click.option(
    "-n",
    "--per-page",
    type=click.IntRange(min=1),
    default=ITEMS_PER_PAGE,
    show_default=True,
    help="Entries per page",
)
@click.pass_context
def build_diary(ctx: click.Context, data_dir: str, out_dir: str, per_page: int) -> None:
    """
    Build the paginated diary API.

    Reads diary/*.md under the data directory, resolves attachments under
    attachment/, and writes one JSON file per page, newest entries first.
    """
    logger: DiaristLogger = ctx.obj["logger"]
    data_path = Path(data_dir)

    click.echo("📔 Building diary pages...")

    try:
        context = PipelineContext.from_attachment_dir(data_path / "attachment", logger=logger)
        stats = DiaryBuilder(
            data_path / "diary", Path(out_dir), context, per_page=per_page
        ).build()

        click.echo("\n✅ Diary build complete:")
        click.echo(f"  Entries: {stats.entries_parsed}")
        click.echo(f"  Skipped: {stats.entries_skipped}")
        click.echo(f"  Pages written: {stats.pages_written}")
        click.echo(f"  Duration: {stats.duration():.2f}s")
        if logger.warning_count:
            click.echo(
                f"\n⚠️  {logger.warning_count} warning(s) logged in {logger.log_dir}"
            )

    except Exception as e:
        handle_cli_error(
            ctx,
            e,
            "build_diary",
            additional_context={"data_dir": data_dir, "out_dir": out_dir},
        )


__all__ = ["identify", "build_diary"]
