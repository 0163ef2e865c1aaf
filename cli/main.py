"""dumplinks CLI: entry-point for dump extraction and graph building.

Usage:
    python cli/main.py --help

Commands:
    parse    → stream a dump and print one JSON page record per line
    stats    → drain a dump and report what the pipeline kept and dropped
    ingest   → build the link graph in SQLite
    graph    → inspect the stored graph
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from dumplinks.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import json
import logging
from typing import Optional

import typer

from dumplinks.config import settings
from dumplinks.db import get_connection, init_db
from dumplinks.graph.store import store_pages
from dumplinks.parse import Pipeline, PipelineStats, open_dump

from cli.commands.graph import graph_app

app = typer.Typer(
    name="dumplinks",
    help="Extract pages, links and categories from XML dumps.",
    no_args_is_help=True,
)
app.add_typer(graph_app, name="graph")

_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _echo_stats(stats: PipelineStats, err: bool = False) -> None:
    for key, value in stats.as_dict().items():
        typer.echo(f"  {key:<18} {value}", err=err)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="DEBUG | INFO | WARNING | ERROR (default from settings)."
    ),
) -> None:
    """Configure logging for every sub-command."""
    level_name = (log_level or settings.log_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise typer.BadParameter(f"Unknown log level {level_name!r}", param_hint="--log-level")
    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stderr)


# ---------------------------------------------------------------------------
# Extraction commands
# ---------------------------------------------------------------------------

@app.command("parse")
def parse_cmd(
    dump: Path = typer.Argument(..., exists=True, dir_okay=False, help="Dump file (.xml, .bz2, .gz)."),
    categories: bool = typer.Option(False, "--categories", help="Also extract categories."),
    limit: Optional[int] = typer.Option(None, "--limit", min=1, help="Stop after this many pages."),
) -> None:
    """Print one JSON object per extracted page."""
    with open_dump(dump) as stream:
        with Pipeline(stream, categorize=categories) as pipeline:
            for count, page in enumerate(pipeline, start=1):
                typer.echo(json.dumps(page.to_dict(), ensure_ascii=False))
                if limit is not None and count >= limit:
                    break

    typer.echo("[parse] Pipeline stats:", err=True)
    _echo_stats(pipeline.stats, err=True)


@app.command("stats")
def stats_cmd(
    dump: Path = typer.Argument(..., exists=True, dir_okay=False, help="Dump file (.xml, .bz2, .gz)."),
    categories: bool = typer.Option(False, "--categories", help="Also extract categories."),
) -> None:
    """Drain a dump and report pages kept and items dropped."""
    links = 0
    with open_dump(dump) as stream:
        with Pipeline(stream, categorize=categories) as pipeline:
            for page in pipeline:
                links += len(page.links)

    typer.echo(f"[stats] {dump}")
    _echo_stats(pipeline.stats)
    typer.echo(f"  {'links':<18} {links}")


@app.command("ingest")
def ingest_cmd(
    dump: Path = typer.Argument(..., exists=True, dir_okay=False, help="Dump file (.xml, .bz2, .gz)."),
    categories: bool = typer.Option(False, "--categories", help="Also store categories."),
    db: Optional[Path] = typer.Option(None, "--db", help="Graph database path."),
) -> None:
    """Build the link graph for a dump in SQLite."""
    conn = get_connection(db)
    init_db(conn)
    typer.echo(f"[ingest] Reading {dump} …")
    try:
        with open_dump(dump) as stream:
            with Pipeline(stream, categorize=categories) as pipeline:
                stored = store_pages(conn, pipeline)
    finally:
        conn.close()

    typer.echo(f"[ingest] Stored {stored} pages in {db or settings.db_path}")
    _echo_stats(pipeline.stats)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
