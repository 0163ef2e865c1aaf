"""Shared fixtures: small synthetic dumps and an in-memory graph database."""

from __future__ import annotations

import sqlite3
from typing import Callable, Generator, Optional
from xml.sax.saxutils import escape

import pytest

from dumplinks.db.connection import get_connection
from dumplinks.db.migrations import init_db


def _page_xml(
    title: str,
    text: Optional[str] = "",
    page_id: Optional[int] = None,
    ns: Optional[int] = 0,
) -> str:
    lines = ["  <page>", f"    <title>{escape(title)}</title>"]
    if ns is not None:
        lines.append(f"    <ns>{ns}</ns>")
    if page_id is not None:
        lines.append(f"    <id>{page_id}</id>")
    lines.append("    <revision>")
    if text is not None:
        lines.append(f'      <text xml:space="preserve">{escape(text)}</text>')
    lines.append("    </revision>")
    lines.append("  </page>")
    return "\n".join(lines) + "\n"


def _dump(*pages: str) -> bytes:
    header = (
        '<mediawiki xmlns="http://www.mediawiki.org/xml/export-0.10/" xml:lang="en">\n'
        "  <siteinfo>\n    <sitename>Testpedia</sitename>\n  </siteinfo>\n"
    )
    return (header + "".join(pages) + "</mediawiki>\n").encode("utf-8")


@pytest.fixture()
def page_xml() -> Callable[..., str]:
    """Build the XML for one ``<page>`` record, one element per line."""
    return _page_xml


@pytest.fixture()
def make_dump() -> Callable[..., bytes]:
    """Wrap page XML strings in a MediaWiki-style dump and encode it."""
    return _dump


@pytest.fixture()
def conn() -> Generator[sqlite3.Connection, None, None]:
    """In-memory connection with the schema initialised."""
    connection = get_connection(db_path=":memory:")  # type: ignore[arg-type]
    init_db(connection)
    yield connection
    connection.close()
