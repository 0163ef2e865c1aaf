"""Graph persistence: writes extracted pages into the SQLite node/edge store.

``store_pages`` consumes any page iterable (normally a running pipeline):

    page → ``Page`` node → ``links_to`` edge per link target
                         → ``in_category`` edge per category
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Iterable, Optional

from dumplinks.config import settings
from dumplinks.db.edges import connect_nodes
from dumplinks.db.models import CATEGORY, IN_CATEGORY, LINKS_TO, PAGE
from dumplinks.db.nodes import get_or_create_node
from dumplinks.parse.models import Page

logger = logging.getLogger(__name__)


def store_page(conn: sqlite3.Connection, page: Page, commit: bool = True) -> None:
    """Persist one page with its links and categories."""
    node = get_or_create_node(
        conn,
        title=page.title,
        node_type=PAGE,
        metadata={
            "page_id": page.page_id,
            "namespace": page.namespace,
            "links_count": len(page.links),
            "categories_count": len(page.categories),
        },
        commit=False,
    )
    for target in page.links:
        target_node = get_or_create_node(conn, title=target, node_type=PAGE, commit=False)
        connect_nodes(conn, node.id, target_node.id, LINKS_TO, commit=False)
    for category in page.categories:
        category_node = get_or_create_node(
            conn, title=category, node_type=CATEGORY, commit=False
        )
        connect_nodes(conn, node.id, category_node.id, IN_CATEGORY, commit=False)
    if commit:
        conn.commit()


def store_pages(
    conn: sqlite3.Connection,
    pages: Iterable[Page],
    commit_every: Optional[int] = None,
) -> int:
    """Persist every page of *pages*, committing in batches.

    Args:
        conn: Open, initialised DB connection.
        pages: Pages to store, typically a running pipeline.
        commit_every: Pages per transaction.  Defaults to
            ``settings.commit_every``.

    Returns:
        The number of pages stored.
    """
    batch = settings.commit_every if commit_every is None else commit_every
    if batch < 1:
        raise ValueError(f"commit_every must be at least 1, got {batch}")

    stored = 0
    try:
        for page in pages:
            store_page(conn, page, commit=False)
            stored += 1
            if stored % batch == 0:
                conn.commit()
                logger.info("Stored %d pages", stored)
    except BaseException:
        conn.rollback()
        raise
    conn.commit()
    return stored
