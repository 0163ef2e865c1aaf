"""Operations on the ``nodes`` table."""

from __future__ import annotations

import json
import sqlite3
import uuid
from time import time
from typing import Any, Optional

from dumplinks.db.models import Node


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_node(row: sqlite3.Row) -> Node:
    return Node(
        id=row["id"],
        node_type=row["node_type"],
        title=row["title"],
        metadata=json.loads(row["metadata"] or "{}"),
        created_at=row["created_at"],
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def get_or_create_node(
    conn: sqlite3.Connection,
    title: str,
    node_type: str,
    metadata: Optional[dict[str, Any]] = None,
    commit: bool = True,
) -> Node:
    """Return the node with this *title* and *node_type*, creating it if needed.

    When *metadata* is given it is merged into the stored metadata, so a link
    target created before its own page is seen picks up the page's details
    later.

    Args:
        conn: Open DB connection.
        title: Page or category title, stored verbatim.
        node_type: ``Page`` or ``Category``.
        metadata: Key/value pairs to merge into the node's JSON metadata.
        commit: Commit immediately.  Pass ``False`` when batching writes.
    """
    existing = get_node_by_title(conn, title, node_type)

    if existing is not None:
        if metadata:
            existing.metadata.update(metadata)
            sql, params = (
                "UPDATE nodes SET metadata = ? WHERE id = ?",
                (existing.metadata_json(), existing.id),
            )
            if commit:
                with conn:
                    conn.execute(sql, params)
            else:
                conn.execute(sql, params)
        return existing

    node = Node(
        id=str(uuid.uuid4()),
        node_type=node_type,
        title=title,
        metadata=dict(metadata or {}),
        created_at=int(time()),
    )
    sql = """
        INSERT INTO nodes (id, node_type, title, metadata, created_at)
        VALUES (?, ?, ?, ?, ?)
    """
    params = (node.id, node.node_type, node.title, node.metadata_json(), node.created_at)
    if commit:
        with conn:
            conn.execute(sql, params)
    else:
        conn.execute(sql, params)
    return node


def get_node(conn: sqlite3.Connection, node_id: str) -> Optional[Node]:
    """Fetch a single node by its UUID.  Returns ``None`` if not found."""
    row = conn.execute(
        "SELECT * FROM nodes WHERE id = ?", (node_id,)
    ).fetchone()
    return _row_to_node(row) if row else None


def get_node_by_title(
    conn: sqlite3.Connection,
    title: str,
    node_type: str = "Page",
) -> Optional[Node]:
    """Fetch a node by exact title.  Returns ``None`` if not found."""
    row = conn.execute(
        "SELECT * FROM nodes WHERE node_type = ? AND title = ?", (node_type, title)
    ).fetchone()
    return _row_to_node(row) if row else None


def list_nodes(
    conn: sqlite3.Connection,
    node_type: Optional[str] = None,
    limit: Optional[int] = None,
) -> list[Node]:
    """Return nodes in insertion order, optionally filtered by ``node_type``."""
    sql = "SELECT * FROM nodes"
    params: list[Any] = []
    if node_type:
        sql += " WHERE node_type = ?"
        params.append(node_type)
    sql += " ORDER BY rowid"
    if limit is not None:
        sql += " LIMIT ?"
        params.append(limit)
    return [_row_to_node(r) for r in conn.execute(sql, params).fetchall()]


def count_nodes(conn: sqlite3.Connection, node_type: Optional[str] = None) -> int:
    if node_type:
        row = conn.execute(
            "SELECT COUNT(*) FROM nodes WHERE node_type = ?", (node_type,)
        ).fetchone()
    else:
        row = conn.execute("SELECT COUNT(*) FROM nodes").fetchone()
    return row[0]
