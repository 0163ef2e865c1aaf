"""Operations on the ``edges`` table."""

from __future__ import annotations

import json
import sqlite3
from time import time
from typing import Optional

from dumplinks.db.models import Edge, GraphPayload, Node
from dumplinks.db.nodes import _row_to_node


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_edge(row: sqlite3.Row) -> Edge:
    return Edge(
        source_id=row["source_id"],
        target_id=row["target_id"],
        relation_type=row["relation_type"],
        created_at=row["created_at"],
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def connect_nodes(
    conn: sqlite3.Connection,
    source_id: str,
    target_id: str,
    relation_type: str = "links_to",
    commit: bool = True,
) -> None:
    """Create a directed edge from *source* to *target*.

    Uses ``INSERT OR IGNORE`` so calling it twice with the same triple is safe.
    """
    sql = """
        INSERT OR IGNORE INTO edges (source_id, target_id, relation_type, created_at)
        VALUES (?, ?, ?, ?)
    """
    params = (source_id, target_id, relation_type, int(time()))
    if commit:
        with conn:
            conn.execute(sql, params)
    else:
        conn.execute(sql, params)


def get_edges(conn: sqlite3.Connection, node_id: str) -> list[Edge]:
    """Return all edges where *node_id* is the source **or** the target."""
    rows = conn.execute(
        """
        SELECT source_id, target_id, relation_type, created_at
        FROM   edges
        WHERE  source_id = ? OR target_id = ?
        """,
        (node_id, node_id),
    ).fetchall()
    return [_row_to_edge(r) for r in rows]


def get_outgoing(
    conn: sqlite3.Connection,
    node_id: str,
    relation_type: Optional[str] = None,
) -> list[tuple[Edge, Node]]:
    """Return ``(edge, target node)`` pairs leaving *node_id*, in insertion order."""
    sql = """
        SELECT e.source_id, e.target_id, e.relation_type, e.created_at,
               n.id, n.node_type, n.title, n.metadata, n.created_at AS node_created_at
        FROM   edges e
        JOIN   nodes n ON n.id = e.target_id
        WHERE  e.source_id = ?
    """
    params: list[str] = [node_id]
    if relation_type:
        sql += " AND e.relation_type = ?"
        params.append(relation_type)
    sql += " ORDER BY e.rowid"

    pairs: list[tuple[Edge, Node]] = []
    for r in conn.execute(sql, params).fetchall():
        node = Node(
            id=r["id"],
            node_type=r["node_type"],
            title=r["title"],
            metadata=json.loads(r["metadata"] or "{}"),
            created_at=r["node_created_at"],
        )
        pairs.append((_row_to_edge(r), node))
    return pairs


def get_graph_data(conn: sqlite3.Connection) -> GraphPayload:
    """Return **all** nodes and edges.

    Returns:
        A :class:`~dumplinks.db.models.GraphPayload` with ``nodes`` and
        ``edges`` lists populated.
    """
    node_rows = conn.execute("SELECT * FROM nodes ORDER BY rowid").fetchall()
    edge_rows = conn.execute(
        "SELECT source_id, target_id, relation_type, created_at FROM edges ORDER BY rowid"
    ).fetchall()
    return GraphPayload(
        nodes=[_row_to_node(r) for r in node_rows],
        edges=[_row_to_edge(r) for r in edge_rows],
    )


def get_subgraph(conn: sqlite3.Connection, root_id: str, depth: int = 1) -> GraphPayload:
    """Return the nodes reachable from *root_id* within *depth* hops, and their edges.

    Uses a recursive Common Table Expression (CTE) over outgoing edges.  The
    root node itself is included.
    """
    node_rows = conn.execute(
        """
        WITH RECURSIVE reachable(id, depth) AS (
            SELECT ?, 0
            UNION
            SELECT e.target_id, r.depth + 1
            FROM   edges e
            JOIN   reachable r ON e.source_id = r.id
            WHERE  r.depth < ?
        )
        SELECT DISTINCT n.*
        FROM   nodes n
        JOIN   reachable r ON n.id = r.id
        """,
        (root_id, depth),
    ).fetchall()
    nodes = [_row_to_node(r) for r in node_rows]
    ids = {n.id for n in nodes}

    edges: list[Edge] = []
    for node in nodes:
        for edge, _ in get_outgoing(conn, node.id):
            if edge.target_id in ids:
                edges.append(edge)
    return GraphPayload(nodes=nodes, edges=edges)
