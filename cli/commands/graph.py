"""Commands for inspecting the stored link graph."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from dumplinks.db import get_connection, init_db
from dumplinks.db.edges import get_subgraph
from dumplinks.db.models import PAGE
from dumplinks.db.nodes import count_nodes, get_node_by_title, list_nodes

from cli.rendering import render_tree

graph_app = typer.Typer(help="Inspect the stored link graph.", no_args_is_help=True)


@graph_app.command("show")
def graph_show(
    title: str = typer.Argument(..., help="Exact title of the page to start from."),
    depth: int = typer.Option(1, "--depth", min=1, help="How many link hops to follow."),
    db: Optional[Path] = typer.Option(None, "--db", help="Graph database path."),
) -> None:
    """Display the outbound links of a page as an ASCII tree."""
    conn = get_connection(db)
    init_db(conn)

    try:
        root = get_node_by_title(conn, title, PAGE)
        if root is None:
            typer.echo(f"❌ Page {title!r} not found.")
            raise typer.Exit(code=1)

        subgraph = get_subgraph(conn, root.id, depth=depth)
        typer.echo(render_tree(subgraph.nodes, subgraph.edges, root.id))
    finally:
        conn.close()


@graph_app.command("list")
def graph_list(
    node_type: Optional[str] = typer.Option(None, "--type", help="Filter by node type (Page, Category)."),
    limit: Optional[int] = typer.Option(None, "--limit", min=1, help="Maximum number of nodes to print."),
    db: Optional[Path] = typer.Option(None, "--db", help="Graph database path."),
) -> None:
    """List stored nodes in insertion order."""
    conn = get_connection(db)
    init_db(conn)

    try:
        nodes = list_nodes(conn, node_type=node_type, limit=limit)
        if not nodes:
            typer.echo("No nodes found.")
            return
        for n in nodes:
            typer.echo(f"  [{n.node_type}] {n.title}")
        total = count_nodes(conn, node_type=node_type)
        if total > len(nodes):
            typer.echo(f"  … {total - len(nodes)} more")
    finally:
        conn.close()
