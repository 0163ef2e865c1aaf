"""Utilities for rendering link graphs in the CLI."""

from __future__ import annotations

from typing import Dict, List, Tuple

from dumplinks.db.models import Edge, Node


def render_tree(nodes: List[Node], edges: List[Edge], root_id: str) -> str:
    """Render a link graph as an ASCII tree rooted at *root_id*.

    Args:
        nodes: Node objects in the subgraph.
        edges: Edges between those nodes.
        root_id: The ID of the node to start from.

    Returns:
        String representation of the tree.  A node already printed higher up
        is shown once more with a ``(seen)`` marker and not expanded again.
    """
    node_map = {n.id: n for n in nodes}
    adj: Dict[str, List[Tuple[str, str]]] = {}
    for e in edges:
        adj.setdefault(e.source_id, []).append((e.target_id, e.relation_type))

    lines: List[str] = []
    visited: set[str] = set()

    def _render_node(node_id: str, relation: str, prefix: str, is_last: bool, is_root: bool) -> None:
        node = node_map.get(node_id)
        title = node.title if node else f"Unknown({node_id[:8]})"
        icon = _get_icon(node.node_type if node else "")

        if is_root:
            lines.append(f"{icon} {title}")
            child_prefix = ""
        else:
            connector = "└── " if is_last else "├── "
            seen = " (seen)" if node_id in visited else ""
            lines.append(f"{prefix}{connector}[{relation}] {icon} {title}{seen}")
            child_prefix = prefix + ("    " if is_last else "│   ")

        if node_id in visited:
            return
        visited.add(node_id)

        children = adj.get(node_id, [])
        count = len(children)
        for i, (child_id, rel) in enumerate(children):
            _render_node(child_id, rel, child_prefix, i == count - 1, False)

    if root_id in node_map:
        _render_node(root_id, "", "", True, True)
    else:
        lines.append("Root node not found in subgraph.")

    return "\n".join(lines)


def _get_icon(node_type: str) -> str:
    icons = {
        "Page": "📄",
        "Category": "🏷️",
    }
    return icons.get(node_type, "📦")
