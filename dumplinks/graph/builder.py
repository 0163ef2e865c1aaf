"""In-memory link graph built from a stream of pages.

Nodes are keyed by title.  Every link becomes a directed edge from the page
to the link target; targets become nodes even when no page with that title
is ever seen.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from dumplinks.parse.models import Page


class LinkGraph:
    """Directed title → title graph with per-title category memberships."""

    def __init__(self) -> None:
        # dicts used as ordered sets: first-seen order is preserved
        self._adjacency: Dict[str, Dict[str, None]] = {}
        self._categories: Dict[str, Dict[str, None]] = {}
        self._members: Dict[str, Dict[str, None]] = {}

    def __contains__(self, title: object) -> bool:
        return title in self._adjacency

    def __len__(self) -> int:
        return len(self._adjacency)

    @property
    def titles(self) -> List[str]:
        return list(self._adjacency)

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self._adjacency.values())

    def add_node(self, title: str) -> None:
        self._adjacency.setdefault(title, {})

    def add_edge(self, source: str, target: str) -> None:
        self.add_node(target)
        self._adjacency.setdefault(source, {})[target] = None

    def add_page(self, page: Page) -> None:
        """Add *page*, its outbound links and its categories to the graph."""
        self.add_node(page.title)
        for target in page.links:
            self.add_edge(page.title, target)
        for category in page.categories:
            self._categories.setdefault(page.title, {})[category] = None
            self._members.setdefault(category, {})[page.title] = None

    def neighbors(self, title: str) -> List[str]:
        """Return the distinct link targets of *title* (empty if unknown)."""
        return list(self._adjacency.get(title, {}))

    def categories_of(self, title: str) -> List[str]:
        return list(self._categories.get(title, {}))

    def members_of(self, category: str) -> List[str]:
        return list(self._members.get(category, {}))


def build_graph(pages: Iterable[Page]) -> LinkGraph:
    """Drain *pages* into a new :class:`LinkGraph`."""
    graph = LinkGraph()
    for page in pages:
        graph.add_page(page)
    return graph
