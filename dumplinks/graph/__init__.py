"""Graph package: builds link graphs from extracted pages."""

from dumplinks.graph.builder import LinkGraph, build_graph
from dumplinks.graph.store import store_page, store_pages

__all__ = ["LinkGraph", "build_graph", "store_page", "store_pages"]
