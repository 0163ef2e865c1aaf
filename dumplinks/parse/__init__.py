"""Parse package: streaming page extraction from block-delimited XML dumps."""

from dumplinks.parse.models import DropReason, Page, PipelineStats, Revision
from dumplinks.parse.pipeline import (
    Handoff,
    Pipeline,
    categorized_parse,
    extract_pages,
    parse,
)
from dumplinks.parse.source import open_dump

__all__ = [
    "parse",
    "categorized_parse",
    "extract_pages",
    "open_dump",
    "Pipeline",
    "Handoff",
    "Page",
    "Revision",
    "PipelineStats",
    "DropReason",
]
