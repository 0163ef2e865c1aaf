"""Data models for the parse pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


@dataclass
class Revision:
    """The latest revision of a page; only its wikitext is kept."""

    text: str = ""


@dataclass
class Page:
    """A decoded page record, enriched with the references found in its text."""

    title: str
    revision: Revision = field(default_factory=Revision)
    links: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    page_id: Optional[int] = None
    namespace: Optional[int] = None

    @property
    def text(self) -> str:
        return self.revision.text

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "page_id": self.page_id,
            "namespace": self.namespace,
            "links": list(self.links),
            "categories": list(self.categories),
        }


class DropReason(str, Enum):
    """Why an item left the pipeline without producing a page."""

    READ_ERROR = "read_error"
    TRUNCATED = "truncated"
    REDIRECT = "redirect"
    MALFORMED = "malformed"
    UNTITLED = "untitled"


@dataclass
class PipelineStats:
    """Counters describing one pipeline run.

    Each counter is written by exactly one stage thread, so no locking is
    needed; readers see a consistent picture once the pipeline has closed.
    """

    lines_read: int = 0
    read_errors: int = 0
    blocks_assembled: int = 0
    truncated_blocks: int = 0
    redirects_skipped: int = 0
    malformed_blocks: int = 0
    untitled_blocks: int = 0
    pages_emitted: int = 0
    stage_failures: int = 0

    def record_drop(self, reason: DropReason) -> None:
        if reason is DropReason.READ_ERROR:
            self.read_errors += 1
        elif reason is DropReason.TRUNCATED:
            self.truncated_blocks += 1
        elif reason is DropReason.REDIRECT:
            self.redirects_skipped += 1
        elif reason is DropReason.MALFORMED:
            self.malformed_blocks += 1
        elif reason is DropReason.UNTITLED:
            self.untitled_blocks += 1

    @property
    def dropped(self) -> int:
        """Total number of items dropped for any reason."""
        return (
            self.read_errors
            + self.truncated_blocks
            + self.redirects_skipped
            + self.malformed_blocks
            + self.untitled_blocks
        )

    def as_dict(self) -> dict[str, int]:
        return {
            "lines_read": self.lines_read,
            "read_errors": self.read_errors,
            "blocks_assembled": self.blocks_assembled,
            "truncated_blocks": self.truncated_blocks,
            "redirects_skipped": self.redirects_skipped,
            "malformed_blocks": self.malformed_blocks,
            "untitled_blocks": self.untitled_blocks,
            "pages_emitted": self.pages_emitted,
            "stage_failures": self.stage_failures,
        }
