"""Redirect filtering and structural decoding of raw page blocks."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from lxml import etree

from dumplinks.parse.models import DropReason, Page, PipelineStats, Revision
from dumplinks.parse.patterns import REDIRECT

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _make_parser() -> etree.XMLParser:
    """Return a parser that never fetches or expands external content.

    lxml parsers must not be shared between threads, so every decoding
    stage builds its own.
    """
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        huge_tree=True,
        remove_comments=True,
    )


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Redirect filter
# ---------------------------------------------------------------------------

def is_redirect(block: bytes) -> bool:
    """Return ``True`` if *block* contains a ``#REDIRECT [[Target]]`` directive."""
    return REDIRECT.search(block) is not None


def filter_redirects(
    blocks: Iterable[bytes],
    stats: Optional[PipelineStats] = None,
) -> Iterator[bytes]:
    """Yield every block of *blocks* that is not a redirect, unchanged."""
    for block in blocks:
        if is_redirect(block):
            if stats is not None:
                stats.record_drop(DropReason.REDIRECT)
            continue
        yield block


# ---------------------------------------------------------------------------
# Block decoder
# ---------------------------------------------------------------------------

def decode_block(block: bytes, parser: Optional[etree.XMLParser] = None) -> Page:
    """Decode one ``<page>`` block into a :class:`Page`.

    Only the title, the text of the last revision, page id and namespace are
    read; links and categories are left empty for the extractor stages.

    Raises:
        etree.XMLSyntaxError: If *block* is not well-formed XML.
        ValueError: If the block has no ``<title>`` element.  An empty title
            is kept.
    """
    root = etree.fromstring(block, parser or _make_parser())

    title = root.findtext("title")
    if title is None:
        raise ValueError("Page block has no title")

    # Full-history dumps repeat <revision>; the last one is the latest.
    revisions = root.findall("revision")
    text = revisions[-1].findtext("text") if revisions else None

    return Page(
        title=title,
        revision=Revision(text=text or ""),
        page_id=_optional_int(root.findtext("id")),
        namespace=_optional_int(root.findtext("ns")),
    )


def decode_pages(
    blocks: Iterable[bytes],
    stats: Optional[PipelineStats] = None,
) -> Iterator[Page]:
    """Yield a :class:`Page` for each block of *blocks* that decodes.

    Blocks that fail to decode are dropped.  Nothing is raised or logged
    above debug level; *stats* records how many were lost and why.
    """
    parser = _make_parser()
    for block in blocks:
        try:
            page = decode_block(block, parser)
        except etree.XMLSyntaxError as exc:
            if stats is not None:
                stats.record_drop(DropReason.MALFORMED)
            logger.debug("Dropping malformed page block: %s", exc)
            continue
        except ValueError as exc:
            if stats is not None:
                stats.record_drop(DropReason.UNTITLED)
            logger.debug("Dropping page block: %s", exc)
            continue
        yield page
