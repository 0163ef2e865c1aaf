"""Block assembler: folds dump lines into complete ``<page>`` blocks.

The assembler is a two-state machine.  :func:`transition` is the pure
transition function; :func:`assemble_blocks` drives it over a line
sequence and owns the block buffer.

    OUTSIDE_PAGE --start marker--> INSIDE_PAGE   (open a new block)
    INSIDE_PAGE  --end marker----> OUTSIDE_PAGE  (close and emit the block)
    INSIDE_PAGE  --other line----> INSIDE_PAGE   (append the line)
    OUTSIDE_PAGE --other line----> OUTSIDE_PAGE  (ignore the line)

A start marker seen while already inside a page is an ordinary line; dumps
are assumed flat.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, Iterator, Optional, Tuple

from dumplinks.parse.models import DropReason, PipelineStats
from dumplinks.parse.patterns import PAGE_CLOSE_TAG, PAGE_END, PAGE_OPEN_TAG, PAGE_START

logger = logging.getLogger(__name__)


class PageState(Enum):
    OUTSIDE_PAGE = "outside-page"
    INSIDE_PAGE = "inside-page"


class Action(Enum):
    IGNORE = "ignore"
    OPEN = "open"
    APPEND = "append"
    CLOSE = "close"


def transition(state: PageState, line: bytes) -> Tuple[PageState, Action]:
    """Return the next state and the buffer action for *line* seen in *state*."""
    if state is PageState.OUTSIDE_PAGE:
        if PAGE_START.search(line):
            return PageState.INSIDE_PAGE, Action.OPEN
        return PageState.OUTSIDE_PAGE, Action.IGNORE

    if PAGE_END.search(line):
        return PageState.OUTSIDE_PAGE, Action.CLOSE
    return PageState.INSIDE_PAGE, Action.APPEND


def assemble_blocks(
    lines: Iterable[bytes],
    stats: Optional[PipelineStats] = None,
) -> Iterator[bytes]:
    """Yield one complete page block per closed ``<page>`` in *lines*.

    Every block is wrapped in synthetic ``<page>``/``</page>`` tags.  A
    block still open when *lines* runs out is discarded, never emitted.
    """
    state = PageState.OUTSIDE_PAGE
    block = bytearray()

    for line in lines:
        state, action = transition(state, line)
        if action is Action.OPEN:
            block = bytearray(PAGE_OPEN_TAG)
        elif action is Action.APPEND:
            block += line
        elif action is Action.CLOSE:
            block += PAGE_CLOSE_TAG
            if stats is not None:
                stats.blocks_assembled += 1
            yield bytes(block)
            block = bytearray()

    if state is PageState.INSIDE_PAGE:
        if stats is not None:
            stats.record_drop(DropReason.TRUNCATED)
        logger.debug("Dropping truncated page block (%d bytes)", len(block))
