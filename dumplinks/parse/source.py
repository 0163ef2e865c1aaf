"""Line source: turns a binary dump stream into a lazy sequence of lines."""

from __future__ import annotations

import bz2
import gzip
import logging
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from dumplinks.config import settings
from dumplinks.parse.models import DropReason, PipelineStats

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _discard_rest_of_line(stream: BinaryIO, chunk_size: int) -> None:
    """Consume bytes up to and including the next newline (or EOF)."""
    while True:
        chunk = stream.readline(chunk_size)
        if not chunk or chunk.endswith(b"\n"):
            return


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def open_dump(path: str | Path) -> BinaryIO:
    """Open *path* for binary reading, decompressing ``.bz2``/``.gz`` dumps."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".bz2":
        return bz2.open(path, "rb")  # type: ignore[return-value]
    if suffix in (".gz", ".gzip"):
        return gzip.open(path, "rb")  # type: ignore[return-value]
    return open(path, "rb")


def iter_lines(
    stream: BinaryIO,
    max_line_bytes: Optional[int] = None,
    max_read_errors: Optional[int] = None,
    stats: Optional[PipelineStats] = None,
) -> Iterator[bytes]:
    """Yield the lines of *stream* in order, line terminators included.

    A line that cannot be read is skipped with a warning and the sequence
    carries on.  Lines longer than *max_line_bytes* count as unreadable: the
    remainder of the line is discarded.  After *max_read_errors* consecutive
    failures the stream is treated as exhausted.

    Args:
        stream: Binary stream positioned at the start of the dump.
        max_line_bytes: Longest accepted line, terminator excluded.  Defaults to
            ``settings.max_line_bytes``; ``0`` disables the limit.
        max_read_errors: Consecutive read failures tolerated before giving
            up.  Defaults to ``settings.max_read_errors``.
        stats: Optional counters updated as lines are read or skipped.
    """
    limit = settings.max_line_bytes if max_line_bytes is None else max_line_bytes
    error_budget = settings.max_read_errors if max_read_errors is None else max_read_errors
    consecutive_errors = 0

    while True:
        try:
            line = stream.readline(limit + 2) if limit > 0 else stream.readline()
        except EOFError as exc:
            # Compressed input cut short: nothing more can be decoded.
            logger.warning("Input ended unexpectedly: %s", exc)
            return
        except OSError as exc:
            consecutive_errors += 1
            if stats is not None:
                stats.record_drop(DropReason.READ_ERROR)
            logger.warning("%s skipping line", exc)
            if consecutive_errors >= error_budget:
                logger.error(
                    "Giving up after %d consecutive read errors", consecutive_errors
                )
                return
            continue

        if not line:
            return
        consecutive_errors = 0

        if limit > 0 and len(line.rstrip(b"\r\n")) > limit:
            if stats is not None:
                stats.record_drop(DropReason.READ_ERROR)
            logger.warning("Line exceeds %d bytes, skipping line", limit)
            if not line.endswith(b"\n"):
                _discard_rest_of_line(stream, limit + 2)
            continue

        if stats is not None:
            stats.lines_read += 1
        yield line
