"""Concurrent page-extraction pipeline.

``parse`` wires the stages together, one thread per stage, linked by
bounded single-producer/single-consumer :class:`Handoff` queues:

    read-lines → assemble → filter-redirects → decode → extract-links
                                               [→ extract-categories]

Closing propagates downstream: when the line source runs dry it closes its
handoff, and every stage closes its own output once its input is closed.
The caller drains the final handoff (or simply iterates the
:class:`Pipeline`) until it closes.

Usage::

    with parse(open_dump("enwiki.xml.bz2")) as pipeline:
        for page in pipeline:
            print(page.title, page.links)
    print(pipeline.stats.as_dict())
"""

from __future__ import annotations

import logging
import queue
import threading
from functools import partial
from typing import Any, BinaryIO, Callable, Iterable, Iterator, Optional

from dumplinks.config import settings
from dumplinks.parse.assembler import assemble_blocks
from dumplinks.parse.decoder import decode_pages, filter_redirects
from dumplinks.parse.extractor import extract_categories, extract_links
from dumplinks.parse.models import Page, PipelineStats
from dumplinks.parse.source import iter_lines

logger = logging.getLogger(__name__)

# Enqueued by a producer when it has nothing more to send.
_CLOSED = object()


# ---------------------------------------------------------------------------
# Handoff queue
# ---------------------------------------------------------------------------

class Handoff:
    """Bounded queue connecting exactly one producer stage to one consumer.

    Both ``put`` and iteration wait in slices of *poll_interval* seconds and
    give up once *cancelled* is set.
    """

    def __init__(
        self,
        maxsize: int,
        cancelled: threading.Event,
        poll_interval: float,
    ) -> None:
        if maxsize < 1:
            raise ValueError(f"Handoff capacity must be at least 1, got {maxsize}")
        self._queue: queue.Queue[Any] = queue.Queue(maxsize=maxsize)
        self._cancelled = cancelled
        self._poll_interval = poll_interval
        self._drained = False

    @property
    def drained(self) -> bool:
        """``True`` once the consumer has seen the close marker."""
        return self._drained

    def put(self, item: Any) -> bool:
        """Block until *item* is accepted.  Returns ``False`` if cancelled."""
        while not self._cancelled.is_set():
            try:
                self._queue.put(item, timeout=self._poll_interval)
                return True
            except queue.Full:
                continue
        return False

    def close(self) -> bool:
        """Signal the consumer that no more items will follow."""
        return self.put(_CLOSED)

    def __iter__(self) -> Iterator[Any]:
        while not self._drained and not self._cancelled.is_set():
            try:
                item = self._queue.get(timeout=self._poll_interval)
            except queue.Empty:
                continue
            if item is _CLOSED:
                self._drained = True
                return
            yield item


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

class Pipeline:
    """A running (or ready-to-run) extraction pipeline over one dump stream.

    Args:
        stream: Binary stream holding the dump.
        categorize: Also fill ``Page.categories`` via an extra stage.
        queue_size: Capacity of every handoff.  Defaults to
            ``settings.queue_size``.
        poll_interval: How often blocked stages re-check for cancellation.
        max_line_bytes: Passed through to :func:`iter_lines`.
        max_read_errors: Passed through to :func:`iter_lines`.
    """

    def __init__(
        self,
        stream: BinaryIO,
        categorize: bool = False,
        queue_size: Optional[int] = None,
        poll_interval: Optional[float] = None,
        max_line_bytes: Optional[int] = None,
        max_read_errors: Optional[int] = None,
    ) -> None:
        self.stream = stream
        self.categorize = categorize
        self.queue_size = settings.queue_size if queue_size is None else queue_size
        self.poll_interval = (
            settings.poll_interval if poll_interval is None else poll_interval
        )
        if self.queue_size < 1:
            raise ValueError(f"queue_size must be at least 1, got {self.queue_size}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")

        self.stats = PipelineStats()
        self._max_line_bytes = max_line_bytes
        self._max_read_errors = max_read_errors
        self._cancelled = threading.Event()
        self._failure_lock = threading.Lock()
        self._threads: list[threading.Thread] = []
        self._output: Optional[Handoff] = None

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------
    def _handoff(self) -> Handoff:
        return Handoff(self.queue_size, self._cancelled, self.poll_interval)

    def _transforms(self) -> list[tuple[str, Callable[[Iterable[Any]], Iterator[Any]]]]:
        transforms: list[tuple[str, Callable[[Iterable[Any]], Iterator[Any]]]] = [
            ("assemble", partial(assemble_blocks, stats=self.stats)),
            ("filter-redirects", partial(filter_redirects, stats=self.stats)),
            ("decode", partial(decode_pages, stats=self.stats)),
            ("extract-links", extract_links),
        ]
        if self.categorize:
            transforms.append(("extract-categories", extract_categories))
        return transforms

    def _counting(
        self, transform: Callable[[Iterable[Any]], Iterator[Page]]
    ) -> Callable[[Iterable[Any]], Iterator[Page]]:
        """Wrap the final transform so emitted pages are counted."""

        def counted(items: Iterable[Any]) -> Iterator[Page]:
            for page in transform(items):
                self.stats.pages_emitted += 1
                yield page

        return counted

    def start(self) -> "Pipeline":
        """Spawn one thread per stage.  Returns ``self`` for chaining."""
        if self._output is not None:
            raise RuntimeError("Pipeline already started")

        lines = self._handoff()
        self._spawn(
            "read-lines",
            lambda: iter_lines(
                self.stream,
                max_line_bytes=self._max_line_bytes,
                max_read_errors=self._max_read_errors,
                stats=self.stats,
            ),
            outbox=lines,
        )

        upstream = lines
        transforms = self._transforms()
        last_name, last_transform = transforms[-1]
        transforms[-1] = (last_name, self._counting(last_transform))
        for name, transform in transforms:
            downstream = self._handoff()
            self._spawn(name, partial(transform, upstream), outbox=downstream, inbox=upstream)
            upstream = downstream

        self._output = upstream
        logger.debug("Started pipeline with %d stages", len(self._threads))
        return self

    def _spawn(
        self,
        name: str,
        produce: Callable[[], Iterable[Any]],
        outbox: Handoff,
        inbox: Optional[Handoff] = None,
    ) -> None:
        thread = threading.Thread(
            target=self._run_stage,
            args=(name, produce, outbox, inbox),
            name=f"dumplinks-{name}",
            daemon=True,
        )
        self._threads.append(thread)
        thread.start()

    def _run_stage(
        self,
        name: str,
        produce: Callable[[], Iterable[Any]],
        outbox: Handoff,
        inbox: Optional[Handoff],
    ) -> None:
        try:
            for item in produce():
                if not outbox.put(item):
                    logger.debug("Stage %s cancelled", name)
                    return
        except Exception:  # noqa: BLE001
            with self._failure_lock:
                self.stats.stage_failures += 1
            logger.exception("Stage %s failed; closing its output", name)
            if inbox is not None:
                # Keep the upstream stages running to exhaustion.
                for _ in inbox:
                    pass
        finally:
            outbox.close()

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------
    @property
    def output(self) -> Handoff:
        """The final handoff carrying enriched :class:`Page` records."""
        if self._output is None:
            raise RuntimeError("Pipeline has not been started")
        return self._output

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def __iter__(self) -> Iterator[Page]:
        if self._output is None:
            self.start()
        return iter(self.output)

    def cancel(self) -> None:
        """Ask every stage to stop at its next handoff."""
        self._cancelled.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for all stage threads.  Returns ``True`` if every one exited."""
        for thread in self._threads:
            thread.join(timeout)
        return not any(t.is_alive() for t in self._threads)

    def __enter__(self) -> "Pipeline":
        if self._output is None:
            self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.cancel()
        self.join(timeout=self.poll_interval * 10)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def parse(stream: BinaryIO, **kwargs: Any) -> Pipeline:
    """Start a pipeline that emits pages with ``links`` populated."""
    return Pipeline(stream, categorize=False, **kwargs).start()


def categorized_parse(stream: BinaryIO, **kwargs: Any) -> Pipeline:
    """Start a pipeline that emits pages with ``links`` and ``categories``."""
    return Pipeline(stream, categorize=True, **kwargs).start()


def extract_pages(
    stream: BinaryIO,
    categorize: bool = False,
    **kwargs: Any,
) -> Iterator[Page]:
    """Yield every extracted page of *stream*, shutting the pipeline down after.

    Closing the generator early cancels the pipeline, so no stage thread is
    left blocked.
    """
    with Pipeline(stream, categorize=categorize, **kwargs) as pipeline:
        yield from pipeline
