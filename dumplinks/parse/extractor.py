"""Link and category extraction from a page's revision text.

Only references in the plain ``[[Target]]`` form are extracted.  Links with
a display label (``[[Target|label]]``) are not followed.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List

from dumplinks.parse.models import Page
from dumplinks.parse.patterns import CATEGORY, CATEGORY_TRIM, LINK


def find_links(text: str) -> List[str]:
    """Return every non-category ``[[Target]]`` in *text*, in order of appearance."""
    if not text:
        return []
    return [m.group(1) for m in LINK.finditer(text)]


def find_categories(text: str) -> List[str]:
    """Return every ``[[Category:Name]]`` in *text* with ``Name`` trimmed."""
    if not text:
        return []
    return [m.group(1).strip(CATEGORY_TRIM) for m in CATEGORY.finditer(text)]


def extract_links(pages: Iterable[Page]) -> Iterator[Page]:
    """Populate ``page.links`` for each page and yield it.

    The list is replaced rather than extended, so extracting twice from the
    same text gives the same result.
    """
    for page in pages:
        page.links = find_links(page.text)
        yield page


def extract_categories(pages: Iterable[Page]) -> Iterator[Page]:
    """Populate ``page.categories`` for each page and yield it."""
    for page in pages:
        page.categories = find_categories(page.text)
        yield page
