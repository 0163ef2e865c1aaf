"""Compiled patterns shared by every pipeline stage.

Compiled once at import time and only ever read afterwards, so stage
threads use them concurrently without locking.
"""

from __future__ import annotations

import re

# Block boundaries (matched against raw byte lines)
PAGE_START = re.compile(rb"<page>")
PAGE_END = re.compile(rb"</page>")

# Synthetic wrapper written around every assembled block
PAGE_OPEN_TAG = b"<page>"
PAGE_CLOSE_TAG = b"</page>"

# Redirect directive (matched against a whole raw block)
REDIRECT = re.compile(rb"#REDIRECT[ \t].*?\[\[.*?\]\]")

# References inside revision text
CATEGORY_PREFIX = "Category:"
LINK = re.compile(r"\[\[(?!" + re.escape(CATEGORY_PREFIX) + r")([^|]+?)\]\]")
CATEGORY = re.compile(r"\[\[" + re.escape(CATEGORY_PREFIX) + r"(.+?)\]\]")

# Characters trimmed from both ends of a category name
CATEGORY_TRIM = " \t|"
