"""Tests for redirect filtering and block decoding."""

from __future__ import annotations

import logging

import pytest
from lxml import etree

from dumplinks.parse.decoder import decode_block, decode_pages, filter_redirects, is_redirect
from dumplinks.parse.models import Page, PipelineStats

_BLOCK = (
    b"<page>"
    b"    <title>Alpha &amp; Omega</title>\n"
    b"    <ns>0</ns>\n"
    b"    <id>12</id>\n"
    b"    <revision>\n"
    b"      <id>999</id>\n"
    b'      <text xml:space="preserve">See [[Beta]].</text>\n'
    b"    </revision>\n"
    b"</page>"
)

_REDIRECT_BLOCK = (
    b"<page><title>Old</title>\n"
    b"<redirect title=\"New\" />\n"
    b"<revision><text>#REDIRECT [[New]]</text></revision>\n</page>"
)


# ---------------------------------------------------------------------------
# Redirect filter
# ---------------------------------------------------------------------------

class TestIsRedirect:
    def test_detects_redirect_directive(self) -> None:
        assert is_redirect(_REDIRECT_BLOCK) is True

    def test_tab_separator(self) -> None:
        assert is_redirect(b"<text>#REDIRECT\t[[Target]]</text>") is True

    def test_is_case_sensitive(self) -> None:
        assert is_redirect(b"<text>#redirect [[Target]]</text>") is False

    def test_requires_bracketed_target(self) -> None:
        assert is_redirect(b"<text>#REDIRECT Target</text>") is False

    def test_ordinary_page_is_not_redirect(self) -> None:
        assert is_redirect(_BLOCK) is False


class TestFilterRedirects:
    def test_drops_redirects_and_keeps_order(self) -> None:
        other = b"<page><title>Other</title></page>"
        stats = PipelineStats()
        kept = list(filter_redirects([_BLOCK, _REDIRECT_BLOCK, other], stats=stats))

        assert kept == [_BLOCK, other]
        assert stats.redirects_skipped == 1

    def test_passes_blocks_through_unchanged(self) -> None:
        assert list(filter_redirects([_BLOCK]))[0] is _BLOCK


# ---------------------------------------------------------------------------
# Block decoder
# ---------------------------------------------------------------------------

class TestDecodeBlock:
    def test_decodes_title_text_and_ids(self) -> None:
        page = decode_block(_BLOCK)
        assert isinstance(page, Page)
        assert page.title == "Alpha & Omega"
        assert page.revision.text == "See [[Beta]]."
        assert page.page_id == 12
        assert page.namespace == 0
        assert page.links == []
        assert page.categories == []

    def test_missing_text_decodes_as_empty(self) -> None:
        page = decode_block(b"<page><title>Stub</title><revision></revision></page>")
        assert page.revision.text == ""
        assert page.page_id is None

    def test_malformed_block_raises(self) -> None:
        with pytest.raises(etree.XMLSyntaxError):
            decode_block(b"<page><title>Broken</page>")

    def test_multi_revision_page_uses_latest_text(self) -> None:
        block = (
            b"<page><title>T</title>"
            b"<revision><text>old [[Old]]</text></revision>"
            b"<revision><text>new [[New]]</text></revision>"
            b"</page>"
        )
        assert decode_block(block).revision.text == "new [[New]]"

    def test_empty_title_is_kept(self) -> None:
        page = decode_block(b"<page><title></title><revision><text>x</text></revision></page>")
        assert page.title == ""
        assert page.revision.text == "x"

    def test_untitled_block_raises(self) -> None:
        with pytest.raises(ValueError, match="no title"):
            decode_block(b"<page><revision><text>x</text></revision></page>")

    def test_external_entities_are_not_resolved(self) -> None:
        block = (
            b'<!DOCTYPE page [<!ENTITY secret SYSTEM "file:///etc/passwd">]>'
            b"<page><title>T</title><revision><text>&secret;</text></revision></page>"
        )
        page = decode_block(block)
        assert "root:" not in page.revision.text


class TestDecodePages:
    def test_malformed_block_is_isolated(self) -> None:
        stats = PipelineStats()
        blocks = [
            b"<page><title>A</title></page>",
            b"<page><title>B</page>",
            b"<page><title>C</title></page>",
        ]
        pages = list(decode_pages(blocks, stats=stats))

        assert [p.title for p in pages] == ["A", "C"]
        assert stats.malformed_blocks == 1

    def test_untitled_block_is_dropped(self) -> None:
        stats = PipelineStats()
        pages = list(decode_pages([b"<page><id>1</id></page>"], stats=stats))
        assert pages == []
        assert stats.untitled_blocks == 1

    def test_drops_are_silent_at_default_levels(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            list(decode_pages([b"<page><title>B</page>"]))
        assert caplog.records == []
