"""CLI tests using typer's CliRunner.

Each test writes a small dump into ``tmp_path`` and points the graph
commands at a database inside the same directory.
"""

from __future__ import annotations

import bz2
import json
from pathlib import Path
from typing import Callable

import pytest
from typer.testing import CliRunner

from cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("dumplinks.config.settings.workspace_dir", tmp_path / "workspace")


@pytest.fixture()
def dump_file(
    tmp_path: Path, page_xml: Callable[..., str], make_dump: Callable[..., bytes]
) -> Path:
    path = tmp_path / "dump.xml"
    path.write_bytes(
        make_dump(
            page_xml("Alpha", "[[Beta]] and [[Gamma]] [[Category:Greek]]", page_id=1),
            page_xml("Old Alpha", "#REDIRECT [[Alpha]]", page_id=2),
            page_xml("Beta", "back to [[Alpha]]", page_id=3),
        )
    )
    return path


def _records(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


# ---------------------------------------------------------------------------
# parse / stats
# ---------------------------------------------------------------------------

class TestParseCommand:
    def test_prints_one_json_record_per_page(self, dump_file: Path) -> None:
        result = runner.invoke(app, ["parse", str(dump_file)])
        assert result.exit_code == 0, result.output

        records = _records(result.output)
        assert [r["title"] for r in records] == ["Alpha", "Beta"]
        assert records[0]["links"] == ["Beta", "Gamma"]
        assert records[0]["categories"] == []

    def test_categories_flag(self, dump_file: Path) -> None:
        result = runner.invoke(app, ["parse", str(dump_file), "--categories"])
        assert result.exit_code == 0, result.output
        assert _records(result.output)[0]["categories"] == ["Greek"]

    def test_limit_stops_early(self, dump_file: Path) -> None:
        result = runner.invoke(app, ["parse", str(dump_file), "--limit", "1"])
        assert result.exit_code == 0, result.output
        assert [r["title"] for r in _records(result.output)] == ["Alpha"]

    def test_reads_bz2_dumps(
        self, tmp_path: Path, page_xml: Callable[..., str], make_dump: Callable[..., bytes]
    ) -> None:
        path = tmp_path / "dump.xml.bz2"
        path.write_bytes(bz2.compress(make_dump(page_xml("Packed", "[[Inside]]"))))

        result = runner.invoke(app, ["parse", str(path)])
        assert result.exit_code == 0, result.output
        assert _records(result.output) == [
            {
                "title": "Packed",
                "page_id": None,
                "namespace": 0,
                "links": ["Inside"],
                "categories": [],
            }
        ]

    def test_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["parse", str(tmp_path / "nope.xml")])
        assert result.exit_code != 0


class TestStatsCommand:
    def test_reports_counts(self, dump_file: Path) -> None:
        result = runner.invoke(app, ["stats", str(dump_file)])
        assert result.exit_code == 0, result.output
        assert "[stats]" in result.output

        counters = {}
        for line in result.output.splitlines():
            parts = line.split()
            if len(parts) == 2 and parts[1].isdigit():
                counters[parts[0]] = int(parts[1])
        assert counters["pages_emitted"] == 2
        assert counters["redirects_skipped"] == 1
        assert counters["links"] == 3


class TestLogLevel:
    def test_invalid_log_level(self, dump_file: Path) -> None:
        result = runner.invoke(app, ["--log-level", "LOUD", "stats", str(dump_file)])
        assert result.exit_code != 0

    def test_debug_log_level_accepted(self, dump_file: Path) -> None:
        result = runner.invoke(app, ["--log-level", "debug", "stats", str(dump_file)])
        assert result.exit_code == 0, result.output


# ---------------------------------------------------------------------------
# ingest / graph
# ---------------------------------------------------------------------------

class TestIngestAndGraph:
    def test_ingest_then_show(self, dump_file: Path, tmp_path: Path) -> None:
        db = tmp_path / "graph.db"
        result = runner.invoke(app, ["ingest", str(dump_file), "--categories", "--db", str(db)])
        assert result.exit_code == 0, result.output
        assert "Stored 2 pages" in result.output
        assert db.exists()

        result = runner.invoke(app, ["graph", "show", "Alpha", "--db", str(db)])
        assert result.exit_code == 0, result.output
        assert "Alpha" in result.output
        assert "[links_to]" in result.output
        assert "Gamma" in result.output
        assert "[in_category]" in result.output

    def test_show_depth_marks_revisited_pages(self, dump_file: Path, tmp_path: Path) -> None:
        db = tmp_path / "graph.db"
        runner.invoke(app, ["ingest", str(dump_file), "--db", str(db)])

        result = runner.invoke(app, ["graph", "show", "Alpha", "--depth", "2", "--db", str(db)])
        assert result.exit_code == 0, result.output
        assert "(seen)" in result.output

    def test_show_unknown_page(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["graph", "show", "Nobody", "--db", str(tmp_path / "g.db")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_list_nodes(self, dump_file: Path, tmp_path: Path) -> None:
        db = tmp_path / "graph.db"
        runner.invoke(app, ["ingest", str(dump_file), "--categories", "--db", str(db)])

        result = runner.invoke(app, ["graph", "list", "--type", "Category", "--db", str(db)])
        assert result.exit_code == 0, result.output
        assert "[Category] Greek" in result.output

        result = runner.invoke(app, ["graph", "list", "--limit", "1", "--db", str(db)])
        assert "[Page] Alpha" in result.output
        assert "more" in result.output

    def test_list_empty_database(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["graph", "list", "--db", str(tmp_path / "empty.db")])
        assert result.exit_code == 0
        assert "No nodes found." in result.output

    def test_ingest_uses_settings_path_by_default(self, dump_file: Path, tmp_path: Path) -> None:
        result = runner.invoke(app, ["ingest", str(dump_file)])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "workspace" / "graph.db").exists()
