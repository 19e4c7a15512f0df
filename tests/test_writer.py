"""Tests for docmerge.writer."""

from __future__ import annotations

from pathlib import Path

from docmerge.models import Document
from docmerge.pipeline import AggregationResult
from docmerge.writer import CollectionWriter


def _result() -> AggregationResult:
    document = Document(
        filename="a-svc-ADR-1.md",
        relative_path="ADR-1.md",
        absolute_path=None,
        content="# Decision\n",
        section="adr",
        source_repo="a/svc",
        conflict_resolution="prefixed",
    )
    return AggregationResult(merged={"adr": [document]}, index="# Index\n")


def test_writer_lays_out_sections_and_index(tmp_path: Path) -> None:
    output = tmp_path / "out"

    written = CollectionWriter().write(_result(), output)

    assert (output / "INDEX.md").read_text(encoding="utf-8") == "# Index\n"
    assert (output / "adr" / "a-svc-ADR-1.md").read_text(encoding="utf-8") == "# Decision\n"
    assert written == [output / "INDEX.md", output / "adr" / "a-svc-ADR-1.md"]


def test_writer_clean_removes_stale_files(tmp_path: Path) -> None:
    output = tmp_path / "out"
    (output / "old").mkdir(parents=True)
    (output / "old" / "stale.md").write_text("stale", encoding="utf-8")
    (output / "notes.txt").write_text("stale", encoding="utf-8")

    CollectionWriter().write(_result(), output, clean=True)

    assert not (output / "old").exists()
    assert not (output / "notes.txt").exists()
    assert (output / "INDEX.md").exists()


def test_writer_keeps_existing_files_without_clean(tmp_path: Path) -> None:
    output = tmp_path / "out"
    output.mkdir()
    (output / "keep.md").write_text("keep", encoding="utf-8")

    CollectionWriter().write(_result(), output)

    assert (output / "keep.md").exists()
