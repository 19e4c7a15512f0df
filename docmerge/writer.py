"""Persist an aggregation result to disk."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List

from .indexer import INDEX_FILENAME
from .logging import get_logger
from .pipeline import AggregationResult


class CollectionWriter:
    """Writes ``INDEX.md`` plus one file per document at ``{section}/{filename}``."""

    def __init__(self) -> None:
        self.logger = get_logger("writer")

    def write(self, result: AggregationResult, output_root: Path, *, clean: bool = False) -> List[Path]:
        output_root = Path(output_root).expanduser()
        if clean and output_root.exists():
            self.logger.info("Cleaning output directory %s", output_root)
            _empty_dir(output_root)
        output_root.mkdir(parents=True, exist_ok=True)

        written: List[Path] = []
        index_path = output_root / INDEX_FILENAME
        index_path.write_text(result.index, encoding="utf-8")
        written.append(index_path)

        for section, documents in result.merged.items():
            section_dir = output_root / section
            section_dir.mkdir(parents=True, exist_ok=True)
            for document in documents:
                target = section_dir / Path(document.filename).name
                target.write_text(document.content, encoding="utf-8")
                written.append(target)

        self.logger.info("Wrote %d files to %s", len(written), output_root)
        return written


def _empty_dir(path: Path) -> None:
    for child in path.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


__all__ = ["CollectionWriter"]
