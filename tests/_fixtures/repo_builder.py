"""Helper utilities for constructing temporary source repositories in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from docmerge.models import SourceRepository


class RepoBuilder:
    """Writes files into throwaway repositories rooted under a temp directory."""

    def __init__(self, tmp_path: Path) -> None:
        self.base = tmp_path / "repos"
        self.base.mkdir()

    def write(self, identifier: str, files: Mapping[str, str]) -> SourceRepository:
        """Write `path -> contents` entries into the repository named `identifier`."""
        root = self.base / identifier
        root.mkdir(parents=True, exist_ok=True)
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")
        return SourceRepository(identifier=identifier, root=root)

    def path(self, identifier: str) -> Path:
        """Return the root path a repository would be written to."""
        return self.base / identifier


__all__ = ["RepoBuilder"]
