"""Cross-repository link rewriting for merged collections."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict, Optional, Tuple

from .logging import get_logger
from .models import Document, MergedCollection


@dataclass(frozen=True)
class CrossReference:
    """Where a document lives in the merged layout."""

    section: str
    document: Document

    @property
    def path(self) -> str:
        return f"../{self.section}/{self.document.filename}"


class CrossReferenceIndex:
    """Two-level lookup over a merged collection.

    The primary map is keyed by ``(section, filename)`` and is exact. The
    secondary map is keyed by bare filename and is best effort: when several
    sections hold the same filename, the last one indexed wins.
    """

    def __init__(self) -> None:
        self._by_path: Dict[Tuple[str, str], CrossReference] = {}
        self._by_filename: Dict[str, CrossReference] = {}

    @classmethod
    def build(cls, merged: MergedCollection) -> "CrossReferenceIndex":
        index = cls()
        for section, documents in merged.items():
            for document in documents:
                index.add(section, document)
        return index

    def add(self, section: str, document: Document) -> None:
        reference = CrossReference(section=section, document=document)
        self._by_path[(section, document.filename)] = reference
        self._by_filename[document.filename] = reference

    def get(self, section: str, filename: str) -> Optional[CrossReference]:
        return self._by_path.get((section, filename))

    def get_by_filename(self, filename: str) -> Optional[CrossReference]:
        return self._by_filename.get(filename)

    def resolve(self, path: str) -> Optional[CrossReference]:
        """Resolve a relative link path (anchor already removed)."""
        posix = PurePosixPath(path.replace("\\", "/"))
        filename = posix.name
        if not filename:
            return None
        parent = posix.parent.name
        if parent:
            exact = self.get(parent, filename)
            if exact is not None:
                return exact
        return self.get_by_filename(filename)

    def __len__(self) -> int:
        return len(self._by_path)


class CrossReferenceLinker:
    """Rewrites relative links that cross repository boundaries."""

    _LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

    def __init__(self) -> None:
        self.logger = get_logger("linker")

    def link(self, merged: MergedCollection) -> MergedCollection:
        """Rewrite document content in place and return ``merged``."""
        index = CrossReferenceIndex.build(merged)
        rewritten = 0
        for documents in merged.values():
            for document in documents:
                content, count = self.rewrite(document, index)
                document.content = content
                rewritten += count
        self.logger.debug("Rewrote %d cross-repository links across %d documents", rewritten, len(index))
        return merged

    def rewrite(self, document: Document, index: CrossReferenceIndex) -> tuple[str, int]:
        """Return ``(content, rewritten_count)`` for a single document."""
        count = 0

        def _replace(match: re.Match[str]) -> str:
            nonlocal count
            text, target = match.group(1), match.group(2)
            if target.startswith(("http://", "https://")):
                return match.group(0)
            if target.startswith("#"):
                return match.group(0)

            path, has_anchor, anchor = target.partition("#")
            reference = index.resolve(path)
            if reference is None or _same_repository(document, reference.document):
                return match.group(0)

            count += 1
            new_target = reference.path
            if has_anchor and anchor:
                new_target = f"{new_target}#{anchor}"
            return f"[{text}]({new_target})"

        content = self._LINK_PATTERN.sub(_replace, document.content)
        return content, count


def _same_repository(current: Document, target: Document) -> bool:
    # Merged documents have no single source repository.
    return current.source_repo is not None and current.source_repo == target.source_repo


__all__ = ["CrossReference", "CrossReferenceIndex", "CrossReferenceLinker"]
