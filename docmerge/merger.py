"""Cross-repository merge with per-section conflict resolution."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Collection, Dict, List, Sequence

from .logging import get_logger
from .models import Document, MergedCollection, RepositoryExtraction
from .sections import MERGED, PREFIXED, policy_for

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")
_LEADING_HEADING = re.compile(r"\A\s*#[ \t]+[^\n]*(?:\n|\Z)")

MERGE_NOTE = "> **Note**: This document has been aggregated from multiple repositories."


def sanitize_repo_name(identifier: str) -> str:
    """Replace every non-alphanumeric character with a hyphen."""
    return _NON_ALPHANUMERIC.sub("-", identifier)


def strip_leading_heading(content: str) -> str:
    """Drop the level-1 heading that opens ``content``, if any."""
    return _LEADING_HEADING.sub("", content, count=1)


class DocMerger:
    """Flattens per-repository extractions into one collection keyed by section.

    Colliding filenames are resolved by section name: ``adr`` and ``runbooks``
    keep every document under a repository prefix, every other section folds
    the colliding documents into a single one. Output is deterministic for a
    given input order.
    """

    def __init__(self) -> None:
        self.logger = get_logger("merger")

    def merge(
        self,
        extractions: Sequence[RepositoryExtraction],
        sections: Collection[str] | None = None,
    ) -> MergedCollection:
        section_filter = set(sections) if sections else None
        grouped: Dict[str, List[Document]] = {}

        for extraction in extractions:
            if not extraction.ok:
                continue
            identifier = extraction.repository.identifier
            for section, documents in extraction.documents.items():
                if section_filter is not None and section not in section_filter:
                    continue
                bucket = grouped.setdefault(section, [])
                for document in documents:
                    bucket.append(replace(document, source_repo=identifier))

        merged: MergedCollection = {}
        for section, documents in grouped.items():
            merged[section] = self.resolve_conflicts(section, documents)
        return merged

    def resolve_conflicts(self, section: str, documents: Sequence[Document]) -> List[Document]:
        """Return ``documents`` with unique filenames, applying the section policy."""
        groups: Dict[str, List[Document]] = {}
        for document in documents:
            groups.setdefault(document.filename, []).append(document)

        taken = set(groups)
        policy = policy_for(section)
        resolved: List[Document] = []
        for filename, group in groups.items():
            if len(group) == 1:
                resolved.append(group[0])
                continue

            self.logger.debug(
                "Conflict in %s/%s across %d documents; applying %s strategy",
                section,
                filename,
                len(group),
                policy,
            )
            if policy == PREFIXED:
                for document in group:
                    name = _prefixed_name(document, taken)
                    taken.add(name)
                    resolved.append(
                        replace(document, filename=name, conflict_resolution=PREFIXED)
                    )
            else:
                resolved.append(self._merge_group(section, filename, group))
        return resolved

    def _merge_group(self, section: str, filename: str, group: Sequence[Document]) -> Document:
        first = group[0]
        lines = [f"# {first.title}", "", MERGE_NOTE, ""]
        for index, document in enumerate(group):
            lines.append(f"## From {document.source_repo}")
            lines.append("")
            lines.append(strip_leading_heading(document.content))
            lines.append("")
            if index < len(group) - 1:
                lines.append("---")
                lines.append("")

        return Document(
            filename=filename,
            relative_path=filename,
            absolute_path=None,
            content="\n".join(lines),
            section=section,
            source_repo=None,
            metadata=first.metadata,
            conflict_resolution=MERGED,
            source_repos=[document.source_repo or "" for document in group],
        )


def _prefixed_name(document: Document, taken: Collection[str]) -> str:
    prefix = sanitize_repo_name(document.source_repo or "")
    candidate = f"{prefix}-{document.filename}"
    if candidate not in taken:
        return candidate

    # Same repository contributed the filename twice, or the name already exists.
    if document.origin:
        origin = sanitize_repo_name(document.origin).strip("-")
        candidate = f"{prefix}-{origin}-{document.filename}"
        if candidate not in taken:
            return candidate

    counter = 2
    while f"{prefix}-{counter}-{document.filename}" in taken:
        counter += 1
    return f"{prefix}-{counter}-{document.filename}"


__all__ = ["DocMerger", "MERGE_NOTE", "sanitize_repo_name", "strip_leading_heading"]
