"""Unified index rendering for merged documentation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Callable, Dict, List, Sequence

from .models import Document, MergedCollection

INDEX_FILENAME = "INDEX.md"

LEGEND: tuple[str, ...] = (
    "- **prefixed**: Document filename prefixed with repo name to avoid conflicts",
    "- **merged**: Content from multiple repos merged into single document",
)


@dataclass
class IndexContext:
    """Run context shown in the index header."""

    repos: Sequence[str] = field(default_factory=list)
    sections: Sequence[str] = field(default_factory=list)


class IndexBuilder:
    """Renders the navigational ``INDEX.md`` for a merged collection."""

    TITLE = "# Aggregated Documentation Index"
    BANNER = "> Auto-generated by docmerge"

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))

    def build(self, merged: MergedCollection, context: IndexContext | None = None) -> str:
        context = context or IndexContext()
        lines: List[str] = [
            self.TITLE,
            "",
            self.BANNER,
            "",
            f"**Last Updated**: {self._clock().date().isoformat()}",
            "",
        ]

        total = sum(len(documents) for documents in merged.values())
        lines.extend(["## Summary", ""])
        lines.append(f"- **Repositories**: {len(context.repos)}")
        lines.append(f"- **Sections**: {len(merged)}")
        lines.append(f"- **Documents**: {total}")
        if context.sections:
            lines.append(f"- **Section filter**: {', '.join(context.sections)}")
        lines.append("")

        lines.extend(["## Source Repositories", ""])
        for repo in context.repos:
            lines.append(f"- {repo}")
        lines.append("")

        lines.extend(["## Documentation Sections", ""])
        for section in sorted(merged):
            lines.extend(self._render_section(section, merged[section]))

        lines.extend(["## Legend", ""])
        lines.extend(LEGEND)
        lines.append("")
        return "\n".join(lines)

    def _render_section(self, section: str, documents: Sequence[Document]) -> List[str]:
        lines = [f"### {section[:1].upper()}{section[1:]}", ""]

        by_repo: Dict[str, List[Document]] = {}
        for document in documents:
            for repo in document.repositories:
                by_repo.setdefault(repo, []).append(document)

        for repo, grouped in by_repo.items():
            lines.append(f"**{repo}**:")
            lines.append("")
            for document in sorted(grouped, key=lambda doc: doc.filename):
                lines.append(f"- [{document.title}]({section}/{document.filename})")
                if document.metadata.status:
                    lines.append(f"  - Status: {document.metadata.status}")
                if document.conflict_resolution:
                    lines.append(f"  - *({document.conflict_resolution})*")
            lines.append("")
        return lines


__all__ = ["INDEX_FILENAME", "IndexBuilder", "IndexContext", "LEGEND"]
