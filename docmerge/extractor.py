"""Document extraction from a repository's known documentation locations."""

from __future__ import annotations

import datetime as _dt
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Sequence

import yaml

from .errors import RepositoryNotFound
from .logging import get_logger
from .models import Document, DocumentMetadata, SectionSpec

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "dist",
    "build",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
    ".docmerge",
}

MARKDOWN_SUFFIXES: tuple[str, ...] = (".md", ".markdown", ".mdx")

_FRONTMATTER_PATTERN = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
_TITLE_PATTERN = re.compile(r"^#[ \t]+(.+?)[ \t]*$")
_ADR_STATUS_PATTERN = re.compile(
    r"^##[ \t]*Status[ \t]*\r?\n\s*(?!#)(\S[^\r\n]*)", re.IGNORECASE | re.MULTILINE
)
_ADR_DATE_PATTERN = re.compile(
    r"^##[ \t]*Date[ \t]*\r?\n\s*(?!#)(\S[^\r\n]*)", re.IGNORECASE | re.MULTILINE
)

logger = get_logger("extractor")


def split_frontmatter(content: str) -> tuple[str | None, str]:
    """Return ``(frontmatter, body)``; frontmatter is ``None`` when absent."""
    match = _FRONTMATTER_PATTERN.match(content)
    if not match:
        return None, content
    return match.group(1), content[match.end():]


def extract_metadata(content: str) -> DocumentMetadata:
    """Infer metadata from document content.

    Frontmatter supplies ``date``, ``author``, ``tags`` and ``status``. ADR-style
    ``## Status`` / ``## Date`` blocks in the body override ``status``/``date``.
    Malformed input never raises; affected fields keep their defaults.
    """
    metadata = DocumentMetadata()
    frontmatter, body = split_frontmatter(content)

    metadata.title = _first_heading(body)

    if frontmatter is not None:
        _apply_frontmatter(metadata, frontmatter)

    status_match = _ADR_STATUS_PATTERN.search(body)
    if status_match:
        metadata.status = status_match.group(1).strip()
    date_match = _ADR_DATE_PATTERN.search(body)
    if date_match:
        metadata.date = date_match.group(1).strip()

    return metadata


def _first_heading(markdown: str) -> str | None:
    in_code = False
    for line in markdown.splitlines():
        stripped = line.strip()
        if stripped.startswith("```") or stripped.startswith("~~~"):
            in_code = not in_code
            continue
        if in_code:
            continue
        match = _TITLE_PATTERN.match(line)
        if match:
            return match.group(1).strip()
    return None


def _apply_frontmatter(metadata: DocumentMetadata, text: str) -> None:
    try:
        data = yaml.safe_load(text)
    except (yaml.YAMLError, ValueError) as exc:
        # Impossible timestamps such as 2024-02-30 surface as ValueError.
        logger.debug("Ignoring unparseable frontmatter: %s", exc)
        return
    if not isinstance(data, dict):
        return

    fields = {str(key).lower(): value for key, value in data.items()}
    date = _as_text(fields.get("date"))
    if date:
        metadata.date = date
    author = _as_text(fields.get("author"))
    if author:
        metadata.author = author
    status = _as_text(fields.get("status"))
    if status:
        metadata.status = status
    metadata.tags = _as_tags(fields.get("tags"))


def _as_text(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, (_dt.date, _dt.datetime)):
        return value.isoformat()
    text = str(value).strip()
    return text or None


def _as_tags(value: Any) -> List[str]:
    if isinstance(value, str):
        items: Sequence[Any] = value.strip("[]").split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        return []
    tags: List[str] = []
    for item in items:
        if item is None or isinstance(item, (dict, list)):
            continue
        tag = str(item).strip().strip("'\"")
        if tag:
            tags.append(tag)
    return tags


class DocExtractor:
    """Collects markdown documents from a repository's section directories."""

    def __init__(
        self,
        *,
        suffixes: Sequence[str] = MARKDOWN_SUFFIXES,
        excluded_dirs: Sequence[str] | None = None,
    ) -> None:
        self.suffixes = tuple(suffix.lower() for suffix in suffixes)
        self.excluded_dirs = set(excluded_dirs) if excluded_dirs is not None else set(_EXCLUDED_DIRS)

    def extract(self, root: str | Path, specs: Sequence[SectionSpec]) -> Dict[str, List[Document]]:
        """Return documents found under ``root`` grouped by section name.

        Sections without documents are omitted.
        """
        root_path = Path(root).expanduser()
        if not root_path.is_dir():
            raise RepositoryNotFound(str(root))
        root_path = root_path.resolve()

        extracted: Dict[str, List[Document]] = {}
        for spec in specs:
            documents = self.extract_section(root_path, spec)
            if documents:
                extracted[spec.name] = documents
        logger.debug(
            "Extracted %d documents from %s",
            sum(len(docs) for docs in extracted.values()),
            root_path,
        )
        return extracted

    def extract_section(self, root: Path, spec: SectionSpec) -> List[Document]:
        """Read every document under every existing candidate path of ``spec``."""
        documents: List[Document] = []
        seen: set[Path] = set()
        for candidate in spec.paths:
            base = root / candidate
            if not base.is_dir():
                continue
            for path in self._iter_documents(base):
                resolved = path.resolve()
                # The same file reached through two candidates is emitted once.
                if resolved in seen:
                    continue
                seen.add(resolved)
                content = path.read_text(encoding="utf-8", errors="replace")
                documents.append(
                    Document(
                        filename=path.name,
                        relative_path=path.relative_to(base).as_posix(),
                        absolute_path=resolved,
                        content=content,
                        section=spec.name,
                        metadata=extract_metadata(content),
                        origin=candidate,
                    )
                )
        return documents

    def _iter_documents(self, base: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(base):
            dirnames[:] = sorted(name for name in dirnames if name not in self.excluded_dirs)
            current_dir = Path(dirpath)
            for filename in sorted(filenames):
                if filename.lower().endswith(self.suffixes):
                    yield current_dir / filename


__all__ = ["DocExtractor", "MARKDOWN_SUFFIXES", "extract_metadata", "split_frontmatter"]
