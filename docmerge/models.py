"""Core data models shared across docmerge stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class SourceRepository:
    """A repository identifier (``org/name``) resolved to a local checkout."""

    identifier: str
    root: Path

    @property
    def name(self) -> str:
        return self.identifier.rstrip("/").split("/")[-1]


@dataclass(frozen=True)
class SectionSpec:
    """A documentation section and the paths searched for it, in order."""

    name: str
    paths: Tuple[str, ...]


@dataclass
class DocumentMetadata:
    """Metadata inferred from document content. Every field is optional."""

    title: Optional[str] = None
    date: Optional[str] = None
    author: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    status: Optional[str] = None


@dataclass
class Document:
    """A single markdown document, before or after conflict resolution."""

    filename: str
    relative_path: str
    absolute_path: Optional[Path]
    content: str
    section: str
    source_repo: Optional[str] = None
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    origin: Optional[str] = None
    conflict_resolution: Optional[str] = None
    source_repos: Optional[List[str]] = None

    @property
    def title(self) -> str:
        """Resolved title: the first heading, else the filename without extension."""
        if self.metadata.title:
            return self.metadata.title
        return PurePosixPath(self.filename).stem or self.filename

    @property
    def repositories(self) -> List[str]:
        """Identifiers of every repository that contributed to this document."""
        if self.source_repos:
            return list(self.source_repos)
        if self.source_repo:
            return [self.source_repo]
        return []


@dataclass
class RepositoryExtraction:
    """Outcome of extracting one repository.

    Exactly one of ``documents`` (success, possibly empty) or ``warning``
    (recoverable failure) is meaningful.
    """

    repository: SourceRepository
    documents: Dict[str, List[Document]] = field(default_factory=dict)
    warning: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.warning is None


MergedCollection = Dict[str, List[Document]]


__all__ = [
    "Document",
    "DocumentMetadata",
    "MergedCollection",
    "RepositoryExtraction",
    "SectionSpec",
    "SourceRepository",
]
