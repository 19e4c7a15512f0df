"""Pipeline orchestration: acquire, extract, merge, link, index."""

from __future__ import annotations

import time
from concurrent import futures
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from .acquisition import RepositoryFetcher
from .config import DEFAULT_WORKERS
from .errors import RepositoryNotFound
from .extractor import DocExtractor
from .indexer import IndexBuilder, IndexContext
from .linker import CrossReferenceLinker
from .logging import get_logger
from .merger import DocMerger
from .models import MergedCollection, RepositoryExtraction, SectionSpec, SourceRepository
from .sections import resolve_section_specs


@dataclass
class AggregationResult:
    """Everything a writer needs: the linked collection and the index text."""

    merged: MergedCollection
    index: str
    repositories: List[SourceRepository] = field(default_factory=list)
    extractions: List[RepositoryExtraction] = field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        return [
            f"{extraction.repository.identifier}: {extraction.warning}"
            for extraction in self.extractions
            if not extraction.ok
        ]

    @property
    def document_count(self) -> int:
        return sum(len(documents) for documents in self.merged.values())

    def section_counts(self) -> Dict[str, int]:
        return {section: len(documents) for section, documents in self.merged.items()}


class AggregationPipeline:
    """Coordinates the aggregation stages.

    Acquisition failures propagate immediately. Extraction runs concurrently
    and a failing repository only produces a warning. Merge, link and index
    run in order on the calling thread.
    """

    def __init__(
        self,
        fetcher: RepositoryFetcher | None = None,
        extractor: DocExtractor | None = None,
        merger: DocMerger | None = None,
        linker: CrossReferenceLinker | None = None,
        index_builder: IndexBuilder | None = None,
        *,
        workers: int = DEFAULT_WORKERS,
        timeout: float | None = None,
    ) -> None:
        self.fetcher = fetcher or RepositoryFetcher()
        self.extractor = extractor or DocExtractor()
        self.merger = merger or DocMerger()
        self.linker = linker or CrossReferenceLinker()
        self.index_builder = index_builder or IndexBuilder()
        self.workers = max(1, workers)
        self.timeout = timeout
        self.logger = get_logger("pipeline")

    def run(
        self,
        repos: Sequence[str],
        *,
        sections: Sequence[str] | None = None,
        section_paths: Mapping[str, Sequence[str]] | None = None,
        clone: bool = False,
        workspace: Path | None = None,
        search_root: Path | None = None,
    ) -> AggregationResult:
        """Acquire ``repos`` and aggregate their documentation."""
        self.logger.info("Acquiring %d repositories", len(repos))
        repositories = self.fetcher.acquire(
            repos,
            clone=clone,
            workspace=workspace,
            search_root=search_root,
        )
        return self.aggregate(repositories, sections=sections, section_paths=section_paths)

    def aggregate(
        self,
        repositories: Sequence[SourceRepository],
        *,
        sections: Sequence[str] | None = None,
        section_paths: Mapping[str, Sequence[str]] | None = None,
    ) -> AggregationResult:
        """Run extraction through indexing over already-acquired repositories."""
        specs = resolve_section_specs(sections, section_paths)
        extractions = self.extract_all(repositories, specs)
        succeeded = sum(1 for extraction in extractions if extraction.ok)
        self.logger.info("Extracted documentation from %d/%d repositories", succeeded, len(repositories))

        merged = self.merger.merge(extractions, sections)
        self.logger.info("Merged %d sections", len(merged))

        linked = self.linker.link(merged)

        context = IndexContext(
            repos=[repository.identifier for repository in repositories],
            sections=list(sections or []),
        )
        index = self.index_builder.build(linked, context)
        return AggregationResult(
            merged=linked,
            index=index,
            repositories=list(repositories),
            extractions=extractions,
        )

    def extract_all(
        self,
        repositories: Sequence[SourceRepository],
        specs: Sequence[SectionSpec],
    ) -> List[RepositoryExtraction]:
        """Extract every repository concurrently; results follow input order."""
        if not repositories:
            return []

        deadline: Optional[float] = None
        if self.timeout is not None:
            deadline = time.monotonic() + self.timeout

        executor = futures.ThreadPoolExecutor(
            max_workers=min(self.workers, len(repositories)),
            thread_name_prefix="docmerge-extract",
        )
        outcomes: List[RepositoryExtraction] = []
        timed_out = False
        try:
            submitted = [
                (repository, executor.submit(self.extractor.extract, repository.root, specs))
                for repository in repositories
            ]
            for repository, future in submitted:
                remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
                try:
                    documents = future.result(timeout=remaining)
                except futures.TimeoutError:
                    future.cancel()
                    timed_out = True
                    outcomes.append(
                        self._failed(repository, f"extraction timed out after {self.timeout:g}s")
                    )
                except (RepositoryNotFound, OSError) as exc:
                    outcomes.append(self._failed(repository, str(exc)))
                except Exception as exc:
                    self.logger.debug("Extraction of %s raised", repository.identifier, exc_info=True)
                    outcomes.append(self._failed(repository, f"{type(exc).__name__}: {exc}"))
                else:
                    outcomes.append(RepositoryExtraction(repository=repository, documents=documents))
        finally:
            # A stuck read must not hold up the run once its deadline passed.
            executor.shutdown(wait=not timed_out, cancel_futures=True)
        return outcomes

    def _failed(self, repository: SourceRepository, reason: str) -> RepositoryExtraction:
        self.logger.warning("Failed to extract from %s: %s", repository.identifier, reason)
        return RepositoryExtraction(repository=repository, warning=reason)


__all__ = ["AggregationPipeline", "AggregationResult"]
