"""Tests for docmerge.indexer."""

from __future__ import annotations

import re

from docmerge.indexer import LEGEND, IndexBuilder, IndexContext
from docmerge.models import Document, DocumentMetadata


def _doc(section, filename, repo=None, *, title=None, status=None, resolution=None, repos=None):
    return Document(
        filename=filename,
        relative_path=filename,
        absolute_path=None,
        content=f"# {title or filename}\n",
        section=section,
        source_repo=repo,
        metadata=DocumentMetadata(title=title, status=status),
        conflict_resolution=resolution,
        source_repos=repos,
    )


def _sample_collection():
    return {
        "runbooks": [
            _doc("runbooks", "restart.md", "z/ops", title="Restart"),
        ],
        "adr": [
            _doc("adr", "b-svc-ADR-1.md", "b/svc", title="Use Kafka", status="Accepted", resolution="prefixed"),
            _doc("adr", "a-svc-ADR-1.md", "a/svc", title="Use Postgres", resolution="prefixed"),
            _doc("adr", "ADR-0.md", "b/svc", title="Record decisions"),
        ],
        "api": [
            _doc("api", "overview.md", title="Overview", resolution="merged", repos=["a/svc", "b/svc"]),
        ],
    }


def test_index_header_and_summary(fixed_clock) -> None:
    merged = _sample_collection()
    context = IndexContext(repos=["a/svc", "b/svc", "z/ops"], sections=["adr", "api", "runbooks"])

    index = IndexBuilder(clock=fixed_clock).build(merged, context)

    assert index.startswith("# Aggregated Documentation Index\n")
    assert "**Last Updated**: 2024-05-01" in index
    assert "- **Repositories**: 3" in index
    assert "- **Sections**: 3" in index
    assert "- **Documents**: 5" in index
    assert "- **Section filter**: adr, api, runbooks" in index
    assert "## Source Repositories\n\n- a/svc\n- b/svc\n- z/ops\n" in index


def test_index_document_count_matches_collection(fixed_clock) -> None:
    merged = _sample_collection()
    index = IndexBuilder(clock=fixed_clock).build(merged, IndexContext())

    total = sum(len(docs) for docs in merged.values())
    assert f"- **Documents**: {total}" in index


def test_index_sections_sorted_lexicographically(fixed_clock) -> None:
    merged = _sample_collection()
    index = IndexBuilder(clock=fixed_clock).build(merged, IndexContext())

    headings = re.findall(r"^### (.+)$", index, flags=re.MULTILINE)
    assert headings == ["Adr", "Api", "Runbooks"]
    assert [heading.lower() for heading in headings] == sorted(merged)


def test_index_groups_by_repository_in_first_appearance_order(fixed_clock) -> None:
    index = IndexBuilder(clock=fixed_clock).build(_sample_collection(), IndexContext())

    adr_block = index.split("### Adr", 1)[1].split("### Api", 1)[0]
    assert adr_block.index("**b/svc**:") < adr_block.index("**a/svc**:")

    b_group = adr_block.split("**b/svc**:", 1)[1].split("**a/svc**:", 1)[0]
    # Within a repository group entries are sorted by filename.
    assert b_group.index("(adr/ADR-0.md)") < b_group.index("(adr/b-svc-ADR-1.md)")
    assert "- [Use Kafka](adr/b-svc-ADR-1.md)\n  - Status: Accepted\n  - *(prefixed)*" in b_group


def test_merged_documents_listed_under_each_contributor(fixed_clock) -> None:
    index = IndexBuilder(clock=fixed_clock).build(_sample_collection(), IndexContext())

    api_block = index.split("### Api", 1)[1].split("### Runbooks", 1)[0]
    assert api_block.count("- [Overview](api/overview.md)") == 2
    assert api_block.count("*(merged)*") == 2
    assert api_block.index("**a/svc**:") < api_block.index("**b/svc**:")


def test_index_title_falls_back_to_filename(fixed_clock) -> None:
    merged = {"features": [_doc("features", "search-v2.md", "a/svc")]}
    index = IndexBuilder(clock=fixed_clock).build(merged, IndexContext(repos=["a/svc"]))

    assert "- [search-v2](features/search-v2.md)" in index


def test_empty_collection_renders_near_empty_index(fixed_clock) -> None:
    index = IndexBuilder(clock=fixed_clock).build({}, IndexContext())

    assert "- **Documents**: 0" in index
    assert "- **Sections**: 0" in index
    assert "###" not in index
    assert index.rstrip("\n").endswith(LEGEND[-1])


def test_index_does_not_mutate_collection(fixed_clock) -> None:
    merged = _sample_collection()
    before = {section: [(doc.filename, doc.content) for doc in docs] for section, docs in merged.items()}
    order_before = [doc.filename for doc in merged["adr"]]

    IndexBuilder(clock=fixed_clock).build(merged, IndexContext())

    after = {section: [(doc.filename, doc.content) for doc in docs] for section, docs in merged.items()}
    assert before == after
    assert [doc.filename for doc in merged["adr"]] == order_before


def test_index_is_deterministic(fixed_clock) -> None:
    builder = IndexBuilder(clock=fixed_clock)
    context = IndexContext(repos=["a/svc", "b/svc"])
    assert builder.build(_sample_collection(), context) == builder.build(_sample_collection(), context)
