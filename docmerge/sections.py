"""Known documentation sections and their candidate search paths."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence

from .models import SectionSpec

DEFAULT_SECTION_SPECS: tuple[SectionSpec, ...] = (
    SectionSpec("adr", ("docs/architecture/adr", "docs/adr", "adr", ".design/adr")),
    SectionSpec("api", ("docs/api", "api", "docs/endpoints")),
    SectionSpec("runbooks", ("docs/runbooks", "runbooks", "docs/operations")),
    SectionSpec("features", ("docs/features", "features", "docs/requirements")),
    SectionSpec("architecture", ("docs/architecture", "architecture", "docs/design", ".design")),
    SectionSpec("database", ("docs/database", "database", "docs/schema")),
    SectionSpec("security", ("docs/security", "security")),
    SectionSpec("deployment", ("docs/deployment", "deployment", "docs/deploy")),
)

DEFAULT_SECTIONS: tuple[str, ...] = tuple(spec.name for spec in DEFAULT_SECTION_SPECS)

# Sections whose colliding documents are kept side by side under a repo prefix.
# Every other section concatenates colliding documents into one.
PREFIXED_SECTIONS: tuple[str, ...] = ("adr", "runbooks")

PREFIXED = "prefixed"
MERGED = "merged"


def fallback_paths(name: str) -> tuple[str, ...]:
    """Candidate paths for a section missing from the known table."""
    return (f"docs/{name}", name)


def resolve_section_specs(
    sections: Sequence[str] | None = None,
    overrides: Mapping[str, Sequence[str]] | None = None,
) -> List[SectionSpec]:
    """Return section specs for ``sections`` (all known sections when empty).

    ``overrides`` replaces the candidate paths of individual sections and may
    introduce new ones.
    """
    known: Dict[str, SectionSpec] = {spec.name: spec for spec in DEFAULT_SECTION_SPECS}
    for name, paths in (overrides or {}).items():
        known[name] = SectionSpec(name, tuple(paths))

    names: Iterable[str] = sections if sections else list(known)
    specs: List[SectionSpec] = []
    seen: set[str] = set()
    for name in names:
        if name in seen:
            continue
        seen.add(name)
        specs.append(known.get(name) or SectionSpec(name, fallback_paths(name)))
    return specs


def policy_for(section: str) -> str:
    """Conflict policy applied to ``section``, chosen by section name."""
    return PREFIXED if section in PREFIXED_SECTIONS else MERGED


__all__ = [
    "DEFAULT_SECTIONS",
    "DEFAULT_SECTION_SPECS",
    "MERGED",
    "PREFIXED",
    "PREFIXED_SECTIONS",
    "fallback_paths",
    "policy_for",
    "resolve_section_specs",
]
