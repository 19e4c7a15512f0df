"""Tests for docmerge.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from docmerge.config import AggregateConfig, DocMergeConfig, load_config
from docmerge.errors import ConfigError


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, DocMergeConfig)
    assert config.root == tmp_path.resolve()
    assert config.aggregate == AggregateConfig()


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    (tmp_path / ".docmerge.yml").write_text(
        """
aggregate:
  repos: [org/alpha, org/beta]
  sections:
    - adr
    - api
  output: docs/combined
  clone: true
  workspace: .cache/repos
  search_root: ../checkouts
  workers: 8
  timeout: 90
  section_paths:
    api: [docs/api, openapi]
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)
    aggregate = config.aggregate

    assert aggregate.repos == ["org/alpha", "org/beta"]
    assert aggregate.sections == ["adr", "api"]
    assert aggregate.output == "docs/combined"
    assert aggregate.clone is True
    assert aggregate.workspace == tmp_path.resolve() / ".cache/repos"
    assert aggregate.search_root == tmp_path.resolve() / "../checkouts"
    assert aggregate.workers == 8
    assert aggregate.timeout == pytest.approx(90.0)
    assert aggregate.section_paths == {"api": ["docs/api", "openapi"]}
    assert aggregate.conflict_resolution is None


def test_load_config_accepts_explicit_file(tmp_path: Path) -> None:
    config_file = tmp_path / "custom.yml"
    config_file.write_text("aggregate:\n  repos: org/alpha, org/beta\n", encoding="utf-8")

    config = load_config(config_file)

    assert config.aggregate.repos == ["org/alpha", "org/beta"]


def test_conflict_resolution_is_recorded_but_not_applied(tmp_path: Path) -> None:
    (tmp_path / ".docmerge.yml").write_text(
        "aggregate:\n  conflict_resolution: merge\n", encoding="utf-8"
    )

    config = load_config(tmp_path)

    assert config.aggregate.conflict_resolution == "merge"


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "aggregate: [1, 2]\n",
        "aggregate:\n  conflict_resolution: shuffle\n",
        "aggregate:\n  workers: 0\n",
        "aggregate:\n  section_paths: [docs]\n",
        "aggregate: {repos: [unclosed\n",
    ],
)
def test_load_config_rejects_invalid_content(tmp_path: Path, content: str) -> None:
    (tmp_path / ".docmerge.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".docmerge.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).aggregate == AggregateConfig()
