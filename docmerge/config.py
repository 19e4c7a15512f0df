"""Configuration loading for docmerge (.docmerge.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError
from .logging import get_logger

CONFIG_FILENAME = ".docmerge.yml"
DEFAULT_OUTPUT = "docs/aggregated"
DEFAULT_WORKSPACE = ".docmerge/repos"
DEFAULT_WORKERS = 4

_CONFLICT_STRATEGIES = {"prefix", "merge", "skip", "error"}

logger = get_logger("config")


@dataclass
class AggregateConfig:
    """Settings from the ``aggregate`` block."""

    repos: List[str] = field(default_factory=list)
    sections: List[str] = field(default_factory=list)
    output: Optional[str] = None
    clone: bool = False
    workspace: Optional[Path] = None
    search_root: Optional[Path] = None
    workers: Optional[int] = None
    timeout: Optional[float] = None
    section_paths: Dict[str, List[str]] = field(default_factory=dict)
    # Recognised but not consulted: conflict policy is chosen by section name.
    conflict_resolution: Optional[str] = None


@dataclass
class DocMergeConfig:
    """Represents the settings defined in .docmerge.yml."""

    root: Path
    aggregate: AggregateConfig = field(default_factory=AggregateConfig)


def load_config(config_path: Path) -> DocMergeConfig:
    """Load configuration from disk, returning defaults when the file is missing."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocMergeConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    block = data.get("aggregate", {})
    if block is None:
        block = {}
    if not isinstance(block, dict):
        raise ConfigError("'aggregate' must be a mapping")

    workspace = _as_str(block.get("workspace"))
    search_root = _as_str(block.get("search_root"))
    strategy = _as_str(block.get("conflict_resolution"))
    if strategy is not None:
        if strategy.lower() not in _CONFLICT_STRATEGIES:
            raise ConfigError(
                f"conflict_resolution must be one of {sorted(_CONFLICT_STRATEGIES)}, got {strategy!r}"
            )
        logger.warning(
            "conflict_resolution=%s is not consulted; adr/runbooks are prefixed and other sections merged",
            strategy,
        )

    workers = _as_int(block.get("workers"))
    if workers is not None and workers < 1:
        raise ConfigError("workers must be a positive integer")
    timeout = _as_float(block.get("timeout"))
    if timeout is not None and timeout <= 0:
        raise ConfigError("timeout must be positive")

    aggregate = AggregateConfig(
        repos=_as_str_list(block.get("repos")),
        sections=_as_str_list(block.get("sections")),
        output=_as_str(block.get("output")),
        clone=_as_bool(block.get("clone")) or False,
        workspace=(root / workspace) if workspace else None,
        search_root=(root / search_root) if search_root else None,
        workers=workers,
        timeout=timeout,
        section_paths=_as_section_paths(block.get("section_paths")),
        conflict_resolution=strategy,
    )
    return DocMergeConfig(root=root, aggregate=aggregate)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_section_paths(value: Any) -> Dict[str, List[str]]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError("section_paths must map section names to path lists")
    result: Dict[str, List[str]] = {}
    for name, paths in value.items():
        entries = _as_str_list(paths)
        if entries:
            result[str(name)] = entries
    return result


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "AggregateConfig",
    "CONFIG_FILENAME",
    "DEFAULT_OUTPUT",
    "DEFAULT_WORKERS",
    "DEFAULT_WORKSPACE",
    "DocMergeConfig",
    "load_config",
]
