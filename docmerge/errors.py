"""Error taxonomy for docmerge runs."""

from __future__ import annotations


class DocMergeError(RuntimeError):
    """Base class for errors raised by docmerge."""


class ConfigError(DocMergeError):
    """Raised when the configuration file cannot be parsed."""


class RepositoryNotFound(DocMergeError, FileNotFoundError):
    """Raised when a repository root is missing on disk.

    Recoverable: the pipeline records a warning for the repository and
    continues with the remaining ones.
    """

    def __init__(self, root: str) -> None:
        super().__init__(f"Repository directory not found: {root}")
        self.root = root


class AcquisitionError(DocMergeError):
    """Raised when a repository cannot be resolved or cloned.

    Fatal for the whole run: it propagates before any output is written.
    """

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"Failed to acquire {identifier}: {reason}")
        self.identifier = identifier
        self.reason = reason


__all__ = ["AcquisitionError", "ConfigError", "DocMergeError", "RepositoryNotFound"]
