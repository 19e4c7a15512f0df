"""Repository acquisition: map identifiers to local checkouts."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from .errors import AcquisitionError
from .logging import get_logger
from .models import SourceRepository

DEFAULT_CLONE_URL = "https://github.com/{identifier}.git"


class RepositoryFetcher:
    """Resolves ``org/name`` identifiers to local repository roots.

    Local mode looks for ``{search_root}/{name}``; a missing directory
    surfaces later as a per-repository extraction warning. Clone mode runs a
    shallow ``git clone`` into a workspace and raises
    :class:`AcquisitionError` on the first failure. Both modes refuse two
    identifiers that share a repository name, since they would share a
    checkout directory.
    """

    def __init__(
        self,
        runner: Callable[..., str] | None = None,
        *,
        clone_url: str = DEFAULT_CLONE_URL,
    ) -> None:
        self._runner = runner or self._default_runner
        self.clone_url = clone_url
        self.logger = get_logger("acquisition")

    def acquire(
        self,
        identifiers: Sequence[str],
        *,
        clone: bool = False,
        workspace: Path | None = None,
        search_root: Path | None = None,
    ) -> List[SourceRepository]:
        if clone:
            if workspace is None:
                raise AcquisitionError(", ".join(identifiers), "clone mode requires a workspace directory")
            return self.clone(identifiers, workspace)
        return self.resolve_local(identifiers, search_root or Path.cwd().parent)

    def resolve_local(self, identifiers: Iterable[str], search_root: Path) -> List[SourceRepository]:
        root = Path(search_root).expanduser()
        targets = _checkout_targets(identifiers, root)
        return [SourceRepository(identifier=identifier, root=target) for identifier, target in targets]

    def clone(self, identifiers: Iterable[str], workspace: Path) -> List[SourceRepository]:
        workspace = Path(workspace).expanduser()
        try:
            workspace.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise AcquisitionError(str(workspace), f"cannot create workspace: {exc}") from exc

        identifiers = list(identifiers)
        for identifier in identifiers:
            _validate_identifier(identifier)
        targets = _checkout_targets(identifiers, workspace)

        repositories: List[SourceRepository] = []
        for identifier, target in targets:
            if target.exists():
                self.logger.info("Repository already exists: %s", target)
                repositories.append(SourceRepository(identifier=identifier, root=target))
                continue

            url = self.clone_url.format(identifier=identifier)
            self.logger.info("Cloning %s", identifier)
            try:
                self._runner(
                    ["git", "clone", "--depth", "1", url, str(target)],
                    cwd=workspace,
                    capture_output=True,
                )
            except (subprocess.CalledProcessError, OSError) as exc:
                raise AcquisitionError(identifier, _describe_failure(exc)) from exc
            repositories.append(SourceRepository(identifier=identifier, root=target))
        return repositories

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            env=env,
            check=True,
            text=True,
            capture_output=capture_output,
        )
        if capture_output:
            return completed.stdout
        return ""


def _repo_name(identifier: str) -> str:
    return identifier.rstrip("/").split("/")[-1]


def _checkout_targets(identifiers: Iterable[str], base: Path) -> List[Tuple[str, Path]]:
    """Pair each identifier with its checkout directory, refusing shared directories."""
    targets: List[Tuple[str, Path]] = []
    claimed: Dict[Path, str] = {}
    for identifier in identifiers:
        target = base / _repo_name(identifier)
        if target in claimed:
            raise AcquisitionError(
                identifier,
                f"checkout directory {target} is already used by {claimed[target]}",
            )
        claimed[target] = identifier
        targets.append((identifier, target))
    return targets


def _validate_identifier(identifier: str) -> None:
    if "/" not in identifier or identifier.startswith((".", "/")):
        raise AcquisitionError(identifier, "invalid repository format, expected org/repo")


def _describe_failure(exc: Exception) -> str:
    if isinstance(exc, subprocess.CalledProcessError):
        stderr = (exc.stderr or "").strip() if isinstance(exc.stderr, str) else ""
        return stderr or f"git exited with status {exc.returncode}"
    return str(exc)


__all__ = ["DEFAULT_CLONE_URL", "RepositoryFetcher"]
