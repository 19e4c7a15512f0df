"""CLI entrypoints for docmerge commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import DEFAULT_OUTPUT, DEFAULT_WORKERS, DEFAULT_WORKSPACE, load_config
from .errors import AcquisitionError, ConfigError, DocMergeError
from .logging import configure_logging
from .pipeline import AggregationPipeline
from .writer import CollectionWriter


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docmerge",
        description="Aggregate documentation from multiple repositories into one cross-linked collection.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write detailed logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    aggregate_parser = subparsers.add_parser(
        "aggregate",
        help="Aggregate documentation from multiple repositories.",
    )
    _add_verbose_option(aggregate_parser, suppress_default=True)
    aggregate_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Working directory holding .docmerge.yml (defaults to current directory).",
    )
    aggregate_parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to the configuration file (defaults to <path>/.docmerge.yml).",
    )
    aggregate_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help=f"Output directory for aggregated docs (defaults to {DEFAULT_OUTPUT}).",
    )
    aggregate_parser.add_argument(
        "-r",
        "--repos",
        default=None,
        help="Comma-separated list of repos (e.g. org/repo1,org/repo2).",
    )
    aggregate_parser.add_argument(
        "-s",
        "--sections",
        default=None,
        help="Comma-separated sections to aggregate (e.g. adr,api,runbooks).",
    )
    aggregate_parser.add_argument(
        "--clone",
        action="store_true",
        help="Clone repos into the workspace when not present locally.",
    )
    aggregate_parser.add_argument(
        "--clean",
        action="store_true",
        help="Empty the output directory before writing.",
    )
    aggregate_parser.add_argument(
        "--search-root",
        default=None,
        help="Directory holding local checkouts (defaults to the parent of <path>).",
    )
    aggregate_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help=f"Concurrent repository extractions (defaults to {DEFAULT_WORKERS}).",
    )
    aggregate_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds allowed for extracting all repositories.",
    )
    aggregate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the index instead of writing files.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service (requires the 'service' extra).",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind.")
    serve_parser.add_argument(
        "--output-root",
        type=Path,
        default=None,
        help="Directory that /aggregate requests may write into (writing is disabled without it).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docmerge commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "aggregate":
        _run_aggregate(parser, args)
    elif args.command == "serve":
        try:
            from .service import run_service
        except ImportError as exc:
            parser.exit(1, f"Service mode requires `pip install docmerge[service]`: {exc}\n")

        try:
            run_service(host=args.host, port=args.port, output_root=args.output_root)
        except RuntimeError as exc:
            parser.exit(1, f"{exc}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_aggregate(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    base = Path(args.path).expanduser().resolve()
    try:
        config = load_config(Path(args.config).expanduser() if args.config else base)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")
    settings = config.aggregate

    repos = _split(args.repos) or settings.repos
    if not repos:
        parser.exit(
            1,
            "No repositories specified. Use --repos or configure aggregate.repos in .docmerge.yml\n",
        )
    sections = _split(args.sections) or settings.sections
    output_path = base / (args.output or settings.output or DEFAULT_OUTPUT)
    search_root = (
        Path(args.search_root).expanduser().resolve()
        if args.search_root
        else settings.search_root or base.parent
    )

    pipeline = AggregationPipeline(
        workers=args.workers or settings.workers or DEFAULT_WORKERS,
        timeout=args.timeout if args.timeout is not None else settings.timeout,
    )

    print(f"Repositories: {len(repos)} ({', '.join(repos)})")
    if sections:
        print(f"Sections: {', '.join(sections)}")

    try:
        result = pipeline.run(
            repos,
            sections=sections,
            section_paths=settings.section_paths,
            clone=bool(args.clone or settings.clone),
            workspace=settings.workspace or base / DEFAULT_WORKSPACE,
            search_root=search_root,
        )
    except AcquisitionError as exc:
        parser.exit(1, f"{exc}\n")
    except DocMergeError as exc:
        parser.exit(1, f"docmerge aggregate failed: {exc}\nRun with --verbose for more details.\n")

    for warning in result.warnings:
        print(f"Warning: failed to extract from {warning}")

    if args.dry_run:
        print(result.index)
        return

    try:
        CollectionWriter().write(result, output_path, clean=bool(args.clean))
    except OSError as exc:
        parser.exit(1, f"Failed to write aggregated documentation: {exc}\n")

    print(f"Aggregated documentation written to {_relativize(output_path)}")
    print(f"Sections: {len(result.merged)}")
    print(f"Documents: {result.document_count}")


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
