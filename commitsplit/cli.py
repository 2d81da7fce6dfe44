"""CLI entrypoints for commitsplit commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Tuple

from .config import CommitSplitConfig, ConfigError, load_config
from .logging import configure_logging
from .orchestrator import Orchestrator
from .report import render_markdown
from .repos import CyclicDependencyError, RepositoryManager, load_repository_config


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


def _add_workspace_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .commitsplit.yml or the directory containing it (defaults to current directory).",
    )
    parser.add_argument(
        "--repos",
        default=None,
        help="Repository declaration file (JSON, TOML or YAML); overrides the configured one.",
    )


def _add_selection_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "commit_range",
        help="Commit range to analyse, e.g. 'main..@'.",
    )
    parser.add_argument(
        "-r",
        "--repository",
        dest="repositories",
        action="append",
        default=[],
        help="Repository to include; repeat for several (defaults to all declared).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="commitsplit",
        description="Propose coordinated commit divisions across related repositories.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Summarise changes and detected dependencies per repository.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_workspace_options(analyze_parser)
    _add_selection_options(analyze_parser)

    propose_parser = subparsers.add_parser(
        "propose",
        help="Propose commit groups spanning the selected repositories.",
    )
    _add_verbose_option(propose_parser, suppress_default=True)
    _add_workspace_options(propose_parser)
    _add_selection_options(propose_parser)
    propose_parser.add_argument(
        "--format",
        choices=("json", "markdown"),
        default="json",
        help="Output format for the proposal.",
    )

    order_parser = subparsers.add_parser(
        "order",
        help="Print repositories in dependency order.",
    )
    _add_verbose_option(order_parser, suppress_default=True)
    _add_workspace_options(order_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the JSON-RPC service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_workspace_options(serve_parser)
    serve_parser.add_argument("--host", default=None, help="Bind address (overrides config).")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port (overrides config).")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for commitsplit commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        settings, manager = _load_workspace(args)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "serve":
        from .service import run_service

        configure_logging(
            verbose=bool(args.verbose), log_file=settings.service.log_file, service=True
        )
        try:
            run_service(
                host=args.host or settings.service.host,
                port=args.port or settings.service.port,
                config_path=Path(args.config),
            )
        except RuntimeError as exc:
            parser.exit(1, f"{exc}\n")
        return

    if args.command == "order":
        try:
            order = manager.dependency_order()
        except CyclicDependencyError as exc:
            parser.exit(1, f"{exc}\n")
        for name in order:
            print(name)
        return

    orchestrator = Orchestrator()
    names = list(getattr(args, "repositories", []))
    if args.command == "analyze":
        try:
            summary = orchestrator.summarize(manager, names, args.commit_range, settings.analysis)
        except Exception as exc:  # pragma: no cover
            parser.exit(1, f"commitsplit analyze failed: {exc}\nRun with --verbose for more details.\n")
        _print_json(summary.to_dict())
    elif args.command == "propose":
        try:
            proposal = orchestrator.analyze(manager, names, args.commit_range, settings.analysis)
        except Exception as exc:  # pragma: no cover
            parser.exit(1, f"commitsplit propose failed: {exc}\nRun with --verbose for more details.\n")
        if args.format == "markdown":
            sys.stdout.write(render_markdown(proposal))
        else:
            _print_json(proposal.to_dict())
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _load_workspace(args: argparse.Namespace) -> Tuple[CommitSplitConfig, RepositoryManager]:
    settings = load_config(Path(args.config))
    repos_path = Path(args.repos) if args.repos else settings.repos_config_path
    return settings, load_repository_config(repos_path)


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main(sys.argv[1:])
