"""CLI entrypoints for headroom commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict

from .ci import EXIT_POLICY, EXIT_RUNTIME, CIReport
from .config import ConfigError, HeadroomConfig, load_config
from .dispatcher import APPLY, PREVIEW
from .errors import HeadroomError, PolicyError
from .logging import configure_logging, get_logger
from .orchestrator import Orchestrator


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


def _add_project_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--root",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a .headroom.yml file (defaults to <root>/.headroom.yml).",
    )
    parser.add_argument(
        "--budget",
        type=int,
        default=None,
        help="Token budget used to compute headroom (overrides config).",
    )


def _add_report_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--ci",
        action="store_true",
        help="CI mode: exit with status 8 when findings are present; apply actions only preview unless --force.",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Allow apply actions to write files in CI mode.",
    )
    parser.add_argument(
        "--json-report",
        default=None,
        help="Write a JSON findings report to this file.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="headroom",
        description="Measure context-budget usage and tune ignore and settings files.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write debug logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Report estimated token costs of ignored and unignored paths.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_project_options(analyze_parser)
    _add_report_options(analyze_parser)
    analyze_parser.add_argument(
        "--deep",
        action="store_true",
        help="Print the full report instead of the summary.",
    )

    run_parser = subparsers.add_parser(
        "run",
        help="Run a non-interactive action by ID (see `headroom actions`).",
    )
    _add_verbose_option(run_parser, suppress_default=True)
    _add_project_options(run_parser)
    _add_report_options(run_parser)
    run_parser.add_argument("action", help="Action ID, e.g. suggest.ignores or apply.settings.")
    run_parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Preview apply actions without writing any file.",
    )

    subparsers.add_parser("actions", help="List available action IDs.")

    dispatch_parser = subparsers.add_parser(
        "dispatch",
        help="Run a single verb against a target file.",
    )
    _add_verbose_option(dispatch_parser, suppress_default=True)
    _add_project_options(dispatch_parser)
    dispatch_parser.add_argument("target", help="Target file relative to the root.")
    dispatch_parser.add_argument("verb", help="Verb name, e.g. deduplicate_patterns.")
    dispatch_parser.add_argument(
        "values",
        nargs="*",
        help="Patterns passed to the verb (append_recommended_patterns, add_permissions_deny).",
    )
    dispatch_parser.add_argument(
        "--apply",
        action="store_true",
        help="Persist the change; without this flag only a preview is computed.",
    )
    dispatch_parser.add_argument(
        "--match-threshold",
        type=int,
        default=None,
        help="File-count threshold for tighten_auto_include proposals.",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for headroom commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    if args.command == "actions":
        for action_id in Orchestrator.list_actions():
            print(action_id)
        return

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return

    try:
        config = _load_config(args)
    except ConfigError as exc:
        parser.exit(EXIT_POLICY, f"headroom: invalid configuration: {exc}\n")

    report = CIReport() if (getattr(args, "ci", False) or getattr(args, "json_report", None)) else None
    orchestrator = Orchestrator(config.root, config, report=report)

    try:
        payload = _execute(args, orchestrator)
    except ValueError as exc:
        parser.exit(2, f"headroom: {exc}\n")
    except PolicyError as exc:
        parser.exit(EXIT_POLICY, f"headroom: {exc}\n")
    except (HeadroomError, OSError) as exc:
        parser.exit(
            EXIT_RUNTIME,
            f"headroom {args.command} failed: {exc}\nRun with --verbose for more details.\n",
        )

    print(json.dumps(payload, indent=2, ensure_ascii=False))

    if report is not None:
        if args.json_report:
            report.write(Path(args.json_report))
        if args.ci:
            sys.exit(report.exit_code())


def _load_config(args: argparse.Namespace) -> HeadroomConfig:
    root = Path(args.root).expanduser().resolve()
    config_path = Path(args.config).expanduser() if args.config else root
    config = load_config(config_path)
    # --root wins over the directory the config file happens to live in.
    config.root = root
    if args.budget is not None:
        config.budget = args.budget
    return config


def _execute(args: argparse.Namespace, orchestrator: Orchestrator) -> Dict[str, Any]:
    if args.command == "analyze":
        report = orchestrator.analyze()
        return report.to_dict() if args.deep else report.summary()

    if args.command == "run":
        dry_run = bool(args.dry_run)
        if args.ci and not args.force and not dry_run:
            get_logger("cli").info("CI mode: %s runs as a preview; use --force to write", args.action)
            dry_run = True
        return orchestrator.run(args.action, dry_run=dry_run).to_dict()

    if args.command == "dispatch":
        verb_args: Dict[str, Any] = {}
        if args.values:
            verb_args["patterns"] = list(args.values)
        if args.match_threshold is not None:
            verb_args["match_threshold"] = args.match_threshold
        result = orchestrator.dispatcher.dispatch(
            args.target,
            args.verb,
            verb_args,
            mode=APPLY if args.apply else PREVIEW,
        )
        return result.to_dict()

    raise ValueError(f"Unknown command: {args.command}")  # pragma: no cover - argparse enforces choices


if __name__ == "__main__":
    main(sys.argv[1:])
