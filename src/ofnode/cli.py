"""Command-line interface for ofnode."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable
from pathlib import Path

from ofnode import __version__
from ofnode.config import (
    ConfigurationError,
    ConfigValidationError,
    ProjectOptions,
    load_options,
    resolve_config,
)
from ofnode.project import OpenFaasNodeProject

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ofnode",
        description="ofnode -- scaffold an OpenFaaS Node.js function project.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress (-v) or every planning decision (-vv).",
    )

    subparsers = parser.add_subparsers(dest="command")

    new_parser = subparsers.add_parser("new", help="Generate the project files.")
    _add_project_arguments(new_parser)

    plan_parser = subparsers.add_parser(
        "plan", help="Show what 'new' would write or skip, without writing."
    )
    _add_project_arguments(plan_parser)

    init_parser = subparsers.add_parser("init", help="Create a starter config file.")
    init_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path for the config file (default: ./ofnode.yaml).",
    )
    init_parser.add_argument(
        "--name",
        type=str,
        default=None,
        help="Project name (default: name of the current directory).",
    )

    return parser


def _add_project_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "outdir",
        type=Path,
        help="Output root of the generated project.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file; command-line options override its values.",
    )
    parser.add_argument(
        "--name",
        type=str,
        default=None,
        help="Project name (default: name of the output directory).",
    )
    parser.add_argument(
        "--func-dir",
        type=str,
        default=None,
        help="Function subdirectory (default: function).",
    )
    parser.add_argument(
        "--handler",
        type=str,
        default=None,
        help="Handler file name (default: handler.js).",
    )
    parser.add_argument(
        "--dep",
        action="append",
        default=None,
        metavar="SPEC",
        help="Runtime dependency, e.g. koa@2.1.3. Repeatable.",
    )
    parser.add_argument(
        "--dev-dep",
        action="append",
        default=None,
        metavar="SPEC",
        help="Development dependency. Repeatable.",
    )
    parser.add_argument(
        "--peer-dep",
        action="append",
        default=None,
        metavar="SPEC",
        help="Peer dependency. Repeatable.",
    )
    parser.add_argument(
        "--watchdog-tag",
        type=str,
        default=None,
        help="of-watchdog image tag for the Dockerfile (default: 0.7.2).",
    )
    parser.add_argument(
        "--merge-deps",
        action="store_true",
        default=None,
        help="Merge dependencies into an existing function package.json.",
    )


def _build_project(args: argparse.Namespace) -> OpenFaasNodeProject:
    outdir: Path = args.outdir
    options = load_options(args.config) if args.config is not None else ProjectOptions()
    options = options.merged(
        name=args.name,
        func_dir=args.func_dir,
        func_handler=args.handler,
        function_deps=_as_tuple(args.dep),
        function_dev_deps=_as_tuple(args.dev_dep),
        function_peer_deps=_as_tuple(args.peer_dep),
        watchdog_image_tag=args.watchdog_tag,
        merge_function_deps=args.merge_deps,
    )
    if options.name is None:
        options = options.merged(name=outdir.resolve().name)
    config = resolve_config(options)
    return OpenFaasNodeProject(config, outdir)


def _new_command(args: argparse.Namespace) -> int:
    from ofnode.emitters import GenerationError

    try:
        project = _build_project(args)
        report = project.synth()
    except (
        FileNotFoundError,
        ConfigValidationError,
        ConfigurationError,
        GenerationError,
    ) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Project generated in {report.outdir}")
    for path in report.written:
        print(f"  wrote    {path}")
    for path in report.skipped:
        print(f"  kept     {path}")
    return 0


def _plan_command(args: argparse.Namespace) -> int:
    try:
        project = _build_project(args)
    except (FileNotFoundError, ConfigValidationError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    plan = project.plan()
    rows = [
        (artifact.action.value, artifact.kind.value, artifact.path, artifact.reason)
        for artifact in plan.artifacts
    ]
    _print_table(["Action", "Artifact", "Path", "Reason"], rows)
    return 0


def _init_command(output: Path | None, name: str | None) -> int:
    from ofnode.init import DEFAULT_CONFIG_NAME, generate_config

    target = output or Path.cwd() / DEFAULT_CONFIG_NAME
    try:
        written = generate_config(name or Path.cwd().name, target)
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(f"Config file created: {written}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "new":
        return _new_command(args)

    if args.command == "plan":
        return _plan_command(args)

    if args.command == "init":
        init_output: Path | None = args.output
        init_name: str | None = args.name
        return _init_command(init_output, init_name)

    # No subcommand -- print help by default.
    parser.print_help()
    return 0


def _configure_logging(verbosity: int) -> None:
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    log.debug("Logging configured at %s", logging.getLevelName(level))


def _as_tuple(values: list[str] | None) -> tuple[str, ...] | None:
    return tuple(values) if values is not None else None


def _print_table(headers: Iterable[str], rows: Iterable[tuple[str, ...]]) -> None:
    headers_list = list(headers)
    rows_list = list(rows)
    widths = [len(header) for header in headers_list]
    for row in rows_list:
        for idx, cell in enumerate(row):
            widths[idx] = max(widths[idx], len(cell))

    header_line = "  ".join(header.ljust(widths[idx]) for idx, header in enumerate(headers_list))
    print(header_line)
    print("-" * len(header_line))
    for row in rows_list:
        line = "  ".join(row[idx].ljust(widths[idx]) for idx in range(len(widths)))
        print(line.rstrip())


if __name__ == "__main__":
    sys.exit(main())
