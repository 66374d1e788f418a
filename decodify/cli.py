"""CLI entrypoints for decodify commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .analysis import calculate_metrics, find_issues
from .config import ConfigError, load_config
from .diagrams import DEPENDENCY_FLOW, DIAGRAM_KINDS
from .logging import configure_logging
from .pipeline import ProjectPipeline
from .stores import ProjectStore
from .validators import validate


def _add_logging_options(
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
    quiet_kwargs = dict(kwargs, help="Only log warnings and errors.")
    parser.add_argument("-q", "--quiet", **quiet_kwargs)
    log_file_kwargs: dict[str, object] = {
        "type": Path,
        "help": "Also write DEBUG logs to this file.",
        "default": argparse.SUPPRESS if suppress_default else None,
    }
    parser.add_argument("--log-file", **log_file_kwargs)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="decodify",
        description="Analyze web frontend projects and render Mermaid diagrams of their structure.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Parse a project and print a summary of its structure.",
    )
    _add_logging_options(analyze_parser, suppress_default=True)
    analyze_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    analyze_parser.add_argument("--project-id", help="Identifier used when storing the snapshot.")
    analyze_parser.add_argument(
        "--store",
        type=Path,
        help="Directory where the analysis snapshot is written as JSON.",
    )
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        help="Print metrics and issues as JSON instead of a text summary.",
    )

    diagram_parser = subparsers.add_parser(
        "diagram",
        help="Render a Mermaid diagram for a project.",
    )
    _add_logging_options(diagram_parser, suppress_default=True)
    diagram_parser.add_argument("kind", choices=DIAGRAM_KINDS, help="Diagram kind to render.")
    diagram_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    diagram_parser.add_argument("--direction", help="Flowchart direction (LR, RL, TB, TD or BT).")
    diagram_parser.add_argument(
        "--include-external",
        action="store_true",
        default=None,
        help="Keep nodes that look like external packages.",
    )
    diagram_parser.add_argument("--max-nodes", type=int, help="Maximum number of file nodes to draw.")
    diagram_parser.add_argument(
        "--no-group",
        action="store_true",
        help="Do not group file nodes into directory subgraphs.",
    )
    diagram_parser.add_argument(
        "--target-component",
        help="Component that starts the sequence diagram chain.",
    )

    validate_parser = subparsers.add_parser(
        "validate",
        help="Check a Mermaid diagram file for structural problems.",
    )
    _add_logging_options(validate_parser, suppress_default=True)
    validate_parser.add_argument("file", type=Path, help="Path to the diagram text file.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for decodify commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file)

    if args.command == "analyze":
        _run_analyze(parser, args)
    elif args.command == "diagram":
        _run_diagram(parser, args)
    elif args.command == "validate":
        _run_validate(parser, args)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _pipeline_for(parser: argparse.ArgumentParser, root: Path, store_dir: Path | None = None) -> ProjectPipeline:
    try:
        config = load_config(root)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")
    directory = store_dir or config.store.directory
    store = ProjectStore(directory) if directory is not None else None
    return ProjectPipeline(store=store, config=config)


def _run_analyze(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    root = Path(args.path).expanduser().resolve()
    pipeline = _pipeline_for(parser, root, args.store)
    try:
        snapshot = pipeline.analyze(root, project_id=args.project_id)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except Exception as exc:  # pragma: no cover - unexpected failure
        parser.exit(1, f"decodify analyze failed: {exc}\nRun with --verbose for more details.\n")

    metrics = calculate_metrics(snapshot.file_records)
    issues = find_issues(snapshot.file_records)
    if args.json:
        print(json.dumps({"project_id": snapshot.project_id, "metrics": metrics, "issues": issues}, indent=2))
        return

    complexity = metrics["complexity"]
    print(f"Project {snapshot.project_id}")
    print(f"  files: {metrics['total_files']} ({metrics['total_lines']} lines)")
    print(
        f"  functions: {complexity['total_functions']}, classes: {complexity['total_classes']}, "
        f"components: {complexity['total_components']}"
    )
    print(f"  dependency edges: {len(snapshot.dependency_graph.edges)}")
    for category in issues:
        if category["count"]:
            print(f"  {category['type']}: {category['count']}")


def _run_diagram(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    root = Path(args.path).expanduser().resolve()
    pipeline = _pipeline_for(parser, root)
    try:
        snapshot = pipeline.analyze(root)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")

    options: dict[str, object] = {}
    if args.kind == DEPENDENCY_FLOW:
        defaults = pipeline.config.diagrams if pipeline.config is not None else None
        if defaults is not None:
            options.update(
                {
                    "direction": defaults.direction,
                    "include_external": defaults.include_external,
                    "max_nodes": defaults.max_nodes,
                    "group_by_directory": defaults.group_by_directory,
                }
            )
        if args.direction:
            options["direction"] = args.direction
        if args.include_external:
            options["include_external"] = True
        if args.max_nodes is not None:
            options["max_nodes"] = args.max_nodes
        if args.no_group:
            options["group_by_directory"] = False
    elif args.target_component:
        options["target_component"] = args.target_component

    result = pipeline.render(args.kind, snapshot, options)
    print(result.text, end="")
    if result.note:
        print(f"decodify: {result.note}: {'; '.join(result.validation.errors)}", file=sys.stderr)


def _run_validate(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    try:
        text = args.file.read_text(encoding="utf-8")
    except OSError as exc:
        parser.exit(1, f"{exc}\n")
    result = validate(text)
    if result.is_valid:
        print("Diagram is valid")
        return
    for error in result.errors:
        print(f"- {error}")
    parser.exit(1, "Diagram is invalid\n")


if __name__ == "__main__":
    main(sys.argv[1:])
