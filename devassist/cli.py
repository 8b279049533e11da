"""CLI entrypoints for devassist commands."""

from __future__ import annotations

import argparse
import json
import shutil
import sys
from pathlib import Path

from .config import write_starter_config
from .file_analysis import analyze_file
from .logging import configure_logging
from .models import AnalysisResult, QualityFinding
from .orchestrator import Orchestrator
from .render import DocumentationRenderer
from .stores import analysis_path, load_analysis, save_analysis

_FATAL_ERRORS = (FileNotFoundError, NotADirectoryError, PermissionError, ValueError)


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
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )


def _add_analysis_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--depth", type=int, default=None, help="Maximum directory depth to walk.")
    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="NAME",
        help="Additional directory name to ignore (repeatable).",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Recompute every file instead of reusing cached evidence.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devassist",
        description="Analyze a project: stack, structure, dependencies, quality and security.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Create .devassist/ and a starter config.")
    _add_verbose_option(init_parser, suppress_default=True)
    _add_path_argument(init_parser)

    status_parser = subparsers.add_parser("status", help="Show the last saved analysis.")
    _add_verbose_option(status_parser, suppress_default=True)
    _add_path_argument(status_parser)

    analyze_parser = subparsers.add_parser("analyze", help="Run a full project analysis.")
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_path_argument(analyze_parser)
    _add_analysis_options(analyze_parser)
    analyze_parser.add_argument("--json", action="store_true", help="Print the result as JSON.")
    analyze_parser.add_argument(
        "--no-save",
        action="store_true",
        help="Do not write .devassist/analysis.json.",
    )

    docs_parser = subparsers.add_parser("docs", help="Render markdown documentation.")
    _add_verbose_option(docs_parser, suppress_default=True)
    _add_path_argument(docs_parser)
    _add_analysis_options(docs_parser)
    docs_parser.add_argument(
        "--output",
        default=None,
        help="Directory for generated documents (defaults to .devassist/docs).",
    )

    audit_parser = subparsers.add_parser("audit", help="Report quality and security findings.")
    _add_verbose_option(audit_parser, suppress_default=True)
    _add_path_argument(audit_parser)
    _add_analysis_options(audit_parser)

    focus_parser = subparsers.add_parser("focus", help="Show recommended focus areas and priorities.")
    _add_verbose_option(focus_parser, suppress_default=True)
    _add_path_argument(focus_parser)
    _add_analysis_options(focus_parser)

    clean_parser = subparsers.add_parser("clean", help="Remove the .devassist output directory.")
    _add_verbose_option(clean_parser, suppress_default=True)
    _add_path_argument(clean_parser)

    file_parser = subparsers.add_parser("file", help="Analyze a single file.")
    _add_verbose_option(file_parser, suppress_default=True)
    file_parser.add_argument("file", help="File to analyze, relative to --root.")
    file_parser.add_argument("--root", default=".", help="Project root (defaults to current directory).")
    file_parser.add_argument("--json", action="store_true", help="Print the result as JSON.")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for devassist commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(getattr(args, "verbose", False)),
        quiet=bool(getattr(args, "json", False)),
    )

    orchestrator = Orchestrator()

    try:
        if args.command == "init":
            _run_init(orchestrator, Path(args.path))
        elif args.command == "status":
            _run_status(orchestrator, Path(args.path))
        elif args.command == "analyze":
            result = _analyze(orchestrator, args)
            if not args.no_save:
                _save(orchestrator, result)
            if args.json:
                print(json.dumps(result.to_dict(), indent=2, sort_keys=True))
            else:
                _print_summary(result)
        elif args.command == "docs":
            result = _analyze(orchestrator, args)
            root = Path(result.metadata.root)
            if args.output:
                output_dir = Path(args.output)
            else:
                output_dir = root / orchestrator.resolve_options(root).output_dir / "docs"
            for path in DocumentationRenderer().write(result, output_dir):
                print(f"Wrote {_relativize(path)}")
        elif args.command == "audit":
            _print_audit(_analyze(orchestrator, args))
        elif args.command == "focus":
            _print_focus(_analyze(orchestrator, args))
        elif args.command == "clean":
            _run_clean(orchestrator, Path(args.path))
        elif args.command == "file":
            report = analyze_file(args.root, args.file)
            if args.json:
                print(json.dumps(report.to_dict(), indent=2, sort_keys=True))
            else:
                _print_file_report(report)
        elif args.command == "serve":  # pragma: no cover - integration path
            from .service.app import run_service

            run_service(host=args.host, port=args.port)
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except IsADirectoryError as exc:
        parser.exit(1, f"{exc}\n")
    except _FATAL_ERRORS as exc:
        parser.exit(1, f"devassist {args.command} failed: {exc}\n")
    except OSError as exc:
        parser.exit(1, f"devassist {args.command} failed: {exc}\nRun with --verbose for more details.\n")


def _analyze(orchestrator: Orchestrator, args: argparse.Namespace) -> AnalysisResult:
    return orchestrator.run_analysis(
        args.path,
        max_depth=args.depth,
        ignore=args.ignore or None,
        cache=not args.no_cache,
    )


def _save(orchestrator: Orchestrator, result: AnalysisResult) -> Path:
    root = Path(result.metadata.root)
    output_dir = orchestrator.resolve_options(root).output_dir
    return save_analysis(result, analysis_path(root, output_dir))


def _run_init(orchestrator: Orchestrator, path: Path) -> None:
    root = path.expanduser().resolve()
    if not root.is_dir():
        raise NotADirectoryError(f"Project path is not a directory: {path}")
    output_dir = root / orchestrator.resolve_options(root).output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    print(f"Output directory ready at {_relativize(output_dir)}")
    config_path = write_starter_config(root)
    if config_path is None:
        print("Configuration already present; left unchanged")
    else:
        print(f"Starter configuration written to {_relativize(config_path)}")


def _run_status(orchestrator: Orchestrator, path: Path) -> None:
    root = path.expanduser().resolve()
    output_dir = orchestrator.resolve_options(root).output_dir
    stored = load_analysis(analysis_path(root, output_dir))
    if stored is None:
        print("No saved analysis. Run `devassist analyze` first.")
        return
    print(f"Last analysis: {stored.metadata.analyzed_at} (devassist {stored.metadata.version})")
    _print_summary(stored)


def _run_clean(orchestrator: Orchestrator, path: Path) -> None:
    root = path.expanduser().resolve()
    target = (root / orchestrator.resolve_options(root).output_dir).resolve()
    if target == root or root not in target.parents:
        raise ValueError(f"Refusing to remove {target}: not inside {root}")
    if not target.exists():
        print("Nothing to clean")
        return
    shutil.rmtree(target)
    print(f"Removed {_relativize(target)}")


def _print_summary(result: AnalysisResult) -> None:
    project = result.project
    metrics = result.metrics
    print(f"Project: {result.metadata.name} ({project.type}, {project.language})")
    if project.frameworks:
        print(f"Frameworks: {', '.join(project.frameworks)}")
    print(f"Files: {metrics.total_files}  Lines: {metrics.total_lines}  Complexity: {metrics.complexity}")
    print(f"Quality score: {result.quality.score}/100 ({result.recommendations.quality_level})")
    print(f"Security findings: {len(result.security)}")
    if result.metadata.skipped:
        print(f"Skipped unreadable directories: {', '.join(result.metadata.skipped)}")


def _print_audit(result: AnalysisResult) -> None:
    print(f"Quality score: {result.quality.score}/100 ({result.recommendations.quality_level})")
    if not result.quality.findings:
        print("No findings")
        return
    for finding in result.quality.findings:
        print(f"- {_format_finding(finding)}")
    if result.quality.suggestions:
        print("Suggestions:")
        for suggestion in result.quality.suggestions:
            print(f"- {suggestion}")


def _print_focus(result: AnalysisResult) -> None:
    recommendations = result.recommendations
    print(f"Phase: {recommendations.development_phase}  Technical debt: {recommendations.technical_debt}")
    print("Focus areas: " + (", ".join(recommendations.focus_areas) or "none"))
    print("Priority: " + (", ".join(recommendations.priority) or "none"))
    for insight in recommendations.insights:
        print(f"- {insight}")


def _print_file_report(report) -> None:
    lines = report.lines
    print(f"File: {report.path} ({report.language})")
    print(
        f"Lines: {lines.total} (code {lines.code}, comments {lines.comment}, blank {lines.blank})"
    )
    print(f"Cyclomatic complexity: {report.complexity}")
    print(f"Quality score: {report.score}/100 ({report.quality_level})  Risk: {report.risk_level}")
    for finding in report.findings:
        print(f"- {_format_finding(finding)}")


def _format_finding(finding: QualityFinding) -> str:
    location = ""
    if finding.file:
        location = f" ({finding.file}:{finding.line})" if finding.line else f" ({finding.file})"
    return f"[{finding.severity}] {finding.description}{location}"


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
