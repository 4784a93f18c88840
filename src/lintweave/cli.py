"""Command-line interface.

    lintweave check [PATHS...]     run rules on files and directories
    lintweave rules                list the configured rules

Exit codes: 0 clean (or only warnings/info), 1 when any error-severity
violation is reported, 2 on usage or configuration errors.
"""

from __future__ import annotations

import argparse
import logging
import sys
from argparse import Namespace
from pathlib import Path

from lintweave import __version__
from lintweave.config import LintweaveConfig
from lintweave.discovery import expand_paths
from lintweave.errors import ConfigError, ErrorCollector, handle_error
from lintweave.logging import LogFormat, configure_logging
from lintweave.output import Output, Verbosity, configure_output, reset_output
from lintweave.rules import (
    RuleEngine,
    RuleSpec,
    SessionResult,
    Severity,
    SeverityResolver,
    create_engine_with_builtins,
    load_rules_from_config,
    load_rules_from_file,
)
from lintweave.toml_config import find_config_file, load_toml_config

EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_USAGE = 2


def setup_output(args: Namespace) -> Output:
    """Configure global output and logging based on CLI args."""
    reset_output()
    if getattr(args, "quiet", False):
        verbosity, log_level = Verbosity.QUIET, logging.ERROR
    elif getattr(args, "debug", False):
        verbosity, log_level = Verbosity.DEBUG, logging.DEBUG
    elif getattr(args, "verbose", False):
        verbosity, log_level = Verbosity.VERBOSE, logging.INFO
    else:
        verbosity, log_level = Verbosity.NORMAL, logging.WARNING

    json_format = getattr(args, "json", False)
    configure_logging(log_level, LogFormat.JSON if json_format else LogFormat.TEXT)

    return configure_output(
        verbosity=verbosity,
        json_format=json_format,
        compact=getattr(args, "compact", False),
        no_color=getattr(args, "no_color", False),
    )


def load_project_config(args: Namespace) -> LintweaveConfig:
    """Load configuration from --config or the nearest config file.

    Raises:
        ConfigError: If the config file is invalid
    """
    config_arg = getattr(args, "config", None)
    if config_arg:
        return load_toml_config(Path(config_arg))

    config_path = find_config_file(Path.cwd())
    if config_path is None:
        return LintweaveConfig(project_root=Path.cwd())
    return load_toml_config(config_path)


def load_custom_rules(config: LintweaveConfig, collector: ErrorCollector) -> list[RuleSpec]:
    """Load every custom rule source, collecting errors instead of stopping."""
    rules: list[RuleSpec] = []

    try:
        rules.extend(load_rules_from_config(config.project_root, config.custom_rules))
        collector.success()
    except ConfigError as e:
        collector.record(e)

    for path in config.rule_files:
        try:
            rules.extend(load_rules_from_file(path))
            collector.success()
        except ConfigError as e:
            collector.record(e, {"file": str(path)})

    return rules


def _apply_check_args(config: LintweaveConfig, args: Namespace) -> None:
    if getattr(args, "pattern", None):
        config.include_patterns = [args.pattern]
    if getattr(args, "no_builtins", False):
        config.builtins = False
    if getattr(args, "no_parallel", False):
        config.parallel = False
    if getattr(args, "workers", None):
        config.max_workers = args.workers
    if getattr(args, "no_semantic", False):
        config.semantic = False


def build_engine(args: Namespace, output: Output) -> RuleEngine | None:
    """Load configuration and rules; report problems and return None on failure."""
    try:
        config = load_project_config(args)
    except ConfigError as e:
        output.error(handle_error(e).to_compact())
        return None

    _apply_check_args(config, args)

    collector = ErrorCollector()
    custom_rules = load_custom_rules(config, collector)
    if collector.has_errors():
        output.error(collector.summary())
        return None

    verbose = getattr(args, "verbose", False) or getattr(args, "debug", False)
    return create_engine_with_builtins(
        include_builtins=config.builtins,
        custom_rules=custom_rules,
        config=config,
        verbose=verbose,
    )


def _display_path(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


def report_result(result: SessionResult, output: Output) -> None:
    """Render a session result as text."""
    if not result.violations:
        output.success(f"No violations found in {result.files_checked} files")
    else:
        output.header(f"Found {len(result.violations)} violations")

        # Group by file, in first-seen order
        by_file: dict[Path, list] = {}
        for v in result.violations:
            by_file.setdefault(v.file_path, []).append(v)

        for file_path, violations in by_file.items():
            output.step(_display_path(file_path))
            for v in violations:
                output.violation(v)
            output.blank()

    for rule_id, file_path in result.fallback_pairs:
        output.verbose(f"{rule_id} ran via fallback on {_display_path(file_path)}")
    for d in result.diagnostics:
        where = f" ({_display_path(d.file_path)})" if d.file_path else ""
        rule = f"{d.rule_id}: " if d.rule_id else ""
        output.verbose(f"[{d.kind.value}] {rule}{d.message}{where}")

    counts = result.counts()
    output.info(
        f"Summary: {counts['errors']} errors, {counts['warnings']} warnings, "
        f"{counts['info']} info in {counts['files']} files"
    )


def cmd_check(args: Namespace) -> int:
    """Check files against rules."""
    output = setup_output(args)

    engine = build_engine(args, output)
    if engine is None:
        return EXIT_USAGE

    if not engine.rules:
        output.warning("No rules configured")
        return EXIT_OK

    try:
        files = expand_paths(
            [Path(p) for p in args.paths],
            engine.config.include_patterns,
            engine.config.exclude_patterns,
        )
    except FileNotFoundError as e:
        output.error(str(e))
        return EXIT_USAGE

    result = engine.check_files(files)

    if output.structured:
        output.data(result.to_dict())
    else:
        report_result(result, output)
        output.debug(f"Strategy attempts: {engine.last_stats}")

    return EXIT_VIOLATIONS if result.error_count > 0 else EXIT_OK


def cmd_rules(args: Namespace) -> int:
    """List configured rules with their strategies and severities."""
    output = setup_output(args)

    engine = build_engine(args, output)
    if engine is None:
        return EXIT_USAGE

    resolver = SeverityResolver(engine.config.overrides.categories)
    show_all = getattr(args, "all", False)

    listing = []
    for rule in engine.rules.values():
        severity = resolver.resolve_rule(rule, engine.config.overrides)
        enabled = rule.enabled and severity != Severity.OFF
        if not enabled and not show_all:
            continue
        listing.append(
            {
                "id": rule.id,
                "category": rule.category,
                "severity": severity.value,
                "enabled": enabled,
                "strategies": [
                    f"{s.name} ({s.kind.value}{', always' if s.always_run else ''})"
                    for s in rule.strategies
                ],
                "description": rule.description,
            }
        )

    if output.structured:
        output.data(listing)
        return EXIT_OK

    for error in resolver.errors:
        output.warning(str(error))

    output.header("Available Rules")
    for entry in listing:
        status = "" if entry["enabled"] else " [disabled]"
        output.info(f"{entry['id']} [{entry['severity']}] {entry['category']}{status}")
        output.verbose(f"    {entry['description']}")
        output.verbose(f"    strategies: {', '.join(entry['strategies'])}")
    return EXIT_OK


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _add_config_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: nearest lintweave.toml or pyproject.toml)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="lintweave",
        description="Multi-strategy rule engine for Python code",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # Global output options
    parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")
    parser.add_argument("--compact", "-c", action="store_true", help="Compact single-line output")
    parser.add_argument("--quiet", "-q", action="store_true", help="Quiet mode (errors only)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--debug", action="store_true", help="Debug output (most verbose)")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    check_parser = subparsers.add_parser("check", help="Check files against rules")
    check_parser.add_argument(
        "paths",
        nargs="*",
        default=["."],
        help="Files or directories to check (default: current directory)",
    )
    check_parser.add_argument("--pattern", help="Glob pattern for files to include in directories")
    check_parser.add_argument("--no-builtins", action="store_true", help="Skip built-in rules")
    check_parser.add_argument("--no-parallel", action="store_true", help="Check files sequentially")
    check_parser.add_argument(
        "--workers", type=_positive_int, metavar="N", help="Number of worker threads"
    )
    check_parser.add_argument(
        "--no-semantic",
        action="store_true",
        help="Do not build the semantic model (symbol-based strategies fall back)",
    )
    _add_config_arg(check_parser)
    check_parser.set_defaults(func=cmd_check)

    rules_parser = subparsers.add_parser("rules", help="List configured rules")
    rules_parser.add_argument("--all", action="store_true", help="Include disabled rules")
    rules_parser.add_argument("--no-builtins", action="store_true", help="Skip built-in rules")
    _add_config_arg(rules_parser)
    rules_parser.set_defaults(func=cmd_rules)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_OK

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
