"""Analysis session: one run of a rule set over a file set.

The session resolves every rule's severity once, up front, and drops rules
resolved to ``off`` before any detector could run. Then, per file:

1. read the file once (a file that cannot be read is skipped, with one
   ``file-unreadable`` diagnostic per rule that would have applied)
2. run each applicable rule through the ``RuleOrchestrator``
3. stamp the resolved severity onto the outcome's violations

Files are independent, so they are checked on a thread pool. Results are
merged back in input order, which keeps repeated runs identical.

Usage:
    session = AnalysisSession(rules, files, options, semantic_engine=project)
    result = session.run()
    print(result.counts())
"""

from __future__ import annotations

import fnmatch
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

from lintweave.config import SessionOptions
from lintweave.errors import LintweaveError, SourceReadError
from lintweave.logging import get_logger

from .adapters import read_source
from .base import DetectionContext, Diagnostic, DiagnosticKind, RuleSpec, Severity, Violation
from .dedup import deduplicate
from .orchestrator import AttemptStatus, RuleOrchestrator, RuleOutcome
from .severity import SeverityResolver

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lintweave.semantic import ParsedFile, SemanticEngine

logger = get_logger("session")


class SerializedEngine:
    """Semantic engine wrapper that allows one query at a time.

    Used for engines that do not declare ``thread_safe = True``.
    """

    thread_safe = True

    def __init__(self, engine: SemanticEngine) -> None:
        self._engine = engine
        self._lock = threading.Lock()

    def is_ready(self) -> bool:
        with self._lock:
            return self._engine.is_ready()

    def get_parsed_file(self, path: Path) -> ParsedFile | None:
        with self._lock:
            return self._engine.get_parsed_file(path)


def rule_matches_file(rule: RuleSpec, file_path: Path) -> bool:
    """Whether any of the rule's file patterns matches the path."""
    path_str = str(file_path)
    return any(
        fnmatch.fnmatch(path_str, pattern) or fnmatch.fnmatch(file_path.name, pattern)
        for pattern in rule.file_patterns
    )


@dataclass
class SessionResult:
    """Aggregated result of an analysis session."""

    violations: list[Violation] = field(default_factory=list)
    files_checked: int = 0
    rules_applied: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)
    outcomes: list[RuleOutcome] = field(default_factory=list)
    fallback_pairs: list[tuple[str, Path]] = field(default_factory=list)

    @property
    def counts_by_rule(self) -> dict[str, int]:
        return dict(Counter(v.rule_id for v in self.violations))

    @property
    def counts_by_file(self) -> dict[Path, int]:
        return dict(Counter(v.file_path for v in self.violations))

    def by_severity(self, severity: Severity) -> list[Violation]:
        return [v for v in self.violations if v.severity == severity]

    def by_rule(self, rule_id: str) -> list[Violation]:
        return [v for v in self.violations if v.rule_id == rule_id]

    def by_file(self, file_path: Path) -> list[Violation]:
        return [v for v in self.violations if v.file_path == file_path]

    def diagnostics_of(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == kind]

    @property
    def error_count(self) -> int:
        return len(self.by_severity(Severity.ERROR))

    @property
    def warning_count(self) -> int:
        return len(self.by_severity(Severity.WARNING))

    @property
    def info_count(self) -> int:
        return len(self.by_severity(Severity.INFO))

    def counts(self) -> dict[str, int]:
        """Aggregate counts for report generators."""
        return {
            "files": self.files_checked,
            "violations": len(self.violations),
            "errors": self.error_count,
            "warnings": self.warning_count,
            "info": self.info_count,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "counts": self.counts(),
            "rules_applied": self.rules_applied,
            "violations": [v.to_dict() for v in self.violations],
            "by_rule": self.counts_by_rule,
            "by_file": {str(path): n for path, n in self.counts_by_file.items()},
            "fallback": [
                {"rule": rule_id, "file": str(path)} for rule_id, path in self.fallback_pairs
            ],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


@dataclass
class _FileReport:
    violations: list[Violation] = field(default_factory=list)
    outcomes: list[RuleOutcome] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    rules_run: set[str] = field(default_factory=set)


class AnalysisSession:
    """One execution of a rule set over an ordered list of files.

    The semantic engine handle is borrowed for the duration of ``run()`` and
    released afterwards; a session runs once.
    """

    def __init__(
        self,
        rules: Iterable[RuleSpec],
        files: Iterable[Path],
        options: SessionOptions | None = None,
        semantic_engine: SemanticEngine | None = None,
        resolver: SeverityResolver | None = None,
        orchestrator: RuleOrchestrator | None = None,
    ) -> None:
        self.rules = list(rules)
        self.files = [Path(f).resolve() for f in files]
        self.options = options or SessionOptions()
        self.semantic_engine = semantic_engine
        self.resolver = resolver or SeverityResolver(self.options.config.categories)
        self.orchestrator = orchestrator or RuleOrchestrator()
        self._active: list[tuple[RuleSpec, Severity]] = []
        self._engine: SemanticEngine | None = None
        self._finished = False

    def run(self) -> SessionResult:
        """Run every active rule on every file.

        Returns:
            SessionResult; failures show up as diagnostics, never as exceptions

        Raises:
            RuntimeError: If the session has already run
        """
        if self._finished:
            raise RuntimeError("AnalysisSession.run() can only be called once")

        result = SessionResult()
        self._active = self._resolve_rules(result)
        self._engine = self._prepare_engine(self.semantic_engine)

        try:
            with logger.timed("analysis session", files=len(self.files), rules=len(self._active)):
                reports = self._check_all()
        finally:
            self._engine = None
            self.semantic_engine = None
            self._finished = True

        collected: list[Violation] = []
        rules_run: set[str] = set()
        for report in reports:
            collected.extend(report.violations)
            result.outcomes.extend(report.outcomes)
            result.diagnostics.extend(report.diagnostics)
            rules_run.update(report.rules_run)

        # Repeated file entries are checked independently but reported once
        result.violations = deduplicate(collected)
        result.files_checked = len(self.files)
        result.rules_applied = len(rules_run)
        result.fallback_pairs = [
            (o.rule_id, o.file_path) for o in result.outcomes if o.via_fallback
        ]

        logger.info(
            "Analysis finished",
            files=result.files_checked,
            violations=len(result.violations),
            diagnostics=len(result.diagnostics),
        )
        return result

    def _resolve_rules(self, result: SessionResult) -> list[tuple[RuleSpec, Severity]]:
        """Resolve severities and drop disabled and ``off`` rules."""
        active: list[tuple[RuleSpec, Severity]] = []
        for rule in self.rules:
            if not rule.enabled:
                continue
            severity = self.resolver.resolve_rule(rule, self.options.config)
            if severity == Severity.OFF:
                logger.debug("Rule is off, skipping", rule_id=rule.id)
                continue
            active.append((rule, severity))

        for error in self.resolver.errors:
            result.diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.CONFIG_ERROR,
                    message=str(error),
                    rule_id=error.context.get("rule_id"),
                )
            )
        return active

    def _prepare_engine(self, engine: SemanticEngine | None) -> SemanticEngine | None:
        if engine is None or getattr(engine, "thread_safe", False):
            return engine
        if self.options.parallel and len(self.files) > 1:
            return SerializedEngine(engine)
        return engine

    def _check_all(self) -> list[_FileReport]:
        if self.options.parallel and len(self.files) > 1:
            workers = max(1, self.options.max_workers)
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(self._check_file, f) for f in self.files]
                return [future.result() for future in futures]
        return [self._check_file(f) for f in self.files]

    def _check_file(self, file_path: Path) -> _FileReport:
        report = _FileReport()
        applicable = [(r, s) for r, s in self._active if rule_matches_file(r, file_path)]
        if not applicable:
            return report

        try:
            content = read_source(file_path)
        except SourceReadError as e:
            logger.warning("Skipping unreadable file", file=str(file_path), error=str(e))
            for rule, _ in applicable:
                report.diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.FILE_UNREADABLE,
                        message=str(e),
                        rule_id=rule.id,
                        file_path=file_path,
                    )
                )
            return report

        for rule, severity in applicable:
            self._run_rule(rule, severity, file_path, content, report)
        return report

    def _run_rule(
        self,
        rule: RuleSpec,
        severity: Severity,
        file_path: Path,
        content: str,
        report: _FileReport,
    ) -> None:
        context = DetectionContext(
            file_path=file_path,
            rule_id=rule.id,
            category=rule.category,
            semantic_engine=self._engine,
            verbose=self.options.verbose,
            options=self.options.config.options_for(rule.id),
        )

        try:
            outcome = self.orchestrator.run(rule, file_path, content, context)
        except LintweaveError as e:
            logger.warning("Rule failed", rule_id=rule.id, file=str(file_path), error=str(e))
            report.diagnostics.append(self._internal(rule, file_path, str(e)))
            return
        except Exception as e:
            logger.exception("Unexpected error running rule", rule_id=rule.id, file=str(file_path))
            report.diagnostics.append(
                self._internal(rule, file_path, f"{type(e).__name__}: {e}")
            )
            return

        report.rules_run.add(rule.id)
        report.outcomes.append(outcome)
        report.violations.extend(replace(v, severity=severity) for v in outcome.violations)
        report.diagnostics.extend(self._outcome_diagnostics(rule, file_path, outcome))

    def _outcome_diagnostics(
        self,
        rule: RuleSpec,
        file_path: Path,
        outcome: RuleOutcome,
    ) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for attempt in outcome.attempts:
            if attempt.status == AttemptStatus.FAILED:
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.DETECTION_FAILED,
                        message=attempt.reason or f"{attempt.strategy} failed",
                        rule_id=rule.id,
                        file_path=file_path,
                        strategy=attempt.kind,
                    )
                )

        # Skipped strategies are only worth reporting when nothing else ran
        if not outcome.analyzed:
            for attempt in outcome.attempts:
                if attempt.status == AttemptStatus.SKIPPED:
                    diagnostics.append(
                        Diagnostic(
                            kind=DiagnosticKind.ENGINE_UNAVAILABLE,
                            message=attempt.reason,
                            rule_id=rule.id,
                            file_path=file_path,
                            strategy=attempt.kind,
                        )
                    )

        for note in outcome.notes:
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.TRACE,
                    message=note,
                    rule_id=rule.id,
                    file_path=file_path,
                )
            )
        return diagnostics

    @staticmethod
    def _internal(rule: RuleSpec, file_path: Path, message: str) -> Diagnostic:
        return Diagnostic(
            kind=DiagnosticKind.INTERNAL,
            message=message,
            rule_id=rule.id,
            file_path=file_path,
        )
