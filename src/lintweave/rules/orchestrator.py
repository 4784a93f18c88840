"""Rule orchestration: which strategy runs for a (rule, file) pair.

Most rules pair a precise symbol-based strategy with a cheaper heuristic
fallback. The orchestrator tries them in declared order and stops at the
first one that completes, even when it completes with zero violations:
"analyzed, clean" is an authoritative answer and the fallback does not run.

    symbol strategy  --not ready / failed-->  heuristic strategy  --> ...

A symbol strategy whose engine is not ready (or does not know the file) is
skipped without being counted as a failure. A strategy that raises
``DetectionError`` is logged and the next one is tried. If nothing
completes, the outcome is empty and ``analyzed`` is False.

Rules can also mark strategies ``always_run``. Those all run on every file
(each tuned to a different shape of the same defect) and their results are
merged through the deduplicator. Only if none of them completes are the
remaining strategies tried as fallbacks.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from lintweave.errors import DetectionError, EngineUnavailable
from lintweave.logging import get_logger

from .base import DetectionContext, RuleSpec, StrategyKind, StrategySpec, Violation
from .dedup import deduplicate

logger = get_logger("orchestrator")


class AttemptStatus(Enum):
    """What happened when a strategy was considered for a file."""

    COMPLETED = "completed"
    SKIPPED = "skipped"  # precondition unmet, not an error
    FAILED = "failed"


@dataclass(frozen=True)
class StrategyAttempt:
    """One strategy considered for one (rule, file) pair."""

    strategy: str
    kind: StrategyKind
    status: AttemptStatus
    reason: str = ""


@dataclass
class RuleOutcome:
    """Result of orchestrating one rule on one file.

    An empty ``violations`` list is ambiguous on its own; ``analyzed`` tells
    "checked, clean" apart from "nothing could run".
    """

    rule_id: str
    file_path: Path
    violations: list[Violation] = field(default_factory=list)
    attempts: list[StrategyAttempt] = field(default_factory=list)
    via_fallback: bool = False
    notes: list[str] = field(default_factory=list)

    @property
    def analyzed(self) -> bool:
        return any(a.status == AttemptStatus.COMPLETED for a in self.attempts)

    @property
    def completed_strategies(self) -> list[str]:
        return [a.strategy for a in self.attempts if a.status == AttemptStatus.COMPLETED]

    @property
    def failures(self) -> list[StrategyAttempt]:
        return [a for a in self.attempts if a.status == AttemptStatus.FAILED]

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule": self.rule_id,
            "file": str(self.file_path),
            "analyzed": self.analyzed,
            "via_fallback": self.via_fallback,
            "violations": len(self.violations),
            "attempts": [
                {
                    "strategy": a.strategy,
                    "kind": a.kind.value,
                    "status": a.status.value,
                    "reason": a.reason,
                }
                for a in self.attempts
            ],
        }


class AttemptStats:
    """Thread-safe counters over every attempt an orchestrator made."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts = {status: 0 for status in AttemptStatus}
        self.not_analyzed = 0
        self.fallback_runs = 0

    def record(self, status: AttemptStatus) -> None:
        with self._lock:
            self._counts[status] += 1

    def record_outcome(self, outcome: RuleOutcome) -> None:
        with self._lock:
            if not outcome.analyzed:
                self.not_analyzed += 1
            if outcome.via_fallback:
                self.fallback_runs += 1

    def count(self, status: AttemptStatus) -> int:
        with self._lock:
            return self._counts[status]

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            data = {status.value: n for status, n in self._counts.items()}
            data["not_analyzed"] = self.not_analyzed
            data["fallback_runs"] = self.fallback_runs
            return data


class RuleOrchestrator:
    """Executes a rule's strategies on one file with fallback semantics."""

    def __init__(self) -> None:
        self.stats = AttemptStats()

    def run(
        self,
        rule: RuleSpec,
        file_path: Path,
        content: str | None,
        context: DetectionContext,
    ) -> RuleOutcome:
        """Run a rule on one file.

        Args:
            rule: Rule to execute
            file_path: Absolute path of the file
            content: Pre-read file content (None lets adapters read it)
            context: Detection context for this pair

        Returns:
            RuleOutcome with deduplicated, strategy-tagged violations

        Raises:
            SourceReadError: If an adapter had to read the file and could not
        """
        attempts: list[StrategyAttempt] = []
        collected: list[Violation] = []
        completed_specs: list[StrategySpec] = []

        for spec in rule.always_run_strategies:
            found = self._attempt(spec, file_path, content, context, attempts)
            if found is not None:
                collected.extend(found)
                completed_specs.append(spec)

        if not completed_specs:
            for spec in rule.fallback_strategies:
                found = self._attempt(spec, file_path, content, context, attempts)
                if found is not None:
                    collected = found
                    completed_specs.append(spec)
                    break

        outcome = RuleOutcome(
            rule_id=rule.id,
            file_path=file_path,
            violations=deduplicate(collected),
            attempts=attempts,
            notes=list(context.notes),
        )
        outcome.via_fallback = bool(completed_specs) and not any(
            spec is rule.strategies[0] for spec in completed_specs
        )
        self.stats.record_outcome(outcome)

        if not completed_specs and rule.strategies:
            logger.debug("No strategy could analyze file", rule_id=rule.id, file=str(file_path))
        elif outcome.via_fallback:
            logger.debug(
                "Rule ran via fallback",
                rule_id=rule.id,
                file=str(file_path),
                strategy=",".join(outcome.completed_strategies),
            )
        return outcome

    def _attempt(
        self,
        spec: StrategySpec,
        file_path: Path,
        content: str | None,
        context: DetectionContext,
        attempts: list[StrategyAttempt],
    ) -> list[Violation] | None:
        """Try one strategy; return its violations, or None if it did not complete."""
        if not spec.adapter.is_ready(file_path, context):
            self._record(attempts, spec, AttemptStatus.SKIPPED, "semantic engine unavailable")
            return None

        try:
            found = spec.adapter.detect(file_path, content, context)
        except EngineUnavailable as e:
            self._record(attempts, spec, AttemptStatus.SKIPPED, e.reason)
            return None
        except DetectionError as e:
            logger.warning(
                "Detection failed, trying next strategy",
                rule_id=e.rule_id,
                file=str(e.file_path),
                strategy=e.strategy,
                error=e.detail,
            )
            self._record(attempts, spec, AttemptStatus.FAILED, e.detail)
            return None

        self._record(attempts, spec, AttemptStatus.COMPLETED)
        return found

    def _record(
        self,
        attempts: list[StrategyAttempt],
        spec: StrategySpec,
        status: AttemptStatus,
        reason: str = "",
    ) -> None:
        attempts.append(StrategyAttempt(spec.name, spec.kind, status, reason))
        self.stats.record(status)
