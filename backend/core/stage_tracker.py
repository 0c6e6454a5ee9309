"""
Stage attempt tracking with user-friendly console output.

Records every stage the parser tries for one call (for API responses and
failure diagnostics) and renders it with rich for the CLI.
"""

import time
from dataclasses import asdict, dataclass, field
from typing import Any

from rich.console import Console
from rich.table import Table

from core.stage_defs import StageDef, get_stage_header


@dataclass
class StageAttempt:
    """Outcome of a single stage attempt."""

    stage_number: int
    stage_name: str
    status: str  # 'succeeded', 'failed', 'skipped'
    elapsed_seconds: float = 0.0
    candidate_length: int | None = None
    error: str | None = None  # "Expecting ',' delimiter: line 3 column 5"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ParseTrace:
    """
    Ordered record of stage attempts for one parse call.

    Usage:
        trace = ParseTrace()

        with trace.stage(stage_def, candidate):
            json.loads(candidate)
    """

    attempts: list[StageAttempt] = field(default_factory=list)

    def stage(self, stage: StageDef, candidate: str):
        """Context manager timing one attempt; failures are recorded, not suppressed."""
        return _StageContext(self, stage, candidate)

    def skip(self, stage: StageDef, reason: str) -> None:
        self.attempts.append(
            StageAttempt(
                stage_number=stage.number,
                stage_name=stage.name,
                status="skipped",
                error=reason,
            )
        )

    def to_list(self) -> list[dict[str, Any]]:
        return [a.to_dict() for a in self.attempts]

    @classmethod
    def from_list(cls, attempts: list[dict[str, Any]]) -> "ParseTrace":
        return cls(attempts=[StageAttempt(**a) for a in attempts])


class _StageContext:
    """Internal context manager for a single stage attempt."""

    def __init__(self, trace: ParseTrace, stage: StageDef, candidate: str):
        self.trace = trace
        self.stage = stage
        self.candidate = candidate
        self.start: float | None = None

    def __enter__(self):
        self.start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - (self.start or time.perf_counter())
        failed = exc_type is not None

        self.trace.attempts.append(
            StageAttempt(
                stage_number=self.stage.number,
                stage_name=self.stage.name,
                status="failed" if failed else "succeeded",
                elapsed_seconds=elapsed,
                candidate_length=len(self.candidate),
                error=str(exc_val) if failed else None,
            )
        )

        # Don't suppress exceptions
        return False


# =============================================================================
# CONSOLE OUTPUT
# =============================================================================

STATUS_STYLES = {
    "succeeded": "[green]✓ succeeded[/]",
    "failed": "[bold red]✗ failed[/]",
    "skipped": "[yellow]- skipped[/]",
}


def print_trace(
    trace: ParseTrace,
    stages: tuple[StageDef, ...],
    console: Console | None = None,
) -> None:
    """Print a table of stage attempts."""
    console = console or Console(stderr=True)
    by_name = {s.name: s for s in stages}

    table = Table(title="JSON repair stages", title_justify="left", border_style="dim")
    table.add_column("Stage")
    table.add_column("Status")
    table.add_column("Chars", justify="right")
    table.add_column("Detail", overflow="fold")

    for attempt in trace.attempts:
        stage = by_name.get(attempt.stage_name)
        label = (
            get_stage_header(stage, len(stages)) if stage else attempt.stage_name
        )
        table.add_row(
            label,
            STATUS_STYLES.get(attempt.status, attempt.status),
            str(attempt.candidate_length) if attempt.candidate_length is not None else "",
            attempt.error or f"{attempt.elapsed_seconds * 1000:.2f} ms",
        )

    console.print(table)
