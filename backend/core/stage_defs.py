"""
Stage definitions for the JSON repair pipeline.

Each stage has:
- name: Short identifier recorded in traces and API responses
- title: Human-readable name shown in CLI output
- description: What the stage does to the text before parsing
- transform: Produces the candidate text to parse, or None to skip

Stages run in order and the first one whose candidate parses wins.
Stages escalate from trusting the model output as-is to increasingly
aggressive repair, so already-valid output is never mutated.
"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import Callable

from core.repair import (
    FieldNeutralizer,
    extract_first_json_object,
    extract_outer_braces,
    strip_backticks,
    strip_markdown_fences,
    strip_markdown_headings,
)


@dataclass
class StageContext:
    """Per-call inputs shared by all stage transforms."""

    raw: str
    neutralizer: FieldNeutralizer = field(default_factory=FieldNeutralizer)

    @cached_property
    def cleaned(self) -> str:
        return clean_text(self.raw, self.neutralizer)


@dataclass(frozen=True)
class StageDef:
    """Definition for a single repair stage."""

    number: int
    name: str
    title: str
    description: str
    transform: Callable[[StageContext], str | None]


# =============================================================================
# TRANSFORMS
# =============================================================================


def clean_text(text: str, neutralizer: FieldNeutralizer) -> str:
    """Fences -> headings -> stray backticks -> code field neutralization."""
    text = strip_markdown_fences(text)
    text = strip_markdown_headings(text)
    text = strip_backticks(text)
    return neutralizer.neutralize(text)


def _raw(ctx: StageContext) -> str | None:
    return ctx.raw


def _clean(ctx: StageContext) -> str | None:
    return ctx.cleaned


def _balanced(ctx: StageContext) -> str | None:
    span = extract_first_json_object(ctx.cleaned)
    return ctx.neutralizer.neutralize(span) if span is not None else None


def _outer(ctx: StageContext) -> str | None:
    span = extract_outer_braces(ctx.cleaned)
    return ctx.neutralizer.neutralize(span) if span is not None else None


# =============================================================================
# STAGE DEFINITIONS
# =============================================================================

STAGES: tuple[StageDef, ...] = (
    StageDef(
        number=1,
        name="raw",
        title="Raw Parse",
        description="Parsing the untouched model output",
        transform=_raw,
    ),
    StageDef(
        number=2,
        name="clean",
        title="Clean Parse",
        description="Stripping fences, headings and backticks; emptying code fields",
        transform=_clean,
    ),
    StageDef(
        number=3,
        name="balanced",
        title="Balanced Object",
        description="Parsing the first balanced {...} span of the cleaned text",
        transform=_balanced,
    ),
    StageDef(
        number=4,
        name="outer",
        title="Outer Bounds",
        description="Parsing from the first '{' to the last '}' of the cleaned text",
        transform=_outer,
    ),
)

TOTAL_STAGES = len(STAGES)


def get_stage(name: str) -> StageDef:
    """Get stage definition by name."""
    for stage in STAGES:
        if stage.name == name:
            return stage
    raise ValueError(f"Unknown stage: {name}")


def get_stage_header(stage: StageDef, total: int | None = None) -> str:
    """
    Get formatted stage header for display.

    Example: "[2/4] Clean Parse"
    """
    total = total or TOTAL_STAGES
    return f"[{stage.number}/{total}] {stage.title}"
