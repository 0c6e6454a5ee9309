"""
Recover a JSON object from raw LLM output.

Runs the repair stages from core.stage_defs in order and returns the first
candidate that parses:

    1. raw       - the untouched text
    2. clean     - fences, headings and backticks stripped, code fields emptied
    3. balanced  - first balanced {...} span of the cleaned text
    4. outer     - first '{' to last '}' of the cleaned text

Per-stage errors (SyntaxInvalid, NoBalancedObjectFound) are recorded in the
trace and drive escalation. Only JSONExtractionFailed leaves this module.

Example:
    >>> safe_json_parse('```json\\n{"summary": "ok"}\\n```')
    {'summary': 'ok'}

Configuration (via environment variables):
    JSON_PREVIEW_CHARS: Characters of input kept in failure previews (default: 200)
"""

import json
import os
from dataclasses import dataclass
from typing import Any, Iterable

from loguru import logger

from core.errors import JSONExtractionFailed, NoBalancedObjectFound, SyntaxInvalid
from core.repair import FieldNeutralizer
from core.stage_defs import STAGES, StageContext, StageDef
from core.stage_tracker import ParseTrace
from core.utils import preview_text

# =============================================================================
# CONFIGURATION
# =============================================================================

PREVIEW_CHARS = int(os.getenv("JSON_PREVIEW_CHARS", "200"))


@dataclass
class ParseOutcome:
    """Successful parse: the value, the stage that produced it, and the trace."""

    data: Any
    stage: str
    trace: ParseTrace


# =============================================================================
# PARSING
# =============================================================================


def parse_candidate(stage: str, candidate: str, require_object: bool = True) -> Any:
    """Structural parse of one candidate; raises SyntaxInvalid on failure."""
    try:
        value = json.loads(candidate)
    except (ValueError, RecursionError) as e:
        raise SyntaxInvalid(stage, str(e) or type(e).__name__) from e

    if require_object and not isinstance(value, dict):
        raise SyntaxInvalid(
            stage, f"expected a JSON object, got {type(value).__name__}"
        )
    return value


def parse_with_trace(
    text: str,
    fields: Iterable[str] | None = None,
    stages: Iterable[StageDef] = STAGES,
    require_object: bool = True,
) -> ParseOutcome:
    """
    Run the repair stages and return the first successful parse.

    Args:
        text: Raw LLM response text
        fields: Code field names to neutralize (defaults to DEFAULT_CODE_FIELDS)
        stages: Ordered stage definitions; extra repair stages can be appended
        require_object: Only accept JSON objects (dicts)

    Returns:
        ParseOutcome with the parsed value, winning stage name and trace

    Raises:
        JSONExtractionFailed: No stage produced a parseable candidate
    """
    stages = tuple(stages)
    ctx = StageContext(raw=text, neutralizer=FieldNeutralizer(fields))
    trace = ParseTrace()
    tried: set[str] = set()

    for stage in stages:
        candidate = stage.transform(ctx)

        if candidate is None:
            reason = NoBalancedObjectFound(stage.name)
            logger.debug(str(reason))
            trace.skip(stage, str(reason))
            continue

        if candidate in tried:
            trace.skip(stage, "candidate identical to an earlier stage")
            continue
        tried.add(candidate)

        try:
            with trace.stage(stage, candidate):
                data = parse_candidate(stage.name, candidate, require_object)
        except SyntaxInvalid as e:
            logger.debug(f"Stage '{stage.name}' failed: {e.reason}")
            continue

        if stage is not stages[0]:
            logger.info(f"Recovered JSON at stage '{stage.name}'")
        return ParseOutcome(data=data, stage=stage.name, trace=trace)

    logger.warning(
        f"JSON extraction failed after {len(stages)} stages (length={len(text)})"
    )
    raise JSONExtractionFailed(
        length=len(text),
        preview=preview_text(text, PREVIEW_CHARS),
        attempts=trace.to_list(),
    )


def safe_json_parse(
    text: str,
    fields: Iterable[str] | None = None,
    require_object: bool = True,
) -> Any:
    """Parse LLM output into JSON, raising JSONExtractionFailed if unrecoverable."""
    return parse_with_trace(text, fields=fields, require_object=require_object).data
