"""
Error taxonomy for the JSON repair pipeline.

Only JSONExtractionFailed escapes the parser. The other errors are raised
inside individual stages and recorded in the parse trace to drive
escalation to the next stage.
"""


class JSONRepairError(Exception):
    """Base class for JSON repair errors."""


class SyntaxInvalid(JSONRepairError):
    """Candidate text is not parseable JSON (or not an object) at a stage."""

    def __init__(self, stage: str, reason: str):
        super().__init__(f"{stage}: {reason}")
        self.stage = stage
        self.reason = reason


class NoBalancedObjectFound(JSONRepairError):
    """No {...} span could be located in the candidate text."""

    def __init__(self, stage: str):
        super().__init__(f"{stage}: no JSON object boundaries found")
        self.stage = stage


class JSONExtractionFailed(JSONRepairError):
    """
    Terminal failure: every stage was exhausted.

    Carries the input length and a short preview for diagnostics, plus the
    list of stage attempts (dicts) when a trace was recorded.
    """

    def __init__(self, length: int, preview: str, attempts: list[dict] | None = None):
        super().__init__(
            f"Could not locate valid JSON in LLM response "
            f"(length={length}, preview={preview!r})"
        )
        self.length = length
        self.preview = preview
        self.attempts = attempts or []
