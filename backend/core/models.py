"""
Domain records for AI cleaning recommendations.

The parser only guarantees a JSON object. These models narrow it into the
shape the UI consumes: a list of recommendation entries plus a summary.
Keys are camelCase on the wire, snake_case in Python.
"""

import math
import random
import string
import time
from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# =============================================================================
# CONFIGURATION
# =============================================================================

PARSE_FAILED_SUMMARY = "AI response could not be parsed; showing no-op recommendations."
GENERATION_FAILED_SUMMARY = "AI generation failed; showing no-op recommendations."


def generate_recommendation_id() -> str:
    """Fallback id, e.g. 'rec_1718000000000_k3j9x0a1b'."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"rec_{int(time.time() * 1000)}_{suffix}"


def _to_number(v: Any) -> float | None:
    """Numeric pass-through; anything non-numeric becomes None."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        try:
            number = float(v)
        except OverflowError:
            logger.debug("Dropping integer too large for a float")
            return None
        return number if math.isfinite(number) else None
    try:
        number = float(str(v).strip())
    except ValueError:
        logger.debug(f"Dropping non-numeric value {v!r}")
        return None
    return number if math.isfinite(number) else None


# =============================================================================
# RECOMMENDATIONS
# =============================================================================


class CleaningRecommendation(BaseModel):
    """A single data-cleaning recommendation."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(default_factory=generate_recommendation_id)
    title: str = ""
    description: str = ""
    user_friendly_explanation: str = ""
    impact: str = ""  # low|medium|high, not enforced
    confidence: float | None = None  # expected 0-1, not enforced
    affected_rows: int | None = None
    category: str = ""  # missing_data|duplicates|outliers|... open set
    business_impact: str = ""
    step_by_step_guide: list[str] = Field(default_factory=list)
    estimated_time_to_fix: str = ""
    difficulty: str = ""
    python_code: str = ""
    sql_code: str = ""
    preview: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _fill_id(cls, v: Any) -> str:
        if v is None or v == "":
            return generate_recommendation_id()
        return str(v)

    @field_validator(
        "title",
        "description",
        "user_friendly_explanation",
        "impact",
        "category",
        "business_impact",
        "estimated_time_to_fix",
        "difficulty",
        "preview",
        mode="before",
    )
    @classmethod
    def _text(cls, v: Any) -> str:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, v: Any) -> float | None:
        return _to_number(v)

    @field_validator("affected_rows", mode="before")
    @classmethod
    def _rows(cls, v: Any) -> int | None:
        number = _to_number(v)
        return int(number) if number is not None else None

    @field_validator("step_by_step_guide", mode="before")
    @classmethod
    def _steps(cls, v: Any) -> list[str]:
        if not isinstance(v, list):
            return []
        return [s if isinstance(s, str) else str(s) for s in v]

    @field_validator("python_code", "sql_code", mode="before")
    @classmethod
    def _always_empty(cls, v: Any) -> str:
        return ""

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class RecommendationResult(BaseModel):
    """What the UI receives: recommendations plus a summary line."""

    recommendations: list[CleaningRecommendation] = Field(default_factory=list)
    summary: str = ""

    @classmethod
    def failed(cls, summary: str = PARSE_FAILED_SUMMARY) -> "RecommendationResult":
        return cls(recommendations=[], summary=summary)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


# =============================================================================
# PROMPT INPUT
# =============================================================================


@dataclass
class DatasetSummary:
    """Dataset profile the recommendation prompt is built from."""

    file_name: str
    total_rows: int
    total_columns: int
    quality_score: int
    null_values: dict[str, int] = field(default_factory=dict)
    duplicates: int = 0
    headers: list[str] = field(default_factory=list)
