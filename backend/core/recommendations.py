"""
Turn LLM output into data-cleaning recommendations.

This is the boundary the UI talks to. Whatever the model returns, callers
get a RecommendationResult: either fully narrowed recommendations or an
empty list with a human-readable summary. Nothing raises past this module.

Key features:
- Prompt lists the code fields as empty strings, in lockstep with the
  neutralizer's field set
- Parsing goes through the staged repair pipeline (core.parser)
- Code fields are always emptied, whatever the model emitted

The LLM client is injected; this module makes no network calls itself.

Configuration (via environment variables):
    RECOMMENDATION_TEMPERATURE: Sampling temperature for the LLM call (default: 0.2)
"""

import os
from typing import Any, Iterable, Protocol

from loguru import logger
from pydantic import ValidationError

from core.errors import JSONExtractionFailed
from core.models import (
    GENERATION_FAILED_SUMMARY,
    PARSE_FAILED_SUMMARY,
    CleaningRecommendation,
    DatasetSummary,
    RecommendationResult,
)
from core.parser import safe_json_parse
from core.repair import DEFAULT_CODE_FIELDS

# =============================================================================
# CONFIGURATION
# =============================================================================

TEMPERATURE = float(os.getenv("RECOMMENDATION_TEMPERATURE", "0.2"))


class LLMClient(Protocol):
    """Anything with an async chat-completion call returning text."""

    async def complete(self, messages: list[dict], temperature: float = ...) -> Any: ...


# =============================================================================
# PROMPT
# =============================================================================

AI_JSON_SYSTEM_PROMPT = (
    "You are a strict JSON generator. Return ONLY a single JSON object, "
    "no prose, no markdown, no code fences, no headings."
)

CLEANING_PROMPT = """You are a friendly data consultant explaining to a business owner (not a technical person) how to improve their data. Use simple, clear language and focus on business impact.

Dataset: {file_name}
- {total_rows} rows of data
- {total_columns} different types of information
- Current quality score: {quality_score}%

Problems found:
{problems}

Sample data columns: {headers}

Provide 4-6 recommendations in JSON format. For each recommendation, explain:
1. What the problem is in simple terms (like explaining to a friend)
2. Why it matters for business success
3. How to fix it step-by-step
4. What the result will look like
5. How long it will take and how difficult it is

IMPORTANT:
- Return ONLY a valid JSON object. No markdown, no headings, no code fences, no backticks, no extra prose.
- Set {empty_fields} to empty strings ("") - do NOT include any code.
- Ensure all values are proper JSON types (strings, numbers, arrays); do not leave unquoted text.

Format:
{{
  "recommendations": [
    {{
      "id": "unique_id",
      "title": "Simple, clear title",
      "description": "Brief technical description",
      "userFriendlyExplanation": "Explain like talking to a business owner who isn't technical - use analogies and simple language",
      "impact": "low|medium|high",
      "confidence": 0.95,
      "affectedRows": 150,
      "category": "missing_data|duplicates|outliers|formatting|validation",
      "businessImpact": "How this affects business decisions, revenue, customers, etc.",
      "stepByStepGuide": ["Step 1: Clear action", "Step 2: Clear action", "Step 3: Clear action"],
      "estimatedTimeToFix": "15 minutes|1 hour|half day",
      "difficulty": "easy|medium|hard",
{empty_field_lines}
      "preview": "What will change after applying this fix"
    }}
  ],
  "summary": "One or two sentences on the overall state of the data"
}}

Focus on practical, business-focused explanations that anyone can understand. Use analogies and real-world examples."""


def build_cleaning_prompt(
    summary: DatasetSummary,
    fields: Iterable[str] | None = None,
) -> str:
    """
    Build the recommendation prompt for a dataset.

    The code fields named here must be the ones the neutralizer empties,
    so both default to DEFAULT_CODE_FIELDS.
    """
    fields = tuple(fields) if fields is not None else DEFAULT_CODE_FIELDS

    problems = [
        f"- {col}: {count} missing values"
        for col, count in summary.null_values.items()
    ]
    if summary.duplicates > 0:
        problems.append(f"- {summary.duplicates} duplicate records")

    return CLEANING_PROMPT.format(
        file_name=summary.file_name,
        total_rows=summary.total_rows,
        total_columns=summary.total_columns,
        quality_score=summary.quality_score,
        problems="\n".join(problems) or "- None detected",
        headers=", ".join(summary.headers),
        empty_fields=" and ".join(f'"{name}"' for name in fields),
        empty_field_lines="\n".join(f'      "{name}": "",' for name in fields),
    )


# =============================================================================
# NARROWING
# =============================================================================


def narrow_recommendations(data: dict) -> RecommendationResult:
    """
    Narrow a parsed JSON object into a RecommendationResult.

    Raises:
        ValueError: 'recommendations' missing or not a list
        ValidationError: an entry could not be coerced
    """
    raw_recs = data.get("recommendations")
    if not isinstance(raw_recs, list):
        raise ValueError(
            f"'recommendations' must be a list, got {type(raw_recs).__name__}"
        )

    recommendations = []
    for i, item in enumerate(raw_recs):
        if not isinstance(item, dict):
            logger.warning(f"  Skipping recommendation {i}: not an object")
            continue
        recommendations.append(CleaningRecommendation.model_validate(item))

    summary = data.get("summary")
    return RecommendationResult(
        recommendations=recommendations,
        summary=summary if isinstance(summary, str) else "",
    )


def parse_recommendations(
    text: str,
    fields: Iterable[str] | None = None,
) -> RecommendationResult:
    """
    Parse raw LLM output into recommendations. Never raises.

    Args:
        text: Raw model completion
        fields: Code field names to neutralize (defaults to DEFAULT_CODE_FIELDS)

    Returns:
        Narrowed result, or an empty result with PARSE_FAILED_SUMMARY
    """
    try:
        data = safe_json_parse(text, fields=fields)
        result = narrow_recommendations(data)
    except JSONExtractionFailed as e:
        logger.warning(f"Failed to parse LLM response: {e.preview!r}")
        return RecommendationResult.failed(PARSE_FAILED_SUMMARY)
    except (ValueError, ValidationError) as e:
        logger.warning(f"LLM response has unexpected shape: {e}")
        return RecommendationResult.failed(PARSE_FAILED_SUMMARY)

    logger.info(f"Parsed {len(result.recommendations)} recommendations")
    return result


async def generate_recommendations(
    summary: DatasetSummary,
    llm: LLMClient,
    fields: Iterable[str] | None = None,
    temperature: float = TEMPERATURE,
) -> RecommendationResult:
    """
    Ask the LLM for cleaning recommendations and parse its answer.

    Any failure (client error, unparseable output) degrades to an empty
    result with a summary explaining what went wrong.
    """
    fields = tuple(fields) if fields is not None else DEFAULT_CODE_FIELDS
    prompt = build_cleaning_prompt(summary, fields)

    logger.info(f"Requesting recommendations for {summary.file_name}")

    try:
        response = await llm.complete(
            [
                {"role": "system", "content": AI_JSON_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=temperature,
        )
    except Exception as e:
        logger.error(f"Error generating AI recommendations: {e}")
        return RecommendationResult.failed(GENERATION_FAILED_SUMMARY)

    return parse_recommendations(str(response), fields=fields)
