"""Tests for recommendation narrowing, prompt building and the LLM wrapper."""

import asyncio
import json

from core.models import (
    GENERATION_FAILED_SUMMARY,
    PARSE_FAILED_SUMMARY,
    CleaningRecommendation,
    DatasetSummary,
    RecommendationResult,
)
from core.recommendations import (
    AI_JSON_SYSTEM_PROMPT,
    build_cleaning_prompt,
    generate_recommendations,
    parse_recommendations,
)

FULL_ENTRY = {
    "id": "fill_missing_email",
    "title": "Fill in missing emails",
    "description": "Null values in email",
    "userFriendlyExplanation": "Like a phone book with blank numbers",
    "impact": "high",
    "confidence": 0.92,
    "affectedRows": 150,
    "category": "missing_data",
    "businessImpact": "Campaigns miss customers",
    "stepByStepGuide": ["Step 1: Find blanks", "Step 2: Ask sales"],
    "estimatedTimeToFix": "1 hour",
    "difficulty": "easy",
    "pythonCode": "df['email'].fillna('n/a')",
    "sqlCode": "UPDATE t SET email = 'n/a'",
    "preview": "No blank emails",
}


class FakeLLM:
    def __init__(self, response: str = "", error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[tuple[list[dict], float]] = []

    async def complete(self, messages: list[dict], temperature: float = 0.0) -> str:
        self.calls.append((messages, temperature))
        if self.error:
            raise self.error
        return self.response


def make_summary() -> DatasetSummary:
    return DatasetSummary(
        file_name="customers.csv",
        total_rows=1000,
        total_columns=3,
        quality_score=87,
        null_values={"email": 150, "phone": 0},
        duplicates=12,
        headers=["name", "email", "phone"],
    )


# =============================================================================
# NARROWING
# =============================================================================


def test_full_entry_round_trips_with_code_fields_emptied():
    text = json.dumps({"recommendations": [FULL_ENTRY], "summary": "Mostly clean"})
    result = parse_recommendations(text)

    assert result.summary == "Mostly clean"
    assert len(result.recommendations) == 1
    rec = result.recommendations[0].to_dict()
    assert rec == {**FULL_ENTRY, "pythonCode": "", "sqlCode": ""}


def test_raw_code_in_fenced_response():
    text = (
        "```json\n"
        '{"recommendations": [{"id": "a", "title": "Dedupe",\n'
        '"pythonCode": df = df.drop_duplicates(subset=["id", "email"])\n'
        "print(len(df)),\n"
        '"sqlCode": SELECT DISTINCT * FROM customers\n'
        '}], "summary": "s"}\n'
        "```"
    )
    result = parse_recommendations(text)
    assert result.summary == "s"
    rec = result.recommendations[0]
    assert (rec.id, rec.title, rec.python_code, rec.sql_code) == ("a", "Dedupe", "", "")


def test_missing_id_is_generated():
    result = parse_recommendations('{"recommendations": [{"title": "t"}], "summary": ""}')
    assert result.recommendations[0].id.startswith("rec_")


def test_loose_field_types_are_coerced():
    rec = CleaningRecommendation.model_validate(
        {
            "title": None,
            "confidence": "0.8",
            "affectedRows": 12.7,
            "stepByStepGuide": "just do it",
            "impact": 3,
        }
    )
    assert rec.title == ""
    assert rec.confidence == 0.8
    assert rec.affected_rows == 12
    assert rec.step_by_step_guide == []
    assert rec.impact == "3"


def test_non_numeric_confidence_becomes_none():
    rec = CleaningRecommendation.model_validate(
        {"confidence": "high", "affectedRows": "many"}
    )
    assert rec.confidence is None
    assert rec.affected_rows is None


def test_huge_integer_affected_rows_becomes_none():
    text = (
        '{"recommendations": [{"id": "a", "affectedRows": 1'
        + "0" * 400
        + '}], "summary": "s"}'
    )
    result = parse_recommendations(text)
    assert result.summary == "s"
    assert result.recommendations[0].affected_rows is None


def test_non_object_entries_skipped():
    result = parse_recommendations('{"recommendations": ["oops", {"id": "b"}], "summary": "s"}')
    assert [r.id for r in result.recommendations] == ["b"]


def test_missing_summary_defaults_to_empty():
    result = parse_recommendations('{"recommendations": []}')
    assert result == RecommendationResult(recommendations=[], summary="")


def test_unparseable_text_degrades():
    result = parse_recommendations("not json at all")
    assert result.recommendations == []
    assert result.summary == PARSE_FAILED_SUMMARY


def test_recommendations_not_a_list_degrades():
    result = parse_recommendations('{"recommendations": "none", "summary": "s"}')
    assert result.to_dict() == {"recommendations": [], "summary": PARSE_FAILED_SUMMARY}


# =============================================================================
# PROMPT
# =============================================================================


def test_prompt_lists_problems_and_empty_code_fields():
    prompt = build_cleaning_prompt(make_summary())

    assert "Dataset: customers.csv" in prompt
    assert "- 1000 rows of data" in prompt
    assert "- email: 150 missing values" in prompt
    assert "- 12 duplicate records" in prompt
    assert "Sample data columns: name, email, phone" in prompt
    assert 'Set "pythonCode" and "sqlCode" to empty strings' in prompt
    assert '"pythonCode": "",' in prompt
    assert '"sqlCode": "",' in prompt


def test_prompt_follows_custom_fields():
    prompt = build_cleaning_prompt(make_summary(), fields=["rCode"])
    assert '"rCode": "",' in prompt
    assert "pythonCode" not in prompt


# =============================================================================
# LLM WRAPPER
# =============================================================================


def test_generate_recommendations_parses_response():
    body = json.dumps({"recommendations": [FULL_ENTRY], "summary": "ok"})
    llm = FakeLLM(response=f"# Recommendations\n```json\n{body}\n```")

    result = asyncio.run(generate_recommendations(make_summary(), llm, temperature=0.1))

    assert result.summary == "ok"
    assert result.recommendations[0].python_code == ""
    messages, temperature = llm.calls[0]
    assert temperature == 0.1
    assert messages[0] == {"role": "system", "content": AI_JSON_SYSTEM_PROMPT}
    assert "customers.csv" in messages[1]["content"]


def test_generate_recommendations_client_error_degrades():
    llm = FakeLLM(error=RuntimeError("rate limited"))
    result = asyncio.run(generate_recommendations(make_summary(), llm))
    assert result.recommendations == []
    assert result.summary == GENERATION_FAILED_SUMMARY


def test_generate_recommendations_garbage_degrades():
    llm = FakeLLM(response="I cannot help with that.")
    result = asyncio.run(generate_recommendations(make_summary(), llm))
    assert result.summary == PARSE_FAILED_SUMMARY
