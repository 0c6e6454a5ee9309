"""JSON repair and recommendation parsing endpoints."""

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from core.errors import JSONExtractionFailed
from core.models import RecommendationResult
from core.parser import parse_with_trace
from core.recommendations import parse_recommendations

router = APIRouter()


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================


class ParseRequest(BaseModel):
    """Raw model completion to repair."""

    text: str
    fields: list[str] | None = Field(
        default=None, description="Code field names to empty (default: server config)"
    )
    require_object: bool = True


class ParseResponse(BaseModel):
    data: Any
    stage: str
    attempts: list[dict[str, Any]]


class RecommendationsRequest(BaseModel):
    text: str
    fields: list[str] | None = None


# =============================================================================
# ENDPOINTS
# =============================================================================


@router.post("/json/parse", response_model=ParseResponse)
async def parse_json(request: ParseRequest) -> ParseResponse:
    """Recover a JSON value from raw LLM output; 422 if no stage succeeds."""
    try:
        outcome = parse_with_trace(
            request.text,
            fields=request.fields,
            require_object=request.require_object,
        )
    except JSONExtractionFailed as e:
        raise HTTPException(
            status_code=422,
            detail={
                "error": "json_extraction_failed",
                "length": e.length,
                "preview": e.preview,
                "attempts": e.attempts,
            },
        )

    return ParseResponse(
        data=outcome.data,
        stage=outcome.stage,
        attempts=outcome.trace.to_list(),
    )


@router.post("/recommendations/parse", response_model=RecommendationResult)
async def parse_recommendation_text(
    request: RecommendationsRequest,
) -> RecommendationResult:
    """Parse recommendations; failures come back as an empty list with a summary."""
    return parse_recommendations(request.text, fields=request.fields)
