"""Text repair transforms applied before parsing LLM JSON output."""

from core.repair.braces import extract_first_json_object, extract_outer_braces
from core.repair.fences import strip_markdown_fences
from core.repair.headings import strip_backticks, strip_markdown_headings
from core.repair.neutralize import (
    DEFAULT_CODE_FIELDS,
    FieldNeutralizer,
    neutralize_code_fields,
)

__all__ = [
    # Braces
    "extract_first_json_object",
    "extract_outer_braces",
    # Fences
    "strip_markdown_fences",
    # Headings
    "strip_backticks",
    "strip_markdown_headings",
    # Neutralize
    "DEFAULT_CODE_FIELDS",
    "FieldNeutralizer",
    "neutralize_code_fields",
]
