"""
Neutralize free-form code fields in LLM JSON output.

Models asked for recommendation JSON routinely put raw source code in the
code fields: unescaped quotes, literal newlines, backslashes. Any of these
breaks the surrounding JSON. Those fields are always empty in the final
result, so their values are replaced with "" before parsing.

Configuration (via environment variables):
    NEUTRALIZED_FIELDS: Comma-separated field names (default: "pythonCode,sqlCode")

The field names must match the ones the prompt tells the model to leave
empty (see core.recommendations.build_cleaning_prompt).
"""

import os
import re
from typing import Iterable

from loguru import logger

# =============================================================================
# CONFIGURATION
# =============================================================================

DEFAULT_CODE_FIELDS: tuple[str, ...] = tuple(
    name.strip()
    for name in os.getenv("NEUTRALIZED_FIELDS", "pythonCode,sqlCode").split(",")
    if name.strip()
)

# Fallback terminator when the bracket/quote-aware scan runs off the end
NAIVE_TERMINATOR = re.compile(r",|\n\s*}")

OPENERS = "([{"
CLOSERS = ")]}"
CONTAINER_CLOSERS = "]}"
QUOTES = "\"'"


# =============================================================================
# VALUE SCANNING
# =============================================================================


def find_value_end(text: str, start: int) -> int | None:
    """
    Find where the value beginning at ``start`` ends.

    Returns the index of the terminator (not consumed): a comma at value
    level, or a closing bracket that closes the enclosing object or array.
    Brackets and quoted strings opened inside the value are skipped over.
    Returns None if the scan reaches the end of the text.
    """
    depth = 0
    quote: str | None = None
    i = start
    n = len(text)

    while i < n:
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in QUOTES:
            quote = ch
        elif ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            if depth == 0:
                # ')' never closes a JSON container
                if ch in CONTAINER_CLOSERS:
                    return i
            else:
                depth -= 1
        elif ch == "," and depth == 0:
            return i
        i += 1

    return None


def find_value_end_naive(text: str, start: int) -> int | None:
    """First comma, or first newline followed by a closing brace."""
    match = NAIVE_TERMINATOR.search(text, start)
    return match.start() if match else None


# =============================================================================
# NEUTRALIZER
# =============================================================================


class FieldNeutralizer:
    """
    Replace the values of known code fields with empty strings.

    Usage:
        neutralizer = FieldNeutralizer(["pythonCode", "sqlCode"])
        text = neutralizer.neutralize(text)
    """

    def __init__(self, fields: Iterable[str] | None = None):
        self.fields: tuple[str, ...] = (
            tuple(fields) if fields is not None else DEFAULT_CODE_FIELDS
        )
        self._key_patterns = {
            name: re.compile(r'"' + re.escape(name) + r'"\s*:\s*')
            for name in self.fields
        }

    def neutralize(self, text: str) -> str:
        for name in self.fields:
            text = self._neutralize_field(text, name)
        return text

    __call__ = neutralize

    def _neutralize_field(self, text: str, name: str) -> str:
        pattern = self._key_patterns[name]
        replacement = f'"{name}": ""'
        count = 0
        pos = 0

        while True:
            match = pattern.search(text, pos)
            if not match:
                break

            value_start = match.end()
            end = find_value_end(text, value_start)
            if end is None:
                end = find_value_end_naive(text, value_start)
            if end is None:
                # No terminator at all: nothing safe to replace
                break

            # Trailing whitespace belongs to the old value
            tail_start = end
            while tail_start > value_start and text[tail_start - 1] in " \t\r\n":
                tail_start -= 1
            text = text[: match.start()] + replacement + text[tail_start:]
            pos = match.start() + len(replacement)
            count += 1

        if count:
            logger.debug(f"Neutralized {count} '{name}' value(s)")
        return text


def neutralize_code_fields(text: str, fields: Iterable[str] | None = None) -> str:
    """Neutralize code fields with the given (or default) field set."""
    return FieldNeutralizer(fields).neutralize(text)
