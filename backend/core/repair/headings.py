"""Markdown heading and stray backtick removal."""

import re

HEADING_PATTERN = re.compile(r"^\s*#+(?:\s|$)")


def is_heading_line(line: str) -> bool:
    """True if the first non-whitespace token of the line is a heading marker."""
    return HEADING_PATTERN.match(line) is not None


def strip_markdown_headings(text: str) -> str:
    """Drop markdown heading lines and trim the result."""
    kept = [line for line in text.split("\n") if not is_heading_line(line)]
    return "\n".join(kept).strip()


def strip_backticks(text: str) -> str:
    """Remove every remaining single backtick."""
    return text.replace("`", "")
