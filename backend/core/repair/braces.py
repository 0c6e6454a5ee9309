"""
Locate JSON object boundaries inside surrounding prose.

Brace counting here is naive: braces inside string literals are counted
like any other. Objects are themselves brace-delimited, so literal braces
inside values balance out in the common case. Unbalanced literal braces
inside a string can produce a wrong span; the parser then falls through to
the next stage.
"""


def extract_first_json_object(text: str) -> str | None:
    """
    Return the first balanced top-level {...} span, or None.

    A closing brace seen at depth 0 is ignored so depth never goes negative.
    Only the first span is returned; anything after it is ignored.
    """
    depth = 0
    start = -1

    for i, ch in enumerate(text):
        if ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}":
            if depth == 0:
                continue
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    return None


def extract_outer_braces(text: str) -> str | None:
    """Slice from the first '{' to the last '}' (looser fallback)."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    return text[start : end + 1]
