"""
Shared utilities for the core package.

Common helpers used by the parser and the recommendation service.
"""


def preview_text(text: str, limit: int = 200) -> str:
    """
    Single-line preview of text for logs and error messages.

    Args:
        text: Text to preview
        limit: Maximum number of characters kept

    Returns:
        Text with newlines collapsed, truncated with "..." when longer than limit
    """
    flat = " ".join(text.split())
    if len(flat) <= limit:
        return flat
    return flat[: max(limit - 3, 0)] + "..."
