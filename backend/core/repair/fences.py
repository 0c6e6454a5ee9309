"""Markdown code-fence removal."""

import re

# Opening fence, optional language tag (only when followed by whitespace),
# then the shortest run of content up to the next closing fence.
FENCE_PATTERN = re.compile(r"```(?:[\w+#.-]+(?=\s))?\s*(.*?)\s*```", re.DOTALL)


def strip_markdown_fences(text: str) -> str:
    """
    Replace every fenced block with its inner content.

    Text outside the fences is left untouched. An opening fence without a
    matching close is not a match, so that segment comes back unchanged.

    Example:
        "```json\\n{\\"a\\": 1}\\n```" -> "{\\"a\\": 1}"
    """
    return FENCE_PATTERN.sub(lambda m: m.group(1), text)
