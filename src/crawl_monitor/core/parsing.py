"""Splitting free-form provider text into a title and a summary."""

import re

PLACEHOLDER_TITLE = "New update detected"
EMPTY_RESPONSE_TEXT = "No relevant content found."

_HEADING_RE = re.compile(r"^#+\s*")
_EMPHASIS_RE = re.compile(r"\*\*|__")


def clean_title(line: str) -> str:
    """Strip markdown heading and bold markers from a title line."""
    title = _HEADING_RE.sub("", line.strip())
    return _EMPHASIS_RE.sub("", title).strip()


def parse_summary(text: str) -> tuple[str, str]:
    """Split provider text into ``(title, summary)``.

    The first non-blank line is the title, every other non-blank line is the
    summary. When nothing is left for the summary the whole text is used and
    the title falls back to a placeholder. Never raises.
    """
    text = (text or "").strip()
    if not text:
        return PLACEHOLDER_TITLE, EMPTY_RESPONSE_TEXT

    lines = [line.strip() for line in text.split("\n") if line.strip()]
    title = clean_title(lines[0])
    summary = "\n".join(lines[1:]).strip()

    if not summary or not title:
        return PLACEHOLDER_TITLE, text

    return title, summary


def truncate(text: str, limit: int = 200) -> str:
    """Cap text at ``limit`` characters, marking the cut with an ellipsis."""
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
