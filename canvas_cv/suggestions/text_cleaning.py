"""text_cleaning.py
Decides when a description edit is worth a completion request and filters
what comes back.
"""
import re

from canvas_cv.config import EDITOR_DEFAULTS
from canvas_cv.editor.rich_text import html_to_text

BULLET_REGEX = re.compile(r"^\s*[•◦▪▫‣⁃·*\-–—]+\s*")

# The model sometimes echoes the few-shot template from its prompt
PROMPT_ECHO_MARKERS = ("Input:", "Output:")


def last_line_fragment(description: str) -> str:
    """
    Plain text of the last non-blank line of `description`, bullet glyph stripped.

    Example:
        >>> last_line_fragment("<div>• Shipped v2</div><div>• Led a team of</div>")
        'Led a team of'
    """
    lines = [line for line in html_to_text(description).splitlines() if line.strip()]
    if not lines:
        return ""
    return BULLET_REGEX.sub("", lines[-1]).strip()


def should_request_completion(fragment: str) -> bool:
    """A completion is requested only for a long enough line that is not finished yet."""
    return (
        len(fragment) > EDITOR_DEFAULTS.SUGGESTION_MIN_LINE_LENGTH
        and not fragment.endswith(".")
    )


def is_valid_completion(completion: str) -> bool:
    """Reject empty or very short completions and echoes of the prompt template."""
    text = (completion or "").strip()
    if len(text) < EDITOR_DEFAULTS.SUGGESTION_MIN_COMPLETION_LENGTH:
        return False
    return not any(marker in text for marker in PROMPT_ECHO_MARKERS)
