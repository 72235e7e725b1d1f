"""rich_text.py
Helpers for the rich text produced by in-place editable fields.
"""
import html
import re

# Tags that end a visual line in editable content
LINE_BREAK_TAGS_REGEX = re.compile(r"<br\s*/?>|</(?:div|p|li)>", re.IGNORECASE)
TAG_REGEX = re.compile(r"<[^>]+>")


def html_to_text(value: str) -> str:
    """
    Convert editable rich text to plain text.

    Line-ending tags (``<br>``, ``</div>``, ``</p>``, ``</li>``) become newlines,
    all other tags are dropped and entities (``&amp;``, ``&nbsp;``) are decoded.

    Example:
        >>> html_to_text("<div>Led a <b>team</b></div><div>Cut costs &amp; time</div>")
        'Led a team\\nCut costs & time\\n'
    """
    if not value:
        return ""
    text = LINE_BREAK_TAGS_REGEX.sub("\n", value)
    text = TAG_REGEX.sub("", text)
    return html.unescape(text).replace("\xa0", " ")
