"""heatmap.py
Read-only "heatmap" rendering of resume text: numbers / metrics and strong
action verbs are wrapped in marker tags so the author can see at a glance how
quantified and active their bullets are.
"""
import html
import re
from dataclasses import dataclass
from typing import FrozenSet

from canvas_cv.editor.rich_text import html_to_text

METRIC_CLASS = "hm-metric"
VERB_CLASS = "hm-verb"

ACTION_VERBS: FrozenSet[str] = frozenset({
    # leadership
    "led", "managed", "directed", "supervised", "coordinated", "oversaw",
    "mentored", "spearheaded", "championed", "pioneered", "orchestrated",
    # achievement
    "achieved", "delivered", "exceeded", "surpassed", "secured", "won",
    # creation
    "created", "developed", "designed", "built", "established", "founded",
    "launched", "introduced", "initiated",
    # improvement
    "improved", "enhanced", "increased", "boosted", "accelerated", "optimized",
    "streamlined", "reduced", "maximized", "strengthened",
    # analysis
    "analyzed", "evaluated", "researched", "identified", "conducted",
    # communication
    "presented", "negotiated", "collaborated", "partnered", "facilitated",
    # technical
    "implemented", "engineered", "automated", "integrated", "deployed",
    "architected", "migrated",
})

# Currency amounts, percentages, multipliers, counts: "$1.2M", "25%", "3x", "10k+", "4"
METRIC_PATTERN = (
    r"(?<![\w$€£])"
    r"[$€£]?\d+(?:[.,]\d+)*"
    r"(?:%|\+|[xX](?![A-Za-z])|[kKmMbB](?![A-Za-z]))?"
    r"(?![A-Za-z])"
)
VERB_PATTERN = r"\b(?:" + "|".join(sorted(ACTION_VERBS, key=len, reverse=True)) + r")\b"

HEATMAP_REGEX = re.compile(
    rf"(?P<metric>{METRIC_PATTERN})|(?P<verb>{VERB_PATTERN})",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class HeatmapStats:
    metric_count: int
    action_verb_count: int

    def to_dict(self) -> dict:
        return {"metricCount": self.metric_count, "actionVerbCount": self.action_verb_count}


def highlight_html(rich_text: str) -> str:
    """
    Render `rich_text` as escaped HTML with metrics and action verbs marked.

    Metrics become ``<mark class="hm-metric">`` and action verbs (case-insensitive,
    whole words) ``<mark class="hm-verb">``; newlines become ``<br>``. The input
    is never modified.

    Example:
        >>> highlight_html("Led a 25% uplift")
        '<mark class="hm-verb">Led</mark> a <mark class="hm-metric">25%</mark> uplift'
    """
    text = html_to_text(rich_text)
    parts = []
    position = 0
    for match in HEATMAP_REGEX.finditer(text):
        parts.append(html.escape(text[position:match.start()]))
        css_class = METRIC_CLASS if match.group("metric") else VERB_CLASS
        parts.append(f'<mark class="{css_class}">{html.escape(match.group(0))}</mark>')
        position = match.end()
    parts.append(html.escape(text[position:]))
    return "".join(parts).replace("\n", "<br>")


def heatmap_stats(rich_text: str) -> HeatmapStats:
    """Count highlighted metrics and action verbs in `rich_text`."""
    metrics = verbs = 0
    for match in HEATMAP_REGEX.finditer(html_to_text(rich_text)):
        if match.group("metric"):
            metrics += 1
        else:
            verbs += 1
    return HeatmapStats(metric_count=metrics, action_verb_count=verbs)
