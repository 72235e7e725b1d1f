"""keyword_matcher.py
Checks which keywords (e.g. the analysis' missing keywords) already appear in
the resume text, tolerating small spelling and formatting differences.
"""
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from fuzzywuzzy import fuzz

from canvas_cv.config import EDITOR_DEFAULTS


@dataclass
class KeywordCoverage:
    """
    Attributes:
        matched (List[str]): Keywords found in the text.
        missing (List[str]): Keywords not found.
    """
    matched: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)

    @property
    def ratio(self) -> float:
        """Share of keywords matched (1.0 when there were none to match)."""
        total = len(self.matched) + len(self.missing)
        return len(self.matched) / total if total else 1.0


def _normalize(text: str) -> str:
    return re.sub(r"\s+", " ", re.sub(r"[^\w\s/+#.-]", " ", text.lower())).strip()


def keyword_score(keyword: str, text: str) -> int:
    """
    Best fuzzy match score (0-100) of `keyword` against `text`.

    Exact (case-insensitive, whitespace-normalized) containment scores 100;
    otherwise the partial ratio of the keyword against the text is used.
    """
    needle = _normalize(keyword)
    haystack = _normalize(text)
    if not needle:
        return 0
    if re.search(rf"(?<!\w){re.escape(needle)}(?!\w)", haystack):
        return 100
    return fuzz.partial_ratio(needle, haystack)


def match_keywords(
    keywords: Iterable[str],
    text: str,
    threshold: int = EDITOR_DEFAULTS.KEYWORD_MATCH_THRESHOLD,
) -> KeywordCoverage:
    """Split `keywords` into those present in `text` (score >= threshold) and those missing."""
    coverage = KeywordCoverage()
    for keyword in keywords:
        if keyword_score(keyword, text) >= threshold:
            coverage.matched.append(keyword)
        else:
            coverage.missing.append(keyword)
    return coverage


def missing_keyword_progress(store: "ResumeStore") -> Tuple[KeywordCoverage, bool]:
    """
    Coverage of the stored analysis' missing keywords in the current resume.

    Returns:
        Tuple[KeywordCoverage, bool]: The coverage and whether an analysis exists.
    """
    analysis = store.ats_analysis
    if analysis is None:
        return KeywordCoverage(), False
    return match_keywords(analysis.missing_keywords, store.get_resume_text()), True
