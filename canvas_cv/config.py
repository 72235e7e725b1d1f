"""config.py
Holds various defaults for the resume editor, its AI helpers and the ATS analyzer.
"""

from dataclasses import dataclass, field

# --------------------------------------------------------------
# SETUP DEFAULT VALUES
# --------------------------------------------------------------
@dataclass
class EditorDefaults:
    """
    Default settings for parameters used across the canvas_cv repo.
    """
    # ---- ResumeStore settings ----
    DEFAULT_THEME: str = field(
        default = "modern",
        metadata = {
            "description": 'Theme used for a fresh document: "modern", "minimal", "serif" or "classic"'
    })

    # ---- SuggestionEngine settings ----
    SUGGESTION_DEBOUNCE_SECONDS: float = field(
        default = 1.5,
        metadata = {
            "description": "Quiet period after the last description edit before a completion is requested"
    })
    SUGGESTION_MIN_LINE_LENGTH: int = field(
        default = 15,
        metadata = {
            "description": "Last line must be longer than this (in characters) to request a completion"
    })
    SUGGESTION_MIN_COMPLETION_LENGTH: int = field(
        default = 5,
        metadata = {
            "description": "Completions shorter than this are discarded"
    })
    SUGGESTION_CONTEXT_LABEL: str = field(
        default = "Work Experience",
        metadata = {
            "description": "Context label sent with every sentence completion request"
    })

    # ---- ATSAnalyzer settings ----
    ATS_RESUME_CHAR_LIMIT: int = field(
        default = 3000,
        metadata = {
            "description": "Maximum number of resume characters sent for analysis"
    })
    KEYWORD_MATCH_THRESHOLD: int = field(
        default = 85,
        metadata = {
            "description": "Fuzzy match score (0-100) at which a keyword counts as present"
    })

    # ---- GenerativeTextService settings ----
    SUMMARY_EXPERIENCE_CHAR_LIMIT: int = field(
        default = 500,
        metadata = {
            "description": "Maximum number of experience characters used to generate a summary"
    })

    # ---- LLMClient settings ----
    LLM_PROVIDER: str = field(
        default = "anthropic",
        metadata = {
            "description": 'LLM provider: "anthropic"'
    })
    ANTHROPIC_MODEL_ID: str = field(
        default = "claude-haiku-4-5",
        metadata = {
            "description": "Anthropic model ID"
    })
    LLM_TEMPERATURE: float = field(
        default = 0.5,
        metadata = {
            "description": "Sampling temperature for every editor query"
    })


# Import this where needed
EDITOR_DEFAULTS = EditorDefaults()
