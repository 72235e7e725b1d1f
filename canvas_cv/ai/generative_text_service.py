"""generative_text_service.py
The editor's only door to the generative text backend: rewriting a field,
completing a sentence, analyzing ATS compatibility and drafting a summary.
"""
import os
from typing import Dict, Literal, Optional

from canvas_cv.ai.llm_client import LLMClient
from canvas_cv.config import EDITOR_DEFAULTS
from canvas_cv.exceptions import LLMConfigError, LLMError
from canvas_cv.logging import LoggerFactory

logger_factory = LoggerFactory()
ai_logger = logger_factory.get_logger(
    name="generative_text_service",
    logger_type="ai",
    console=False,
)

MISSING_API_KEY_MESSAGE = "Error: API Key missing. Please configure your environment."
GENERAL_ROLE_TARGET = "Target: General Professional Role"

REWRITE_SYSTEM_PROMPT = (
    "You are an expert resume writer and career coach. You rewrite one piece of resume "
    "text at a time according to the task you are given.\n\n"
    "Instructions:\n"
    "1. Follow the task exactly.\n"
    "2. Keep facts that are present in the input; do not invent employers, titles or dates.\n"
    "3. Preserve line breaks when the input is a list of bullet points.\n"
    "4. Return ONLY the improved text. Do not include quotes or explanations."
)

COMPLETION_SYSTEM_PROMPT = (
    "You complete resume bullet points in a professional, impact-oriented way.\n\n"
    "Instructions:\n"
    "1. Return ONLY the completion part (the rest of the sentence), never the text you were given.\n"
    "2. Keep it short (max 10-15 words).\n"
    "3. Prefer concrete outcomes and metrics.\n"
    "Example: given \"Led a team of\" you answer \"5 engineers to deliver the project 2 weeks ahead of schedule.\""
)

ATS_SYSTEM_PROMPT = (
    "You analyze resume text for ATS (Applicant Tracking System) compatibility.\n\n"
    "Return a JSON object with this EXACT structure (no markdown formatting, just raw JSON):\n"
    "{\n"
    "  \"score\": 0-100 integer based on keyword match, readability and impact,\n"
    "  \"criticalIssues\": [\"2-3 major issues to fix\"],\n"
    "  \"missingKeywords\": [\"3-5 important keywords missing (from the job description if provided)\"],\n"
    "  \"positiveFeedback\": [\"2 things done well\"]\n"
    "}\n\n"
    "Do not include any additional text, explanations, or formatting outside the JSON."
)

SUMMARY_SYSTEM_PROMPT = (
    "You write professional resume summaries of approximately 50 words. "
    "Keep them impactful, use action verbs, and avoid buzzwords. Return only the summary."
)

FEATURE_NAMES = Literal["rewrite_text", "complete_sentence", "analyze_ats", "generate_summary"]


class GenerativeTextService:
    """
    Async wrapper around `LLMClient` implementing the editor's collaborator contract.

    Every method degrades gracefully when no API key is configured: `rewrite`
    returns an explanatory placeholder, the others return their neutral
    "nothing available" value. Call failures are logged; only `rewrite` lets
    them propagate (as `LLMError`) so the rewrite dialog can show the error.

    Attributes:
        llm_client (Optional[LLMClient]): Shared, pre-initialized client. When None,
            one client per feature is created lazily on first use.
        test_mode (bool): Passed to lazily created clients (canned responses).
        test_response_type (str): Canned response type for test mode.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        test_mode: bool = False,
        test_response_type: Literal["success", "failed", "unexpected_json", "not_json"] = "success",
    ):
        self.llm_client = llm_client
        self.test_mode = test_mode
        self.test_response_type = test_response_type
        self._clients: Dict[str, LLMClient] = {}

    # ----------------------
    # CONFIGURATION
    # ----------------------
    @property
    def is_configured(self) -> bool:
        """True when a client was injected, test mode is on, or an API key is set."""
        if self.llm_client is not None or self.test_mode:
            return True
        api_key = os.getenv("ANTHROPIC_API_KEY")
        return bool(api_key) and api_key != "<REPLACE_ME>"

    def _get_client(self, function_name: FEATURE_NAMES) -> Optional[LLMClient]:
        """
        Return a ready client for `function_name`, or None if configuration is absent.

        Raises:
            LLMInitializationError: If the LangChain client cannot be created.
        """
        if self.llm_client is not None:
            return self.llm_client
        if function_name in self._clients:
            return self._clients[function_name]
        try:
            client = LLMClient(
                function_name=function_name,
                test_mode=self.test_mode,
                test_response_type=self.test_response_type,
            )
        except LLMConfigError as e:
            ai_logger.warning(f"AI feature '{function_name}' unavailable: {e}")
            return None
        client.initialize_client()
        self._clients[function_name] = client
        return client

    # ----------------------
    # COLLABORATOR CALLS
    # ----------------------
    async def rewrite(self, text: str, instruction: str) -> str:
        """
        Rewrite `text` following `instruction`.

        Returns:
            str: The rewritten text, the original text if the model answered
                with nothing, or `MISSING_API_KEY_MESSAGE` without configuration.

        Raises:
            LLMError: If the model call fails.
        """
        client = self._get_client("rewrite_text") if self.is_configured else None
        if client is None:
            return MISSING_API_KEY_MESSAGE

        user_prompt = f"Task: {instruction}\n\nInput Text:\n\"{text}\""
        try:
            result = await client.aquery(system_prompt=REWRITE_SYSTEM_PROMPT, user_prompt=user_prompt)
        except LLMError as e:
            logger_factory.get_ai_feature_logger("rewrite").warning(f"Rewrite failed: {e}")
            raise
        return str(result).strip() or text

    async def complete_sentence(
        self,
        fragment: str,
        context: str,
        role: Optional[str] = None,
        company: Optional[str] = None,
    ) -> str:
        """
        Propose the rest of a resume sentence. Returns "" for "no suggestion",
        including on failure or missing configuration.
        """
        if len(fragment) < EDITOR_DEFAULTS.SUGGESTION_MIN_COMPLETION_LENGTH or not self.is_configured:
            return ""

        context_lines = [f"Context: The user is writing the {context} section of a resume."]
        if role:
            context_lines.append(f"Role: {role}")
        if company:
            context_lines.append(f"Company: {company}")
        user_prompt = "\n".join(context_lines) + f"\nCurrent text: \"{fragment}\""

        try:
            client = self._get_client("complete_sentence")
            if client is None:
                return ""
            result = await client.aquery(system_prompt=COMPLETION_SYSTEM_PROMPT, user_prompt=user_prompt)
        except LLMError as e:
            logger_factory.get_ai_feature_logger("completion").warning(f"Completion failed: {e}")
            return ""
        return str(result).strip()

    async def analyze(self, resume_text: str, job_description: str = "") -> Optional[dict | str]:
        """
        Ask for an ATS analysis of `resume_text` against `job_description`.

        Returns:
            dict | str | None: The decoded JSON object when the model returned
                clean JSON, the raw text when it did not, None on failure or
                missing configuration. Never raises.
        """
        if not self.is_configured:
            return None

        target = (
            f"Target Job Description: {job_description}"
            if job_description and job_description.strip()
            else GENERAL_ROLE_TARGET
        )
        user_prompt = f"{target}\n\nResume Text: \"{resume_text}\""

        try:
            client = self._get_client("analyze_ats")
            if client is None:
                return None
            return await client.aquery(
                system_prompt=ATS_SYSTEM_PROMPT,
                user_prompt=user_prompt,
                expect_json=True,
            )
        except LLMError as e:
            logger_factory.get_ai_feature_logger("ats_analysis").warning(f"ATS analysis failed: {e}")
            return None

    async def generate_summary(self, role: str, experience: str) -> str:
        """Draft a ~50 word summary for `role` from experience text. "" on failure."""
        if not self.is_configured:
            return "API Key missing."

        excerpt = experience[:EDITOR_DEFAULTS.SUMMARY_EXPERIENCE_CHAR_LIMIT]
        user_prompt = (
            f"Write a professional resume summary for a {role}.\n"
            f"Based on this experience context: \"{excerpt}...\""
        )
        try:
            client = self._get_client("generate_summary")
            if client is None:
                return "API Key missing."
            result = await client.aquery(system_prompt=SUMMARY_SYSTEM_PROMPT, user_prompt=user_prompt)
        except LLMError as e:
            logger_factory.get_ai_feature_logger("summary").warning(f"Summary generation failed: {e}")
            return ""
        return str(result).strip()
