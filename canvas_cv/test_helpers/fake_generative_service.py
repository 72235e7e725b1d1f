"""fake_generative_service.py
In-memory stand-in for GenerativeTextService with scripted answers, call
recording and an optional gate that holds every response until released.
"""
import asyncio
from typing import Any, Dict, List, Optional

from canvas_cv.exceptions import LLMQueryError

DEFAULT_ANALYSIS = {
    "score": 64,
    "criticalIssues": ["Summary is generic.", "Bullets lack metrics."],
    "missingKeywords": ["Kubernetes", "Figma", "Roadmapping"],
    "positiveFeedback": ["Clear structure.", "Relevant experience."],
}


class FakeGenerativeTextService:
    """
    Implements the async collaborator contract of `GenerativeTextService`.

    Attributes:
        completion (str): Answer of `complete_sentence`.
        rewrite_result (Optional[str]): Answer of `rewrite`; None echoes "Rewritten: <text>".
        analysis (Any): Answer of `analyze` (dict, raw text or None).
        summary (str): Answer of `generate_summary`.
        rewrite_error (bool): Make `rewrite` raise `LLMQueryError`.
        hold_responses (bool): Block every call until `release()` is called.
        calls (Dict[str, List[dict]]): Arguments of every call, per method.
    """

    def __init__(
        self,
        completion: str = "5 engineers to ship the platform 2 weeks early.",
        rewrite_result: Optional[str] = None,
        analysis: Any = None,
        summary: str = "Seasoned designer focused on measurable outcomes.",
        rewrite_error: bool = False,
        hold_responses: bool = False,
    ):
        self.completion = completion
        self.rewrite_result = rewrite_result
        self.analysis = dict(DEFAULT_ANALYSIS) if analysis is None else analysis
        self.summary = summary
        self.rewrite_error = rewrite_error
        self.hold_responses = hold_responses
        self.calls: Dict[str, List[dict]] = {
            "rewrite": [],
            "complete_sentence": [],
            "analyze": [],
            "generate_summary": [],
        }
        self._gate: Optional[asyncio.Event] = None

    @property
    def is_configured(self) -> bool:
        return True

    def _get_gate(self) -> asyncio.Event:
        if self._gate is None:
            self._gate = asyncio.Event()
        return self._gate

    def release(self) -> None:
        """Let every held call (and all later ones) return."""
        self._get_gate().set()

    async def _wait(self) -> None:
        if self.hold_responses:
            await self._get_gate().wait()

    async def rewrite(self, text: str, instruction: str) -> str:
        self.calls["rewrite"].append({"text": text, "instruction": instruction})
        await self._wait()
        if self.rewrite_error:
            raise LLMQueryError(provider="fake", model="fake", additional_message="scripted failure")
        return self.rewrite_result if self.rewrite_result is not None else f"Rewritten: {text}"

    async def complete_sentence(
        self,
        fragment: str,
        context: str,
        role: Optional[str] = None,
        company: Optional[str] = None,
    ) -> str:
        self.calls["complete_sentence"].append(
            {"fragment": fragment, "context": context, "role": role, "company": company}
        )
        await self._wait()
        return self.completion

    async def analyze(self, resume_text: str, job_description: str = "") -> Any:
        self.calls["analyze"].append({"resume_text": resume_text, "job_description": job_description})
        await self._wait()
        return self.analysis

    async def generate_summary(self, role: str, experience: str) -> str:
        self.calls["generate_summary"].append({"role": role, "experience": experience})
        await self._wait()
        return self.summary
