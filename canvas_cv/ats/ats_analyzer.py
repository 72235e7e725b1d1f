"""ats_analyzer.py
On-demand ATS compatibility scoring of the whole resume against a target job description.
"""
from enum import Enum
from typing import Literal, Optional

from canvas_cv.ai.json_extraction import extract_first_json_object, strip_code_fences
from canvas_cv.config import EDITOR_DEFAULTS
from canvas_cv.exceptions import AnalysisParseError
from canvas_cv.logging import LoggerFactory
from canvas_cv.models import ATSAnalysisResult

logger_factory = LoggerFactory()
analyzer_logger = logger_factory.get_logger(
    name="ats_analyzer",
    logger_type="ai",
    console=False,
)


class AnalysisOutcome(str, Enum):
    SUCCESS = "success"
    NEED_JOB_DESCRIPTION = "need_job_description"
    FAILED = "failed"


def score_band(score: int) -> Literal["good", "fair", "poor"]:
    """Colour band of a score: good (>= 80), fair (>= 50), poor."""
    if score >= 80:
        return "good"
    if score >= 50:
        return "fair"
    return "poor"


def parse_analysis_response(response: Optional[dict | str]) -> ATSAnalysisResult:
    """
    Turn a collaborator response into an ATSAnalysisResult.

    Accepts the decoded JSON object or raw text with the object embedded in
    prose / code fences, in which case the first well-formed ``{...}`` wins.

    Raises:
        AnalysisParseError: If no usable analysis object can be found.
    """
    if response is None:
        raise AnalysisParseError(message="No analysis returned")
    if isinstance(response, str):
        payload = extract_first_json_object(strip_code_fences(response))
        if payload is None:
            raise AnalysisParseError(message="No JSON object in analysis response", raw_response=response)
        return ATSAnalysisResult.from_dict(payload)
    return ATSAnalysisResult.from_dict(response)


class ATSAnalyzer:
    """
    Serializes the resume, sends it with the job description to the analysis
    collaborator and stores the structured result.

    The stored analysis is replaced wholesale on success and left exactly as
    it was on any failure. `analyze()` does not guard against concurrent
    calls: callers are expected to disable their trigger while `is_analyzing`
    is True.

    Attributes:
        store (ResumeStore): Source of the resume text and job description,
            destination of the result.
        service (GenerativeTextService): Analysis collaborator.
        char_limit (int): Resume characters sent to the collaborator.
        is_analyzing (bool): True while a call is outstanding.
    """

    def __init__(
        self,
        store: "ResumeStore",
        service: "GenerativeTextService",
        char_limit: int = EDITOR_DEFAULTS.ATS_RESUME_CHAR_LIMIT,
    ):
        self.store = store
        self.service = service
        self.char_limit = char_limit
        self.is_analyzing = False

    async def analyze(self) -> AnalysisOutcome:
        """
        Run one analysis.

        Returns:
            AnalysisOutcome: NEED_JOB_DESCRIPTION if the job description is blank
                (nothing is sent, nothing changes), FAILED if the collaborator
                failed or answered with nothing parseable, SUCCESS otherwise.
        """
        job_description = self.store.job_description
        if not job_description or not job_description.strip():
            return AnalysisOutcome.NEED_JOB_DESCRIPTION

        resume_text = self.store.get_resume_text()[:self.char_limit]

        self.is_analyzing = True
        try:
            response = await self.service.analyze(resume_text, job_description)
        except Exception as e:
            analyzer_logger.warning(f"ATS analysis call failed: {e}")
            return AnalysisOutcome.FAILED
        finally:
            self.is_analyzing = False

        try:
            result = parse_analysis_response(response)
        except AnalysisParseError as e:
            logger_factory.get_ai_feature_logger("ats_analysis").warning(str(e))
            return AnalysisOutcome.FAILED

        self.store.set_ats_analysis(result)
        analyzer_logger.info(f"ATS analysis stored with score {result.score}")
        return AnalysisOutcome.SUCCESS
