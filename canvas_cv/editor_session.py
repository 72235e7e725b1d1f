"""editor_session.py
Wires one editing session together: the store and every component that
reads or writes it.
"""
from typing import Optional

from canvas_cv.ai.generative_text_service import GenerativeTextService
from canvas_cv.ats.ats_analyzer import ATSAnalyzer
from canvas_cv.ats.keyword_matcher import missing_keyword_progress
from canvas_cv.config import EDITOR_DEFAULTS
from canvas_cv.editor.block_renderer import BlockRenderer
from canvas_cv.editor.drag_reorder import DragReorderController
from canvas_cv.editor.field_targets import FieldTarget, ListItemField, WholeField
from canvas_cv.models import BlockType, HeaderData
from canvas_cv.rewrite.rewrite_dialog import (
    EXPERIENCE_INSTRUCTION,
    SUMMARY_INSTRUCTION,
    RewriteDialog,
)
from canvas_cv.store.resume_store import ResumeStore
from canvas_cv.suggestions.suggestion_engine import SuggestionEngine


def context_instruction_for(block_type: BlockType, target: FieldTarget) -> Optional[str]:
    """Recommended rewrite instruction for a field, None if it has none."""
    if block_type == BlockType.SUMMARY and isinstance(target, WholeField) and target.field_name == "content":
        return SUMMARY_INSTRUCTION
    if block_type == BlockType.EXPERIENCE and isinstance(target, ListItemField) and target.field_name == "description":
        return EXPERIENCE_INSTRUCTION
    return None


class EditorSession:
    """
    One user's editor: a `ResumeStore` plus the renderer, drag controller,
    suggestion engine, ATS analyzer and rewrite dialog bound to it.

    All components share the same store and collaborator. The suggestion
    engine needs the asyncio loop that runs the session's coroutines, so
    field edits should be made from that loop.
    """

    def __init__(
        self,
        store: Optional[ResumeStore] = None,
        service: Optional[GenerativeTextService] = None,
        debounce_seconds: float = EDITOR_DEFAULTS.SUGGESTION_DEBOUNCE_SECONDS,
    ):
        self.store = store or ResumeStore()
        self.service = service or GenerativeTextService()
        self.suggestion_engine = SuggestionEngine(
            store=self.store,
            service=self.service,
            debounce_seconds=debounce_seconds,
        )
        self.renderer = BlockRenderer(self.store, self.suggestion_engine)
        self.drag = DragReorderController(self.store)
        self.analyzer = ATSAnalyzer(self.store, self.service)
        self.rewrite_dialog = RewriteDialog(self.store, self.service)

    def open_rewrite(self, block_id: str, target: FieldTarget) -> bool:
        """Open the rewrite dialog on a field with its recommended instruction."""
        block = self.store.get_block(block_id)
        if block is None:
            return False
        return self.rewrite_dialog.open(
            block_id=block_id,
            target=target,
            context_instruction=context_instruction_for(block.type, target),
        )

    def keyword_progress(self) -> dict:
        """Which of the last analysis' missing keywords the resume now contains."""
        coverage, has_analysis = missing_keyword_progress(self.store)
        return {
            "hasAnalysis": has_analysis,
            "matched": coverage.matched,
            "missing": coverage.missing,
            "ratio": coverage.ratio,
        }

    async def draft_summary(self) -> str:
        """
        Ask the collaborator for a summary based on the header title and the
        experience text. The draft is returned, not written to the store.
        """
        role = "Professional"
        experience = []
        for block in self.store.blocks:
            if isinstance(block.data, HeaderData) and block.data.title:
                role = block.data.title
            elif block.type == BlockType.EXPERIENCE:
                experience.extend(item.description for item in block.items)
        return await self.service.generate_summary(role, "\n".join(experience))

    def close(self) -> None:
        self.suggestion_engine.close()
        self.rewrite_dialog.close()
