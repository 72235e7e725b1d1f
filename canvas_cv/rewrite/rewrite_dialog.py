"""rewrite_dialog.py
The AI rewrite dialog: pick an instruction, get one candidate rewrite of a
single field, compare it with the original and apply or discard it.
"""
import itertools
from dataclasses import dataclass
from typing import Dict, Optional

from canvas_cv.ai.generative_text_service import MISSING_API_KEY_MESSAGE
from canvas_cv.editor.field_targets import FieldTarget, ListItemField, build_field_update, read_field
from canvas_cv.exceptions import LLMError
from canvas_cv.logging import LoggerFactory

rewrite_logger = LoggerFactory().get_logger(
    name="rewrite_dialog",
    logger_type="ai",
    console=False,
)

# Label -> instruction sent to the rewrite collaborator
PRESETS: Dict[str, str] = {
    "Add Metrics & Impact": (
        "Rewrite this text to include plausible, specific metrics, numbers, "
        "and impact-driven outcomes. Make it impressive."
    ),
    "Make Professional": "Rewrite this to be more professional, formal, and suitable for a resume.",
    "Fix Grammar": "Correct all grammar, spelling, and punctuation errors. Keep the tone the same.",
    "Make Concise": "Make this text more concise and direct. Remove fluff words.",
    "Add Action Verbs": "Rewrite this using strong action verbs to start sentences.",
}

SUMMARY_INSTRUCTION = "Rewrite this summary to be more impactful and professional."
EXPERIENCE_INSTRUCTION = "Rewrite these bullet points to be results-oriented using strong action verbs."

GENERIC_ERROR = "Failed to generate content."


@dataclass(frozen=True)
class _Origin:
    block_id: str
    target: FieldTarget
    item_id: Optional[str]


class RewriteDialog:
    """
    One rewrite dialog per editor session; it targets one field at a time.

    Every `generate*` call makes exactly one collaborator call. While it is
    outstanding `is_loading` is True; a response that arrives after the
    dialog was closed or re-opened for another field is dropped. Failures
    end up in `error` instead of raising.

    `apply()` writes the candidate to the field the dialog was opened for.
    List item fields are followed by item id, so the candidate lands on the
    same item even if items were inserted or removed in the meantime.

    Attributes:
        store (ResumeStore): Destination of applied rewrites.
        service (GenerativeTextService): Rewrite collaborator.
        is_open (bool): Whether the dialog is showing.
        original_text (str): Text the dialog was opened with.
        context_instruction (Optional[str]): Field-specific recommended instruction.
        is_loading (bool): A rewrite call is outstanding.
        candidate (Optional[str]): Last generated rewrite.
        error (Optional[str]): Visible error from the last generation.
    """

    def __init__(self, store: "ResumeStore", service: "GenerativeTextService"):
        self.store = store
        self.service = service
        self._requests = itertools.count(1)
        self._request_token: Optional[int] = None
        self._origin: Optional[_Origin] = None
        self._reset()

    def _reset(self) -> None:
        self._origin = None
        self._request_token = None
        self.is_open = False
        self.original_text = ""
        self.context_instruction: Optional[str] = None
        self.is_loading = False
        self.candidate: Optional[str] = None
        self.error: Optional[str] = None

    @property
    def target(self) -> Optional[FieldTarget]:
        return self._origin.target if self._origin else None

    @property
    def block_id(self) -> Optional[str]:
        return self._origin.block_id if self._origin else None

    def open(
        self,
        block_id: str,
        target: FieldTarget,
        original_text: Optional[str] = None,
        context_instruction: Optional[str] = None,
    ) -> bool:
        """
        Open the dialog for one field. Any previous candidate or pending call is discarded.

        Args:
            block_id (str): Block holding the field.
            target (FieldTarget): The field to rewrite.
            original_text (Optional[str]): Text to rewrite. Defaults to the field's current value.
            context_instruction (Optional[str]): Recommended instruction for this kind of field.

        Returns:
            bool: False if the block or field does not exist.
        """
        block = self.store.get_block(block_id)
        current = read_field(block, target) if block else None
        if current is None:
            return False

        item_id = None
        if isinstance(target, ListItemField):
            item_id = block.items[target.index].id

        self._reset()
        self._origin = _Origin(block_id=block_id, target=target, item_id=item_id)
        self.is_open = True
        self.original_text = current if original_text is None else original_text
        self.context_instruction = context_instruction
        return True

    async def generate(self, instruction: str) -> Optional[str]:
        """
        Request one rewrite of `original_text` following `instruction`.

        Without a configured service no call is made and `error` carries the
        missing key message, so it can never be applied as a candidate.

        Returns:
            Optional[str]: The candidate, or None if the call failed or its
                response was dropped.
        """
        if not self.is_open:
            return None

        if not self.service.is_configured:
            self.candidate = None
            self.error = MISSING_API_KEY_MESSAGE
            return None

        token = next(self._requests)
        self._request_token = token
        self.is_loading = True
        self.candidate = None
        self.error = None

        try:
            result = await self.service.rewrite(self.original_text, instruction)
        except LLMError as e:
            if self._request_token != token:
                return None
            rewrite_logger.warning(f"Rewrite failed: {e}")
            self.error = GENERIC_ERROR
            self.is_loading = False
            return None

        if self._request_token != token:
            rewrite_logger.debug("Dropping rewrite response for a closed or re-opened dialog")
            return None

        self.is_loading = False
        if result == MISSING_API_KEY_MESSAGE:
            self.error = result
            return None
        self.candidate = result
        return result

    async def generate_preset(self, label: str) -> Optional[str]:
        """
        Raises:
            KeyError: If `label` is not one of `PRESETS`.
        """
        return await self.generate(PRESETS[label])

    async def generate_recommended(self) -> Optional[str]:
        """Use the field's context instruction, falling back to "Make Professional"."""
        return await self.generate(self.context_instruction or PRESETS["Make Professional"])

    async def generate_custom(self, prompt: str) -> Optional[str]:
        """Free-form instruction. A blank prompt makes no call."""
        if not prompt or not prompt.strip():
            return None
        return await self.generate(prompt.strip())

    def _current_target(self) -> Optional[FieldTarget]:
        """The origin target, re-indexed if its item moved. None if the item is gone."""
        origin = self._origin
        if origin is None or origin.item_id is None:
            return origin.target if origin else None
        block = self.store.get_block(origin.block_id)
        if block is None:
            return None
        for index, item in enumerate(block.items):
            if item.id == origin.item_id:
                return ListItemField(index=index, field_name=origin.target.field_name)
        return None

    def apply(self) -> bool:
        """
        Commit the candidate to the originating field and close the dialog.

        Returns:
            bool: True if the store was updated. Nothing is written (and the
                dialog stays open) when there is no candidate or the target
                field no longer exists.
        """
        if not self.is_open or self.candidate is None or self.is_loading:
            return False
        block = self.store.get_block(self._origin.block_id)
        target = self._current_target()
        if block is None or target is None:
            return False

        partial = build_field_update(block, target, self.candidate)
        if partial is None:
            return False
        self.store.update_block_data(block.id, partial)
        self.close()
        return True

    def cancel(self) -> None:
        """Discard the candidate without touching the store."""
        self.close()

    def close(self) -> None:
        self._reset()

    def to_dict(self) -> dict:
        return {
            "isOpen": self.is_open,
            "blockId": self.block_id,
            "fieldPath": self.target.to_path() if self.target else None,
            "originalText": self.original_text,
            "contextInstruction": self.context_instruction,
            "isLoading": self.is_loading,
            "candidate": self.candidate,
            "error": self.error,
            "presets": list(PRESETS),
        }
