"""resume_store.py
Single source of truth for an editing session: the ordered block list, display
settings, transient UI flags and the last ATS analysis.
"""
import dataclasses
import threading
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from canvas_cv.config import EDITOR_DEFAULTS
from canvas_cv.exceptions import InvalidBlockDataError, ResumeStoreError
from canvas_cv.logging import LoggerFactory
from canvas_cv.models import (
    ATSAnalysisResult,
    Block,
    BlockType,
    STYLE_CHOICES,
    StyleConfig,
    Theme,
    build_seed_blocks,
    default_data_for_type,
    default_title_for_type,
    normalize_partial_data,
    resolve_block_type,
    to_snake,
)
from canvas_cv.store.id_generator import IdGenerator, all_ids_unique
from canvas_cv.store.resume_text import resume_to_text

store_logger = LoggerFactory().get_logger(
    name="resume_store",
    logger_type="store",
    console=False,
)

StoreListener = Callable[["ResumeStore"], None]


class ResumeStore:
    """
    Owns every piece of mutable editor state.

    Blocks and their payloads are immutable dataclasses: readers receive the
    current objects and mutations replace them, so no component can hold a
    private mutable copy of block data. Every mutation runs under one lock and
    notifies subscribers after the state has been replaced.

    Invalid targets (unknown block ids) are silent no-ops. Only programming
    errors, such as a partial update naming a field the payload does not
    have, raise.

    Attributes:
        theme (Theme): Display theme.
        style_config (StyleConfig): Typography / spacing settings.
        active_block_id (Optional[str]): Block currently focused in the editor.
        last_added_block_id (Optional[str]): Block to scroll to / highlight once.
        ats_analysis (Optional[ATSAnalysisResult]): Result of the last successful analysis.
        job_description (str): Target job description for analysis.
        is_heatmap_visible (bool): Heatmap (read-only) rendering mode.
        is_ai_suggestions_enabled (bool): Global switch for autocomplete suggestions.

    Example:
        >>> store = ResumeStore()
        >>> block = store.add_block("skills")
        >>> store.last_added_block_id == block.id
        True
    """

    def __init__(
        self,
        blocks: Optional[Iterable[Block]] = None,
        theme: Union[Theme, str] = EDITOR_DEFAULTS.DEFAULT_THEME,
        id_generator: Optional[IdGenerator] = None,
    ):
        """
        Args:
            blocks (Optional[Iterable[Block]]): Initial document. Defaults to the
                seed document from `build_seed_blocks()`.
            theme (Theme | str): Initial theme.
            id_generator (Optional[IdGenerator]): Source of new block / item ids.

        Raises:
            ResumeStoreError: If the initial blocks do not have unique ids.
        """
        initial = list(build_seed_blocks() if blocks is None else blocks)
        if not all_ids_unique(block.id for block in initial):
            raise ResumeStoreError("Initial blocks must have unique ids")

        self._lock = threading.RLock()
        self._blocks: Tuple[Block, ...] = tuple(initial)
        self._listeners: List[StoreListener] = []

        self.id_generator = id_generator or IdGenerator()
        if self.id_generator.is_taken is None:
            self.id_generator.is_taken = self._is_id_taken

        self.theme = Theme(theme)
        self.style_config = StyleConfig()
        self.active_block_id: Optional[str] = None
        self.last_added_block_id: Optional[str] = None
        self.ats_analysis: Optional[ATSAnalysisResult] = None
        self.job_description = ""
        self.is_heatmap_visible = False
        self.is_ai_suggestions_enabled = True

    # ----------------------
    # READS
    # ----------------------
    @property
    def blocks(self) -> Tuple[Block, ...]:
        """Current blocks in document order."""
        return self._blocks

    def block_ids(self) -> List[str]:
        return [block.id for block in self._blocks]

    def get_block(self, block_id: str) -> Optional[Block]:
        for block in self._blocks:
            if block.id == block_id:
                return block
        return None

    def _index_of(self, block_id: str) -> int:
        for index, block in enumerate(self._blocks):
            if block.id == block_id:
                return index
        return -1

    def _is_id_taken(self, candidate: str) -> bool:
        for block in self._blocks:
            if block.id == candidate or any(item.id == candidate for item in block.items):
                return True
        return False

    def get_resume_text(self) -> str:
        """Whole resume as one string: every field of every block, in block order."""
        return resume_to_text(self._blocks)

    def snapshot(self) -> Dict[str, Any]:
        """Complete state in its camelCase wire form."""
        with self._lock:
            return {
                "blocks": [block.to_dict() for block in self._blocks],
                "theme": self.theme.value,
                "styleConfig": self.style_config.to_dict(),
                "activeBlockId": self.active_block_id,
                "lastAddedBlockId": self.last_added_block_id,
                "atsAnalysis": self.ats_analysis.to_dict() if self.ats_analysis else None,
                "jobDescription": self.job_description,
                "isHeatmapVisible": self.is_heatmap_visible,
                "isAISuggestionsEnabled": self.is_ai_suggestions_enabled,
            }

    # ----------------------
    # SUBSCRIPTIONS
    # ----------------------
    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """
        Call `listener(store)` after every mutation. Returns an unsubscribe function.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ----------------------
    # BLOCK MUTATIONS
    # ----------------------
    def add_block(self, block_type: Union[BlockType, str]) -> Block:
        """
        Append a new block with the default payload for `block_type` and record
        it as `last_added_block_id`.

        Raises:
            UnsupportedBlockTypeError: If `block_type` is not a known block type.
        """
        block_type = resolve_block_type(block_type)
        with self._lock:
            block = Block(
                id=self.id_generator.new_id(block_type.value),
                type=block_type,
                title=default_title_for_type(block_type),
                is_visible=True,
                data=default_data_for_type(block_type, self.id_generator.new_id),
            )
            self._blocks = self._blocks + (block,)
            self.last_added_block_id = block.id
        store_logger.debug(f"Added block '{block.id}' ({block_type.value})")
        self._notify()
        return block

    def consume_last_added_block_id(self) -> Optional[str]:
        """Return `last_added_block_id` and clear it, so the highlight fires once per add."""
        with self._lock:
            block_id = self.last_added_block_id
            self.last_added_block_id = None
        return block_id

    def remove_block(self, block_id: str) -> None:
        """Delete the block with `block_id`. No-op if it does not exist."""
        with self._lock:
            index = self._index_of(block_id)
            if index < 0:
                return
            self._blocks = self._blocks[:index] + self._blocks[index + 1:]
            if self.active_block_id == block_id:
                self.active_block_id = None
            if self.last_added_block_id == block_id:
                self.last_added_block_id = None
        store_logger.debug(f"Removed block '{block_id}'")
        self._notify()

    def update_block_data(self, block_id: str, partial: Mapping[str, Any]) -> None:
        """
        Shallow-merge `partial` into the block's payload.

        Fields not named in `partial` are left untouched. List fields are not
        deep-merged: an ``items`` value replaces the whole sequence, so callers
        changing one item must pass the complete new list. No-op if `block_id`
        does not exist.

        Args:
            block_id (str): Target block.
            partial (Mapping[str, Any]): Field name (snake or camel case) to new value.

        Raises:
            InvalidBlockDataError: If `partial` names a field the payload does not have,
                holds a non-text value or an `items` value that is not a list.
        """
        with self._lock:
            index = self._index_of(block_id)
            if index < 0:
                return
            block = self._blocks[index]
            fields = normalize_partial_data(block.type, partial, self.id_generator.new_id)
            if "items" in fields and not all_ids_unique(item.id for item in fields["items"]):
                raise InvalidBlockDataError(
                    block_type=block.type.value,
                    invalid_fields=["items"],
                    context="item ids must be unique within a block",
                )
            updated = dataclasses.replace(block, data=dataclasses.replace(block.data, **fields))
            self._blocks = self._blocks[:index] + (updated,) + self._blocks[index + 1:]
        self._notify()

    def update_block(self, block_id: str, title: Optional[str] = None, is_visible: Optional[bool] = None) -> None:
        """Change a block's title and/or visibility. No-op if `block_id` does not exist."""
        with self._lock:
            index = self._index_of(block_id)
            if index < 0:
                return
            block = self._blocks[index]
            updated = dataclasses.replace(
                block,
                title=block.title if title is None else title,
                is_visible=block.is_visible if is_visible is None else is_visible,
            )
            self._blocks = self._blocks[:index] + (updated,) + self._blocks[index + 1:]
        self._notify()

    def reorder_blocks(self, active_id: str, over_id: str) -> None:
        """
        Move the block `active_id` to the position currently held by `over_id`.

        A stable move, not a swap: all other blocks keep their relative order.
        No-op if either id is missing or both are the same.
        """
        with self._lock:
            if active_id == over_id:
                return
            old_index = self._index_of(active_id)
            new_index = self._index_of(over_id)
            if old_index < 0 or new_index < 0:
                return
            blocks = list(self._blocks)
            blocks.insert(new_index, blocks.pop(old_index))
            self._blocks = tuple(blocks)
        store_logger.debug(f"Moved block '{active_id}' from {old_index} to {new_index}")
        self._notify()

    # ----------------------
    # SETTINGS / FLAGS
    # ----------------------
    def set_active_block(self, block_id: Optional[str]) -> None:
        with self._lock:
            self.active_block_id = block_id
        self._notify()

    def set_theme(self, theme: Union[Theme, str]) -> None:
        with self._lock:
            self.theme = Theme(theme)
        self._notify()

    def set_style_config(self, **partial: str) -> None:
        """
        Replace the given StyleConfig fields (snake or camel case names).

        Raises:
            ValueError: On an unknown field or a value outside its allowed choices.
        """
        fields = {to_snake(key): value for key, value in partial.items()}
        known = {f.name for f in dataclasses.fields(StyleConfig)}
        unknown = sorted(set(fields) - known)
        if unknown:
            raise ValueError(f"Unknown style setting(s): {unknown}")
        for name, value in fields.items():
            choices = STYLE_CHOICES.get(name)
            if choices and value not in choices:
                raise ValueError(f"Invalid value '{value}' for {name}. Choices are: {list(choices)}")
        with self._lock:
            self.style_config = dataclasses.replace(self.style_config, **fields)
        self._notify()

    def set_job_description(self, job_description: str) -> None:
        with self._lock:
            self.job_description = job_description
        self._notify()

    def set_ats_analysis(self, analysis: Optional[ATSAnalysisResult]) -> None:
        """Replace the stored analysis wholesale (never merged)."""
        with self._lock:
            self.ats_analysis = analysis
        self._notify()

    def toggle_heatmap(self) -> bool:
        with self._lock:
            self.is_heatmap_visible = not self.is_heatmap_visible
            value = self.is_heatmap_visible
        self._notify()
        return value

    def toggle_ai_suggestions(self) -> bool:
        with self._lock:
            self.is_ai_suggestions_enabled = not self.is_ai_suggestions_enabled
            value = self.is_ai_suggestions_enabled
        self._notify()
        return value
