"""block_renderer.py
Turns store blocks into view models a client binds to, and routes field
edits, item additions and item removals back into the store.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from canvas_cv.editor.field_targets import (
    FieldTarget,
    ListItemField,
    WholeField,
    build_field_update,
    read_field,
)
from canvas_cv.editor.heatmap import HeatmapStats, heatmap_stats, highlight_html
from canvas_cv.exceptions import UnsupportedBlockTypeError
from canvas_cv.models import Block, BlockType, ITEM_TYPES, default_item_for_type
from canvas_cv.rewrite.rewrite_dialog import EXPERIENCE_INSTRUCTION, SUMMARY_INSTRUCTION

# (field name, label, multiline, AI rewrite instruction)
FieldSpec = Tuple[str, str, bool, Optional[str]]

HEADER_FIELDS: List[FieldSpec] = [
    ("full_name", "Full Name", False, None),
    ("title", "Title", False, None),
    ("email", "Email", False, None),
    ("phone", "Phone", False, None),
    ("location", "Location", False, None),
    ("linkedin", "LinkedIn", False, None),
    ("website", "Website", False, None),
]
SUMMARY_FIELDS: List[FieldSpec] = [
    ("content", "Summary", True, SUMMARY_INSTRUCTION),
]
EXPERIENCE_ITEM_FIELDS: List[FieldSpec] = [
    ("role", "Role", False, None),
    ("company", "Company", False, None),
    ("start_date", "Start", False, None),
    ("end_date", "End", False, None),
    ("description", "Description", True, EXPERIENCE_INSTRUCTION),
]
EDUCATION_ITEM_FIELDS: List[FieldSpec] = [
    ("degree", "Degree", False, None),
    ("school", "School", False, None),
    ("year", "Year", False, None),
]
SKILL_ITEM_FIELDS: List[FieldSpec] = [
    ("name", "Skill", False, None),
    ("level", "Level", False, None),
]

# Whole-payload fields of single-record blocks, item fields of list blocks.
# Rendering dispatches on these and fails loudly for an unmapped block type.
BLOCK_FIELDS: Dict[BlockType, List[FieldSpec]] = {
    BlockType.HEADER: HEADER_FIELDS,
    BlockType.SUMMARY: SUMMARY_FIELDS,
}
ITEM_FIELDS: Dict[BlockType, List[FieldSpec]] = {
    BlockType.EXPERIENCE: EXPERIENCE_ITEM_FIELDS,
    BlockType.EDUCATION: EDUCATION_ITEM_FIELDS,
    BlockType.SKILLS: SKILL_ITEM_FIELDS,
}


@dataclass
class FieldView:
    """
    One editable (or, in heatmap mode, read-only) field.

    Attributes:
        target (FieldTarget): Where edits of this field are written.
        label (str): Placeholder / label text.
        value (str): Current raw value ("" for an unset optional field).
        html (Optional[str]): Highlighted markup, only in heatmap mode.
        editable (bool): False in heatmap mode.
        multiline (bool): Rich text field.
        ai_instruction (Optional[str]): Recommended rewrite instruction, if the
            field offers the AI rewrite action.
        suggestion (Optional[str]): Autocomplete suggestion shown under the field.
    """
    target: FieldTarget
    label: str
    value: str
    html: Optional[str] = None
    editable: bool = True
    multiline: bool = False
    ai_instruction: Optional[str] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fieldPath": self.target.to_path(),
            "label": self.label,
            "value": self.value,
            "html": self.html,
            "editable": self.editable,
            "multiline": self.multiline,
            "aiInstruction": self.ai_instruction,
            "suggestion": self.suggestion,
        }


@dataclass
class ItemView:
    item_id: str
    index: int
    fields: List[FieldView] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.item_id,
            "index": self.index,
            "fields": [f.to_dict() for f in self.fields],
        }


@dataclass
class BlockView:
    block_id: str
    block_type: BlockType
    title: str
    is_visible: bool
    is_active: bool = False
    fields: List[FieldView] = field(default_factory=list)
    items: List[ItemView] = field(default_factory=list)
    can_add_item: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.block_id,
            "type": self.block_type.value,
            "title": self.title,
            "isVisible": self.is_visible,
            "isActive": self.is_active,
            "fields": [f.to_dict() for f in self.fields],
            "items": [i.to_dict() for i in self.items],
            "canAddItem": self.can_add_item,
        }


@dataclass
class DocumentView:
    blocks: List[BlockView]
    theme: str
    is_heatmap_visible: bool
    highlight_block_id: Optional[str] = None
    heatmap_stats: Optional[HeatmapStats] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blocks": [b.to_dict() for b in self.blocks],
            "theme": self.theme,
            "isHeatmapVisible": self.is_heatmap_visible,
            "highlightBlockId": self.highlight_block_id,
            "heatmapStats": self.heatmap_stats.to_dict() if self.heatmap_stats else None,
        }


class BlockRenderer:
    """
    Renders the store's blocks and writes every field edit straight through
    to the store; nothing is buffered between an edit and the store.

    While heatmap mode is on, fields are read-only and carry highlighted html
    instead; toggling the mode never touches field content.
    """

    def __init__(self, store: "ResumeStore", suggestion_engine: Optional["SuggestionEngine"] = None):
        self.store = store
        self.suggestion_engine = suggestion_engine

    # ----------------------
    # RENDERING
    # ----------------------
    def render(self) -> DocumentView:
        """
        Render the whole document. The id of a just-added block is reported
        once as `highlight_block_id` so the client scrolls to it a single time.
        In heatmap mode the view also totals the metrics and action verbs found
        in multi-line fields (summary, experience descriptions).
        """
        blocks = [self.render_block(block) for block in self.store.blocks]
        return DocumentView(
            blocks=blocks,
            theme=self.store.theme.value,
            is_heatmap_visible=self.store.is_heatmap_visible,
            highlight_block_id=self.store.consume_last_added_block_id(),
            heatmap_stats=self._heatmap_totals(blocks) if self.store.is_heatmap_visible else None,
        )

    @staticmethod
    def _heatmap_totals(blocks: List[BlockView]) -> HeatmapStats:
        metrics = verbs = 0
        for block in blocks:
            fields = [*block.fields, *(f for item in block.items for f in item.fields)]
            for view in fields:
                if view.multiline:
                    stats = heatmap_stats(view.value)
                    metrics += stats.metric_count
                    verbs += stats.action_verb_count
        return HeatmapStats(metric_count=metrics, action_verb_count=verbs)

    def render_block(self, block: Block) -> BlockView:
        """
        Raises:
            UnsupportedBlockTypeError: If `block.type` has no field layout.
        """
        view = BlockView(
            block_id=block.id,
            block_type=block.type,
            title=block.title,
            is_visible=block.is_visible,
            is_active=block.id == self.store.active_block_id,
        )
        if block.type in BLOCK_FIELDS:
            view.fields = [
                self._field_view(block, WholeField(spec[0]), spec)
                for spec in BLOCK_FIELDS[block.type]
            ]
        elif block.type in ITEM_FIELDS:
            view.can_add_item = True
            view.items = [
                ItemView(
                    item_id=item.id,
                    index=index,
                    fields=[
                        self._field_view(block, ListItemField(index, spec[0]), spec)
                        for spec in ITEM_FIELDS[block.type]
                    ],
                )
                for index, item in enumerate(block.items)
            ]
        else:
            raise UnsupportedBlockTypeError(
                block_type=str(block.type),
                supported_types=[t.value for t in (*BLOCK_FIELDS, *ITEM_FIELDS)],
            )
        return view

    def _field_view(self, block: Block, target: FieldTarget, spec: FieldSpec) -> FieldView:
        _, label, multiline, ai_instruction = spec
        value = read_field(block, target) or ""
        view = FieldView(
            target=target,
            label=label,
            value=value,
            multiline=multiline,
            ai_instruction=ai_instruction,
        )

        if self.store.is_heatmap_visible:
            view.editable = False
            view.html = highlight_html(value)
            return view

        if self._is_experience_description(block, target) and self.suggestion_engine is not None:
            view.suggestion = self.suggestion_engine.suggestion_for(block.id, target.index)
        return view

    @staticmethod
    def _is_experience_description(block: Block, target: FieldTarget) -> bool:
        return (
            block.type == BlockType.EXPERIENCE
            and isinstance(target, ListItemField)
            and target.field_name == "description"
        )

    # ----------------------
    # EDITING
    # ----------------------
    def edit_field(self, block_id: str, target: FieldTarget, value: str) -> bool:
        """
        Write `value` into the field `target` of block `block_id`.

        Edits of an experience description are also reported to the
        suggestion engine.

        Returns:
            bool: False if heatmap mode is on or the block / field does not exist.
        """
        if self.store.is_heatmap_visible:
            return False
        block = self.store.get_block(block_id)
        if block is None:
            return False
        partial = build_field_update(block, target, value)
        if partial is None:
            return False

        self.store.update_block_data(block_id, partial)

        if self._is_experience_description(block, target) and self.suggestion_engine is not None:
            self.suggestion_engine.on_description_edited(block_id, target.index)
        return True

    def add_item(self, block_id: str) -> Optional[str]:
        """
        Add a placeholder item to a list block: experience at the top, the others at the end.

        Returns:
            Optional[str]: The new item's id, or None if the block is missing or has no items.
        """
        block = self.store.get_block(block_id)
        if block is None or block.type not in ITEM_TYPES:
            return None
        item = default_item_for_type(block.type, self.store.id_generator.new_id)
        if block.type == BlockType.EXPERIENCE:
            items = [item, *block.items]
        else:
            items = [*block.items, item]
        self.store.update_block_data(block_id, {"items": items})
        return item.id

    def remove_item(self, block_id: str, index: int) -> bool:
        """Delete the item at `index`. Remaining items keep their ids."""
        block = self.store.get_block(block_id)
        if block is None or block.type not in ITEM_TYPES:
            return False
        items = list(block.items)
        if not 0 <= index < len(items):
            return False
        del items[index]
        self.store.update_block_data(block_id, {"items": items})
        return True
