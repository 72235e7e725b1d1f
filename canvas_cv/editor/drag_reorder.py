"""drag_reorder.py
Drag gesture state for reordering blocks, operable by pointer or keyboard.
"""
from typing import Optional

from canvas_cv.models import Block

DRAGGING_OPACITY = 0.5
RESTING_OPACITY = 1.0


class DragReorderController:
    """
    Tracks one drag gesture and reports it to the store on drop.

    While a block is dragged it renders detached (reduced opacity) and
    `overlay_block()` returns the copy that follows the pointer. A drop makes
    exactly one `reorder_blocks(active_id, over_id)` call, or none when the
    block is dropped on its own position or outside any block.

    Keyboard flow: `keyboard_pick_up(id)`, any number of `keyboard_move(+1/-1)`,
    then `keyboard_drop()` (or `cancel()`).
    """

    def __init__(self, store: "ResumeStore"):
        self.store = store
        self.active_id: Optional[str] = None
        self.over_id: Optional[str] = None

    @property
    def in_progress(self) -> bool:
        return self.active_id is not None

    def start(self, active_id: str) -> bool:
        """Pick up `active_id`. False if the block does not exist."""
        if self.store.get_block(active_id) is None:
            return False
        self.active_id = active_id
        self.over_id = active_id
        return True

    def move_over(self, over_id: Optional[str]) -> None:
        """Pointer is now over `over_id` (None when outside every block)."""
        if not self.in_progress:
            return
        self.over_id = over_id if over_id is None or self.store.get_block(over_id) else None

    def drop(self, over_id: Optional[str] = None) -> bool:
        """
        Finish the gesture.

        Args:
            over_id (Optional[str]): Drop target; defaults to the last `move_over` target.

        Returns:
            bool: True if the store was asked to reorder.
        """
        if not self.in_progress:
            return False
        active_id = self.active_id
        target = over_id if over_id is not None else self.over_id
        self.cancel()

        if target is None or target == active_id:
            return False
        if self.store.get_block(target) is None:
            return False
        self.store.reorder_blocks(active_id, target)
        return True

    def cancel(self) -> None:
        self.active_id = None
        self.over_id = None

    # ----------------------
    # KEYBOARD
    # ----------------------
    def keyboard_pick_up(self, block_id: str) -> bool:
        return self.start(block_id)

    def keyboard_move(self, step: int) -> Optional[str]:
        """
        Move the drop target `step` positions up (negative) or down, clamped to
        the document. Returns the new target id.
        """
        if not self.in_progress:
            return None
        ids = self.store.block_ids()
        current = self.over_id if self.over_id in ids else self.active_id
        if current not in ids:
            self.cancel()
            return None
        index = max(0, min(len(ids) - 1, ids.index(current) + step))
        self.over_id = ids[index]
        return self.over_id

    def keyboard_drop(self) -> bool:
        return self.drop()

    # ----------------------
    # PRESENTATION
    # ----------------------
    def is_dragging(self, block_id: str) -> bool:
        return self.active_id is not None and self.active_id == block_id

    def opacity_for(self, block_id: str) -> float:
        return DRAGGING_OPACITY if self.is_dragging(block_id) else RESTING_OPACITY

    def overlay_block(self) -> Optional[Block]:
        """Preview copy of the dragged block, None when nothing is dragged."""
        if not self.in_progress:
            return None
        return self.store.get_block(self.active_id)
