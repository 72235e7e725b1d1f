"""suggestion_engine.py
Debounced autocomplete for experience descriptions.

Each experience item moves through ``IDLE -> PENDING -> SHOWN -> IDLE``:
an edit arms a timer, the timer fires one completion request, and a valid
answer is shown until the user accepts or dismisses it. Any edit in between
invalidates everything that was in flight for that item.
"""
import asyncio
import dataclasses
import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Set, Tuple

from canvas_cv.config import EDITOR_DEFAULTS
from canvas_cv.logging import LoggerFactory
from canvas_cv.models import BlockType, ExperienceItem
from canvas_cv.suggestions.text_cleaning import (
    is_valid_completion,
    last_line_fragment,
    should_request_completion,
)

suggestion_logger = LoggerFactory().get_logger(
    name="suggestion_engine",
    logger_type="ai",
    console=False,
)

SlotKey = Tuple[str, str]  # (block_id, item_id)


class SuggestionState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SHOWN = "shown"


@dataclass
class _Slot:
    """
    Suggestion state of one experience item.

    `token` identifies the request this slot is currently waiting for; it is
    None when nothing is awaited. `description` is the text the request was
    computed from.
    """
    state: SuggestionState = SuggestionState.IDLE
    token: Optional[int] = None
    description: Optional[str] = None
    suggestion: Optional[str] = None
    timer: Optional[asyncio.TimerHandle] = None


class SuggestionEngine:
    """
    Per-item debounced sentence completion for experience descriptions.

    Slots are keyed by ``(block_id, item_id)`` so inserting an item at the top
    of a block does not move a pending suggestion onto a different job. The
    public methods take the item index the UI knows and resolve it to the id.

    Stale responses are discarded by token: each armed timer draws a fresh
    token from a monotonic counter, the slot remembers the one it awaits, and
    a response is applied only if its token is still the slot's token and the
    item's description is unchanged. In-flight calls are never cancelled.

    Timers are armed on the running asyncio loop, so edits must be made from
    a coroutine or a callback on that loop. Without a running loop no timer is
    armed and the item stays IDLE.

    Open risk: there is no timeout on the completion call. A hung call keeps
    its slot PENDING until the next edit; `pending_calls` reports how many
    calls are in flight.
    """

    def __init__(
        self,
        store: "ResumeStore",
        service: "GenerativeTextService",
        debounce_seconds: float = EDITOR_DEFAULTS.SUGGESTION_DEBOUNCE_SECONDS,
        context_label: str = EDITOR_DEFAULTS.SUGGESTION_CONTEXT_LABEL,
    ):
        self.store = store
        self.service = service
        self.debounce_seconds = debounce_seconds
        self.context_label = context_label

        self._slots: Dict[SlotKey, _Slot] = {}
        self._tokens = itertools.count(1)
        self._tasks: Set[asyncio.Task] = set()
        self._calls_in_flight = 0

        self._unsubscribe = store.subscribe(self._on_store_change)

    # ----------------------
    # LOOKUPS
    # ----------------------
    def _resolve_item(self, block_id: str, item_index: int) -> Optional[ExperienceItem]:
        block = self.store.get_block(block_id)
        if block is None or block.type != BlockType.EXPERIENCE:
            return None
        if not 0 <= item_index < len(block.items):
            return None
        return block.items[item_index]

    def _find_item(self, key: SlotKey) -> Optional[Tuple[int, ExperienceItem]]:
        block = self.store.get_block(key[0])
        if block is None or block.type != BlockType.EXPERIENCE:
            return None
        for index, item in enumerate(block.items):
            if item.id == key[1]:
                return index, item
        return None

    def _slot_for(self, block_id: str, item_index: int) -> Optional[_Slot]:
        item = self._resolve_item(block_id, item_index)
        if item is None:
            return None
        return self._slots.get((block_id, item.id))

    @property
    def pending_calls(self) -> int:
        """Number of completion calls awaiting a response."""
        return self._calls_in_flight

    def state(self, block_id: str, item_index: int) -> SuggestionState:
        slot = self._slot_for(block_id, item_index)
        return slot.state if slot else SuggestionState.IDLE

    def suggestion_for(self, block_id: str, item_index: int) -> Optional[str]:
        """Suggestion text shown for the item, or None."""
        slot = self._slot_for(block_id, item_index)
        if slot and slot.state == SuggestionState.SHOWN:
            return slot.suggestion
        return None

    # ----------------------
    # TRANSITIONS
    # ----------------------
    def _invalidate(self, slot: _Slot) -> None:
        """Back to IDLE: cancel the timer, forget the awaited token and any shown text."""
        if slot.timer is not None:
            slot.timer.cancel()
        slot.timer = None
        slot.token = None
        slot.description = None
        slot.suggestion = None
        slot.state = SuggestionState.IDLE

    def on_description_edited(self, block_id: str, item_index: int) -> SuggestionState:
        """
        React to an edit of an experience item's description (already written to the store).

        Cancels whatever the item had pending or shown, then arms the debounce
        timer if suggestions are enabled and the last line is long enough and
        unfinished.

        Returns:
            SuggestionState: The item's state after the edit.
        """
        item = self._resolve_item(block_id, item_index)
        if item is None:
            return SuggestionState.IDLE

        key = (block_id, item.id)
        slot = self._slots.setdefault(key, _Slot())
        self._invalidate(slot)

        if not self.store.is_ai_suggestions_enabled:
            return slot.state

        fragment = last_line_fragment(item.description)
        if not should_request_completion(fragment):
            return slot.state

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            suggestion_logger.debug(f"No running event loop, suggestion for {key} not armed")
            return slot.state

        token = next(self._tokens)
        slot.token = token
        slot.description = item.description
        slot.state = SuggestionState.PENDING
        slot.timer = loop.call_later(self.debounce_seconds, self._fire, key, token)
        return slot.state

    def _is_current(self, key: SlotKey, token: int) -> bool:
        """True if `token` is still what the slot awaits and the description is unchanged."""
        slot = self._slots.get(key)
        if slot is None or slot.token != token:
            return False
        found = self._find_item(key)
        return found is not None and found[1].description == slot.description

    def _fire(self, key: SlotKey, token: int) -> None:
        """Debounce timer callback: issue exactly one completion request."""
        if not self._is_current(key, token):
            return
        slot = self._slots[key]
        slot.timer = None
        _, item = self._find_item(key)

        task = asyncio.get_running_loop().create_task(
            self._request_completion(
                key=key,
                token=token,
                fragment=last_line_fragment(item.description),
                role=item.role,
                company=item.company,
            )
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _request_completion(
        self,
        key: SlotKey,
        token: int,
        fragment: str,
        role: str,
        company: str,
    ) -> None:
        self._calls_in_flight += 1
        try:
            completion = await self.service.complete_sentence(
                fragment,
                self.context_label,
                role=role,
                company=company,
            )
        except Exception as e:
            suggestion_logger.warning(f"Completion request for {key} failed: {e}")
            completion = ""
        finally:
            self._calls_in_flight -= 1

        if not self._is_current(key, token):
            suggestion_logger.debug(f"Discarding stale completion for {key}")
            return

        slot = self._slots[key]
        completion = (completion or "").strip()
        if not is_valid_completion(completion):
            self._invalidate(slot)
            return

        slot.token = None
        slot.suggestion = completion
        slot.state = SuggestionState.SHOWN

    def accept(self, block_id: str, item_index: int) -> bool:
        """
        Append the shown suggestion (after a space) to the item's description.

        Returns:
            bool: True if a suggestion was applied.
        """
        item = self._resolve_item(block_id, item_index)
        if item is None:
            return False
        key = (block_id, item.id)
        slot = self._slots.get(key)
        if slot is None or slot.state != SuggestionState.SHOWN:
            return False

        suggestion = slot.suggestion
        self._invalidate(slot)

        block = self.store.get_block(block_id)
        items = list(block.items)
        items[item_index] = dataclasses.replace(item, description=f"{item.description} {suggestion}")
        self.store.update_block_data(block_id, {"items": items})
        return True

    def dismiss(self, block_id: str, item_index: int) -> bool:
        """Drop the shown suggestion without touching the description."""
        slot = self._slot_for(block_id, item_index)
        if slot is None or slot.state != SuggestionState.SHOWN:
            return False
        self._invalidate(slot)
        return True

    def reset(self) -> None:
        """Return every item to IDLE. Responses still in flight will be discarded."""
        for slot in self._slots.values():
            self._invalidate(slot)
        self._slots.clear()

    def close(self) -> None:
        self.reset()
        self._unsubscribe()

    # ----------------------
    # STORE WATCH
    # ----------------------
    def _on_store_change(self, store: "ResumeStore") -> None:
        """
        Keep slots consistent with the store: disabling suggestions clears
        everything, and a slot whose item vanished or whose description was
        changed by any writer goes back to IDLE.
        """
        if not store.is_ai_suggestions_enabled:
            if self._slots:
                self.reset()
            return

        for key in list(self._slots):
            slot = self._slots[key]
            found = self._find_item(key)
            if found is None:
                self._invalidate(slot)
                del self._slots[key]
            elif slot.description is not None and found[1].description != slot.description:
                self._invalidate(slot)
