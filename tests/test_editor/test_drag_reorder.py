"""test_drag_reorder.py
Test DragReorderController pointer and keyboard gestures.
"""
import pytest

from canvas_cv.editor.drag_reorder import DragReorderController


@pytest.fixture
def drag(store):
    return DragReorderController(store)


@pytest.fixture
def reorder_calls(store, monkeypatch):
    """Record every reorder_blocks call while still performing it."""
    calls = []
    original = store.reorder_blocks

    def recording(active_id, over_id):
        calls.append((active_id, over_id))
        original(active_id, over_id)

    monkeypatch.setattr(store, "reorder_blocks", recording)
    return calls


class TestPointerDrag:
    def test_drop_on_other_block_reorders_once(self, drag, store, reorder_calls):
        drag.start("edu-1")
        drag.move_over("exp-1")
        drag.move_over("summary-1")
        assert drag.drop() is True
        assert reorder_calls == [("edu-1", "summary-1")]
        assert store.block_ids()[1] == "edu-1"
        assert not drag.in_progress

    def test_drop_on_origin_makes_no_call(self, drag, reorder_calls):
        drag.start("exp-1")
        drag.move_over("skills-1")
        assert drag.drop("exp-1") is False
        assert reorder_calls == []

    def test_drop_outside_any_block(self, drag, reorder_calls):
        drag.start("exp-1")
        drag.move_over(None)
        assert drag.drop() is False
        assert reorder_calls == []

    def test_drop_without_drag(self, drag, reorder_calls):
        assert drag.drop("exp-1") is False
        assert reorder_calls == []

    def test_cancel(self, drag, reorder_calls):
        drag.start("exp-1")
        drag.move_over("header-1")
        drag.cancel()
        assert drag.drop() is False
        assert reorder_calls == []

    def test_start_unknown_block(self, drag):
        assert drag.start("nope") is False
        assert not drag.in_progress


class TestPresentation:
    def test_dragged_block_detached(self, drag, store):
        drag.start("skills-1")
        assert drag.opacity_for("skills-1") == 0.5
        assert drag.opacity_for("header-1") == 1.0
        assert drag.is_dragging("skills-1")
        assert drag.overlay_block() == store.get_block("skills-1")

    def test_nothing_dragged(self, drag):
        assert drag.overlay_block() is None
        assert drag.opacity_for("skills-1") == 1.0


class TestKeyboardDrag:
    def test_move_down_twice_and_drop(self, drag, store, reorder_calls):
        assert drag.keyboard_pick_up("header-1")
        drag.keyboard_move(1)
        assert drag.keyboard_move(1) == "exp-1"
        assert drag.keyboard_drop() is True
        assert reorder_calls == [("header-1", "exp-1")]
        assert store.block_ids() == ["summary-1", "exp-1", "header-1", "skills-1", "edu-1"]

    def test_moves_are_clamped(self, drag):
        drag.keyboard_pick_up("summary-1")
        assert drag.keyboard_move(-5) == "header-1"
        assert drag.keyboard_move(99) == "edu-1"

    def test_back_to_origin_makes_no_call(self, drag, reorder_calls):
        drag.keyboard_pick_up("exp-1")
        drag.keyboard_move(1)
        drag.keyboard_move(-1)
        assert drag.keyboard_drop() is False
        assert reorder_calls == []

    def test_dragged_block_removed_mid_gesture(self, drag, store):
        drag.keyboard_pick_up("exp-1")
        store.remove_block("exp-1")
        assert drag.keyboard_move(1) is None
        assert not drag.in_progress
