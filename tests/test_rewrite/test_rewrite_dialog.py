"""test_rewrite_dialog.py
Test the AI rewrite dialog workflow.
"""
import asyncio

import pytest

from canvas_cv.ai.generative_text_service import MISSING_API_KEY_MESSAGE, GenerativeTextService
from canvas_cv.editor.field_targets import ListItemField, WholeField
from canvas_cv.rewrite.rewrite_dialog import (
    EXPERIENCE_INSTRUCTION,
    GENERIC_ERROR,
    PRESETS,
    RewriteDialog,
)


@pytest.fixture
def dialog(store, fake_service):
    return RewriteDialog(store, fake_service)


def test_five_presets():
    assert list(PRESETS) == [
        "Add Metrics & Impact",
        "Make Professional",
        "Fix Grammar",
        "Make Concise",
        "Add Action Verbs",
    ]


class TestOpen:
    def test_open_reads_current_value(self, dialog, store):
        assert dialog.open("summary-1", WholeField("content")) is True
        assert dialog.is_open
        assert dialog.original_text == store.get_block("summary-1").data.content
        assert dialog.candidate is None

    def test_open_missing_field(self, dialog):
        assert dialog.open("summary-1", WholeField("nope")) is False
        assert dialog.open("nope", WholeField("content")) is False
        assert dialog.open("exp-1", ListItemField(5, "description")) is False
        assert not dialog.is_open


class TestGenerate:
    def test_preset_makes_one_call(self, dialog, fake_service):
        dialog.open("summary-1", WholeField("content"), original_text="I do design")
        result = asyncio.run(dialog.generate_preset("Fix Grammar"))
        assert result == "Rewritten: I do design"
        assert dialog.candidate == result
        assert dialog.is_loading is False
        assert fake_service.calls["rewrite"] == [
            {"text": "I do design", "instruction": PRESETS["Fix Grammar"]},
        ]

    def test_recommended_uses_context_instruction(self, dialog, fake_service):
        dialog.open("exp-1", ListItemField(0, "description"), context_instruction=EXPERIENCE_INSTRUCTION)
        asyncio.run(dialog.generate_recommended())
        assert fake_service.calls["rewrite"][0]["instruction"] == EXPERIENCE_INSTRUCTION

    def test_recommended_falls_back_to_professional(self, dialog, fake_service):
        dialog.open("header-1", WholeField("title"))
        asyncio.run(dialog.generate_recommended())
        assert fake_service.calls["rewrite"][0]["instruction"] == PRESETS["Make Professional"]

    @pytest.mark.parametrize("prompt", ["", "   "])
    def test_blank_custom_prompt_refused(self, dialog, fake_service, prompt):
        dialog.open("summary-1", WholeField("content"))
        assert asyncio.run(dialog.generate_custom(prompt)) is None
        assert fake_service.calls["rewrite"] == []

    def test_custom_prompt(self, dialog, fake_service):
        dialog.open("summary-1", WholeField("content"))
        asyncio.run(dialog.generate_custom("  Make it sound like a pirate "))
        assert fake_service.calls["rewrite"][0]["instruction"] == "Make it sound like a pirate"

    def test_failure_shows_error_instead_of_candidate(self, dialog, fake_service):
        fake_service.rewrite_error = True
        dialog.open("summary-1", WholeField("content"))
        assert asyncio.run(dialog.generate_preset("Make Concise")) is None
        assert dialog.error == GENERIC_ERROR
        assert dialog.candidate is None
        assert dialog.is_loading is False

    def test_unconfigured_service_sets_error_not_candidate(self, store, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        dialog = RewriteDialog(store, GenerativeTextService())
        dialog.open("summary-1", WholeField("content"))

        assert asyncio.run(dialog.generate_preset("Make Concise")) is None
        assert dialog.error == MISSING_API_KEY_MESSAGE
        assert dialog.candidate is None
        assert dialog.apply() is False
        assert store.get_block("summary-1").data.content != MISSING_API_KEY_MESSAGE

    def test_missing_key_answer_is_an_error(self, dialog, fake_service):
        fake_service.rewrite_result = MISSING_API_KEY_MESSAGE
        dialog.open("summary-1", WholeField("content"))
        assert asyncio.run(dialog.generate_recommended()) is None
        assert dialog.error == MISSING_API_KEY_MESSAGE
        assert dialog.candidate is None
        assert dialog.is_loading is False

    def test_closed_dialog_makes_no_call(self, dialog, fake_service):
        assert asyncio.run(dialog.generate("anything")) is None
        assert fake_service.calls["rewrite"] == []

    def test_response_after_close_dropped(self, dialog, fake_service, store):
        fake_service.hold_responses = True
        dialog.open("summary-1", WholeField("content"))

        async def scenario():
            task = asyncio.create_task(dialog.generate_preset("Make Concise"))
            await asyncio.sleep(0.01)
            assert dialog.is_loading is True
            dialog.cancel()
            fake_service.release()
            return await task

        assert asyncio.run(scenario()) is None
        assert dialog.candidate is None
        assert not dialog.is_open

    def test_response_after_reopen_dropped(self, dialog, fake_service):
        fake_service.hold_responses = True
        dialog.open("summary-1", WholeField("content"))

        async def scenario():
            task = asyncio.create_task(dialog.generate_preset("Make Concise"))
            await asyncio.sleep(0.01)
            dialog.open("header-1", WholeField("title"))
            fake_service.release()
            await task

        asyncio.run(scenario())
        assert dialog.block_id == "header-1"
        assert dialog.candidate is None
        assert dialog.is_loading is False


class TestApply:
    def test_apply_summary(self, dialog, store, fake_service):
        fake_service.rewrite_result = "Impactful summary."
        dialog.open("summary-1", WholeField("content"))
        asyncio.run(dialog.generate_recommended())
        assert dialog.apply() is True
        assert store.get_block("summary-1").data.content == "Impactful summary."
        assert not dialog.is_open

    def test_apply_item_field_leaves_siblings(self, dialog, store, fake_service):
        fake_service.rewrite_result = "• Drove a 30% lift."
        before = store.get_block("exp-1").items
        dialog.open("exp-1", ListItemField(1, "description"))
        asyncio.run(dialog.generate_preset("Add Metrics & Impact"))
        dialog.apply()

        after = store.get_block("exp-1").items
        assert after[1].description == "• Drove a 30% lift."
        assert after[1].role == before[1].role
        assert after[0] == before[0]

    def test_apply_follows_item_after_insert(self, dialog, store, fake_service):
        """An item inserted above the target while the dialog is open does not redirect the apply."""
        fake_service.rewrite_result = "New text"
        dialog.open("exp-1", ListItemField(0, "description"))
        asyncio.run(dialog.generate_preset("Make Concise"))

        items = store.get_block("exp-1").items
        store.update_block_data("exp-1", {"items": [
            {"id": "job-new", "role": "R", "company": "C", "startDate": "s", "endDate": "e", "description": "keep"},
            *items,
        ]})
        assert dialog.apply() is True

        updated = store.get_block("exp-1").items
        assert updated[0].description == "keep"
        assert updated[1].id == "job-1"
        assert updated[1].description == "New text"

    def test_apply_item_removed(self, dialog, store):
        dialog.open("exp-1", ListItemField(1, "description"))
        asyncio.run(dialog.generate_preset("Make Concise"))
        store.update_block_data("exp-1", {"items": list(store.get_block("exp-1").items[:1])})
        assert dialog.apply() is False
        assert dialog.is_open

    def test_cancel_does_not_touch_store(self, dialog, store):
        before = store.blocks
        dialog.open("summary-1", WholeField("content"))
        asyncio.run(dialog.generate_preset("Fix Grammar"))
        dialog.cancel()
        assert store.blocks == before
        assert dialog.candidate is None

    def test_apply_without_candidate(self, dialog):
        dialog.open("summary-1", WholeField("content"))
        assert dialog.apply() is False

    def test_to_dict(self, dialog):
        dialog.open("exp-1", ListItemField(0, "description"))
        wire = dialog.to_dict()
        assert wire["fieldPath"] == "items[0].description"
        assert wire["isOpen"] is True
        assert len(wire["presets"]) == 5
