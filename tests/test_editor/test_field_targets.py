"""test_field_targets.py
Test structured field targets and the field path codec.
"""
import pytest

from canvas_cv.editor.field_targets import (
    ListItemField,
    WholeField,
    build_field_update,
    parse_field_path,
    read_field,
)
from canvas_cv.exceptions import FieldPathError


class TestParseFieldPath:
    @pytest.mark.parametrize("path, expected", [
        ("content", WholeField("content")),
        ("fullName", WholeField("full_name")),
        ("items[0].description", ListItemField(0, "description")),
        ("items[12].startDate", ListItemField(12, "start_date")),
    ])
    def test_valid_paths(self, path, expected):
        assert parse_field_path(path) == expected

    @pytest.mark.parametrize("path", ["", "items", "items[].role", "items[-1].role", "items[0]", "a.b", "items[0].role.x"])
    def test_invalid_paths(self, path):
        with pytest.raises(FieldPathError):
            parse_field_path(path)

    def test_to_path_roundtrip(self):
        assert ListItemField(3, "description").to_path() == "items[3].description"
        assert WholeField("content").to_path() == "content"


class TestReadAndBuild:
    def test_read_fields(self, store):
        assert read_field(store.get_block("summary-1"), WholeField("content")).startswith("Creative")
        assert read_field(store.get_block("exp-1"), ListItemField(1, "company")) == "Creative Pulse"
        assert read_field(store.get_block("exp-1"), ListItemField(5, "company")) is None

    def test_item_update_keeps_siblings(self, store):
        block = store.get_block("exp-1")
        partial = build_field_update(block, ListItemField(0, "role"), "Principal Designer")
        store.update_block_data("exp-1", partial)

        updated = store.get_block("exp-1")
        assert updated.items[0].role == "Principal Designer"
        assert updated.items[0].description == block.items[0].description
        assert updated.items[1] == block.items[1]

    @pytest.mark.parametrize("target", [
        WholeField("missing"),
        WholeField("items"),
        ListItemField(9, "role"),
        ListItemField(0, "id"),
        ListItemField(0, "salary"),
    ])
    def test_unknown_targets_return_none(self, store, target):
        assert build_field_update(store.get_block("exp-1"), target, "x") is None
