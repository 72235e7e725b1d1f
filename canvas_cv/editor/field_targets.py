"""field_targets.py
Structured descriptors naming one editable text field inside a block, and the
helpers to read and write a field through the ResumeStore.

Only the HTTP boundary deals with path strings such as ``items[0].description``;
everything inside the editor passes `WholeField` / `ListItemField` values.
"""
import dataclasses
import re
from dataclasses import dataclass
from typing import Optional, Union

from canvas_cv.exceptions import FieldPathError
from canvas_cv.models import Block, to_snake

ITEM_PATH_REGEX = re.compile(r"^items\[(\d+)\]\.([A-Za-z_][A-Za-z0-9_]*)$")
FIELD_NAME_REGEX = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class WholeField:
    """A top-level payload field, e.g. ``content`` of a summary block."""
    field_name: str

    def to_path(self) -> str:
        return self.field_name


@dataclass(frozen=True)
class ListItemField:
    """A field of one item of a list block, e.g. the description of job 0."""
    index: int
    field_name: str

    def to_path(self) -> str:
        return f"items[{self.index}].{self.field_name}"


FieldTarget = Union[WholeField, ListItemField]


def parse_field_path(field_path: str) -> FieldTarget:
    """
    Turn a path string into a field target.

    Accepts ``"<field>"`` and ``"items[<index>].<field>"``; camelCase field
    names are converted to the payload's snake_case names.

    Raises:
        FieldPathError: If the path matches neither form.

    Example:
        >>> parse_field_path("items[2].startDate")
        ListItemField(index=2, field_name='start_date')
    """
    path = (field_path or "").strip()
    match = ITEM_PATH_REGEX.match(path)
    if match:
        return ListItemField(index=int(match.group(1)), field_name=to_snake(match.group(2)))
    if FIELD_NAME_REGEX.match(path) and path != "items":
        return WholeField(field_name=to_snake(path))
    raise FieldPathError(field_path=field_path)


def read_field(block: Block, target: FieldTarget) -> Optional[str]:
    """Current value of `target` in `block`, or None if the field/item does not exist."""
    if isinstance(target, WholeField):
        return getattr(block.data, target.field_name, None)
    items = block.items
    if not 0 <= target.index < len(items):
        return None
    return getattr(items[target.index], target.field_name, None)


def build_field_update(block: Block, target: FieldTarget, value: str) -> Optional[dict]:
    """
    Partial payload that sets `target` to `value` in `block`.

    List item updates rebuild the full items sequence with only the target
    item replaced, so sibling items are carried over unchanged. Returns None
    if the field or item does not exist.
    """
    if isinstance(target, WholeField):
        if not hasattr(block.data, target.field_name) or target.field_name == "items":
            return None
        return {target.field_name: value}

    items = list(block.items)
    if not 0 <= target.index < len(items):
        return None
    item = items[target.index]
    if target.field_name == "id" or not hasattr(item, target.field_name):
        return None
    items[target.index] = dataclasses.replace(item, **{target.field_name: value})
    return {"items": items}
