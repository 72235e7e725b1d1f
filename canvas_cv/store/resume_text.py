"""resume_text.py
Serializes a sequence of blocks into one plain string, used as the input of the
ATS analyzer and the keyword matcher.
"""
from typing import Callable, Dict, Iterable, List

from canvas_cv.exceptions import UnsupportedBlockTypeError
from canvas_cv.models import (
    Block,
    BlockType,
    EducationData,
    ExperienceData,
    HeaderData,
    SkillsData,
    SummaryData,
)


def _header_lines(data: HeaderData) -> List[str]:
    contact = [data.email, data.phone, data.location, data.linkedin, data.website]
    return [
        data.full_name,
        data.title,
        " | ".join(value for value in contact if value),
    ]


def _summary_lines(data: SummaryData) -> List[str]:
    return [data.content]


def _experience_lines(data: ExperienceData) -> List[str]:
    lines = []
    for item in data.items:
        lines.append(f"{item.role} | {item.company} | {item.start_date} - {item.end_date}")
        lines.append(item.description)
    return lines


def _education_lines(data: EducationData) -> List[str]:
    return [f"{item.degree} | {item.school} | {item.year}" for item in data.items]


def _skills_lines(data: SkillsData) -> List[str]:
    names = []
    for item in data.items:
        names.append(f"{item.name} ({item.level})" if item.level else item.name)
    return [", ".join(names)] if names else []


BLOCK_SERIALIZERS: Dict[BlockType, Callable] = {
    BlockType.HEADER: _header_lines,
    BlockType.SUMMARY: _summary_lines,
    BlockType.EXPERIENCE: _experience_lines,
    BlockType.EDUCATION: _education_lines,
    BlockType.SKILLS: _skills_lines,
}


def block_to_text(block: Block) -> str:
    """
    Render one block as text: its title followed by every field value.

    Raises:
        UnsupportedBlockTypeError: If no serializer exists for the block type.
    """
    serializer = BLOCK_SERIALIZERS.get(block.type)
    if serializer is None:
        raise UnsupportedBlockTypeError(
            block_type=str(block.type),
            supported_types=[t.value for t in BLOCK_SERIALIZERS],
        )
    lines = [block.title] + [line for line in serializer(block.data) if line]
    return "\n".join(lines)


def resume_to_text(blocks: Iterable[Block]) -> str:
    """
    Join every block's text in document order, separated by blank lines.

    Every string value of every block (hidden ones included) appears verbatim in
    the output; multi-line rich text keeps its line breaks.
    """
    return "\n\n".join(block_to_text(block) for block in blocks)
