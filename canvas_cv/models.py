"""models.py
Holds standardized data models used across the editor: block payloads, blocks,
display settings and ATS analysis results.

Payloads are frozen dataclasses and list fields are stored as tuples, so a block
handed out by the ResumeStore can be read freely but never mutated in place.
"""
import dataclasses
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from canvas_cv.exceptions import (
    AnalysisParseError,
    InvalidBlockDataError,
    UnsupportedBlockTypeError,
)


class BlockType(str, Enum):
    """Kinds of content block a resume can be built from."""
    HEADER = "header"
    SUMMARY = "summary"
    EXPERIENCE = "experience"
    EDUCATION = "education"
    SKILLS = "skills"


class Theme(str, Enum):
    MODERN = "modern"
    MINIMAL = "minimal"
    SERIF = "serif"
    CLASSIC = "classic"


# Allowed values for each StyleConfig field (accent_color is free-form)
STYLE_CHOICES: Dict[str, Tuple[str, ...]] = {
    "font_family": ("sans", "serif", "mono"),
    "font_size": ("sm", "base", "lg"),
    "line_height": ("tight", "normal", "loose"),
    "page_margin": ("compact", "standard", "spacious"),
}

IdFactory = Callable[[str], str]


# --------------------------------------------------------------
# CASE CONVERSION (python fields <-> camelCase wire keys)
# --------------------------------------------------------------
def to_camel(name: str) -> str:
    """Convert ``start_date`` to ``startDate``."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def to_snake(name: str) -> str:
    """Convert ``startDate`` to ``start_date``. Snake case input is returned unchanged."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


# --------------------------------------------------------------
# BLOCK PAYLOADS
# --------------------------------------------------------------
@dataclass(frozen=True)
class HeaderData:
    """
    Contact header shown at the top of the resume.

    Attributes:
        full_name (str): Candidate's full name.
        title (str): Headline / current job title.
        email (str): Contact email.
        phone (str): Contact phone number.
        location (str): City, region.
        linkedin (Optional[str]): LinkedIn profile reference.
        website (Optional[str]): Personal website.
    """
    full_name: str
    title: str
    email: str
    phone: str
    location: str
    linkedin: Optional[str] = None
    website: Optional[str] = None


@dataclass(frozen=True)
class SummaryData:
    """Professional summary; ``content`` is rich text."""
    content: str


@dataclass(frozen=True)
class ExperienceItem:
    """
    One position in the work experience block.

    Attributes:
        id (str): Identifier unique within the block.
        role (str): Job title held.
        company (str): Employer.
        start_date (str): Free-form start (e.g. "2021").
        end_date (str): Free-form end (e.g. "Present").
        description (str): Multi-line rich text, usually one bullet per line.
    """
    id: str
    role: str
    company: str
    start_date: str
    end_date: str
    description: str


@dataclass(frozen=True)
class ExperienceData:
    items: Tuple[ExperienceItem, ...] = ()


@dataclass(frozen=True)
class EducationItem:
    id: str
    degree: str
    school: str
    year: str


@dataclass(frozen=True)
class EducationData:
    items: Tuple[EducationItem, ...] = ()


@dataclass(frozen=True)
class SkillItem:
    id: str
    name: str
    level: Optional[str] = None


@dataclass(frozen=True)
class SkillsData:
    items: Tuple[SkillItem, ...] = ()


BlockData = Union[HeaderData, SummaryData, ExperienceData, EducationData, SkillsData]
ListItem = Union[ExperienceItem, EducationItem, SkillItem]

# Payload class for every block type. Every consumer of block data dispatches on
# this mapping so a new block type fails loudly until it is handled everywhere.
PAYLOAD_TYPES: Dict[BlockType, type] = {
    BlockType.HEADER: HeaderData,
    BlockType.SUMMARY: SummaryData,
    BlockType.EXPERIENCE: ExperienceData,
    BlockType.EDUCATION: EducationData,
    BlockType.SKILLS: SkillsData,
}

# Item class for block types whose payload is an ordered `items` sequence
ITEM_TYPES: Dict[BlockType, type] = {
    BlockType.EXPERIENCE: ExperienceItem,
    BlockType.EDUCATION: EducationItem,
    BlockType.SKILLS: SkillItem,
}

# Prefix used when generating ids for blocks / items of each type
ITEM_ID_PREFIXES: Dict[BlockType, str] = {
    BlockType.EXPERIENCE: "job",
    BlockType.EDUCATION: "edu",
    BlockType.SKILLS: "skill",
}


def resolve_block_type(block_type: Union[BlockType, str]) -> BlockType:
    """
    Return ``block_type`` as a BlockType.

    Raises:
        UnsupportedBlockTypeError: If the value names no known block type.
    """
    try:
        return BlockType(block_type)
    except ValueError:
        raise UnsupportedBlockTypeError(
            block_type=str(block_type),
            supported_types=[t.value for t in BlockType],
        )


@dataclass(frozen=True)
class Block:
    """
    A self-contained, independently editable section of the resume.

    Attributes:
        id (str): Globally unique, stable for the lifetime of the block.
        type (BlockType): Fixed at creation.
        title (str): Display title.
        is_visible (bool): Whether the block is shown on the page.
        data (BlockData): Payload whose class matches `type`.
    """
    id: str
    type: BlockType
    title: str
    is_visible: bool
    data: BlockData

    def __post_init__(self):
        expected = PAYLOAD_TYPES.get(self.type)
        if expected is None:
            raise UnsupportedBlockTypeError(
                block_type=str(self.type),
                supported_types=[t.value for t in BlockType],
            )
        if not isinstance(self.data, expected):
            raise InvalidBlockDataError(
                block_type=self.type.value,
                invalid_fields=["data"],
                context=f"expected {expected.__name__}, got {type(self.data).__name__}",
            )

    @property
    def items(self) -> Tuple[ListItem, ...]:
        """Items of a list block, empty tuple for header/summary blocks."""
        return getattr(self.data, "items", ())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "isVisible": self.is_visible,
            "data": payload_to_dict(self.data),
        }


# --------------------------------------------------------------
# DISPLAY SETTINGS / ANALYSIS
# --------------------------------------------------------------
@dataclass(frozen=True)
class StyleConfig:
    font_family: str = "sans"
    font_size: str = "base"
    line_height: str = "normal"
    page_margin: str = "standard"
    accent_color: str = "#2563eb"

    def to_dict(self) -> Dict[str, str]:
        return {to_camel(f.name): getattr(self, f.name) for f in dataclasses.fields(self)}


@dataclass(frozen=True)
class ATSAnalysisResult:
    """
    Structured outcome of one ATS compatibility analysis.

    Attributes:
        score (int): 0-100 compatibility score.
        critical_issues (Tuple[str, ...]): Major issues to fix (usually 2-3).
        missing_keywords (Tuple[str, ...]): Keywords the resume lacks (usually 3-5).
        positive_feedback (Tuple[str, ...]): Things done well (usually 2).
    """
    score: int
    critical_issues: Tuple[str, ...] = ()
    missing_keywords: Tuple[str, ...] = ()
    positive_feedback: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ATSAnalysisResult":
        """
        Build a result from a decoded analysis payload (camelCase or snake_case keys).

        The score is rounded and clamped into 0-100. Missing lists become empty.

        Raises:
            AnalysisParseError: If the payload is not a mapping, has no numeric
                score, or holds a list field that is not a list of strings.
        """
        if not isinstance(raw, Mapping):
            raise AnalysisParseError(message=f"Analysis payload must be an object, got {type(raw).__name__}")

        normalized = {to_snake(key): value for key, value in raw.items()}

        score = normalized.get("score")
        if isinstance(score, bool) or score is None:
            raise AnalysisParseError(message=f"Analysis payload has no numeric score: {score!r}")
        try:
            score = float(score)
            if not math.isfinite(score):
                raise ValueError("non-finite score")
            score = int(round(score))
        except (TypeError, ValueError):
            raise AnalysisParseError(message=f"Analysis payload has no numeric score: {score!r}")
        score = max(0, min(100, score))

        lists = {}
        for name in ("critical_issues", "missing_keywords", "positive_feedback"):
            value = normalized.get(name) or []
            if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
                raise AnalysisParseError(message=f"Analysis field '{name}' must be a list of strings")
            lists[name] = tuple(value)

        return cls(score=score, **lists)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "criticalIssues": list(self.critical_issues),
            "missingKeywords": list(self.missing_keywords),
            "positiveFeedback": list(self.positive_feedback),
        }


# --------------------------------------------------------------
# PAYLOAD CONVERSION
# --------------------------------------------------------------
def payload_to_dict(data: BlockData) -> Dict[str, Any]:
    """Serialize a payload to its camelCase wire form."""
    result = {}
    for f in dataclasses.fields(data):
        value = getattr(data, f.name)
        if f.name == "items":
            value = [
                {to_camel(item_field.name): getattr(item, item_field.name)
                 for item_field in dataclasses.fields(item)}
                for item in value
            ]
        result[to_camel(f.name)] = value
    return result


def _check_text_values(block_type: BlockType, cls: type, values: Mapping[str, Any]) -> None:
    """
    Every non-list payload / item field holds text. Fields defaulting to None may also be None.

    Raises:
        InvalidBlockDataError: On a value of any other type.
    """
    optional = {f.name for f in dataclasses.fields(cls) if f.default is None}
    invalid = sorted(
        name for name, value in values.items()
        if name != "items"
        and not isinstance(value, str)
        and not (value is None and name in optional)
    )
    if invalid:
        raise InvalidBlockDataError(
            block_type=block_type.value,
            invalid_fields=invalid,
            context="values must be text",
        )


def item_from_value(
    block_type: BlockType,
    value: Union[ListItem, Mapping[str, Any]],
    id_factory: Optional[IdFactory] = None,
) -> ListItem:
    """
    Coerce a list item given as a dataclass or a (camel/snake case) mapping.

    A mapping without an ``id`` gets one from ``id_factory`` when provided.

    Raises:
        InvalidBlockDataError: On unknown keys, missing required keys or a
            dataclass of the wrong item type.
    """
    item_cls = ITEM_TYPES[block_type]
    if isinstance(value, item_cls):
        return value
    if not isinstance(value, Mapping):
        raise InvalidBlockDataError(
            block_type=block_type.value,
            invalid_fields=["items"],
            context=f"item must be {item_cls.__name__} or a mapping, got {type(value).__name__}",
        )

    kwargs = {to_snake(key): item_value for key, item_value in value.items()}
    if not kwargs.get("id") and id_factory is not None:
        kwargs["id"] = id_factory(ITEM_ID_PREFIXES[block_type])

    known = {f.name for f in dataclasses.fields(item_cls)}
    unknown = sorted(set(kwargs) - known)
    if unknown:
        raise InvalidBlockDataError(block_type=block_type.value, invalid_fields=unknown)
    _check_text_values(block_type, item_cls, kwargs)
    try:
        return item_cls(**kwargs)
    except TypeError as e:
        raise InvalidBlockDataError(
            block_type=block_type.value,
            invalid_fields=["items"],
            context=str(e),
        )


def normalize_partial_data(
    block_type: BlockType,
    partial: Mapping[str, Any],
    id_factory: Optional[IdFactory] = None,
) -> Dict[str, Any]:
    """
    Validate a partial payload update and convert it to dataclass field names.

    Keys may be camelCase or snake_case. An ``items`` value replaces the whole
    sequence, so it is coerced into a tuple of item dataclasses.

    Raises:
        InvalidBlockDataError: If a key is not a field of the block's payload, a
            value is not text or ``items`` is not a list.
    """
    payload_cls = PAYLOAD_TYPES[block_type]
    known = {f.name for f in dataclasses.fields(payload_cls)}

    normalized = {to_snake(key): value for key, value in partial.items()}
    unknown = sorted(set(normalized) - known)
    if unknown:
        raise InvalidBlockDataError(block_type=block_type.value, invalid_fields=unknown)
    _check_text_values(block_type, payload_cls, normalized)

    if "items" in normalized:
        items = normalized["items"]
        if isinstance(items, (str, Mapping)) or not isinstance(items, Iterable):
            raise InvalidBlockDataError(
                block_type=block_type.value,
                invalid_fields=["items"],
                context=f"items must be a list, got {type(items).__name__}",
            )
        normalized["items"] = tuple(
            item_from_value(block_type, item, id_factory) for item in items
        )
    return normalized


def payload_from_dict(
    block_type: BlockType,
    raw: Mapping[str, Any],
    id_factory: Optional[IdFactory] = None,
) -> BlockData:
    """Build a full payload for `block_type` from its wire form."""
    fields = normalize_partial_data(block_type, raw, id_factory)
    try:
        return PAYLOAD_TYPES[block_type](**fields)
    except TypeError as e:
        raise InvalidBlockDataError(
            block_type=block_type.value,
            invalid_fields=sorted(fields),
            context=str(e),
        )


# --------------------------------------------------------------
# DEFAULTS
# --------------------------------------------------------------
def default_item_for_type(block_type: BlockType, id_factory: IdFactory) -> ListItem:
    """Placeholder item inserted by the "add item" control of a list block."""
    item_id = id_factory(ITEM_ID_PREFIXES[block_type])
    if block_type == BlockType.EXPERIENCE:
        return ExperienceItem(
            id=item_id, role="Role", company="Company",
            start_date="Start", end_date="End", description="Key achievements...",
        )
    if block_type == BlockType.EDUCATION:
        return EducationItem(id=item_id, degree="Degree", school="School", year="Year")
    if block_type == BlockType.SKILLS:
        return SkillItem(id=item_id, name="New Skill")
    raise UnsupportedBlockTypeError(
        block_type=block_type.value,
        supported_types=[t.value for t in ITEM_TYPES],
    )


def default_data_for_type(block_type: BlockType, id_factory: IdFactory) -> BlockData:
    """Payload of a freshly added block."""
    if block_type == BlockType.HEADER:
        return HeaderData(full_name="Name", title="Title", email="email@example.com", phone="", location="")
    if block_type == BlockType.SUMMARY:
        return SummaryData(content="Add your professional summary here.")
    if block_type == BlockType.EXPERIENCE:
        return ExperienceData(items=(ExperienceItem(
            id=id_factory("job"), role="Role", company="Company",
            start_date="Start", end_date="End", description="Description",
        ),))
    if block_type == BlockType.EDUCATION:
        return EducationData(items=(EducationItem(
            id=id_factory("edu"), degree="Degree", school="School", year="Year",
        ),))
    if block_type == BlockType.SKILLS:
        return SkillsData(items=(SkillItem(id=id_factory("skill"), name="Skill"),))
    raise UnsupportedBlockTypeError(
        block_type=str(block_type),
        supported_types=[t.value for t in BlockType],
    )


def default_title_for_type(block_type: BlockType) -> str:
    return block_type.value.capitalize()


def build_seed_blocks() -> List[Block]:
    """
    Sample document every new editor session starts with:
    header, summary, experience, skills, education (in that order).
    """
    return [
        Block(
            id="header-1",
            type=BlockType.HEADER,
            title="Header",
            is_visible=True,
            data=HeaderData(
                full_name="Alex Johnson",
                title="Senior Product Designer",
                email="alex.j@example.com",
                phone="(555) 123-4567",
                location="San Francisco, CA",
                linkedin="linkedin.com/in/alexj",
                website="alex.design",
            ),
        ),
        Block(
            id="summary-1",
            type=BlockType.SUMMARY,
            title="Professional Summary",
            is_visible=True,
            data=SummaryData(content=(
                "Creative and detail-oriented Product Designer with over 6 years of experience "
                "in building user-centric digital products. Proven track record of improving "
                "user engagement and streamlining complex workflows. Adept at collaborating with "
                "cross-functional teams to deliver high-quality solutions."
            )),
        ),
        Block(
            id="exp-1",
            type=BlockType.EXPERIENCE,
            title="Work Experience",
            is_visible=True,
            data=ExperienceData(items=(
                ExperienceItem(
                    id="job-1",
                    role="Senior Product Designer",
                    company="TechFlow Inc.",
                    start_date="2021",
                    end_date="Present",
                    description=(
                        "• Led the redesign of the core SaaS platform, resulting in a 25% increase in user retention.\n"
                        "• Mentored junior designers and established a comprehensive design system used across 4 product lines.\n"
                        "• Collaborated closely with engineering and product management to define product roadmap and strategy."
                    ),
                ),
                ExperienceItem(
                    id="job-2",
                    role="UI/UX Designer",
                    company="Creative Pulse",
                    start_date="2018",
                    end_date="2021",
                    description=(
                        "• Designed responsive websites and mobile apps for diverse clients in fintech and healthcare.\n"
                        "• Conducted user research and usability testing to inform design decisions.\n"
                        "• Created interactive prototypes to visualize complex user flows."
                    ),
                ),
            )),
        ),
        Block(
            id="skills-1",
            type=BlockType.SKILLS,
            title="Skills",
            is_visible=True,
            data=SkillsData(items=(
                SkillItem(id="s1", name="Figma"),
                SkillItem(id="s2", name="React"),
                SkillItem(id="s3", name="User Research"),
                SkillItem(id="s4", name="Prototyping"),
                SkillItem(id="s5", name="HTML/CSS"),
                SkillItem(id="s6", name="Agile"),
            )),
        ),
        Block(
            id="edu-1",
            type=BlockType.EDUCATION,
            title="Education",
            is_visible=True,
            data=EducationData(items=(
                EducationItem(
                    id="edu-1",
                    degree="B.S. Interaction Design",
                    school="University of California, Arts",
                    year="2018",
                ),
            )),
        ),
    ]
