"""In-memory representation of content, typesetting atoms and layout output."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from reflow_layout.model.geometry import Edge, Point, Rectangle
from reflow_layout.model.style_model import (
    Display,
    FontKind,
    FontStyle,
    FontWeight,
    SiblingStyle,
    StyleData,
)

INFINITE_PENALTY = 10_000


# ----------------------------------------------------------------------
# Content tree


@dataclass(slots=True)
class TextNode:
    """Character data; ``offset`` locates its first character in the source."""

    text: str
    offset: int = 0


@dataclass(slots=True)
class ElementNode:
    """Element with attributes, inline style declarations and children."""

    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    style: Dict[str, str] = field(default_factory=dict)
    children: List["Node"] = field(default_factory=list)
    offset: int = 0

    @property
    def anchor_id(self) -> Optional[str]:
        return self.attributes.get("id")


Node = ElementNode | TextNode


# ----------------------------------------------------------------------
# Inline material gathered from one block


@dataclass(slots=True)
class TextMaterial:
    offset: int
    text: str
    style: StyleData


@dataclass(slots=True)
class ImageMaterial:
    offset: int
    path: str
    style: StyleData
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass(slots=True)
class GlueMaterial:
    width: int
    stretch: int
    shrink: int


@dataclass(slots=True)
class PenaltyMaterial:
    width: int
    penalty: int
    flagged: bool = False


@dataclass(slots=True)
class BoxMaterial:
    """Fixed advance, such as a text indent."""

    width: int


@dataclass(slots=True)
class LineBreakMaterial:
    """Forced line break.

    A collapsible break comes from a block boundary and is dropped at the
    start of the content or right after another break.
    """

    collapsible: bool = False


@dataclass(slots=True)
class MarkerMaterial:
    """Zero-width anchor target."""

    offset: int


InlineMaterial = (
    TextMaterial
    | ImageMaterial
    | GlueMaterial
    | PenaltyMaterial
    | BoxMaterial
    | LineBreakMaterial
    | MarkerMaterial
)


# ----------------------------------------------------------------------
# Shaping results and paragraph elements


@dataclass(slots=True)
class GlyphPlan:
    char: str
    advance: int


@dataclass(slots=True)
class RenderPlan:
    """Glyph advances of a shaped text run."""

    glyphs: List[GlyphPlan] = field(default_factory=list)
    ascender: int = 0
    descender: int = 0
    features: Optional[List[str]] = None

    @property
    def width(self) -> int:
        return sum(glyph.advance for glyph in self.glyphs)

    def extend(self, other: "RenderPlan") -> "RenderPlan":
        """Return the plan of this run followed by ``other``."""
        return RenderPlan(
            glyphs=self.glyphs + other.glyphs,
            ascender=max(self.ascender, other.ascender),
            descender=max(self.descender, other.descender),
            features=self.features,
        )


@dataclass(slots=True)
class TextElement:
    offset: int
    language: Optional[str]
    text: str
    plan: RenderPlan
    font_features: Optional[List[str]]
    font_kind: FontKind
    font_style: FontStyle
    font_weight: FontWeight
    font_size: int
    letter_spacing: int
    vertical_align: int
    color: int
    uri: Optional[str] = None

    def same_run_style(self, other: "TextElement") -> bool:
        """True when both elements would be drawn with identical attributes."""
        return (
            self.font_kind == other.font_kind
            and self.font_style == other.font_style
            and self.font_weight == other.font_weight
            and self.font_size == other.font_size
            and self.vertical_align == other.vertical_align
            and self.color == other.color
            and self.uri == other.uri
        )


@dataclass(slots=True)
class ImageElement:
    offset: int
    width: int
    height: int
    scale: float
    vertical_align: int
    display: Display
    edge: Edge
    path: str
    uri: Optional[str] = None


@dataclass(slots=True)
class MarkerElement:
    offset: int


@dataclass(slots=True)
class NothingElement:
    """Placeholder occupying space without drawing anything."""


ParagraphElement = TextElement | ImageElement | MarkerElement | NothingElement


# ----------------------------------------------------------------------
# Typesetting items consumed by the line breaker


@dataclass(slots=True)
class BoxItem:
    width: int
    element: ParagraphElement


@dataclass(slots=True)
class GlueItem:
    width: int
    stretch: int
    shrink: int


@dataclass(slots=True)
class PenaltyItem:
    """Candidate break; ``hyphen`` is drawn at the line end when chosen."""

    width: int
    penalty: int
    flagged: bool = False
    hyphen: Optional[TextElement] = None

    @property
    def is_forced(self) -> bool:
        return self.penalty <= -INFINITE_PENALTY

    @property
    def is_forbidden(self) -> bool:
        return self.penalty >= INFINITE_PENALTY


Item = BoxItem | GlueItem | PenaltyItem


def forced_break() -> PenaltyItem:
    return PenaltyItem(0, -INFINITE_PENALTY)


@dataclass(slots=True)
class LineStats:
    """Running widths of the line being assembled."""

    width: int = 0
    merged_width: int = 0
    started: bool = False


@dataclass(slots=True)
class LayoutLine:
    """One line after break and alignment decisions.

    ``elements`` holds ``(x, element)`` pairs relative to the line start and
    ``glue_widths`` the final width of each glue kept inside the line.
    """

    elements: List[Tuple[int, ParagraphElement]]
    width: int
    glue_widths: List[int] = field(default_factory=list)
    hyphenated: bool = False
    justified: bool = False


# ----------------------------------------------------------------------
# Draw commands


@dataclass(slots=True)
class TextCommand:
    offset: int
    position: Point
    text: str
    plan: RenderPlan
    font_kind: FontKind
    font_style: FontStyle
    font_weight: FontWeight
    font_size: int
    color: int
    uri: Optional[str]
    rect: Rectangle


@dataclass(slots=True)
class ImageCommand:
    offset: int
    position: Point
    scale: float
    path: str
    uri: Optional[str]
    rect: Rectangle


@dataclass(slots=True)
class MarkerCommand:
    offset: int


DrawCommand = TextCommand | ImageCommand | MarkerCommand


@dataclass(slots=True)
class ChildArtifact:
    """Outcome of laying out one block child."""

    sibling_style: SiblingStyle
    rects: List[Tuple[int, Rectangle]] = field(default_factory=list)


@dataclass(slots=True)
class BoundedText:
    text: str
    rect: Rectangle
    offset: int


@dataclass(slots=True)
class LayoutModel:
    """Paginated draw commands plus the offset -> rectangle index."""

    pages: Sequence[Sequence[DrawCommand]] = field(default_factory=list)
    rects: Sequence[Tuple[int, Rectangle]] = field(default_factory=list)

    @property
    def commands(self) -> List[DrawCommand]:
        return [command for page in self.pages for command in page]

    def locate(self, point: Point, page_index: int = 0) -> Optional[int]:
        """Return the source offset of the text or image drawn under ``point``."""
        if page_index >= len(self.pages):
            return None
        for command in self.pages[page_index]:
            if isinstance(command, MarkerCommand):
                continue
            if command.rect.includes(point):
                return command.offset
        return None

    def words(self, page_index: int) -> List[BoundedText]:
        """Text commands of a page, for search and selection."""
        if page_index >= len(self.pages):
            return []
        return [
            BoundedText(command.text, command.rect, command.offset)
            for command in self.pages[page_index]
            if isinstance(command, TextCommand)
        ]

    def links(self, page_index: int) -> List[BoundedText]:
        """Link targets of a page with the area that activates them."""
        if page_index >= len(self.pages):
            return []
        return [
            BoundedText(command.uri, command.rect, command.offset)
            for command in self.pages[page_index]
            if isinstance(command, (TextCommand, ImageCommand)) and command.uri
        ]
