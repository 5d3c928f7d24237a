"""Style model: resolved per-node style and the traversal state around it."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from reflow_layout.model.geometry import Edge, Rectangle

if TYPE_CHECKING:
    from reflow_layout.model.elements import ElementNode, Node

BLACK = 0


class Display(Enum):
    BLOCK = "block"
    INLINE = "inline"
    NONE = "none"


class TextAlign(Enum):
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"
    JUSTIFY = "justify"


class FontKind(Enum):
    SERIF = "serif"
    SANS_SERIF = "sans-serif"
    MONOSPACE = "monospace"
    CURSIVE = "cursive"
    FANTASY = "fantasy"


class FontStyle(Enum):
    NORMAL = "normal"
    ITALIC = "italic"


class FontWeight(Enum):
    NORMAL = "normal"
    BOLD = "bold"


@dataclass(slots=True, frozen=True)
class RootData:
    """Per-pass layout context, read-only once created."""

    start_offset: int
    spine_dir: Path
    page_rect: Rectangle
    rect: Rectangle


@dataclass(slots=True)
class StyleData:
    """Fully resolved style of a node; lengths are device pixels."""

    display: Display = Display.BLOCK
    width: int = 0
    height: int = 0
    margin: Edge = field(default_factory=Edge)
    padding: Edge = field(default_factory=Edge)
    start_x: int = 0
    end_x: int = 0
    retain_whitespace: bool = False
    text_align: TextAlign = TextAlign.LEFT
    text_indent: int = 0
    line_height: int = 0
    language: Optional[str] = None
    font_kind: FontKind = FontKind.SERIF
    font_style: FontStyle = FontStyle.NORMAL
    font_weight: FontWeight = FontWeight.NORMAL
    font_size: float = 0.0
    font_features: Optional[List[str]] = None
    color: int = BLACK
    letter_spacing: int = 0
    vertical_align: int = 0
    uri: Optional[str] = None

    @property
    def content_width(self) -> int:
        return max(self.end_x - self.start_x, 0)

    def copy(self) -> "StyleData":
        return replace(
            self,
            margin=self.margin.copy(),
            padding=self.padding.copy(),
            font_features=list(self.font_features) if self.font_features is not None else None,
        )


@dataclass(slots=True)
class SiblingStyle:
    """Trailing vertical spacing of the previous block sibling."""

    padding_bottom: int = 0
    margin_bottom: int = 0


@dataclass(slots=True)
class LoopContext:
    """Traversal-local view of a node's surroundings.

    The tree itself holds no parent or sibling links; they only live here for
    the duration of one visit.
    """

    parent: Optional["ElementNode"] = None
    sibling: Optional["Node"] = None
    sibling_style: SiblingStyle = field(default_factory=SiblingStyle)
    is_first: bool = False
    is_last: bool = False
