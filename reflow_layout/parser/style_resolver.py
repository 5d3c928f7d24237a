"""Compute the effective style of content nodes and collapse vertical margins."""
from __future__ import annotations

import math
import re
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from reflow_layout.model.elements import ElementNode
from reflow_layout.model.geometry import Edge
from reflow_layout.model.settings import LayoutSettings
from reflow_layout.model.style_model import (
    BLACK,
    Display,
    FontKind,
    FontStyle,
    FontWeight,
    LoopContext,
    RootData,
    StyleData,
    TextAlign,
)
from reflow_layout.utils.logger import get_logger
from reflow_layout.utils.units import parse_length, parse_number, pt_to_px, px_to_pt

LOGGER = get_logger(__name__)

BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "body", "center", "dd", "div", "dl", "dt",
    "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr",
    "html", "li", "main", "nav", "ol", "p", "pre", "section", "ul",
})

_BOLD = {"font-weight": "bold"}
_ITALIC = {"font-style": "italic"}
_MONOSPACE = {"font-family": "monospace"}

USER_AGENT_DECLARATIONS: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "p": {"margin-top": "1em", "margin-bottom": "1em"},
    "h1": {"font-size": "2em", "font-weight": "bold", "margin-top": "0.67em", "margin-bottom": "0.67em"},
    "h2": {"font-size": "1.5em", "font-weight": "bold", "margin-top": "0.83em", "margin-bottom": "0.83em"},
    "h3": {"font-size": "1.17em", "font-weight": "bold", "margin-top": "1em", "margin-bottom": "1em"},
    "h4": {"font-weight": "bold", "margin-top": "1.33em", "margin-bottom": "1.33em"},
    "h5": {"font-size": "0.83em", "font-weight": "bold", "margin-top": "1.67em", "margin-bottom": "1.67em"},
    "h6": {"font-size": "0.67em", "font-weight": "bold", "margin-top": "2.33em", "margin-bottom": "2.33em"},
    "blockquote": {"margin": "1em 40px"},
    "figure": {"margin": "1em 40px"},
    "pre": {"font-family": "monospace", "white-space": "pre", "margin-top": "1em", "margin-bottom": "1em"},
    "ul": {"margin-top": "1em", "margin-bottom": "1em", "padding-left": "40px"},
    "ol": {"margin-top": "1em", "margin-bottom": "1em", "padding-left": "40px"},
    "dd": {"margin-left": "40px"},
    "center": {"text-align": "center"},
    "b": _BOLD,
    "strong": _BOLD,
    "dt": _BOLD,
    "i": _ITALIC,
    "em": _ITALIC,
    "cite": _ITALIC,
    "var": _ITALIC,
    "dfn": _ITALIC,
    "code": _MONOSPACE,
    "kbd": _MONOSPACE,
    "samp": _MONOSPACE,
    "tt": _MONOSPACE,
    "sup": {"vertical-align": "super", "font-size": "smaller"},
    "sub": {"vertical-align": "sub", "font-size": "smaller"},
    "small": {"font-size": "smaller"},
    "big": {"font-size": "larger"},
})

FONT_SIZE_KEYWORDS = MappingProxyType({
    "xx-small": 0.6,
    "x-small": 0.75,
    "small": 0.89,
    "medium": 1.0,
    "large": 1.2,
    "x-large": 1.5,
    "xx-large": 2.0,
})
FONT_SIZE_STEP = 1.2

GENERIC_FAMILIES = MappingProxyType({kind.value: kind for kind in FontKind})

NAMED_COLORS = MappingProxyType({
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
    "silver": (192, 192, 192),
    "dimgray": (105, 105, 105),
    "darkgray": (169, 169, 169),
    "lightgray": (211, 211, 211),
    "red": (255, 0, 0),
    "green": (0, 128, 0),
    "blue": (0, 0, 255),
    "maroon": (128, 0, 0),
    "navy": (0, 0, 128),
})

DECLARATION_PATTERN = re.compile(r"\s*([-\w]+)\s*:\s*([^;]+)")
RGB_PATTERN = re.compile(r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)")

SUPERSCRIPT_RATIO = 0.33
SUBSCRIPT_RATIO = 0.2


def collapse_margins(a: int, b: int) -> int:
    """Combine two adjacent vertical margins.

    Two positive margins give the larger one, two negative margins the more
    negative one; margins of opposite signs are added.
    """
    if a >= 0 and b >= 0:
        return max(a, b)
    if a < 0 and b < 0:
        return min(a, b)
    return a + b


def parse_declarations(text: Optional[str]) -> Dict[str, str]:
    """Parse the body of a ``style`` attribute into a property mapping."""
    if not text:
        return {}
    return {
        match.group(1).lower(): match.group(2).strip()
        for match in DECLARATION_PATTERN.finditer(text)
    }


def parse_gray(value: str) -> Optional[int]:
    """Convert a CSS color to an 8-bit gray level."""
    text = value.strip().lower()
    rgb: Optional[Tuple[int, int, int]] = None
    if text in NAMED_COLORS:
        rgb = NAMED_COLORS[text]
    elif text.startswith("#"):
        digits = text[1:]
        if len(digits) == 3:
            digits = "".join(char * 2 for char in digits)
        if len(digits) == 6:
            try:
                rgb = (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
            except ValueError:
                rgb = None
    else:
        match = RGB_PATTERN.match(text)
        if match:
            rgb = tuple(min(int(part), 255) for part in match.groups())  # type: ignore[assignment]
    if rgb is None:
        return None
    red, green, blue = rgb
    return int(round(0.299 * red + 0.587 * green + 0.114 * blue))


def expand_box_shorthand(value: str) -> List[str]:
    """Expand a 1-4 value margin/padding shorthand to top, right, bottom, left."""
    parts = value.split()
    if len(parts) == 1:
        return parts * 4
    if len(parts) == 2:
        return [parts[0], parts[1], parts[0], parts[1]]
    if len(parts) == 3:
        return [parts[0], parts[1], parts[2], parts[1]]
    return parts[:4]


class StyleResolver:
    """Resolve effective styles from tag defaults, declarations and the parent."""

    def __init__(self, settings: LayoutSettings) -> None:
        self._settings = settings

    # ------------------------------------------------------------------
    # Public API
    def root_style(self, root: RootData) -> StyleData:
        """Initial style of a layout pass, spanning the root working rectangle."""
        settings = self._settings
        font_px = pt_to_px(settings.font_size, settings.dpi)
        return StyleData(
            display=Display.BLOCK,
            start_x=root.rect.min.x,
            end_x=root.rect.max.x,
            line_height=int(round(font_px * settings.line_height)),
            font_size=settings.font_size,
            color=BLACK,
        )

    def declarations(self, node: ElementNode) -> Dict[str, str]:
        """Tag defaults, then the ``style`` attribute, then the node's mapping."""
        merged: Dict[str, str] = dict(USER_AGENT_DECLARATIONS.get(node.tag.lower(), {}))
        merged.update(parse_declarations(node.attributes.get("style")))
        merged.update({key.lower(): value for key, value in node.style.items()})
        return merged

    def display_of(self, node: ElementNode) -> Display:
        """Display of ``node`` without resolving the rest of its style."""
        return self._resolve_display(node.tag.lower(), self.declarations(node).get("display"))

    def resolve(self, node: ElementNode, parent_style: StyleData, loop_context: LoopContext) -> StyleData:
        """Compute the style of ``node`` given its parent's resolved style."""
        decl = self.declarations(node)
        style = self._inherit(parent_style)
        dpi = self._settings.dpi
        tag = node.tag.lower()

        style.display = self._resolve_display(tag, decl.get("display"))

        language = node.attributes.get("lang") or node.attributes.get("xml:lang")
        if language:
            style.language = language

        parent_font_px = float(pt_to_px(parent_style.font_size, dpi))
        self._apply_font(style, decl, parent_style, parent_font_px)
        font_px = float(pt_to_px(style.font_size, dpi))
        container_width = parent_style.content_width

        style.line_height = self._resolve_line_height(decl.get("line-height"), parent_style, parent_font_px, font_px)

        align = self._resolve_text_align(decl.get("text-align"))
        if align is not None:
            style.text_align = align

        indent = parse_length(decl.get("text-indent"), font_px, dpi, container_width)
        if indent is not None:
            style.text_indent = indent

        spacing = decl.get("letter-spacing")
        if spacing is not None:
            style.letter_spacing = 0 if spacing.strip() == "normal" else (parse_length(spacing, font_px, dpi) or 0)

        white_space = decl.get("white-space")
        if white_space is not None:
            style.retain_whitespace = white_space.strip().lower() in ("pre", "pre-wrap", "break-spaces")

        color = decl.get("color")
        if color is not None:
            gray = parse_gray(color)
            if gray is not None:
                style.color = gray

        shift = self._resolve_vertical_align(decl.get("vertical-align"), parent_font_px, style.line_height)
        if style.display is Display.INLINE:
            style.vertical_align = parent_style.vertical_align + shift
        else:
            style.vertical_align = shift

        if tag == "a" and node.attributes.get("href"):
            style.uri = node.attributes["href"]

        self._apply_box_metrics(style, decl, font_px, container_width)
        self._apply_horizontal_bounds(style, parent_style)
        if style.display is Display.BLOCK:
            self._collapse_top_margin(style, parent_style, loop_context)
        return style

    # ------------------------------------------------------------------
    # Inheritance
    def _inherit(self, parent: StyleData) -> StyleData:
        """Copy the inherited properties; box metrics start from zero."""
        return StyleData(
            retain_whitespace=parent.retain_whitespace,
            text_align=parent.text_align,
            text_indent=parent.text_indent,
            line_height=parent.line_height,
            language=parent.language,
            font_kind=parent.font_kind,
            font_style=parent.font_style,
            font_weight=parent.font_weight,
            font_size=parent.font_size,
            font_features=list(parent.font_features) if parent.font_features is not None else None,
            color=parent.color,
            letter_spacing=parent.letter_spacing,
            uri=parent.uri,
            start_x=parent.start_x,
            end_x=parent.end_x,
        )

    def _resolve_display(self, tag: str, value: Optional[str]) -> Display:
        if value is not None:
            keyword = value.strip().lower()
            if keyword == "none":
                return Display.NONE
            if keyword in ("block", "list-item", "flex", "grid", "table"):
                return Display.BLOCK
            if keyword in ("inline", "inline-block", "inline-flex"):
                return Display.INLINE
        return Display.BLOCK if tag in BLOCK_TAGS else Display.INLINE

    # ------------------------------------------------------------------
    # Fonts
    def _apply_font(self, style: StyleData, decl: Mapping[str, str], parent: StyleData, parent_font_px: float) -> None:
        size = decl.get("font-size")
        if size is not None:
            resolved = self._resolve_font_size(size, parent, parent_font_px)
            if resolved is not None:
                style.font_size = resolved

        family = decl.get("font-family")
        if family is not None:
            kind = self._resolve_font_kind(family)
            if kind is not None:
                style.font_kind = kind

        font_style = decl.get("font-style")
        if font_style is not None:
            keyword = font_style.strip().lower()
            style.font_style = FontStyle.ITALIC if keyword in ("italic", "oblique") else FontStyle.NORMAL

        weight = decl.get("font-weight")
        if weight is not None:
            style.font_weight = self._resolve_font_weight(weight, parent.font_weight)

        features = decl.get("font-feature-settings")
        if features is not None:
            style.font_features = self._resolve_font_features(features)

        variant = decl.get("font-variant")
        if variant is not None and "small-caps" in variant.lower():
            style.font_features = (style.font_features or []) + ["smcp"]

    def _resolve_font_size(self, value: str, parent: StyleData, parent_font_px: float) -> Optional[float]:
        keyword = value.strip().lower()
        if keyword in FONT_SIZE_KEYWORDS:
            return self._settings.font_size * FONT_SIZE_KEYWORDS[keyword]
        if keyword == "smaller":
            return parent.font_size / FONT_SIZE_STEP
        if keyword == "larger":
            return parent.font_size * FONT_SIZE_STEP
        root_font_px = float(pt_to_px(self._settings.font_size, self._settings.dpi))
        size_px = parse_length(keyword, parent_font_px, self._settings.dpi, parent_font_px, root_font_px)
        if size_px is None or size_px <= 0:
            return None
        return px_to_pt(size_px, self._settings.dpi)

    def _resolve_font_kind(self, value: str) -> Optional[FontKind]:
        substitutions = self._settings.font_family_substitutions
        for name in value.split(","):
            family = name.strip().strip("'\"").lower()
            generic = substitutions.get(family, family)
            if generic in GENERIC_FAMILIES:
                return GENERIC_FAMILIES[generic]
        return None

    @staticmethod
    def _resolve_font_weight(value: str, inherited: FontWeight) -> FontWeight:
        keyword = value.strip().lower()
        if keyword in ("bold", "bolder"):
            return FontWeight.BOLD
        if keyword in ("normal", "lighter"):
            return FontWeight.NORMAL
        number = parse_number(keyword)
        if number is None:
            return inherited
        return FontWeight.BOLD if number >= 600 else FontWeight.NORMAL

    @staticmethod
    def _resolve_font_features(value: str) -> Optional[List[str]]:
        if value.strip().lower() == "normal":
            return None
        features: List[str] = []
        for entry in value.split(","):
            parts = entry.split()
            if not parts:
                continue
            tag = parts[0].strip("'\"")
            setting = parts[1].lower() if len(parts) > 1 else "1"
            if setting in ("0", "off"):
                features.append(f"-{tag}")
            else:
                features.append(tag)
        return features or None

    # ------------------------------------------------------------------
    # Text properties
    def _resolve_line_height(
        self,
        value: Optional[str],
        parent: StyleData,
        parent_font_px: float,
        font_px: float,
    ) -> int:
        dpi = self._settings.dpi
        if value is not None:
            keyword = value.strip().lower()
            if keyword == "normal":
                return int(round(font_px * self._settings.line_height))
            number = parse_number(keyword)
            if number is not None:
                height = font_px * number
                if math.isfinite(height) and height > 0:
                    return int(round(height))
            else:
                length = parse_length(keyword, font_px, dpi, font_px)
                if length is not None and length > 0:
                    return length
        if parent.line_height > 0 and parent_font_px > 0:
            return int(round(parent.line_height * font_px / parent_font_px))
        return int(round(font_px * self._settings.line_height))

    @staticmethod
    def _resolve_text_align(value: Optional[str]) -> Optional[TextAlign]:
        if value is None:
            return None
        keyword = value.strip().lower()
        aliases = {"start": TextAlign.LEFT, "end": TextAlign.RIGHT}
        if keyword in aliases:
            return aliases[keyword]
        try:
            return TextAlign(keyword)
        except ValueError:
            return None

    def _resolve_vertical_align(self, value: Optional[str], parent_font_px: float, line_height: int) -> int:
        if value is None:
            return 0
        keyword = value.strip().lower()
        if keyword == "super":
            return int(round(parent_font_px * SUPERSCRIPT_RATIO))
        if keyword == "sub":
            return -int(round(parent_font_px * SUBSCRIPT_RATIO))
        length = parse_length(keyword, parent_font_px, self._settings.dpi, line_height)
        return length or 0

    # ------------------------------------------------------------------
    # Box model
    def _apply_box_metrics(self, style: StyleData, decl: Mapping[str, str], font_px: float, container_width: int) -> None:
        dpi = self._settings.dpi
        for name in ("margin", "padding"):
            edge = Edge()
            values = ["0", "0", "0", "0"]
            if name in decl:
                values = expand_box_shorthand(decl[name])
            for index, side in enumerate(("top", "right", "bottom", "left")):
                raw = decl.get(f"{name}-{side}", values[index])
                setattr(edge, side, parse_length(raw, font_px, dpi, container_width) or 0)
            setattr(style, name, edge)

        width = parse_length(decl.get("width"), font_px, dpi, container_width)
        if width is not None and width > 0:
            style.width = width
        height = parse_length(decl.get("height"), font_px, dpi)
        if height is not None and height > 0:
            style.height = height

    @staticmethod
    def _apply_horizontal_bounds(style: StyleData, parent: StyleData) -> None:
        if style.display is not Display.BLOCK:
            return
        style.start_x = parent.start_x + style.margin.left + style.padding.left
        style.end_x = parent.end_x - style.margin.right - style.padding.right
        if style.width > 0:
            style.end_x = min(style.end_x, style.start_x + style.width)
        style.end_x = max(style.end_x, style.start_x)

    @staticmethod
    def _collapse_top_margin(style: StyleData, parent: StyleData, loop_context: LoopContext) -> None:
        """Fold the top margin into the preceding sibling's or the parent's."""
        if loop_context.parent is None:
            return
        if loop_context.is_first and parent.padding.top == 0:
            combined = collapse_margins(parent.margin.top, style.margin.top)
            style.margin.top = combined - parent.margin.top
        else:
            style.margin.top = collapse_margins(loop_context.sibling_style.margin_bottom, style.margin.top)
