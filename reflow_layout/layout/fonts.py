"""Font faces and the registry that resolves them by kind, style and weight."""
from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from PIL import ImageFont

from reflow_layout.model.elements import GlyphPlan, RenderPlan
from reflow_layout.model.style_model import FontKind, FontStyle, FontWeight
from reflow_layout.utils.logger import get_logger
from reflow_layout.utils.units import pt_to_px

if TYPE_CHECKING:
    from reflow_layout.model.settings import LayoutSettings

LOGGER = get_logger(__name__)

NARROW_GLYPHS = frozenset("fijlrtI.,:;'!|()[]{}`\"")
WIDE_GLYPHS = frozenset("mwMW@%&")
AVERAGE_WIDTH_FACTOR = 0.5  # Approximation for Latin alphabets
MONOSPACE_WIDTH_FACTOR = 0.6
ASCENDER_FACTOR = 0.8
DESCENDER_FACTOR = 0.2


class FontFace:
    """One concrete face. Its size is set right before each shaping call."""

    def __init__(self, name: str, path: Optional[str] = None, monospace: bool = False, bold: bool = False) -> None:
        self.name = name
        self.path = path
        self.monospace = monospace
        self.bold = bold
        self.size_px = 0
        self._truetype: Dict[int, ImageFont.FreeTypeFont] = {}

    def set_size(self, size_pt: float, dpi: int) -> None:
        self.size_px = max(pt_to_px(size_pt, dpi), 1)

    @property
    def ascender(self) -> int:
        font = self._font()
        if font is not None:
            return font.getmetrics()[0]
        return int(round(self.size_px * ASCENDER_FACTOR))

    @property
    def descender(self) -> int:
        """Distance from the baseline to the bottom of descenders (positive)."""
        font = self._font()
        if font is not None:
            return font.getmetrics()[1]
        return int(round(self.size_px * DESCENDER_FACTOR))

    @property
    def em(self) -> int:
        return self.size_px

    def advance(self, char: str) -> int:
        font = self._font()
        if font is not None:
            return int(round(font.getlength(char)))
        return int(round(self.size_px * self._estimate_factor(char)))

    def plan(self, text: str, features: Optional[list] = None, letter_spacing: int = 0) -> RenderPlan:
        """Shape ``text`` at the current size."""
        glyphs = [GlyphPlan(char, self.advance(char) + letter_spacing) for char in text]
        return RenderPlan(
            glyphs=glyphs,
            ascender=self.ascender,
            descender=self.descender,
            features=list(features) if features else None,
        )

    def _font(self) -> Optional[ImageFont.FreeTypeFont]:
        if self.path is None:
            return None
        font = self._truetype.get(self.size_px)
        if font is None:
            try:
                font = ImageFont.truetype(self.path, self.size_px)
            except OSError as exc:
                LOGGER.warning("Cannot load font %s (%s); using estimated metrics", self.path, exc)
                self.path = None
                return None
            self._truetype[self.size_px] = font
        return font

    def _estimate_factor(self, char: str) -> float:
        if unicodedata.combining(char):
            return 0.0
        if self.monospace:
            return MONOSPACE_WIDTH_FACTOR
        if unicodedata.east_asian_width(char) in ("W", "F"):
            return 1.0
        if char == " ":
            factor = 0.25
        elif char in NARROW_GLYPHS:
            factor = 0.3
        elif char in WIDE_GLYPHS:
            factor = 0.85
        elif char.isupper():
            factor = 0.65
        else:
            factor = AVERAGE_WIDTH_FACTOR
        return factor * 1.05 if self.bold else factor


@dataclass(slots=True)
class FontFamily:
    """Regular, bold, italic and bold-italic faces of one family."""

    regular: FontFace
    bold: FontFace
    italic: FontFace
    bold_italic: FontFace

    @classmethod
    def from_paths(cls, name: str, paths: Mapping[str, str], monospace: bool = False) -> "FontFamily":
        return cls(
            regular=FontFace(f"{name}-regular", paths.get("regular"), monospace),
            bold=FontFace(f"{name}-bold", paths.get("bold"), monospace, bold=True),
            italic=FontFace(f"{name}-italic", paths.get("italic"), monospace),
            bold_italic=FontFace(f"{name}-bold-italic", paths.get("bold-italic"), monospace, bold=True),
        )

    def face(self, style: FontStyle, weight: FontWeight) -> FontFace:
        return {
            (FontStyle.NORMAL, FontWeight.NORMAL): self.regular,
            (FontStyle.NORMAL, FontWeight.BOLD): self.bold,
            (FontStyle.ITALIC, FontWeight.NORMAL): self.italic,
            (FontStyle.ITALIC, FontWeight.BOLD): self.bold_italic,
        }[(style, weight)]


class Fonts:
    """Registry of the faces available to the engine.

    Cursive and fantasy are single faces: style and weight requests for those
    kinds are accepted and ignored.
    """

    def __init__(
        self,
        serif: FontFamily,
        sans_serif: FontFamily,
        monospace: FontFamily,
        cursive: FontFace,
        fantasy: FontFace,
    ) -> None:
        self.serif = serif
        self.sans_serif = sans_serif
        self.monospace = monospace
        self.cursive = cursive
        self.fantasy = fantasy

    @classmethod
    def from_settings(cls, settings: "LayoutSettings") -> "Fonts":
        paths = settings.font_paths
        return cls(
            serif=FontFamily.from_paths("serif", paths.get("serif", {})),
            sans_serif=FontFamily.from_paths("sans-serif", paths.get("sans-serif", {})),
            monospace=FontFamily.from_paths("monospace", paths.get("monospace", {}), monospace=True),
            cursive=FontFace("cursive", paths.get("cursive", {}).get("regular")),
            fantasy=FontFace("fantasy", paths.get("fantasy", {}).get("regular")),
        )

    def get_mut(self, kind: FontKind, style: FontStyle, weight: FontWeight) -> FontFace:
        """Return the face matching the requested kind, style and weight."""
        if kind is FontKind.CURSIVE:
            return self.cursive
        if kind is FontKind.FANTASY:
            return self.fantasy
        family = {
            FontKind.SERIF: self.serif,
            FontKind.SANS_SERIF: self.sans_serif,
            FontKind.MONOSPACE: self.monospace,
        }[kind]
        return family.face(style, weight)
