"""Configuration surface consumed by the layout engine."""
from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Mapping, Optional

from reflow_layout.model.geometry import Edge, Rectangle
from reflow_layout.model.style_model import RootData
from reflow_layout.utils.hyphenation import DEFAULT_HYPH_LANG
from reflow_layout.utils.logger import get_logger
from reflow_layout.utils.units import mm_to_px

LOGGER = get_logger(__name__)

DEFAULT_PAGE_WIDTH_PX = 600
DEFAULT_PAGE_HEIGHT_PX = 800
DEFAULT_DPI = 167
DEFAULT_FONT_SIZE_PT = 11.0
DEFAULT_MARGIN_WIDTH_MM = 8
DEFAULT_LINE_HEIGHT = 1.2
DEFAULT_HYPHEN_PENALTY = 50
DEFAULT_DASH_PENALTY = 50


@dataclass(slots=True)
class LayoutSettings:
    """Page geometry, typography defaults and collaborator configuration."""

    page_width: int = DEFAULT_PAGE_WIDTH_PX
    page_height: int = DEFAULT_PAGE_HEIGHT_PX
    dpi: int = DEFAULT_DPI
    font_size: float = DEFAULT_FONT_SIZE_PT
    margin_width: float = DEFAULT_MARGIN_WIDTH_MM
    line_height: float = DEFAULT_LINE_HEIGHT
    default_hyph_lang: str = DEFAULT_HYPH_LANG
    hyphen_penalty: int = DEFAULT_HYPHEN_PENALTY
    dash_penalty: int = DEFAULT_DASH_PENALTY
    # Font family name (lowercase) -> generic kind name, e.g. {"palatino": "serif"}.
    font_family_substitutions: Dict[str, str] = field(default_factory=dict)
    # Kind name -> {"regular"|"bold"|"italic"|"bold-italic": path}.
    font_paths: Dict[str, Dict[str, str]] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "LayoutSettings":
        """Build settings from a plain mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = key.replace("-", "_")
            if name not in known:
                LOGGER.warning("Ignoring unknown setting %r", key)
                continue
            values[name] = value
        settings = cls(**values)
        settings.font_family_substitutions = {
            name.lower(): kind for name, kind in settings.font_family_substitutions.items()
        }
        return settings

    @classmethod
    def load(cls, path: Path) -> "LayoutSettings":
        """Read settings from a JSON file."""
        return cls.from_mapping(json.loads(path.read_text(encoding="utf-8")))

    @property
    def margin_px(self) -> int:
        return mm_to_px(self.margin_width, self.dpi)

    def page_rect(self) -> Rectangle:
        return Rectangle.from_bounds(0, 0, self.page_width, self.page_height)

    def content_rect(self) -> Rectangle:
        return self.page_rect().shrink(Edge.uniform(self.margin_px))

    def root_data(self, start_offset: int = 0, spine_dir: Optional[Path] = None) -> RootData:
        """Create the read-only root context for one layout pass."""
        return RootData(
            start_offset=start_offset,
            spine_dir=spine_dir or Path("."),
            page_rect=self.page_rect(),
            rect=self.content_rect(),
        )
