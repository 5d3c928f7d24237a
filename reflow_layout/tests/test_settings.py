"""Tests for layout settings and the root layout context."""
import json
import tempfile
import unittest
from pathlib import Path

from reflow_layout.model.geometry import Rectangle
from reflow_layout.model.settings import DEFAULT_DPI, LayoutSettings


class LayoutSettingsTest(unittest.TestCase):
    """Settings come from defaults, mappings or JSON files."""

    def test_defaults(self) -> None:
        settings = LayoutSettings()
        self.assertEqual(settings.dpi, DEFAULT_DPI)
        self.assertEqual(settings.default_hyph_lang, "en")
        self.assertEqual(settings.page_rect(), Rectangle.from_bounds(0, 0, 600, 800))

    def test_content_rect_applies_margin(self) -> None:
        settings = LayoutSettings(dpi=100, margin_width=25.4)
        self.assertEqual(settings.margin_px, 100)
        self.assertEqual(settings.content_rect(), Rectangle.from_bounds(100, 100, 500, 700))

    def test_from_mapping(self) -> None:
        with self.assertLogs("reflow_layout.model.settings", level="WARNING"):
            settings = LayoutSettings.from_mapping({
                "page-width": 320,
                "font_family_substitutions": {"Palatino": "serif"},
                "unknown": 1,
            })
        self.assertEqual(settings.page_width, 320)
        self.assertEqual(settings.font_family_substitutions, {"palatino": "serif"})

    def test_root_data(self) -> None:
        settings = LayoutSettings(margin_width=0)
        root = settings.root_data(start_offset=12, spine_dir=Path("book/text"))
        self.assertEqual(root.start_offset, 12)
        self.assertEqual(root.spine_dir, Path("book/text"))
        self.assertEqual(root.rect, root.page_rect)

    def test_load(self) -> None:
        with tempfile.TemporaryDirectory() as directory:
            path = Path(directory) / "settings.json"
            path.write_text(json.dumps({"dpi": 300, "line_height": 1.5}), encoding="utf-8")
            settings = LayoutSettings.load(path)
        self.assertEqual(settings.dpi, 300)
        self.assertEqual(settings.line_height, 1.5)


if __name__ == "__main__":
    unittest.main()
