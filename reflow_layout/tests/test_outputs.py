"""Tests for the HTML preview, the debug dump and the command line pipeline."""
import json
import tempfile
import unittest
from pathlib import Path

from reflow_layout.main import build_layout, main
from reflow_layout.model.elements import ImageCommand, LayoutModel, MarkerCommand, RenderPlan, TextCommand
from reflow_layout.model.geometry import Point, Rectangle
from reflow_layout.model.settings import LayoutSettings
from reflow_layout.model.style_model import FontKind, FontStyle, FontWeight
from reflow_layout.renderer.html_renderer import HtmlRenderer
from reflow_layout.renderer.utils import gray_to_css
from reflow_layout.utils.debug import DebugDumper


def sample_model() -> LayoutModel:
    text = TextCommand(
        offset=3,
        position=Point(10, 30),
        text="a < b",
        plan=RenderPlan(),
        font_kind=FontKind.SANS_SERIF,
        font_style=FontStyle.ITALIC,
        font_weight=FontWeight.BOLD,
        font_size=20,
        color=128,
        uri="https://example.org/?a=1&b=2",
        rect=Rectangle.from_bounds(10, 14, 60, 34),
    )
    image = ImageCommand(
        offset=9,
        position=Point(0, 40),
        scale=0.5,
        path="images/pic.png",
        uri=None,
        rect=Rectangle.from_bounds(0, 40, 50, 80),
    )
    return LayoutModel(pages=[[MarkerCommand(1), text, image]], rects=[(3, text.rect), (9, image.rect)])


class HtmlRendererTest(unittest.TestCase):
    """Draw commands become absolutely positioned elements."""

    def test_build_html(self) -> None:
        html = HtmlRenderer(Path("unused.html")).build_html(sample_model(), Rectangle.from_bounds(0, 0, 300, 200))
        self.assertIn("width: 300px; height: 200px", html)
        self.assertIn("a &lt; b", html)
        self.assertIn("href=\"https://example.org/?a=1&amp;b=2\"", html)
        self.assertIn("font-family: sans-serif", html)
        self.assertIn("font-weight: 700", html)
        self.assertIn("font-style: italic", html)
        self.assertIn("color: #808080", html)
        self.assertIn("<a id=\"offset-1\"></a>", html)
        self.assertIn("src=\"images/pic.png\"", html)

    def test_gray_to_css(self) -> None:
        self.assertEqual(gray_to_css(0), "#000000")
        self.assertEqual(gray_to_css(255), "#ffffff")
        self.assertEqual(gray_to_css(300), "#ffffff")


class DebugDumperTest(unittest.TestCase):
    def test_dump_writes_json(self) -> None:
        with tempfile.TemporaryDirectory() as directory:
            DebugDumper(Path(directory)).dump(sample_model())
            payload = json.loads((Path(directory) / "layout_model.json").read_text())
        page = payload["pages"][0]
        self.assertEqual([entry["type"] for entry in page], ["MarkerCommand", "TextCommand", "ImageCommand"])
        self.assertEqual(page[1]["font_kind"], "sans-serif")
        self.assertEqual(page[1]["rect"]["min"], {"x": 10, "y": 14})
        self.assertEqual(payload["rects"][1]["offset"], 9)


class PipelineTest(unittest.TestCase):
    def test_build_layout_and_render(self) -> None:
        tree = {"tag": "body", "children": [{"tag": "h1", "children": ["Title"]}, {"tag": "p", "children": ["Some text."]}]}
        with tempfile.TemporaryDirectory() as directory:
            tree_path = Path(directory) / "tree.json"
            tree_path.write_text(json.dumps(tree), encoding="utf-8")
            model = build_layout(tree_path, LayoutSettings())
            self.assertEqual([word.text for word in model.words(0)], ["Title", "Some", "text."])

            output = Path(directory) / "out"
            main(str(tree_path), str(output))
            self.assertTrue((output / "layout.html").exists())
            self.assertTrue((output / "debug" / "layout_model.json").exists())

    def test_missing_input(self) -> None:
        with self.assertRaises(FileNotFoundError):
            main("/nonexistent/tree.json")
        with tempfile.TemporaryDirectory() as directory:
            tree_path = Path(directory) / "tree.json"
            tree_path.write_text(json.dumps({"tag": "body"}), encoding="utf-8")
            with self.assertRaises(FileNotFoundError):
                main(str(tree_path), settings_file=str(Path(directory) / "missing.json"))


if __name__ == "__main__":
    unittest.main()
