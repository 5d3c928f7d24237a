"""Tests for gathering inline material and building the item stream."""
import unittest
from unittest.mock import Mock

from reflow_layout.layout.context import EngineContext
from reflow_layout.layout.fonts import Fonts
from reflow_layout.layout.inline_builder import InlineBuilder
from reflow_layout.model.elements import (
    INFINITE_PENALTY,
    BoxItem,
    BoxMaterial,
    ElementNode,
    GlueItem,
    GlueMaterial,
    ImageElement,
    ImageMaterial,
    LineBreakMaterial,
    MarkerElement,
    MarkerMaterial,
    NothingElement,
    PenaltyItem,
    PenaltyMaterial,
    TextElement,
    TextNode,
)
from reflow_layout.model.settings import LayoutSettings
from reflow_layout.parser.style_resolver import StyleResolver
from reflow_layout.utils.hyphenation import Language


class InlineBuilderTest(unittest.TestCase):
    """Fonts use estimated metrics: at 20px a lowercase letter is 10px and a space 5px."""

    def setUp(self) -> None:
        self.settings = LayoutSettings(page_width=400, page_height=600, dpi=72, font_size=20, margin_width=0)
        self.hyphenator = Mock()
        self.hyphenator.positions.return_value = []
        self.image_sizer = Mock(return_value=(200, 100))
        self.context = EngineContext(
            settings=self.settings,
            fonts=Fonts.from_settings(self.settings),
            hyphenator=self.hyphenator,
            image_sizer=self.image_sizer,
        )
        self.resolver = StyleResolver(self.settings)
        self.builder = InlineBuilder(self.context, self.resolver)
        self.root = self.settings.root_data()
        self.style = self.resolver.root_style(self.root)

    def build(self, nodes, style=None, line_width=400):
        style = style or self.style
        materials = self.builder.gather(nodes, style, self.root)
        return self.builder.build_items(materials, style, line_width, self.root.rect.height)

    def test_whitespace_collapses_and_is_trimmed(self) -> None:
        items = self.build([TextNode("  hello   world  ")])
        self.assertEqual([type(item) for item in items], [BoxItem, GlueItem, BoxItem])
        self.assertEqual(items[0].element.text, "hello")
        self.assertEqual(items[0].element.offset, 2)
        self.assertEqual(items[0].width, 42)
        self.assertEqual(items[1], GlueItem(5, 2, 1))
        self.assertEqual(items[2].element.text, "world")

    def test_whitespace_collapses_across_nodes(self) -> None:
        nodes = [TextNode("one ", 0), ElementNode("em", children=[TextNode(" two", 4)], offset=4)]
        items = self.build(nodes)
        self.assertEqual([type(item) for item in items], [BoxItem, GlueItem, BoxItem])
        self.assertEqual(items[2].element.text, "two")
        self.assertEqual(items[2].element.offset, 5)

    def test_hyphenation_points_become_flagged_penalties(self) -> None:
        self.hyphenator.positions.side_effect = lambda language, word: [2] if word == "typeset" else []
        items = self.build([TextNode("typeset")])
        self.hyphenator.positions.assert_called_with(Language.ENGLISH_US, "typeset")
        self.assertEqual([type(item) for item in items], [BoxItem, PenaltyItem, BoxItem])
        penalty = items[1]
        self.assertTrue(penalty.flagged)
        self.assertEqual(penalty.penalty, self.settings.hyphen_penalty)
        self.assertEqual(penalty.width, 10)
        self.assertIsInstance(penalty.hyphen, TextElement)
        self.assertEqual(penalty.hyphen.text, "-")
        self.assertEqual([items[0].element.text, items[2].element.text], ["ty", "peset"])
        self.assertEqual(items[2].element.offset, 2)

    def test_language_of_the_element_selects_the_dictionary(self) -> None:
        node = ElementNode("span", attributes={"lang": "de-CH"}, children=[TextNode("Wort")])
        self.build([node])
        self.hyphenator.positions.assert_called_with(Language.GERMAN_SWISS, "Wort")

    def test_hyphen_penalty_follows_the_language(self) -> None:
        self.hyphenator.positions.side_effect = lambda language, word: [4] if word == "Wortbau" else []
        node = ElementNode("span", attributes={"lang": "de"}, children=[TextNode("Wortbau")])
        items = self.build([node])
        self.hyphenator.positions.assert_called_with(Language.GERMAN_1996, "Wortbau")
        self.assertEqual(items[1].penalty, 30)
        self.assertEqual(self.context.hyphen_penalty(Language.ENGLISH_US), self.settings.hyphen_penalty)

    def test_unknown_language_skips_hyphenation(self) -> None:
        node = ElementNode("span", attributes={"lang": "y"}, children=[TextNode("word")])
        items = self.build([node])
        self.hyphenator.positions.assert_not_called()
        self.assertEqual(len(items), 1)

    def test_break_after_dashes_and_slashes(self) -> None:
        items = self.build([TextNode("co-op a/b")])
        kinds = [type(item) for item in items]
        self.assertEqual(kinds, [BoxItem, BoxItem, PenaltyItem, BoxItem, GlueItem, BoxItem, BoxItem, PenaltyItem, BoxItem])
        self.assertTrue(items[2].flagged)
        self.assertEqual(items[2].penalty, self.settings.dash_penalty)
        self.assertEqual(items[2].width, 0)
        self.assertFalse(items[7].flagged)

    def test_trailing_dash_has_no_penalty(self) -> None:
        items = self.build([TextNode("well-")])
        self.assertEqual([type(item) for item in items], [BoxItem, BoxItem])

    def test_preformatted_text_keeps_spaces_and_newlines(self) -> None:
        style = self.style.copy()
        style.retain_whitespace = True
        items = self.build([TextNode("a  b\nc")], style)
        self.assertEqual(
            [type(item) for item in items],
            [BoxItem, GlueItem, GlueItem, BoxItem, PenaltyItem, BoxItem],
        )
        self.assertEqual(items[1], GlueItem(5, 0, 0))
        self.assertTrue(items[4].is_forced)
        self.hyphenator.positions.assert_not_called()

    def test_preformatted_crlf_is_a_single_break(self) -> None:
        style = self.style.copy()
        style.retain_whitespace = True
        items = self.build([TextNode("a\r\nb")], style)
        self.assertEqual([type(item) for item in items], [BoxItem, PenaltyItem, BoxItem])
        self.assertTrue(items[1].is_forced)
        self.assertEqual(items[2].element.offset, 3)

    def test_no_break_space_forbids_the_break(self) -> None:
        items = self.build([TextNode("a\u00A0b")])
        self.assertEqual([type(item) for item in items], [BoxItem, PenaltyItem, GlueItem, BoxItem])
        self.assertEqual(items[1].penalty, INFINITE_PENALTY)
        self.assertEqual(items[2], GlueItem(5, 2, 1))

    def test_em_space_is_rigid(self) -> None:
        items = self.build([TextNode("a\u2003b")])
        self.assertEqual(items[1], GlueItem(20, 0, 0))

    def test_text_indent_prefixes_the_first_line(self) -> None:
        style = self.style.copy()
        style.text_indent = 15
        items = self.build([TextNode("word")], style)
        self.assertEqual(items[0], BoxItem(15, NothingElement()))
        self.assertEqual(self.build([TextNode("   ")], style), [])

    def test_line_break_and_anchor(self) -> None:
        nodes = [
            TextNode("a", 0),
            ElementNode("br", offset=1),
            ElementNode("span", attributes={"id": "here"}, children=[TextNode("b", 1)], offset=1),
        ]
        materials = self.builder.gather(nodes, self.style, self.root)
        self.assertIsInstance(materials[1], LineBreakMaterial)
        self.assertIsInstance(materials[2], MarkerMaterial)
        items = self.builder.build_items(materials, self.style, 400)
        self.assertTrue(items[1].is_forced)
        self.assertIsInstance(items[2].element, MarkerElement)
        self.assertEqual(items[3].element.text, "b")

    def test_word_break_opportunity(self) -> None:
        items = self.build([TextNode("data"), ElementNode("wbr"), TextNode("base")])
        self.assertEqual([type(item) for item in items], [BoxItem, PenaltyItem, BoxItem])
        self.assertEqual(items[1], PenaltyItem(0, 0))

    def test_explicit_materials_pass_through(self) -> None:
        materials = [BoxMaterial(7), GlueMaterial(4, 2, 1), PenaltyMaterial(0, 100, True)]
        items = self.builder.build_items(materials, self.style, 400)
        self.assertEqual(items, [BoxItem(7, NothingElement()), GlueItem(4, 2, 1), PenaltyItem(0, 100, True)])

    def test_hidden_elements_are_skipped(self) -> None:
        nodes = [ElementNode("span", style={"display": "none"}, children=[TextNode("secret")]), TextNode("shown")]
        items = self.build(nodes)
        self.assertEqual([item.element.text for item in items], ["shown"])

    def test_image_is_fitted_to_the_line(self) -> None:
        node = ElementNode("img", attributes={"src": "images/pic.png"})
        materials = self.builder.gather([node], self.style, self.root)
        self.assertEqual(materials, [ImageMaterial(0, "images/pic.png", materials[0].style)])
        items = self.builder.build_items(materials, self.style, 100)
        self.image_sizer.assert_called_once_with("images/pic.png")
        element = items[0].element
        self.assertIsInstance(element, ImageElement)
        self.assertEqual((element.width, element.height), (100, 50))
        self.assertEqual(items[0].width, 100)

    def test_image_attributes_avoid_probing(self) -> None:
        node = ElementNode("img", attributes={"src": "pic.png", "width": "50", "height": "20"})
        items = self.build([node])
        self.image_sizer.assert_not_called()
        self.assertEqual((items[0].element.width, items[0].element.height), (50, 20))

    def test_non_finite_image_attributes_are_ignored(self) -> None:
        node = ElementNode("img", attributes={"src": "images/pic.png", "width": "1e999", "height": "nan"})
        items = self.build([node])
        self.image_sizer.assert_called_once_with("images/pic.png")
        self.assertEqual((items[0].element.width, items[0].element.height), (200, 100))

    def test_unreadable_image_is_skipped(self) -> None:
        self.image_sizer.return_value = None
        items = self.build([TextNode("a "), ElementNode("img", attributes={"src": "missing.png"})])
        self.assertEqual(len(items), 1)

    def test_block_image_sits_on_its_own_line(self) -> None:
        node = ElementNode("img", attributes={"src": "pic.png"}, style={"display": "block"})
        items = self.build([TextNode("a"), node])
        self.assertEqual([type(item) for item in items], [BoxItem, PenaltyItem, BoxItem, PenaltyItem])
        self.assertTrue(items[1].is_forced)
        self.assertIsInstance(items[2].element, ImageElement)


if __name__ == "__main__":
    unittest.main()
