"""Tests for vertical margin collapsing and declaration parsing helpers."""
import unittest

from reflow_layout.parser.style_resolver import (
    collapse_margins,
    expand_box_shorthand,
    parse_declarations,
    parse_gray,
)


class CollapseMarginsTest(unittest.TestCase):
    """Adjacent margins combine by sign."""

    def test_positive_margins_take_the_larger(self) -> None:
        self.assertEqual(collapse_margins(10, 20), 20)
        self.assertEqual(collapse_margins(20, 10), 20)
        self.assertEqual(collapse_margins(0, 0), 0)

    def test_negative_margins_take_the_more_negative(self) -> None:
        self.assertEqual(collapse_margins(-10, -20), -20)
        self.assertEqual(collapse_margins(-20, -10), -20)

    def test_mixed_signs_are_added(self) -> None:
        self.assertEqual(collapse_margins(10, -20), -10)
        self.assertEqual(collapse_margins(-20, 10), -10)
        self.assertEqual(collapse_margins(0, -5), -5)


class DeclarationHelpersTest(unittest.TestCase):
    def test_parse_declarations_lowercases_properties(self) -> None:
        decl = parse_declarations("Margin-Top: 2em; color:red ;; font-weight : bold")
        self.assertEqual(decl, {"margin-top": "2em", "color": "red", "font-weight": "bold"})

    def test_parse_declarations_of_nothing(self) -> None:
        self.assertEqual(parse_declarations(None), {})
        self.assertEqual(parse_declarations(""), {})

    def test_expand_box_shorthand(self) -> None:
        self.assertEqual(expand_box_shorthand("1px"), ["1px"] * 4)
        self.assertEqual(expand_box_shorthand("1px 2px"), ["1px", "2px", "1px", "2px"])
        self.assertEqual(expand_box_shorthand("1px 2px 3px"), ["1px", "2px", "3px", "2px"])
        self.assertEqual(expand_box_shorthand("1px 2px 3px 4px"), ["1px", "2px", "3px", "4px"])

    def test_parse_gray(self) -> None:
        self.assertEqual(parse_gray("black"), 0)
        self.assertEqual(parse_gray("#fff"), 255)
        self.assertEqual(parse_gray("#808080"), 128)
        self.assertEqual(parse_gray("rgb(128, 128, 128)"), 128)
        self.assertIsNone(parse_gray("not-a-color"))


if __name__ == "__main__":
    unittest.main()
