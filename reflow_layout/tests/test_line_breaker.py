"""Tests for greedy line breaking and line alignment."""
import unittest

from reflow_layout.layout.line_breaker import LineBreaker
from reflow_layout.model.elements import (
    INFINITE_PENALTY,
    BoxItem,
    GlueItem,
    NothingElement,
    PenaltyItem,
    RenderPlan,
    TextElement,
    forced_break,
)
from reflow_layout.model.style_model import FontKind, FontStyle, FontWeight, TextAlign


def box(width: int) -> BoxItem:
    return BoxItem(width, NothingElement())


def glue() -> GlueItem:
    return GlueItem(10, 5, 3)


def words(count: int, width: int = 30) -> list:
    items = []
    for index in range(count):
        if index:
            items.append(glue())
        items.append(box(width))
    return items


def hyphen() -> TextElement:
    return TextElement(
        offset=2,
        language=None,
        text="-",
        plan=RenderPlan(),
        font_features=None,
        font_kind=FontKind.SERIF,
        font_style=FontStyle.NORMAL,
        font_weight=FontWeight.NORMAL,
        font_size=20,
        letter_spacing=0,
        vertical_align=0,
        color=0,
    )


class LineBreakerTest(unittest.TestCase):
    """Lines of 30px words separated by 10px glue (stretch 5, shrink 3)."""

    def setUp(self) -> None:
        self.breaker = LineBreaker()

    def test_empty_stream_has_no_lines(self) -> None:
        self.assertEqual(self.breaker.break_lines([], 100, TextAlign.LEFT), [])
        self.assertEqual(self.breaker.break_points([], 100), [])

    def test_single_line(self) -> None:
        lines = self.breaker.break_lines(words(2), 100, TextAlign.LEFT)
        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0].width, 70)
        self.assertEqual([x for x, _ in lines[0].elements], [0, 40])
        self.assertEqual(lines[0].glue_widths, [10])

    def test_wraps_at_the_best_glue(self) -> None:
        lines = self.breaker.break_lines(words(5), 100, TextAlign.LEFT)
        self.assertEqual([len(line.elements) for line in lines], [2, 2, 1])
        self.assertEqual([line.width for line in lines], [70, 70, 30])

    def test_justified_lines_fill_the_width_exactly(self) -> None:
        lines = self.breaker.break_lines(words(5), 100, TextAlign.JUSTIFY)
        for line in lines[:-1]:
            self.assertTrue(line.justified)
            self.assertEqual(line.width, 100)
            self.assertEqual(line.glue_widths, [40])
        self.assertFalse(lines[-1].justified)
        self.assertEqual(lines[-1].width, 30)

    def test_justification_without_glue_falls_back_to_left(self) -> None:
        items = [box(60), PenaltyItem(0, 0), box(60)]
        lines = self.breaker.break_lines(items, 100, TextAlign.JUSTIFY)
        self.assertEqual(len(lines), 2)
        self.assertFalse(lines[0].justified)
        self.assertEqual(lines[0].elements[0][0], 0)

    def test_distribute_sums_to_the_slack(self) -> None:
        shares = LineBreaker._distribute(7, [GlueItem(10, 3, 0), GlueItem(10, 1, 0)])
        self.assertEqual(shares, [6, 1])
        shares = LineBreaker._distribute(-3, [GlueItem(10, 0, 2), GlueItem(10, 0, 2)])
        self.assertEqual(shares, [-2, -1])
        shares = LineBreaker._distribute(5, [GlueItem(10, 0, 0), GlueItem(10, 0, 0)])
        self.assertEqual(sum(shares), 5)

    def test_rebreaking_a_line_is_stable(self) -> None:
        items = words(7)
        breaks = self.breaker.break_points(items, 100)
        first_line = items[:breaks[0].index]
        original = self.breaker.break_lines(items, 100, TextAlign.LEFT)[0]
        again = self.breaker.break_lines(first_line, 100, TextAlign.LEFT)
        self.assertEqual(len(again), 1)
        self.assertEqual(again[0].width, original.width)
        self.assertEqual([x for x, _ in again[0].elements], [x for x, _ in original.elements])
        self.assertEqual(self.breaker.break_points(first_line, 100)[0].index, len(first_line))

    def test_oversized_box_gets_its_own_line(self) -> None:
        lines = self.breaker.break_lines([box(150)], 100, TextAlign.JUSTIFY)
        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0].width, 150)

        items = [box(30), glue(), box(150), glue(), box(30)]
        lines = self.breaker.break_lines(items, 100, TextAlign.LEFT)
        self.assertEqual([line.width for line in lines], [30, 150, 30])

    def test_forced_breaks_are_honored(self) -> None:
        items = [box(30), forced_break(), box(30)]
        lines = self.breaker.break_lines(items, 100, TextAlign.JUSTIFY)
        self.assertEqual(len(lines), 2)
        self.assertFalse(lines[0].justified)

    def test_consecutive_forced_breaks_leave_a_blank_line(self) -> None:
        items = [box(30), forced_break(), forced_break(), box(30), forced_break()]
        lines = self.breaker.break_lines(items, 100, TextAlign.LEFT)
        self.assertEqual([len(line.elements) for line in lines], [1, 0, 1])

    def test_rigid_glue_after_forced_break_is_kept(self) -> None:
        items = [box(30), forced_break(), GlueItem(10, 0, 0), box(30)]
        lines = self.breaker.break_lines(items, 100, TextAlign.LEFT)
        self.assertEqual(lines[1].elements[0][0], 10)

    def test_hyphen_is_appended_at_the_break(self) -> None:
        items = [box(60), PenaltyItem(10, 50, True, hyphen()), box(60)]
        lines = self.breaker.break_lines(items, 100, TextAlign.LEFT)
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].hyphenated)
        self.assertEqual(lines[0].width, 70)
        self.assertEqual(lines[0].elements[-1][1].text, "-")
        self.assertFalse(lines[1].hyphenated)

    def test_no_two_consecutive_flagged_breaks(self) -> None:
        def stream(first_flagged: bool) -> list:
            return [
                box(40), PenaltyItem(0, 0, first_flagged), box(40),
                GlueItem(5, 0, 0), box(5), PenaltyItem(0, 0, True), box(40),
            ]

        points = self.breaker.break_points(stream(False), 50)
        self.assertEqual([point.index for point in points], [1, 5, 7])

        points = self.breaker.break_points(stream(True), 50)
        self.assertEqual([point.index for point in points], [1, 3, 7])
        self.assertTrue(points[0].flagged)
        self.assertFalse(points[1].flagged)

    def test_forbidden_break_is_never_taken(self) -> None:
        items = [box(60), PenaltyItem(0, INFINITE_PENALTY), glue(), box(60)]
        lines = self.breaker.break_lines(items, 100, TextAlign.LEFT)
        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0].width, 130)

    def test_static_alignment_offsets(self) -> None:
        center = self.breaker.break_lines([box(40)], 100, TextAlign.CENTER)[0]
        right = self.breaker.break_lines([box(40)], 100, TextAlign.RIGHT)[0]
        self.assertEqual(center.elements[0][0], 30)
        self.assertEqual(right.elements[0][0], 60)
        self.assertEqual(right.width, 40)


if __name__ == "__main__":
    unittest.main()
