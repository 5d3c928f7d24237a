"""Greedy line breaking over box/glue/penalty items.

Each line takes as many items as fit, possibly by shrinking its glue, and the
break is chosen among the candidates seen so far by the smallest deviation
from the target width plus the candidate's penalty. Two consecutive lines
never both end on a flagged (hyphen) break when another candidate exists.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from reflow_layout.model.elements import (
    BoxItem,
    GlueItem,
    Item,
    LayoutLine,
    LineStats,
    PenaltyItem,
)
from reflow_layout.model.style_model import TextAlign
from reflow_layout.utils.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class Break:
    """Chosen break: ``index`` is the breaking item, or the stream length."""

    index: int
    forced: bool = False
    flagged: bool = False


@dataclass(slots=True)
class _Candidate:
    index: int
    width: int
    stretch: int
    shrink: int
    penalty: int
    flagged: bool


class LineBreaker:
    """Split an item stream into lines of a given width."""

    def break_points(self, items: Sequence[Item], line_width: int) -> List[Break]:
        breaks: List[Break] = []
        start = self._line_start(items, 0, forced=True)
        previous_flagged = False
        while start < len(items):
            brk = self._next_break(items, start, line_width, previous_flagged)
            breaks.append(brk)
            previous_flagged = brk.flagged
            if brk.index >= len(items):
                break
            start = self._line_start(items, brk.index + 1, brk.forced)
        return breaks

    def break_lines(self, items: Sequence[Item], line_width: int, text_align: TextAlign) -> List[LayoutLine]:
        """Break ``items`` into aligned lines. An empty stream gives no lines."""
        breaks = self.break_points(items, line_width)
        lines: List[LayoutLine] = []
        start = self._line_start(items, 0, forced=True)
        for position, brk in enumerate(breaks):
            last = position == len(breaks) - 1
            line = self._assemble(items, start, brk, line_width, text_align, last)
            if line.width > line_width and not line.justified:
                LOGGER.debug("Overfull line by %dpx", line.width - line_width)
            lines.append(line)
            start = self._line_start(items, brk.index + 1, brk.forced)
        return lines

    # ------------------------------------------------------------------
    def _line_start(self, items: Sequence[Item], index: int, forced: bool) -> int:
        """Skip the items discarded at the start of a line.

        After an optional break every glue and penalty is dropped. After a
        forced break only elastic glue is, so preformatted indentation stays.
        """
        while index < len(items):
            item = items[index]
            if isinstance(item, PenaltyItem) and not item.is_forced:
                index += 1
            elif isinstance(item, GlueItem) and (not forced or item.stretch or item.shrink):
                index += 1
            else:
                break
        return index

    def _next_break(self, items: Sequence[Item], start: int, line_width: int, previous_flagged: bool) -> Break:
        stats = LineStats()
        stretch = shrink = 0
        pending_stretch = pending_shrink = 0
        candidates: List[_Candidate] = []

        for index in range(start, len(items)):
            item = items[index]
            if isinstance(item, BoxItem):
                overflow = stats.merged_width + item.width - (shrink + pending_shrink) > line_width
                if stats.started and candidates and overflow:
                    return self._choose(candidates, line_width, previous_flagged)
                stats.width = stats.merged_width + item.width
                stats.merged_width = stats.width
                stretch += pending_stretch
                shrink += pending_shrink
                pending_stretch = pending_shrink = 0
                stats.started = True
            elif isinstance(item, GlueItem):
                if stats.started and not self._after_forbidden(items, index, start):
                    candidates.append(_Candidate(index, stats.width, stretch, shrink, 0, False))
                stats.merged_width += item.width
                pending_stretch += item.stretch
                pending_shrink += item.shrink
            else:
                if item.is_forced:
                    return Break(index, forced=True)
                if stats.started and not item.is_forbidden:
                    candidates.append(_Candidate(
                        index, stats.width + item.width, stretch, shrink, item.penalty, item.flagged,
                    ))
        return Break(len(items))

    @staticmethod
    def _after_forbidden(items: Sequence[Item], index: int, start: int) -> bool:
        if index == start:
            return False
        previous = items[index - 1]
        return isinstance(previous, PenaltyItem) and previous.is_forbidden

    def _choose(self, candidates: List[_Candidate], line_width: int, previous_flagged: bool) -> Break:
        pool = candidates
        if previous_flagged:
            pool = [candidate for candidate in candidates if not candidate.flagged] or candidates
        best = min(pool, key=lambda candidate: self._cost(candidate, line_width))
        return Break(best.index, flagged=best.flagged)

    @staticmethod
    def _cost(candidate: _Candidate, line_width: int) -> Tuple[int, int, int]:
        slack = line_width - candidate.width
        overfull = max(-slack - candidate.shrink, 0)
        return overfull, abs(slack) + max(candidate.penalty, 0), -candidate.index

    # ------------------------------------------------------------------
    def _assemble(
        self,
        items: Sequence[Item],
        start: int,
        brk: Break,
        line_width: int,
        text_align: TextAlign,
        last: bool,
    ) -> LayoutLine:
        entries: List[Item] = [item for item in items[start:brk.index] if not isinstance(item, PenaltyItem)]
        while entries and isinstance(entries[-1], GlueItem):
            entries.pop()

        hyphenated = False
        if not brk.forced and brk.index < len(items):
            breaking = items[brk.index]
            if isinstance(breaking, PenaltyItem) and breaking.hyphen is not None:
                entries.append(BoxItem(breaking.width, breaking.hyphen))
                hyphenated = True

        glues = [entry for entry in entries if isinstance(entry, GlueItem)]
        natural = sum(entry.width for entry in entries)
        slack = line_width - natural
        justify = (
            text_align is TextAlign.JUSTIFY
            and not last
            and not brk.forced
            and bool(glues)
            and (slack >= 0 or -slack <= sum(glue.shrink for glue in glues))
        )
        if justify:
            adjustments = self._distribute(slack, glues)
            offset = 0
        else:
            adjustments = [0] * len(glues)
            offset = self._align_offset(text_align, slack)

        x = offset
        elements = []
        glue_widths = []
        glue_index = 0
        for entry in entries:
            if isinstance(entry, BoxItem):
                elements.append((x, entry.element))
                x += entry.width
            else:
                width = entry.width + adjustments[glue_index]
                glue_index += 1
                glue_widths.append(width)
                x += width
        return LayoutLine(elements, x - offset, glue_widths, hyphenated, justify)

    @staticmethod
    def _distribute(slack: int, glues: Sequence[GlueItem]) -> List[int]:
        """Split ``slack`` over ``glues`` in whole pixels, summing exactly to it."""
        capacities = [glue.stretch if slack >= 0 else glue.shrink for glue in glues]
        total = sum(capacities)
        if total <= 0:
            capacities = [1] * len(glues)
            total = len(glues)
        magnitude = abs(slack)
        shares = [magnitude * capacity // total for capacity in capacities]
        remainder = magnitude - sum(shares)
        for index, capacity in enumerate(capacities):
            if remainder == 0:
                break
            if capacity > 0:
                shares[index] += 1
                remainder -= 1
        sign = 1 if slack >= 0 else -1
        return [sign * share for share in shares]

    @staticmethod
    def _align_offset(text_align: TextAlign, slack: int) -> int:
        if slack <= 0:
            return 0
        if text_align is TextAlign.RIGHT:
            return slack
        if text_align is TextAlign.CENTER:
            return slack // 2
        return 0
