"""Place broken lines on pages and emit draw commands."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from reflow_layout.model.elements import (
    DrawCommand,
    ImageCommand,
    ImageElement,
    LayoutLine,
    LayoutModel,
    MarkerCommand,
    MarkerElement,
    TextCommand,
    TextElement,
)
from reflow_layout.model.geometry import Point, Rectangle
from reflow_layout.model.style_model import RootData, StyleData
from reflow_layout.utils.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class LayoutContext:
    """Mutable state while flowing blocks down the pages."""

    page_rect: Rectangle
    rect: Rectangle
    cursor_y: int
    pages: List[List[DrawCommand]] = field(default_factory=lambda: [[]])
    rects: List[Tuple[int, Rectangle]] = field(default_factory=list)

    @classmethod
    def from_root(cls, root: RootData) -> "LayoutContext":
        return cls(page_rect=root.page_rect, rect=root.rect, cursor_y=root.rect.min.y)

    @property
    def page_index(self) -> int:
        return len(self.pages) - 1

    @property
    def current_page(self) -> List[DrawCommand]:
        return self.pages[-1]

    @property
    def page_is_blank(self) -> bool:
        """True while nothing visible has been placed on the current page."""
        return all(isinstance(command, MarkerCommand) for command in self.current_page)

    def fits(self, height: int) -> bool:
        return self.page_is_blank or self.cursor_y + height <= self.rect.max.y

    def new_page(self) -> None:
        self.pages.append([])
        self.cursor_y = self.rect.min.y

    def advance(self, delta: int) -> None:
        self.cursor_y += delta

    def to_model(self) -> LayoutModel:
        pages = self.pages
        if len(pages) == 1 and not pages[0]:
            pages = []
        return LayoutModel(pages=pages, rects=list(self.rects))


class PageCompositor:
    """Turn :class:`LayoutLine` objects into positioned draw commands."""

    def __init__(self, context: LayoutContext) -> None:
        self.context = context

    def place_marker(self, offset: int) -> None:
        self.context.current_page.append(MarkerCommand(offset))

    def advance(self, delta: int) -> None:
        self.context.advance(delta)

    def place_lines(self, lines: Sequence[LayoutLine], style: StyleData) -> List[Tuple[int, Rectangle]]:
        """Place ``lines`` below the cursor, opening pages as needed."""
        rects: List[Tuple[int, Rectangle]] = []
        for line in lines:
            rects.extend(self.place_line(line, style))
        return rects

    def place_line(self, line: LayoutLine, style: StyleData) -> List[Tuple[int, Rectangle]]:
        context = self.context
        ascent, descent = self._text_metrics(line, style)
        height = max(style.line_height, ascent + descent)
        above = max(
            (element.height + element.edge.top + element.edge.bottom + element.vertical_align
             for _, element in line.elements if isinstance(element, ImageElement)),
            default=0,
        )
        baseline_shift = max((height + ascent - descent) // 2, above)
        height = max(height, baseline_shift + descent)

        if not context.fits(height):
            context.new_page()
        top = context.cursor_y
        baseline = top + baseline_shift

        commands: List[DrawCommand] = []
        rects: List[Tuple[int, Rectangle]] = []
        run: Optional[TextCommand] = None
        run_source: Optional[TextElement] = None
        run_end = 0
        for x, element in line.elements:
            left = style.start_x + x
            if isinstance(element, TextElement):
                if run is not None and run_end == left and run_source.same_run_style(element):
                    run.text += element.text
                    run.plan = run.plan.extend(element.plan)
                    run.rect = Rectangle(run.rect.min, Point(left + element.plan.width, run.rect.max.y))
                else:
                    run = self._text_command(element, left, baseline)
                    commands.append(run)
                run_source = element
                run_end = left + element.plan.width
                continue
            run = None
            if isinstance(element, ImageElement):
                commands.append(self._image_command(element, left, baseline))
            elif isinstance(element, MarkerElement):
                commands.append(MarkerCommand(element.offset))

        for command in commands:
            if not isinstance(command, MarkerCommand):
                rects.append((command.offset, command.rect))
        context.current_page.extend(commands)
        context.rects.extend(rects)
        context.cursor_y = top + height
        return rects

    @staticmethod
    def _text_metrics(line: LayoutLine, style: StyleData) -> Tuple[int, int]:
        ascent = descent = 0
        for _, element in line.elements:
            if isinstance(element, TextElement):
                ascent = max(ascent, element.plan.ascender + element.vertical_align)
                descent = max(descent, element.plan.descender - element.vertical_align)
        if ascent == 0 and descent == 0:
            # Image-only or blank lines still get the block's strut.
            return style.line_height * 4 // 5, style.line_height // 5
        return ascent, descent

    @staticmethod
    def _text_command(element: TextElement, left: int, baseline: int) -> TextCommand:
        y = baseline - element.vertical_align
        return TextCommand(
            offset=element.offset,
            position=Point(left, y),
            text=element.text,
            plan=element.plan,
            font_kind=element.font_kind,
            font_style=element.font_style,
            font_weight=element.font_weight,
            font_size=element.font_size,
            color=element.color,
            uri=element.uri,
            rect=Rectangle.from_bounds(
                left, y - element.plan.ascender, left + element.plan.width, y + element.plan.descender,
            ),
        )

    @staticmethod
    def _image_command(element: ImageElement, left: int, baseline: int) -> ImageCommand:
        x = left + element.edge.left
        bottom = baseline - element.vertical_align - element.edge.bottom
        y = bottom - element.height
        return ImageCommand(
            offset=element.offset,
            position=Point(x, y),
            scale=element.scale,
            path=element.path,
            uri=element.uri,
            rect=Rectangle.from_bounds(x, y, x + element.width, bottom),
        )
