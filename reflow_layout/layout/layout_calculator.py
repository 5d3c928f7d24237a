"""Flow a content tree into paginated draw commands."""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from reflow_layout.layout.compositor import LayoutContext, PageCompositor
from reflow_layout.layout.context import EngineContext
from reflow_layout.layout.inline_builder import InlineBuilder
from reflow_layout.layout.line_breaker import LineBreaker
from reflow_layout.model.elements import (
    BoxItem,
    ChildArtifact,
    ElementNode,
    Item,
    LayoutModel,
    MarkerElement,
    Node,
    PenaltyItem,
    TextNode,
)
from reflow_layout.model.geometry import Rectangle
from reflow_layout.model.style_model import Display, LoopContext, RootData, SiblingStyle, StyleData
from reflow_layout.parser.style_resolver import StyleResolver, collapse_margins
from reflow_layout.utils.logger import get_logger

LOGGER = get_logger(__name__)

BLOCK_GROUP = "block"
INLINE_GROUP = "inline"


class LayoutCalculator:
    """Transform a content tree into renderer-friendly layout."""

    def __init__(self, context: EngineContext) -> None:
        self._context = context
        self._resolver = StyleResolver(context.settings)
        self._builder = InlineBuilder(context, self._resolver)
        self._breaker = LineBreaker()

    # ------------------------------------------------------------------
    # Public API
    def calculate(self, tree: Optional[ElementNode], root: RootData) -> LayoutModel:
        """Return the pages produced by laying ``tree`` out inside ``root``."""
        layout = LayoutContext.from_root(root)
        if tree is None:
            return layout.to_model()
        compositor = PageCompositor(layout)
        self._layout_block(tree, self._resolver.root_style(root), LoopContext(), root, compositor)
        model = layout.to_model()
        LOGGER.debug("Laid out %d page(s) with %d located rectangles", len(model.pages), len(model.rects))
        return model

    # ------------------------------------------------------------------
    # Blocks
    def _layout_block(
        self,
        node: ElementNode,
        parent_style: StyleData,
        loop_context: LoopContext,
        root: RootData,
        compositor: PageCompositor,
    ) -> ChildArtifact:
        style = self._resolver.resolve(node, parent_style, loop_context)
        if style.display is Display.NONE:
            return ChildArtifact(loop_context.sibling_style)

        layout = compositor.context
        start_page, start_y = layout.page_index, layout.cursor_y
        compositor.advance(style.margin.top)
        if node.anchor_id:
            compositor.place_marker(root.start_offset + node.offset)
        compositor.advance(style.padding.top)
        content_page, content_top = layout.page_index, layout.cursor_y

        rects: List[Tuple[int, Rectangle]] = []
        sibling_style = SiblingStyle()
        previous: Optional[Node] = None
        groups = self._group_children(node, style)
        for index, (kind, payload) in enumerate(groups):
            if kind == BLOCK_GROUP:
                child = payload[0]
                child_loop = LoopContext(
                    parent=node,
                    sibling=previous,
                    sibling_style=sibling_style,
                    is_first=index == 0,
                    is_last=index == len(groups) - 1,
                )
                artifact = self._layout_block(child, style, child_loop, root, compositor)
                sibling_style = artifact.sibling_style
                rects.extend(artifact.rects)
            else:
                compositor.advance(sibling_style.margin_bottom)
                sibling_style = SiblingStyle()
                rects.extend(self._layout_paragraph(payload, style, root, compositor, indent=index == 0))
            previous = payload[-1]

        empty = (
            layout.page_index == content_page
            and layout.cursor_y == content_top
            and style.padding.top == 0
            and style.padding.bottom == 0
            and style.height == 0
        )
        if style.padding.bottom == 0 and style.height == 0 and loop_context.parent is not None:
            margin_bottom = collapse_margins(sibling_style.margin_bottom, style.margin.bottom)
        else:
            compositor.advance(sibling_style.margin_bottom)
            margin_bottom = style.margin.bottom

        if empty and loop_context.parent is not None and layout.page_index == start_page:
            layout.cursor_y = start_y
            margin_bottom = collapse_margins(style.margin.top, margin_bottom)
            return ChildArtifact(SiblingStyle(0, margin_bottom), rects)

        if style.height and layout.page_index == content_page:
            layout.cursor_y = max(layout.cursor_y, content_top + style.height)
        compositor.advance(style.padding.bottom)
        if loop_context.parent is None:
            compositor.advance(margin_bottom)
        return ChildArtifact(SiblingStyle(style.padding.bottom, margin_bottom), rects)

    def _group_children(self, node: ElementNode, style: StyleData) -> List[Tuple[str, List[Node]]]:
        """Split children into runs of inline content and single blocks."""
        groups: List[Tuple[str, List[Node]]] = []
        run: List[Node] = []

        def flush() -> None:
            if run and not self._is_blank_run(run, style):
                groups.append((INLINE_GROUP, list(run)))
            run.clear()

        for child in node.children:
            if isinstance(child, ElementNode):
                display = self._resolver.display_of(child)
                if display is Display.NONE:
                    continue
                if display is Display.BLOCK:
                    flush()
                    kind = INLINE_GROUP if child.tag == "img" else BLOCK_GROUP
                    groups.append((kind, [child]))
                    continue
            run.append(child)
        flush()
        return groups

    @staticmethod
    def _is_blank_run(run: Sequence[Node], style: StyleData) -> bool:
        if style.retain_whitespace:
            return False
        return all(isinstance(node, TextNode) and not node.text.strip() for node in run)

    # ------------------------------------------------------------------
    # Paragraphs
    def _layout_paragraph(
        self,
        nodes: Sequence[Node],
        style: StyleData,
        root: RootData,
        compositor: PageCompositor,
        indent: bool,
    ) -> List[Tuple[int, Rectangle]]:
        line_width = style.content_width
        materials = self._builder.gather(nodes, style, root)
        items = self._builder.build_items(materials, style, line_width, root.rect.height, indent=indent)
        if not self._has_visible_content(items):
            for item in items:
                if isinstance(item, BoxItem) and isinstance(item.element, MarkerElement):
                    compositor.place_marker(item.element.offset)
            return []
        lines = self._breaker.break_lines(items, line_width, style.text_align)
        return compositor.place_lines(lines, style)

    @staticmethod
    def _has_visible_content(items: Sequence[Item]) -> bool:
        for item in items:
            if isinstance(item, BoxItem) and not isinstance(item.element, MarkerElement):
                return True
            if isinstance(item, PenaltyItem) and item.is_forced:
                return True
        return False
