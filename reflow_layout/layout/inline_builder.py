"""Turn the inline content of a block into a box/glue/penalty item stream."""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from reflow_layout.layout.context import EngineContext
from reflow_layout.layout.fonts import FontFace
from reflow_layout.model.elements import (
    BoxItem,
    BoxMaterial,
    ElementNode,
    GlueItem,
    GlueMaterial,
    ImageElement,
    ImageMaterial,
    InlineMaterial,
    INFINITE_PENALTY,
    Item,
    LineBreakMaterial,
    MarkerElement,
    MarkerMaterial,
    Node,
    NothingElement,
    PenaltyItem,
    PenaltyMaterial,
    TextElement,
    TextMaterial,
    forced_break,
)
from reflow_layout.model.style_model import Display, LoopContext, RootData, StyleData
from reflow_layout.parser.style_resolver import StyleResolver
from reflow_layout.utils.hyphenation import Language, hyph_lang
from reflow_layout.utils.images import resolve_image_path
from reflow_layout.utils.logger import get_logger
from reflow_layout.utils.spaces import (
    FONT_SPACES,
    HYPHEN_CHARS,
    NEWLINE,
    NO_BREAK_SPACES,
    SPACE,
    SPECIAL_CHARS,
    SpecialSplitter,
    glue_width,
    is_stretchable,
    iter_tokens,
)
from reflow_layout.utils.units import parse_number

LOGGER = get_logger(__name__)

HYPHEN = "-"


class InlineBuilder:
    """Gather inline material from content nodes and convert it to items."""

    def __init__(self, context: EngineContext, resolver: StyleResolver) -> None:
        self._context = context
        self._resolver = resolver

    # ------------------------------------------------------------------
    # Material gathering
    def gather(self, nodes: Sequence[Node], block_style: StyleData, root: RootData) -> List[InlineMaterial]:
        """Walk ``nodes`` depth-first and collect their inline material."""
        materials: List[InlineMaterial] = []
        for node in nodes:
            self._gather_node(node, block_style, root, materials)
        return materials

    def _gather_node(self, node: Node, parent_style: StyleData, root: RootData, out: List[InlineMaterial]) -> None:
        if not isinstance(node, ElementNode):
            if node.text:
                out.append(TextMaterial(root.start_offset + node.offset, node.text, parent_style))
            return

        style = self._resolver.resolve(node, parent_style, LoopContext())
        if style.display is Display.NONE:
            return
        offset = root.start_offset + node.offset
        if node.anchor_id:
            out.append(MarkerMaterial(offset))

        if node.tag == "br":
            out.append(LineBreakMaterial())
            return
        if node.tag == "wbr":
            out.append(PenaltyMaterial(0, 0))
            return
        if node.tag == "img":
            src = node.attributes.get("src")
            if src:
                out.append(ImageMaterial(
                    offset=offset,
                    path=resolve_image_path(root.spine_dir, src),
                    style=style,
                    width=_int_attribute(node, "width"),
                    height=_int_attribute(node, "height"),
                ))
            return

        if style.display is Display.BLOCK:
            out.append(LineBreakMaterial(collapsible=True))
        start_edge = style.margin.left + style.padding.left
        if start_edge > 0:
            out.append(BoxMaterial(start_edge))
        for child in node.children:
            self._gather_node(child, style, root, out)
        end_edge = style.margin.right + style.padding.right
        if end_edge > 0:
            out.append(BoxMaterial(end_edge))
        if style.display is Display.BLOCK:
            out.append(LineBreakMaterial(collapsible=True))

    # ------------------------------------------------------------------
    # Item construction
    def build_items(
        self,
        materials: Sequence[InlineMaterial],
        block_style: StyleData,
        line_width: int,
        max_height: int = 0,
        indent: bool = True,
    ) -> List[Item]:
        """Convert gathered material into the item stream of one block.

        Collapsible whitespace is merged into single glues and dropped at the
        block boundaries. Preformatted text keeps every space as a rigid glue
        and turns newlines into forced breaks.
        """
        items: List[Item] = []
        pending: Optional[Tuple[str, StyleData]] = None
        has_content = False

        for material in materials:
            if isinstance(material, TextMaterial):
                style = material.style
                for token in iter_tokens(material.text, style.retain_whitespace):
                    offset = material.offset + token.start
                    if token.kind == NEWLINE:
                        pending = None
                        items.append(forced_break())
                        has_content = True
                    elif token.kind == SPACE:
                        if token.text == " " and not style.retain_whitespace:
                            if pending is None:
                                pending = (token.text, style)
                            continue
                        if pending is not None and has_content:
                            items.extend(self._glue_items(*pending))
                        pending = None
                        items.extend(self._glue_items(token.text, style))
                        has_content = True
                    else:
                        if pending is not None and has_content:
                            items.extend(self._glue_items(*pending))
                        pending = None
                        items.extend(self._word_items(token.text, offset, style))
                        has_content = True
            elif isinstance(material, ImageMaterial):
                image_items = self._image_items(material, line_width, max_height, has_content, items)
                if image_items:
                    if pending is not None and has_content:
                        items.extend(self._glue_items(*pending))
                    pending = None
                    items.extend(image_items)
                    has_content = True
            elif isinstance(material, LineBreakMaterial):
                pending = None
                if material.collapsible and (not has_content or _ends_with_break(items)):
                    continue
                items.append(forced_break())
                has_content = True
            elif isinstance(material, MarkerMaterial):
                items.append(BoxItem(0, MarkerElement(material.offset)))
            elif isinstance(material, BoxMaterial):
                items.append(BoxItem(material.width, NothingElement()))
            elif isinstance(material, GlueMaterial):
                items.append(GlueItem(material.width, material.stretch, material.shrink))
            elif isinstance(material, PenaltyMaterial):
                items.append(PenaltyItem(material.width, material.penalty, material.flagged))

        if indent and block_style.text_indent and has_content:
            items.insert(0, BoxItem(block_style.text_indent, NothingElement()))
        return items

    def _face(self, style: StyleData) -> FontFace:
        font = self._context.fonts.get_mut(style.font_kind, style.font_style, style.font_weight)
        font.set_size(style.font_size, self._context.settings.dpi)
        return font

    def _glue_items(self, char: str, style: StyleData) -> List[Item]:
        font = self._face(style)
        if char in FONT_SPACES and char != " ":
            width = font.advance(char)
        else:
            width = glue_width(
                char,
                font.advance(" "),
                font.em,
                self._context.em_space_ratios,
                self._context.word_space_ratios,
            )
        width += style.letter_spacing
        if style.retain_whitespace or not is_stretchable(char):
            glue = GlueItem(width, 0, 0)
        else:
            glue = GlueItem(width, width // 2, width // 3)
        if char in NO_BREAK_SPACES:
            return [PenaltyItem(0, INFINITE_PENALTY), glue]
        return [glue]

    def _text_element(self, text: str, offset: int, style: StyleData, font: FontFace) -> TextElement:
        return TextElement(
            offset=offset,
            language=style.language,
            text=text,
            plan=font.plan(text, style.font_features, style.letter_spacing),
            font_features=style.font_features,
            font_kind=style.font_kind,
            font_style=style.font_style,
            font_weight=style.font_weight,
            font_size=font.size_px,
            letter_spacing=style.letter_spacing,
            vertical_align=style.vertical_align,
            color=style.color,
            uri=style.uri,
        )

    def _word_items(self, word: str, offset: int, style: StyleData) -> List[Item]:
        font = self._face(style)
        settings = self._context.settings
        language = None
        if not style.retain_whitespace:
            language = hyph_lang(style.language or settings.default_hyph_lang, self._context.hyphenation_languages)

        items: List[Item] = []
        position = 0
        for segment in SpecialSplitter(word):
            segment_offset = offset + position
            position += len(segment)
            if segment[0] in SPECIAL_CHARS:
                element = self._text_element(segment, segment_offset, style, font)
                items.append(BoxItem(element.plan.width, element))
                if position < len(word):
                    items.append(PenaltyItem(0, settings.dash_penalty, flagged=segment[-1] in HYPHEN_CHARS))
                continue
            parts = self._hyphenate(segment, language)
            part_offset = segment_offset
            for index, part in enumerate(parts):
                element = self._text_element(part, part_offset, style, font)
                items.append(BoxItem(element.plan.width, element))
                part_offset += len(part)
                if index < len(parts) - 1:
                    hyphen = self._text_element(HYPHEN, part_offset, style, font)
                    penalty = self._context.hyphen_penalty(language)
                    items.append(PenaltyItem(hyphen.plan.width, penalty, True, hyphen))
        return items

    def _hyphenate(self, segment: str, language: Optional[Language]) -> List[str]:
        if language is None:
            return [segment]
        positions = sorted(p for p in self._context.hyphenator.positions(language, segment) if 0 < p < len(segment))
        if not positions:
            return [segment]
        bounds = [0] + positions + [len(segment)]
        return [segment[start:end] for start, end in zip(bounds, bounds[1:])]

    def _image_items(
        self,
        material: ImageMaterial,
        line_width: int,
        max_height: int,
        has_content: bool,
        items: Sequence[Item],
    ) -> List[Item]:
        size = self._intrinsic_size(material)
        if size is None:
            LOGGER.debug("Skipping image %s without known dimensions", material.path)
            return []
        width, height = size
        style = material.style
        edge = style.margin.copy()

        scale = 1.0
        if style.width > 0:
            scale = style.width / width
        elif style.height > 0:
            scale = style.height / height
        available = line_width - edge.left - edge.right
        if available > 0 and width * scale > available:
            scale = available / width
        if max_height > 0 and height * scale > max_height:
            scale = max_height / height

        element = ImageElement(
            offset=material.offset,
            width=max(int(width * scale), 1),
            height=max(int(height * scale), 1),
            scale=scale,
            vertical_align=style.vertical_align,
            display=style.display,
            edge=edge,
            path=material.path,
            uri=style.uri,
        )
        box = BoxItem(element.width + edge.left + edge.right, element)
        if style.display is not Display.BLOCK:
            return [box]
        if has_content and not _ends_with_break(items):
            return [forced_break(), box, forced_break()]
        return [box, forced_break()]

    def _intrinsic_size(self, material: ImageMaterial) -> Optional[Tuple[int, int]]:
        if material.width and material.height:
            return material.width, material.height
        probed = self._context.image_sizer(material.path)
        if probed is None or probed[0] <= 0 or probed[1] <= 0:
            return None
        if material.width:
            return material.width, max(int(probed[1] * material.width / probed[0]), 1)
        if material.height:
            return max(int(probed[0] * material.height / probed[1]), 1), material.height
        return probed


def _int_attribute(node: ElementNode, name: str) -> Optional[int]:
    value = node.attributes.get(name, "").strip().lower().removesuffix("px")
    number = parse_number(value)
    if number is None or number < 1:
        return None
    return int(number)


def _ends_with_break(items: Sequence[Item]) -> bool:
    return bool(items) and isinstance(items[-1], PenaltyItem) and items[-1].is_forced
