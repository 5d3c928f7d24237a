"""Render the layout model into an HTML document."""
from __future__ import annotations

from html import escape
from pathlib import Path
from typing import List, Sequence

from reflow_layout.model.elements import DrawCommand, ImageCommand, LayoutModel, MarkerCommand, TextCommand
from reflow_layout.model.geometry import Rectangle
from reflow_layout.renderer.utils import css_declarations, rect_to_css, text_to_css
from reflow_layout.utils.logger import get_logger

LOGGER = get_logger(__name__)


class HtmlRenderer:
    """Produce an absolutely positioned HTML representation of the pages."""

    def __init__(self, output_path: Path) -> None:
        self._output_path = output_path

    def render(self, model: LayoutModel, page_rect: Rectangle) -> None:
        html = self.build_html(model, page_rect)
        self._output_path.write_text(html, encoding="utf-8")
        LOGGER.info("Wrote %d page(s) to %s", len(model.pages), self._output_path.name)

    def build_html(self, model: LayoutModel, page_rect: Rectangle) -> str:
        pages = [self._page_to_div(index, page, page_rect) for index, page in enumerate(model.pages)]
        body = "\n".join(pages)
        return f"""<!DOCTYPE html>
<html lang=\"en\">
<head>
  <meta charset=\"utf-8\" />
  <title>Layout Preview</title>
  <style>
    body {{ margin: 0; padding: 16px; background: #888888; }}
    .page {{ position: relative; margin: 0 auto 16px; background: #ffffff; overflow: hidden; }}
    .text {{ position: absolute; white-space: pre; }}
    .image {{ position: absolute; }}
  </style>
</head>
<body>
{body}
</body>
</html>
"""

    def _page_to_div(self, index: int, page: Sequence[DrawCommand], page_rect: Rectangle) -> str:
        lines: List[str] = [
            f"  <div class=\"page\" id=\"page-{index + 1}\" "
            f"style=\"width: {page_rect.width}px; height: {page_rect.height}px\">"
        ]
        for command in page:
            lines.append("    " + self._command_to_html(command))
        lines.append("  </div>")
        return "\n".join(lines)

    def _command_to_html(self, command: DrawCommand) -> str:
        if isinstance(command, MarkerCommand):
            return f"<a id=\"offset-{command.offset}\"></a>"
        if isinstance(command, TextCommand):
            css = rect_to_css(command.rect)
            css.update(text_to_css(command))
            html = (
                f"<span class=\"text\" data-offset=\"{command.offset}\" "
                f"style=\"{css_declarations(css)}\">{escape(command.text)}</span>"
            )
        else:
            html = self._image_to_html(command)
        if command.uri:
            html = f"<a href=\"{escape(command.uri, quote=True)}\">{html}</a>"
        return html

    @staticmethod
    def _image_to_html(command: ImageCommand) -> str:
        css = rect_to_css(command.rect)
        return (
            f"<img class=\"image\" data-offset=\"{command.offset}\" "
            f"src=\"{escape(command.path, quote=True)}\" "
            f"style=\"{css_declarations(css)}\" alt=\"\" />"
        )
