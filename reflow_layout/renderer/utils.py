"""Common helpers shared by renderer implementations."""
from __future__ import annotations

from typing import Dict

from reflow_layout.model.elements import TextCommand
from reflow_layout.model.geometry import Rectangle
from reflow_layout.model.style_model import FontStyle, FontWeight


def gray_to_css(gray: int) -> str:
    """Convert an 8-bit gray level into a CSS hex color."""
    level = max(0, min(255, gray))
    return f"#{level:02x}{level:02x}{level:02x}"


def rect_to_css(rect: Rectangle) -> Dict[str, str]:
    return {
        "left": f"{rect.min.x}px",
        "top": f"{rect.min.y}px",
        "width": f"{rect.width}px",
        "height": f"{rect.height}px",
    }


def text_to_css(command: TextCommand) -> Dict[str, str]:
    """Convert the font attributes of a text command into CSS properties."""
    css: Dict[str, str] = {
        "font-family": command.font_kind.value,
        "font-size": f"{command.font_size}px",
        "line-height": f"{command.rect.height}px",
    }
    if command.font_weight is FontWeight.BOLD:
        css["font-weight"] = "700"
    if command.font_style is FontStyle.ITALIC:
        css["font-style"] = "italic"
    if command.color:
        css["color"] = gray_to_css(command.color)
    return css


def css_declarations(css: Dict[str, str]) -> str:
    return "; ".join(f"{key}: {value}" for key, value in css.items())
