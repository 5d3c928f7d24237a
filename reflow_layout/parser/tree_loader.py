"""Build the content tree from its JSON interchange form.

An element is an object with ``tag`` and optional ``attributes``, ``style``,
``children`` and ``offset``. A child is either an element, a bare string, or
an object with ``text`` and optional ``offset``. Missing offsets are assigned
from a running character count so that every node maps back to a position in
the source text.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Optional

from reflow_layout.model.elements import ElementNode, Node, TextNode
from reflow_layout.utils.logger import get_logger

LOGGER = get_logger(__name__)


class TreeLoader:
    """Convert decoded JSON into :class:`ElementNode` trees."""

    def __init__(self) -> None:
        self._cursor = 0

    @classmethod
    def load(cls, path: Path) -> ElementNode:
        """Read a JSON tree from ``path``."""
        if not path.exists():
            raise FileNotFoundError(f"Content tree not found: {path}")
        return cls().build(json.loads(path.read_text(encoding="utf-8")))

    def build(self, data: Any) -> ElementNode:
        """Return the root element described by ``data``."""
        if not isinstance(data, Mapping) or "tag" not in data:
            raise ValueError("The root of a content tree must be an element object with a 'tag'")
        self._cursor = 0
        return self._element(data)

    def _build_node(self, data: Any) -> Optional[Node]:
        if isinstance(data, str):
            return self._text(data, None)
        if not isinstance(data, Mapping):
            LOGGER.warning("Skipping unsupported node of type %s", type(data).__name__)
            return None
        if "tag" not in data:
            return self._text(str(data.get("text", "")), data.get("offset"))
        return self._element(data)

    def _element(self, data: Mapping[str, Any]) -> ElementNode:
        offset = self._offset(data.get("offset"))
        element = ElementNode(
            tag=str(data["tag"]).lower(),
            attributes={str(k): str(v) for k, v in (data.get("attributes") or {}).items()},
            style={str(k).lower(): str(v) for k, v in (data.get("style") or {}).items()},
            offset=offset,
        )
        for child in data.get("children") or []:
            node = self._build_node(child)
            if node is not None:
                element.children.append(node)
        return element

    def _text(self, text: str, offset: Optional[int]) -> TextNode:
        node = TextNode(text=text, offset=self._offset(offset))
        self._cursor = node.offset + len(text)
        return node

    def _offset(self, explicit: Optional[int]) -> int:
        if isinstance(explicit, int) and explicit >= 0:
            self._cursor = explicit
        return self._cursor
