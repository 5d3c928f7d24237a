"""Helpers to persist intermediate representations for debugging."""
from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from reflow_layout.model.elements import LayoutModel


class DebugDumper:
    """Writes intermediate artifacts onto disk for inspection."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def dump(self, model: LayoutModel) -> None:
        """Persist the layout model as JSON for offline analysis."""
        self.directory.mkdir(parents=True, exist_ok=True)
        payload = {
            "pages": [
                [{"type": type(command).__name__, **self._serialize(command)} for command in page]
                for page in model.pages
            ],
            "rects": [{"offset": offset, "rect": self._serialize(rect)} for offset, rect in model.rects],
        }
        (self.directory / "layout_model.json").write_text(json.dumps(payload, indent=2))

    def _serialize(self, value: Any) -> Any:
        # Slots dataclasses hold nested dataclasses and enums, so walk fields manually.
        if is_dataclass(value) and not isinstance(value, type):
            return {field.name: self._serialize(getattr(value, field.name)) for field in fields(value)}
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, Path):
            return value.as_posix()
        if isinstance(value, dict):
            return {k: self._serialize(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._serialize(v) for v in value]
        return value
