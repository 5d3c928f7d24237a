"""Engine-wide data shared by the resolvers during a layout pass."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional, Protocol, Tuple

from reflow_layout.layout.fonts import Fonts
from reflow_layout.model.settings import LayoutSettings
from reflow_layout.utils.hyphenation import HYPHEN_PENALTIES, HYPHENATION_LANGUAGES, Language, PyphenHyphenator
from reflow_layout.utils.images import probe_image_size
from reflow_layout.utils.spaces import EM_SPACE_RATIOS, WORD_SPACE_RATIOS


class Hyphenator(Protocol):
    def positions(self, language: Language, word: str) -> List[int]:
        ...


ImageSizer = Callable[[str], Optional[Tuple[int, int]]]


@dataclass(slots=True)
class EngineContext:
    """Immutable lookup tables plus the collaborators the engine calls into.

    ``fonts`` is the only mutable part: faces change size during shaping, so
    callers laying out pages in parallel give each worker its own registry.
    """

    settings: LayoutSettings
    fonts: Fonts
    hyphenator: Hyphenator
    image_sizer: ImageSizer = probe_image_size
    hyphenation_languages: Mapping[str, Language] = field(default_factory=lambda: HYPHENATION_LANGUAGES)
    em_space_ratios: Mapping[str, float] = field(default_factory=lambda: EM_SPACE_RATIOS)
    word_space_ratios: Mapping[str, float] = field(default_factory=lambda: WORD_SPACE_RATIOS)
    hyphen_penalties: Mapping[Language, int] = field(default_factory=lambda: HYPHEN_PENALTIES)

    @classmethod
    def from_settings(cls, settings: LayoutSettings) -> "EngineContext":
        return cls(settings=settings, fonts=Fonts.from_settings(settings), hyphenator=PyphenHyphenator())

    def hyphen_penalty(self, language: Language) -> int:
        """Cost of breaking at a hyphenation point of ``language``."""
        return self.hyphen_penalties.get(language, self.settings.hyphen_penalty)
