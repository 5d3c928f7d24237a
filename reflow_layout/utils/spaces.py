"""
Space and break tokenization for inline text runs.

Classifies space characters into elastic glue (with a width ratio relative to
either the em or the regular word space) and finds the punctuation runs after
which a line may break without a space.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterator, Mapping, NamedTuple

EM_SPACE_RATIOS: Mapping[str, float] = MappingProxyType({
    '\u2003': 1.0,      # Em space
    '\u2002': 0.5,      # En space
    '\u2004': 0.33,     # Three-per-em space
    '\u2005': 0.25,     # Four-per-em space
    '\u2006': 0.16,     # Six-per-em space
})

WORD_SPACE_RATIOS: Mapping[str, float] = MappingProxyType({
    '\t': 4.0,          # Tabulation
    '\u00A0': 1.0,      # No-break space
    '\u202F': 0.5,      # Narrow no-break space
    '\u2009': 0.5,      # Thin space
    '\u200A': 0.25,     # Hair space
})

# Spaces whose width comes from the font's own glyph.
FONT_SPACES = " \u2007\u2008"

# A line may break after a run of these characters.
SPECIAL_CHARS = "-–—/@"

HYPHEN_CHARS = "-–—"

NO_BREAK_SPACES = frozenset('\u00A0\u202F\u2007')

# Whitespace collapsed by the non-preformatted mode.
COLLAPSIBLE_WHITESPACE = frozenset(' \t\n\r\f')


def is_glue_char(char: str) -> bool:
    """Return True when ``char`` typesets as glue rather than as a glyph."""
    return char in EM_SPACE_RATIOS or char in WORD_SPACE_RATIOS or char in FONT_SPACES


def glue_width(
    char: str,
    space_width: int,
    em_width: int,
    em_ratios: Mapping[str, float] = EM_SPACE_RATIOS,
    word_ratios: Mapping[str, float] = WORD_SPACE_RATIOS,
) -> int:
    """Width in pixels of the glue produced by ``char``."""
    ratio = em_ratios.get(char)
    if ratio is not None:
        return int(round(em_width * ratio))
    return int(round(space_width * word_ratios.get(char, 1.0)))


def is_stretchable(char: str) -> bool:
    """Em-family and font spaces keep a fixed width during justification."""
    return char not in EM_SPACE_RATIOS and char not in '\u2007\u2008'


class SpecialSplitter:
    """Split a text run at maximal runs of :data:`SPECIAL_CHARS`.

    Each segment is either a run of special characters or a run of ordinary
    characters. Iterating again restarts from the beginning.
    """

    def __init__(self, text: str) -> None:
        self.text = text

    def __iter__(self) -> Iterator[str]:
        text = self.text
        current = 0
        while current < len(text):
            nxt = self._next_boundary(current)
            yield text[current:nxt]
            current = nxt

    def _next_boundary(self, start: int) -> int:
        """End of the maximal special or ordinary run starting at ``start``."""
        text = self.text
        index = start
        while index < len(text) and text[index] not in SPECIAL_CHARS:
            index += 1
        if index == start:
            while index < len(text) and text[index] in SPECIAL_CHARS:
                index += 1
        return index


class Token(NamedTuple):
    """A word, a space or a newline found in a text run."""

    kind: str
    text: str
    start: int


WORD = "word"
SPACE = "space"
NEWLINE = "newline"


def iter_tokens(text: str, retain_whitespace: bool) -> Iterator[Token]:
    """Split ``text`` into word, space and newline tokens.

    In collapsing mode a run of ASCII whitespace becomes a single ``" "`` space
    token and newlines are ordinary whitespace. Other space characters (no-break,
    thin, em spaces...) are never collapsed and come out one token each. In
    retaining mode every space character is its own token and each line ending
    (``\\n``, ``\\r\\n`` or a lone ``\\r``) yields one newline token carrying the
    original characters.
    """
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if retain_whitespace and char in '\r\n':
            end = index + 2 if text.startswith('\r\n', index) else index + 1
            yield Token(NEWLINE, text[index:end], index)
            index = end
        elif not retain_whitespace and char in COLLAPSIBLE_WHITESPACE:
            start = index
            while index < length and text[index] in COLLAPSIBLE_WHITESPACE:
                index += 1
            yield Token(SPACE, " ", start)
        elif is_glue_char(char):
            yield Token(SPACE, char, index)
            index += 1
        else:
            start = index
            while index < length and not _ends_word(text[index], retain_whitespace):
                index += 1
            yield Token(WORD, text[start:index], start)


def _ends_word(char: str, retain_whitespace: bool) -> bool:
    if is_glue_char(char):
        return True
    if retain_whitespace:
        return char in '\n\r'
    return char in COLLAPSIBLE_WHITESPACE
