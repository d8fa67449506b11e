"""Note and syllable data models for vna-parser.

This module provides the atomic units that note (swara) and lyric (sahitya)
tokens decompose into. A note is one of three variants: a natural swara,
a rest, or a sustain.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Literal

SwaraLetter = Literal["S", "R", "G", "M", "P", "D", "N"]

# Diatonic index of each swara within one octave
SWARA_DEGREES: dict[str, int] = {
    "S": 0,
    "R": 1,
    "G": 2,
    "M": 3,
    "P": 4,
    "D": 5,
    "N": 6,
}

LOWER_OCTAVE_MARK = "."
UPPER_OCTAVE_MARK = "'"


@dataclass(frozen=True)
class Natural:
    """A sounded swara.

    Parameters
    ----------
    letter : SwaraLetter
        The swara letter (S, R, G, M, P, D or N).
    variant : int | None
        The variant number (1, 2 or 3), or None when unspecified.
    octave : int
        Octave offset from the middle octave, in [-2, 2].
    gati : int | None
        Inline gati override of the originating token, if any.

    Examples
    --------
    >>> note = Natural(letter="D", octave=-1)
    >>> str(note)
    'D.'
    >>> note.position
    -2
    """

    letter: SwaraLetter
    variant: int | None = None
    octave: int = 0
    gati: int | None = None

    @property
    def position(self) -> int:
        """Diatonic staff position relative to middle-octave S."""
        return SWARA_DEGREES[self.letter] + 7 * self.octave

    def __str__(self) -> str:
        """Return the note in VNA notation."""
        variant = str(self.variant) if self.variant is not None else ""
        mark = LOWER_OCTAVE_MARK if self.octave < 0 else UPPER_OCTAVE_MARK
        return f"{self.letter}{variant}{mark * abs(self.octave)}"


@dataclass(frozen=True)
class Rest:
    """A silent unit, written ``-``."""

    gati: int | None = None

    def __str__(self) -> str:
        return "-"


@dataclass(frozen=True)
class Sustain:
    """A unit that prolongs the previous note, written ``,``."""

    gati: int | None = None

    def __str__(self) -> str:
        return ","


ParsedNote = Natural | Rest | Sustain


def text_width(text: str) -> int:
    """Count the base characters of text in NFC form.

    Combining marks do not add to the width, so ``ō`` counts once whether
    it was typed precomposed or as ``o`` plus a combining macron.

    Examples
    --------
    >>> text_width("ukō")
    3
    >>> text_width("uko\\u0304")
    3
    """
    normalized = unicodedata.normalize("NFC", text)
    return sum(1 for ch in normalized if not unicodedata.combining(ch))


@dataclass(frozen=True)
class SyllableUnit:
    """One atomic lyric unit.

    Parameters
    ----------
    text : str
        The unit text (``-`` for a continuation).
    is_continuation : bool
        True if the unit prolongs the previous syllable.

    Examples
    --------
    >>> SyllableUnit(text="kō", is_continuation=False).width
    2
    >>> SyllableUnit(text="-", is_continuation=True).width
    1
    """

    text: str
    is_continuation: bool = False

    @property
    def width(self) -> int:
        """Character-equivalent length used for note alignment."""
        if self.is_continuation:
            return 1
        return text_width(self.text)
