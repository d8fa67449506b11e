"""Sahitya token decomposition.

This module splits a single lyric token into syllable units. Backticks mark
explicit syllable boundaries and each ``-`` is a continuation unit of its own.

Tokens that mix letters and dashes without any backtick go through an
automatic fallback that keeps each letter run whole. The fallback is
best-effort only: it does not know the syllable structure of any language and
is not correct for compound words. Authors should write explicit boundaries
(``nin`nu`kō`ri``) wherever the split matters.
"""

from __future__ import annotations

from dataclasses import dataclass

from vna_parser.models import SyllableUnit

BOUNDARY_MARK = "`"
CONTINUATION_MARK = "-"


@dataclass(frozen=True)
class SahityaToken:
    """Result of tokenizing one lyric token.

    Parameters
    ----------
    text : str
        The raw token.
    units : tuple[SyllableUnit, ...]
        The syllable units, in order.
    used_fallback : bool
        True if the automatic fallback decided the split.
    explicit : bool
        True if the token carries backtick boundaries.
    """

    text: str
    units: tuple[SyllableUnit, ...]
    used_fallback: bool = False
    explicit: bool = False

    @property
    def width(self) -> int:
        """Length compared against the note token length.

        With explicit boundaries every unit counts once. Otherwise each
        character counts once, so ``ninn`` pairs with ``G,G,``.

        Examples
        --------
        >>> tokenize_sahitya("nin`nu`kō").width
        3
        >>> tokenize_sahitya("ukō-").width
        4
        """
        if self.explicit:
            return len(self.units)
        return sum(unit.width for unit in self.units)


def split_on_dashes(segment: str) -> list[SyllableUnit]:
    """Split a segment so that every dash becomes its own continuation unit.

    Examples
    --------
    >>> [u.text for u in split_on_dashes("ri--")]
    ['ri', '-', '-']
    >>> [u.is_continuation for u in split_on_dashes("-a")]
    [True, False]
    """
    units: list[SyllableUnit] = []
    current = ""

    for ch in segment:
        if ch == CONTINUATION_MARK:
            if current:
                units.append(SyllableUnit(text=current))
                current = ""
            units.append(SyllableUnit(text=CONTINUATION_MARK, is_continuation=True))
        else:
            current += ch

    if current:
        units.append(SyllableUnit(text=current))

    return units


def tokenize_sahitya(token: str) -> SahityaToken:
    """Decompose one lyric token into syllable units.

    Parameters
    ----------
    token : str
        One whitespace-delimited lyric token.

    Returns
    -------
    SahityaToken
        The units, and whether the automatic fallback was used.

    Examples
    --------
    >>> [u.text for u in tokenize_sahitya("nin`nu`kō`ri").units]
    ['nin', 'nu', 'kō', 'ri']
    >>> [u.text for u in tokenize_sahitya("yun`---").units]
    ['yun', '-', '-', '-']
    >>> tokenize_sahitya("ri--").used_fallback
    True
    >>> tokenize_sahitya("----").used_fallback
    False
    """
    if BOUNDARY_MARK in token:
        units: list[SyllableUnit] = []
        for segment in token.split(BOUNDARY_MARK):
            units.extend(split_on_dashes(segment))
        return SahityaToken(text=token, units=tuple(units), explicit=True)

    units = split_on_dashes(token)
    has_dash = any(u.is_continuation for u in units)
    has_text = any(not u.is_continuation for u in units)

    return SahityaToken(text=token, units=tuple(units), used_fallback=has_dash and has_text)
