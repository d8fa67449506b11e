"""Swara token decomposition.

This module turns a single whitespace-delimited note token (e.g. ``SRGR``,
``G,G,``, ``SRSD.``, ``SRG:3``) into an ordered sequence of ParsedNote
values. Each call is independent of every other call.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from vna_parser.models import (
    LOWER_OCTAVE_MARK,
    SWARA_DEGREES,
    UPPER_OCTAVE_MARK,
    Natural,
    ParsedNote,
    Rest,
    Sustain,
)

REST_MARK = "-"
SUSTAIN_MARK = ","
VARIANT_DIGITS = frozenset("123")
MAX_OCTAVE_RUN = 2

# Trailing gati suffix on a whole token, e.g. "SRG:3"
GATI_SUFFIX_RE = re.compile(r":([^:]*)$")
# Gati values are written in ASCII digits
DIGITS_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class SwaraToken:
    """Result of tokenizing one note token.

    Parameters
    ----------
    text : str
        The raw token, including any gati suffix.
    body : str
        The token without its gati suffix.
    notes : tuple[ParsedNote, ...]
        The decoded notes, in order.
    gati : int | None
        The inline gati override, or None.
    skipped : tuple[tuple[int, str], ...]
        ``(offset, character)`` pairs for characters that were not understood.
        Offsets are 0-indexed within ``text``.
    invalid_suffix : str | None
        The suffix text when a ``:`` suffix was present but not a positive
        integer.
    """

    text: str
    body: str
    notes: tuple[ParsedNote, ...]
    gati: int | None = None
    skipped: tuple[tuple[int, str], ...] = ()
    invalid_suffix: str | None = None

    @property
    def length(self) -> int:
        """Character length of the token body, octave and variant marks included."""
        return len(self.body)

    @property
    def is_pure_marker(self) -> bool:
        """True if the token holds only rests and sustains."""
        return bool(self.body) and all(ch in (REST_MARK, SUSTAIN_MARK) for ch in self.body)


def split_gati_suffix(token: str) -> tuple[str, int | None, str | None]:
    """Split a trailing ``:<int>`` gati override off a token.

    Parameters
    ----------
    token : str
        The raw token.

    Returns
    -------
    tuple[str, int | None, str | None]
        The body, the parsed gati (or None) and the raw suffix if it was
        malformed (or None).

    Examples
    --------
    >>> split_gati_suffix("SRG:3")
    ('SRG', 3, None)
    >>> split_gati_suffix("SRG")
    ('SRG', None, None)
    >>> split_gati_suffix("SRG:x")
    ('SRG', None, 'x')
    """
    match = GATI_SUFFIX_RE.search(token)
    if match is None:
        return token, None, None

    body = token[: match.start()]
    suffix = match.group(1)
    if DIGITS_RE.fullmatch(suffix) and int(suffix) > 0:
        return body, int(suffix), None
    return body, None, suffix


def _consume_run(body: str, i: int, mark: str) -> int:
    """Return how many copies of mark start at i, capped at MAX_OCTAVE_RUN."""
    count = 0
    while i + count < len(body) and body[i + count] == mark and count < MAX_OCTAVE_RUN:
        count += 1
    return count


def tokenize_swara(token: str) -> SwaraToken:
    """Decompose one note token into atomic notes.

    Scans left to right. ``-`` yields a Rest and ``,`` a Sustain, each on its
    own. A swara letter starts a Natural that may take one variant digit
    (1-3) and then a run of one or two ``.`` (lower octave) or ``'`` (upper
    octave) marks. Anything else is skipped and reported in ``skipped``.

    Parameters
    ----------
    token : str
        One whitespace-delimited note token.

    Returns
    -------
    SwaraToken
        The decoded notes with the token's gati override.

    Examples
    --------
    >>> [str(n) for n in tokenize_swara("G,G,").notes]
    ['G', ',', 'G', ',']
    >>> result = tokenize_swara("SRSD.")
    >>> result.notes[-1].octave
    -1
    >>> tokenize_swara("SRG:3").gati
    3
    """
    body, gati, invalid_suffix = split_gati_suffix(token)

    notes: list[ParsedNote] = []
    skipped: list[tuple[int, str]] = []
    i = 0
    n = len(body)

    while i < n:
        ch = body[i]

        if ch == REST_MARK:
            notes.append(Rest(gati=gati))
            i += 1
            continue

        if ch == SUSTAIN_MARK:
            notes.append(Sustain(gati=gati))
            i += 1
            continue

        if ch not in SWARA_DEGREES:
            skipped.append((i, ch))
            i += 1
            continue

        letter = ch
        i += 1

        variant: int | None = None
        if i < n and body[i] in VARIANT_DIGITS:
            variant = int(body[i])
            i += 1

        octave = 0
        lower = _consume_run(body, i, LOWER_OCTAVE_MARK)
        if lower:
            octave = -lower
            i += lower
        else:
            upper = _consume_run(body, i, UPPER_OCTAVE_MARK)
            octave = upper
            i += upper

        notes.append(Natural(letter=letter, variant=variant, octave=octave, gati=gati))  # type: ignore[arg-type]

    return SwaraToken(
        text=token,
        body=body,
        notes=tuple(notes),
        gati=gati,
        skipped=tuple(skipped),
        invalid_suffix=invalid_suffix,
    )
