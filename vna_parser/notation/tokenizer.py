"""Column-aware tokenizer for notation lines.

This module provides tokenization that preserves column span information and
separates beat markers from note or lyric tokens. Spans let diagnostics point
at the exact token that failed a check.
"""

from vna_parser.notation.models import BeatMarker, NotationLine, Token

BEAT_MARK = "|"


def tokenize_notation_line(line: str) -> NotationLine:
    """Tokenize a note or lyric line preserving column spans.

    Splits on whitespace and on runs of ``|``. A run of ``|`` characters is a
    beat marker, whether or not it is surrounded by spaces, so ``G,|R`` holds
    two tokens and one marker.

    Parameters
    ----------
    line : str
        The line to tokenize. Should not include newline characters.

    Returns
    -------
    NotationLine
        Tokens with text, start (inclusive) and end (exclusive), and every
        beat marker with the number of tokens seen before it.

    Examples
    --------
    >>> parsed = tokenize_notation_line("G,G, R,,, | SSRR GGRR ||")
    >>> parsed.texts
    ('G,G,', 'R,,,', 'SSRR', 'GGRR')
    >>> [(m.position, m.text) for m in parsed.markers]
    [(2, '|'), (4, '||')]
    >>> parsed.beat_positions
    (2,)
    """
    tokens: list[Token] = []
    markers: list[BeatMarker] = []
    i = 0
    n = len(line)

    while i < n:
        # Skip whitespace
        if line[i].isspace():
            i += 1
            continue

        start = i

        if line[i] == BEAT_MARK:
            while i < n and line[i] == BEAT_MARK:
                i += 1
            markers.append(BeatMarker(position=len(tokens), text=line[start:i], column=start))
            continue

        # Capture maximal substring up to whitespace or a marker
        while i < n and not line[i].isspace() and line[i] != BEAT_MARK:
            i += 1

        tokens.append(Token(text=line[start:i], start=start, end=i))

    return NotationLine(tokens=tuple(tokens), markers=tuple(markers))
