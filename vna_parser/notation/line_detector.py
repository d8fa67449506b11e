"""Line classification for VNA bodies.

This module decides what each body line is: a section header, a comment, an
annotation, a phrase-analysis line, or a note or lyric line. Note and lyric
lines are told apart by their characters.
"""

from __future__ import annotations

import re
from typing import Literal

from vna_parser.models import SWARA_DEGREES

SECTION_HEADER_RE = re.compile(r"^\s*\[(.*)\]\s*$")

COMMENT_MARK = "#"
ANNOTATION_MARK = "@"
PHRASE_ANALYSIS_PREFIX = "phrases ="

# Characters that may appear in a note line besides swara letters
NOTE_MARK_CHARS = frozenset("123.',-:|0456789")

# Swara letters written in lowercase, counted when a note line mixes case
LOWER_SWARA_LETTERS = frozenset(ch.lower() for ch in SWARA_DEGREES)

LineType = Literal["empty", "section_header", "comment", "annotation", "analysis", "note", "lyric"]


def extract_section_name(line: str) -> str | None:
    """Extract section name from a header line.

    Parameters
    ----------
    line : str
        The line to check.

    Returns
    -------
    str | None
        The stripped section name if this is a header (possibly empty),
        None otherwise.

    Examples
    --------
    >>> extract_section_name("[pallavi]")
    'pallavi'
    >>> extract_section_name("[ ]")
    ''
    >>> extract_section_name("G,G, R,,, ||")
    """
    match = SECTION_HEADER_RE.match(line)
    if match:
        return match.group(1).strip()
    return None


def is_note_line(line: str) -> bool:
    """Check whether a line reads as notes rather than lyrics.

    A note line contains only note characters, or more uppercase swara
    letters than any other letters. A line with at least one uppercase swara
    letter also reads as notes when its swara letters of either case
    outnumber the remaining letters three to one, which catches mixed-case
    lines such as ``Srgm PdNs``. ``SRX G`` is a note line with one stray
    character, while ``ninn ukō-``, ``Pann`` and ``PA DA`` are lyrics.

    Examples
    --------
    >>> is_note_line("G,G, R,,, | SSRR GGRR ||")
    True
    >>> is_note_line("ninn ukō- | ri-- ---- ||")
    False
    >>> is_note_line("- , | - , ||")
    True
    >>> is_note_line("Srgm PdNs ||")
    True
    """
    swara_letters = 0
    lower_swara_letters = 0
    other_letters = 0
    note_marks = 0

    for ch in line:
        if ch.isspace():
            continue
        if ch in SWARA_DEGREES:
            swara_letters += 1
        elif ch in LOWER_SWARA_LETTERS:
            lower_swara_letters += 1
        elif ch.isalpha():
            other_letters += 1
        elif ch in NOTE_MARK_CHARS:
            note_marks += 1

    if swara_letters == 0 and lower_swara_letters == 0 and other_letters == 0:
        return note_marks > 0
    if swara_letters > lower_swara_letters + other_letters:
        return True
    return swara_letters > 0 and swara_letters + lower_swara_letters > 3 * other_letters


def has_swara_letter(line: str) -> bool:
    """Check whether a line contains at least one uppercase swara letter."""
    return any(ch in SWARA_DEGREES for ch in line)


def classify_line(line: str) -> LineType:
    """Classify a body line based on its content.

    Parameters
    ----------
    line : str
        The line to classify.

    Returns
    -------
    LineType
        The line classification.

    Examples
    --------
    >>> classify_line("")
    'empty'
    >>> classify_line("[charanam]")
    'section_header'
    >>> classify_line("@gati: 3")
    'annotation'
    >>> classify_line("phrases = (_ *)* *")
    'analysis'
    """
    stripped = line.strip()
    if not stripped:
        return "empty"

    if SECTION_HEADER_RE.match(stripped):
        return "section_header"

    if stripped.startswith(COMMENT_MARK):
        return "comment"

    if stripped.startswith(ANNOTATION_MARK):
        return "annotation"

    if stripped.startswith(PHRASE_ANALYSIS_PREFIX):
        return "analysis"

    if is_note_line(stripped):
        return "note"

    return "lyric"
