"""Section and phrase scanning for VNA bodies.

This module walks the body lines after the metadata block and groups them
into sections and phrases. The scan position is an index passed into and
returned from each function, so no state outlives a call.

Content before the first section header is rejected outright. Problems local
to one section or phrase are reported as diagnostics and the scan carries
on: a bad section is skipped up to the next header and a bad phrase is
skipped one line at a time.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from types import MappingProxyType

from vna_parser.diagnostics import DiagnosticCollector
from vna_parser.errors import StructuralError
from vna_parser.notation.frontmatter import unquote
from vna_parser.notation.gati import GATI_NAMES, is_conventional_gati
from vna_parser.notation.line_detector import (
    ANNOTATION_MARK,
    COMMENT_MARK,
    PHRASE_ANALYSIS_PREFIX,
    classify_line,
    extract_section_name,
    has_swara_letter,
)
from vna_parser.notation.models import Phrase, Section
from vna_parser.notation.tokenizer import tokenize_notation_line
from vna_parser.swara import DIGITS_RE, tokenize_swara

logger = logging.getLogger(__name__)

GATI_KEY = "gati"
TALA_KEY = "tala"

# Codes of structural problems; the formatter leaves such text alone
STRUCTURAL_CODES = frozenset(
    {
        "empty_section_name",
        "lyric_without_notes",
        "incomplete_phrase",
        "stray_phrase_analysis",
    }
)


def comment_text(line: str) -> str:
    """Return the text of a comment line without its marker.

    Examples
    --------
    >>> comment_text("# slow, with feeling")
    'slow, with feeling'
    """
    return line.strip()[len(COMMENT_MARK) :].strip()


def parse_annotation(line: str, line_number: int, diagnostics: DiagnosticCollector) -> tuple[str, str] | None:
    """Split an ``@key: value`` line into its key and unquoted value.

    Returns None, after reporting a warning, when the line has no colon or
    no key.

    Examples
    --------
    >>> parse_annotation('@tala: "+0+0"', 9, DiagnosticCollector())
    ('tala', '+0+0')
    """
    body = line.strip()[len(ANNOTATION_MARK) :]
    key, sep, value = body.partition(":")
    key = key.strip()
    if not sep or not key:
        diagnostics.warning(
            line_number,
            f"Ignoring annotation without 'key: value': {line.strip()}",
            code="malformed_annotation",
        )
        return None
    return key, unquote(value.strip())


def annotation_gati(value: str, line_number: int, diagnostics: DiagnosticCollector) -> int | None:
    """Convert a gati annotation value, reporting bad or unusual values."""
    if not DIGITS_RE.fullmatch(value) or int(value) <= 0:
        diagnostics.error(
            line_number,
            f"Invalid gati value '{value}': expected a positive integer",
            code="invalid_gati",
        )
        return None

    gati = int(value)
    if not is_conventional_gati(gati):
        diagnostics.warning(
            line_number,
            f"Unusual gati value: {gati} (typical values: 3, 4, 5, 7, 9)",
            code="unusual_gati",
        )
    else:
        logger.debug("Line %s sets %s gati", line_number, GATI_NAMES[gati])
    return gati


def next_header(lines: Sequence[str], start: int) -> int:
    """Return the index of the first section header at or after start."""
    for index in range(start, len(lines)):
        if extract_section_name(lines[index]) is not None:
            return index
    return len(lines)


def scan_phrase(
    lines: Sequence[str],
    start: int,
    overrides: dict[str, str],
    override_lines: dict[str, int],
    comments: Sequence[str],
    diagnostics: DiagnosticCollector,
) -> tuple[Phrase, int]:
    """Assemble one phrase starting at a note line.

    Parameters
    ----------
    lines : Sequence[str]
        All input lines.
    start : int
        Index of the note line.
    overrides : dict[str, str]
        Line-level annotations written before the phrase.
    override_lines : dict[str, int]
        Line number of each annotation in ``overrides``.
    comments : Sequence[str]
        Comments written before the phrase.
    diagnostics : DiagnosticCollector
        Receives gati warnings for the line-level annotations.

    Returns
    -------
    tuple[Phrase, int]
        The phrase and the index of the first line after it.

    Raises
    ------
    StructuralError
        If the first line is a lyric line, or the note line is not followed
        by a lyric line.
    """
    note_line = lines[start].rstrip()
    if classify_line(note_line) != "note":
        msg = "Lyric line without a preceding note line"
        raise StructuralError(msg, line=start + 1, code="lyric_without_notes")

    lyric_index = start + 1
    lyric_type = classify_line(lines[lyric_index]) if lyric_index < len(lines) else "empty"
    if lyric_type not in ("note", "lyric") or (lyric_type == "note" and has_swara_letter(lines[lyric_index])):
        msg = "Incomplete phrase: note line is not followed by a lyric line"
        raise StructuralError(msg, line=start + 1, code="incomplete_phrase")
    lyric_line = lines[lyric_index].rstrip()

    swara_line = tokenize_notation_line(note_line)
    sahitya_line = tokenize_notation_line(lyric_line)
    swaras = [tokenize_swara(text) for text in swara_line.texts]

    phrase_analysis = None
    end = lyric_index + 1
    if end < len(lines) and classify_line(lines[end]) == "analysis":
        phrase_analysis = lines[end].strip()[len(PHRASE_ANALYSIS_PREFIX) :].strip()
        end += 1

    line_gati = None
    if GATI_KEY in overrides:
        line_gati = annotation_gati(overrides[GATI_KEY], override_lines[GATI_KEY], diagnostics)

    phrase = Phrase(
        swara_tokens=swara_line.texts,
        sahitya_tokens=sahitya_line.texts,
        beat_positions=swara_line.beat_positions,
        source_line=start + 1,
        phrase_analysis=phrase_analysis,
        line_gati=line_gati,
        line_tala=overrides.get(TALA_KEY),
        swara_raw=note_line,
        sahitya_raw=lyric_line,
        notes=tuple(s.notes for s in swaras),
        token_gati=tuple(s.gati for s in swaras),
        preceding_comments=tuple(comments),
        annotations=MappingProxyType(dict(overrides)),
    )
    return phrase, end


def scan_section(lines: Sequence[str], start: int, diagnostics: DiagnosticCollector) -> tuple[Section, int]:
    """Scan a section from its header up to the next header.

    Annotations written directly under the header apply to the whole section.
    That block ends at the first phrase, at a blank line after it, or when a
    key repeats. Any later annotation applies to the next phrase only, so
    ``@gati: 3`` followed by ``@gati: 5`` sets the section to 3 and the first
    phrase to 5.

    Parameters
    ----------
    lines : Sequence[str]
        All input lines.
    start : int
        Index of the section header.
    diagnostics : DiagnosticCollector
        Receives phrase-level problems.

    Returns
    -------
    tuple[Section, int]
        The section and the index of the next header (or end of input).

    Raises
    ------
    StructuralError
        If the section name is empty.
    """
    name = extract_section_name(lines[start])
    if not name:
        msg = "Section name cannot be empty"
        raise StructuralError(msg, line=start + 1, code="empty_section_name")

    phrases: list[Phrase] = []
    comments: list[str] = []
    annotations: dict[str, str] = {}
    section_gati: int | None = None
    section_tala: str | None = None

    pending_comments: list[str] = []
    pending_overrides: dict[str, str] = {}
    pending_lines: dict[str, int] = {}
    section_level = True

    i = start + 1
    n = len(lines)

    while i < n:
        line_type = classify_line(lines[i])

        if line_type == "section_header":
            break

        if line_type == "empty":
            if annotations:
                section_level = False
            i += 1
            continue

        if line_type == "comment":
            text = comment_text(lines[i])
            comments.append(text)
            pending_comments.append(text)
            i += 1
            continue

        if line_type == "annotation":
            parsed = parse_annotation(lines[i], i + 1, diagnostics)
            if parsed is not None:
                key, value = parsed
                if section_level and key not in annotations:
                    annotations[key] = value
                    if key == GATI_KEY:
                        section_gati = annotation_gati(value, i + 1, diagnostics)
                    elif key == TALA_KEY:
                        section_tala = value
                else:
                    section_level = False
                    pending_overrides[key] = value
                    pending_lines[key] = i + 1
            i += 1
            continue

        if line_type == "analysis":
            diagnostics.error(
                i + 1,
                "Phrase analysis line without a preceding phrase",
                code="stray_phrase_analysis",
            )
            i += 1
            continue

        section_level = False
        try:
            phrase, i = scan_phrase(lines, i, pending_overrides, pending_lines, pending_comments, diagnostics)
        except StructuralError as exc:
            diagnostics.report(exc)
            i += 1
        else:
            phrases.append(phrase)
        pending_comments = []
        pending_overrides = {}
        pending_lines = {}

    if not phrases:
        diagnostics.warning(start + 1, f"Section '{name}' has no phrases", code="empty_section")

    section = Section(
        name=name,
        phrases=tuple(phrases),
        comments=tuple(comments),
        annotations=MappingProxyType(annotations),
        gati=section_gati,
        tala=section_tala,
        line=start + 1,
    )
    return section, i


def scan_body(
    lines: Sequence[str], start: int, diagnostics: DiagnosticCollector
) -> tuple[tuple[Section, ...], tuple[str, ...]]:
    """Scan the document body into sections.

    Parameters
    ----------
    lines : Sequence[str]
        All input lines.
    start : int
        Index of the first body line.
    diagnostics : DiagnosticCollector
        Receives every structural problem found.

    Returns
    -------
    tuple[tuple[Section, ...], tuple[str, ...]]
        The sections, and the comments written before the first section.

    Raises
    ------
    StructuralError
        If anything other than a comment comes before the first section
        header. The whole body is rejected.
    """
    sections: list[Section] = []
    leading_comments: list[str] = []
    i = start
    n = len(lines)

    while i < n:
        line_type = classify_line(lines[i])

        if line_type == "empty":
            i += 1
            continue

        if line_type == "section_header":
            try:
                section, i = scan_section(lines, i, diagnostics)
            except StructuralError as exc:
                diagnostics.report(exc)
                i = next_header(lines, i + 1)
                continue
            sections.append(section)
            continue

        if line_type == "comment":
            if not sections:
                leading_comments.append(comment_text(lines[i]))
            i += 1
            continue

        msg = "Content outside any section: add a [section] header above it"
        raise StructuralError(msg, line=i + 1, code="content_outside_section")

    logger.debug("Scanned %s sections", len(sections))
    return tuple(sections), tuple(leading_comments)
