"""Alignment checks between paired note and lyric lines.

This module checks that each phrase's note line and lyric line describe the
same timeline: the same number of tokens, the same length for each pair of
tokens, and beat markers at the same token indices. It also reports the
softer issues found in note tokens and annotations.

Every phrase is checked on its own, so one bad phrase never hides problems in
another.
"""

from __future__ import annotations

from vna_parser.diagnostics import DiagnosticCollector
from vna_parser.notation.gati import (
    KNOWN_TALA_PATTERNS,
    is_conventional_gati,
    is_known_tala_pattern,
    is_tala_pattern,
)
from vna_parser.notation.models import Document, Phrase, Section
from vna_parser.notation.tokenizer import tokenize_notation_line
from vna_parser.sahitya import tokenize_sahitya
from vna_parser.swara import tokenize_swara

PHRASE_ANALYSIS_CHARS = frozenset("_*() ")


def check_token_counts(phrase: Phrase, diagnostics: DiagnosticCollector) -> bool:
    """Check that both lines hold the same number of tokens.

    Returns
    -------
    bool
        True if the counts match.
    """
    swara_count = len(phrase.swara_tokens)
    sahitya_count = len(phrase.sahitya_tokens)
    if swara_count == sahitya_count:
        return True

    diagnostics.error(
        phrase.sahitya_line,
        f"Token count mismatch: swara line has {swara_count} tokens, sahitya line has {sahitya_count}",
        code="token_count_mismatch",
    )
    return False


def check_token_lengths(phrase: Phrase, diagnostics: DiagnosticCollector) -> None:
    """Check each note token's length against its lyric token.

    Tokens made only of rests and sustains are not checked. The note length
    counts every character of the token body, octave and variant marks
    included. The lyric length is the sum of its unit widths.
    """
    sahitya_line = tokenize_notation_line(phrase.sahitya_raw)
    fallback_tokens: list[str] = []

    for index, (swara_text, sahitya_text) in enumerate(zip(phrase.swara_tokens, phrase.sahitya_tokens)):
        sahitya = tokenize_sahitya(sahitya_text)
        if sahitya.used_fallback:
            fallback_tokens.append(sahitya_text)

        swara = tokenize_swara(swara_text)
        if swara.is_pure_marker:
            continue

        if swara.length != sahitya.width:
            column = sahitya_line.tokens[index].start + 1 if index < len(sahitya_line.tokens) else None
            diagnostics.error(
                phrase.sahitya_line,
                f"Token length mismatch at position {index + 1}: "
                f"swara '{swara.body}' ({swara.length}) vs sahitya '{sahitya_text}' ({sahitya.width})",
                column=column,
                code="token_length_mismatch",
            )

    if fallback_tokens:
        listed = ", ".join(f"'{t}'" for t in fallback_tokens)
        diagnostics.warning(
            phrase.sahitya_line,
            f"Automatic syllabification used for {listed}; add ` boundaries where the split matters",
            code="syllabification_fallback",
        )


def check_beat_markers(phrase: Phrase, diagnostics: DiagnosticCollector) -> None:
    """Check that beat markers fall at the same token indices in both lines."""
    swara_beats = tokenize_notation_line(phrase.swara_raw).beat_positions
    sahitya_beats = tokenize_notation_line(phrase.sahitya_raw).beat_positions
    if swara_beats == sahitya_beats:
        return

    diagnostics.error(
        phrase.source_line,
        f"Beat markers misaligned between swara and sahitya lines at line {phrase.source_line}: "
        f"swara beats after tokens {list(swara_beats)}, sahitya beats after tokens {list(sahitya_beats)}",
        code="beat_misalignment",
    )


def check_swara_tokens(phrase: Phrase, diagnostics: DiagnosticCollector) -> None:
    """Report stray characters, mixed case and gati suffix problems in note tokens."""
    swara_line = tokenize_notation_line(phrase.swara_raw)

    for index, token in enumerate(swara_line.tokens):
        swara = tokenize_swara(token.text)

        for offset, ch in swara.skipped:
            diagnostics.info(
                phrase.source_line,
                f"Skipped unrecognized character '{ch}' in swara '{token.text}'",
                column=token.start + offset + 1,
                code="unrecognized_swara_char",
            )

        letters = [ch for ch in swara.body if ch.isalpha()]
        if any(ch.islower() for ch in letters) and any(ch.isupper() for ch in letters):
            diagnostics.warning(
                phrase.source_line,
                f"Mixed case in swara '{token.text}' at position {index + 1}",
                column=token.start + 1,
                code="mixed_case_swara",
            )

        if swara.invalid_suffix is not None:
            diagnostics.error(
                phrase.source_line,
                f"Invalid gati notation in token '{token.text}': expected a positive number after ':'",
                column=token.start + 1,
                code="invalid_token_gati",
            )
        elif swara.gati is not None and not is_conventional_gati(swara.gati):
            diagnostics.warning(
                phrase.source_line,
                f"Unusual gati value in token '{token.text}': {swara.gati} (typical values: 3, 4, 5, 7, 9)",
                column=token.start + 1,
                code="unusual_token_gati",
            )


def check_phrase_analysis(phrase: Phrase, diagnostics: DiagnosticCollector) -> None:
    if phrase.phrase_analysis is None:
        return
    for position, ch in enumerate(phrase.phrase_analysis, start=1):
        if ch not in PHRASE_ANALYSIS_CHARS:
            diagnostics.warning(
                phrase.source_line + 2,
                f"Invalid character '{ch}' in phrase analysis at position {position}",
                code="invalid_phrase_analysis",
            )
            return


def check_tala(tala: str | None, line: int, diagnostics: DiagnosticCollector) -> None:
    """Report tala patterns that are not among the common ones.

    Named talas such as "adi" are descriptive and are not checked.
    """
    if tala is None or not is_tala_pattern(tala) or is_known_tala_pattern(tala):
        return
    common = ", ".join(f"{pattern} ({name})" for pattern, name in KNOWN_TALA_PATTERNS.items())
    diagnostics.info(
        line,
        f"Uncommon tala pattern '{tala}'. Common patterns include: {common}",
        code="uncommon_tala_pattern",
    )


def validate_phrase(phrase: Phrase, diagnostics: DiagnosticCollector) -> None:
    """Run every check on one phrase."""
    if check_token_counts(phrase, diagnostics):
        check_token_lengths(phrase, diagnostics)
    check_beat_markers(phrase, diagnostics)
    check_swara_tokens(phrase, diagnostics)
    check_phrase_analysis(phrase, diagnostics)
    check_tala(phrase.line_tala, phrase.source_line, diagnostics)


def validate_section(section: Section, diagnostics: DiagnosticCollector) -> None:
    check_tala(section.tala, section.line, diagnostics)
    for phrase in section.phrases:
        validate_phrase(phrase, diagnostics)


def validate_document(document: Document, diagnostics: DiagnosticCollector) -> None:
    """Validate every phrase of a document.

    Parameters
    ----------
    document : Document
        The parsed document. It is not modified.
    diagnostics : DiagnosticCollector
        Receives every issue found.
    """
    check_tala(document.metadata.tala, document.metadata.line, diagnostics)
    for section in document.sections:
        validate_section(section, diagnostics)
