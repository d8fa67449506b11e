"""Whitespace normalization for VNA text.

The formatter re-emits a document with normalized metadata, one blank line
between phrases and sections, and note and lyric tokens padded into shared
columns. Token text is never altered. Text with structural problems is
returned as it was given.
"""

from __future__ import annotations

from collections.abc import Sequence

from vna_parser.models import text_width
from vna_parser.notation.frontmatter import DELIMITER, INTEGER_FIELDS
from vna_parser.notation.line_detector import ANNOTATION_MARK, COMMENT_MARK, PHRASE_ANALYSIS_PREFIX
from vna_parser.notation.models import Document, Metadata, NotationLine, Phrase, Section
from vna_parser.notation.parser import parse
from vna_parser.notation.scanner import STRUCTURAL_CODES
from vna_parser.notation.tokenizer import tokenize_notation_line
from vna_parser.settings import ParserSettings

# Lines behind these codes are not kept on the document
DROPPED_LINE_CODES = frozenset({"malformed_metadata_line", "duplicate_metadata_field", "malformed_annotation"})


def format_metadata(metadata: Metadata) -> list[str]:
    """Render the metadata block, quoting every text value.

    Comments are written back between the entries they were found between.

    Examples
    --------
    >>> meta = Metadata(title="Test", raga="mohanam", tala="adi", tempo=72,
    ...                 entries=(("title", "Test"), ("raga", "mohanam"),
    ...                          ("tala", "adi"), ("tempo", "72")))
    >>> format_metadata(meta)
    ['---', 'title: "Test"', 'raga: "mohanam"', 'tala: "adi"', 'tempo: 72', '---']
    """
    out = [DELIMITER]
    comments = list(metadata.comments)
    for index, (key, value) in enumerate(metadata.entries):
        while comments and comments[0][0] <= index:
            out.append(f"{COMMENT_MARK} {comments.pop(0)[1]}")
        if key in INTEGER_FIELDS:
            out.append(f"{key}: {value.strip()}")
        else:
            out.append(f'{key}: "{value}"')
    out.extend(f"{COMMENT_MARK} {text}" for _, text in comments)
    out.append(DELIMITER)
    return out


def format_notation_line(line: NotationLine, widths: Sequence[int]) -> str:
    """Render tokens padded to widths, with markers at their token positions."""
    parts: list[str] = []
    markers = list(line.markers)

    for index, token in enumerate(line.tokens):
        while markers and markers[0].position <= index:
            parts.append(markers.pop(0).text)
        width = widths[index] if index < len(widths) else text_width(token.text)
        parts.append(token.text + " " * (width - text_width(token.text)))

    parts.extend(marker.text for marker in markers)
    return " ".join(parts).rstrip()


def format_phrase(phrase: Phrase) -> list[str]:
    swara_line = tokenize_notation_line(phrase.swara_raw)
    sahitya_line = tokenize_notation_line(phrase.sahitya_raw)

    count = max(len(swara_line.tokens), len(sahitya_line.tokens))
    widths = []
    for index in range(count):
        swara_width = text_width(swara_line.tokens[index].text) if index < len(swara_line.tokens) else 0
        sahitya_width = text_width(sahitya_line.tokens[index].text) if index < len(sahitya_line.tokens) else 0
        widths.append(max(swara_width, sahitya_width))

    out = [f"{COMMENT_MARK} {comment}" for comment in phrase.preceding_comments]
    out.extend(f"{ANNOTATION_MARK}{key}: {value}" for key, value in phrase.annotations.items())
    out.append(format_notation_line(swara_line, widths))
    out.append(format_notation_line(sahitya_line, widths))
    if phrase.phrase_analysis is not None:
        out.append(f"{PHRASE_ANALYSIS_PREFIX} {phrase.phrase_analysis}")
    return out


def format_section(section: Section) -> list[str]:
    out = [f"[{section.name}]"]
    out.extend(f"{ANNOTATION_MARK}{key}: {value}" for key, value in section.annotations.items())
    # A blank line keeps the first phrase's own annotations out of the section block
    if section.annotations and section.phrases and section.phrases[0].annotations:
        out.append("")

    attached = 0
    for index, phrase in enumerate(section.phrases):
        if index > 0:
            out.append("")
        out.extend(format_phrase(phrase))
        attached += len(phrase.preceding_comments)

    # Comments after the last phrase
    trailing = section.comments[attached:]
    if trailing and section.phrases:
        out.append("")
    out.extend(f"{COMMENT_MARK} {comment}" for comment in trailing)
    return out


def format_document(document: Document) -> str:
    """Render a document as normalized VNA text."""
    out = format_metadata(document.metadata)
    out.append("")

    if document.comments:
        out.extend(f"{COMMENT_MARK} {comment}" for comment in document.comments)
        out.append("")

    for index, section in enumerate(document.sections):
        if index > 0:
            out.append("")
        out.extend(format_section(section))

    return "\n".join(out) + "\n"


def format_text(text: str, *, settings: ParserSettings | None = None) -> str:
    """Normalize the spacing of VNA text.

    Parameters
    ----------
    text : str
        The raw VNA text.
    settings : ParserSettings | None
        Limits to apply while parsing.

    Returns
    -------
    str
        The normalized text, or the input unchanged when re-emitting it
        would lose or misplace lines.
    """
    result = parse(text, settings=settings)
    if result.document is None:
        return text
    if any(d.code in STRUCTURAL_CODES or d.code in DROPPED_LINE_CODES for d in result.diagnostics):
        return text
    return format_document(result.document)
