"""VNA document parser.

This module provides functionality to parse VNA notation text into a typed
document tree with sections and phrases, check the alignment of paired note
and lyric lines, resolve gati and tala overrides, and normalize spacing.
"""

from vna_parser.notation.formatter import format_document, format_text
from vna_parser.notation.gati import (
    PhraseTiming,
    Resolved,
    effective_gati,
    effective_tala,
    resolve_document,
    resolve_phrase,
)
from vna_parser.notation.models import (
    BeatMarker,
    Document,
    Metadata,
    NotationLine,
    ParseResult,
    Phrase,
    Section,
    Token,
)
from vna_parser.notation.parser import parse, parse_document, validate

__all__ = [
    "BeatMarker",
    "Document",
    "Metadata",
    "NotationLine",
    "ParseResult",
    "Phrase",
    "PhraseTiming",
    "Resolved",
    "Section",
    "Token",
    "effective_gati",
    "effective_tala",
    "format_document",
    "format_text",
    "parse",
    "parse_document",
    "resolve_document",
    "resolve_phrase",
    "validate",
]
