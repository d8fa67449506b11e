"""Main VNA parser orchestration.

This module provides the parse() function that runs the full pipeline:
metadata block, section and phrase scan, then alignment checks. A bad
metadata block or content before the first section is fatal. Each call is
a pure function of its input text.
"""

from __future__ import annotations

import logging

from vna_parser.diagnostics import Diagnostic, DiagnosticCollector
from vna_parser.errors import ResourceError, StructuralError, ValidationError
from vna_parser.notation.alignment import validate_document
from vna_parser.notation.frontmatter import read_frontmatter
from vna_parser.notation.models import Document, ParseResult
from vna_parser.notation.scanner import scan_body
from vna_parser.settings import ParserSettings, settings as default_settings

logger = logging.getLogger(__name__)


def preprocess(text: str) -> list[str]:
    """Preprocess input text into lines.

    Normalizes line endings and preserves original line content
    (only strips the newline character).

    Parameters
    ----------
    text : str
        The raw input text.

    Returns
    -------
    list[str]
        List of lines without trailing newlines.
    """
    # Normalize line endings
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    # Split into lines, preserving content (only strip newline)
    return text.split("\n")


def parse(text: str, *, settings: ParserSettings | None = None) -> ParseResult:
    """Parse VNA text into a document and its diagnostics.

    This is the main entry point for VNA parsing.

    Parameters
    ----------
    text : str
        The raw VNA text.
    settings : ParserSettings | None
        Limits to apply. The environment-derived defaults are used when None.

    Returns
    -------
    ParseResult
        The document, or None if a fatal problem was found, and all
        diagnostics sorted by line.

    Examples
    --------
    >>> text = '''---
    ... title: "Test"
    ... raga: "mohanam"
    ... tala: "adi"
    ... ---
    ... [pallavi]
    ... G,G, R,,, ||
    ... ninn kōri ||
    ... '''
    >>> document, diagnostics = parse(text)
    >>> document.sections[0].name
    'pallavi'
    >>> document.sections[0].phrases[0].swara_tokens
    ('G,G,', 'R,,,')
    """
    config = settings or default_settings
    diagnostics = DiagnosticCollector()

    if len(text) > config.max_input_chars:
        exc = ResourceError(
            f"Input has {len(text)} characters; the limit is {config.max_input_chars}",
            line=1,
        )
        diagnostics.report(exc, fatal=True)
        logger.warning("Refusing to parse input of %s characters", len(text))
        return ParseResult(document=None, diagnostics=diagnostics.sorted())

    lines = preprocess(text)

    try:
        frontmatter = read_frontmatter(lines, diagnostics, config)
        sections, comments = scan_body(lines, frontmatter.body_start, diagnostics)
    except StructuralError as exc:
        diagnostics.report(exc, fatal=True)
        logger.warning("Cannot parse document: %s", exc.message)
        return ParseResult(document=None, diagnostics=diagnostics.sorted())

    document = Document(metadata=frontmatter.metadata, sections=sections, comments=comments)

    validate_document(document, diagnostics)
    logger.debug("Parsed %s sections with %s diagnostics", len(sections), len(diagnostics))

    return ParseResult(document=document, diagnostics=diagnostics.sorted())


def validate(text: str, *, settings: ParserSettings | None = None) -> tuple[Diagnostic, ...]:
    """Return every diagnostic for VNA text.

    Parameters
    ----------
    text : str
        The raw VNA text.
    settings : ParserSettings | None
        Limits to apply.

    Returns
    -------
    tuple[Diagnostic, ...]
        All diagnostics sorted by line. Empty for a clean document.
    """
    return parse(text, settings=settings).diagnostics


def parse_document(text: str, *, strict: bool = False, settings: ParserSettings | None = None) -> Document:
    """Parse VNA text, raising instead of returning diagnostics.

    Parameters
    ----------
    text : str
        The raw VNA text.
    strict : bool
        Also raise if any error diagnostic was reported.
    settings : ParserSettings | None
        Limits to apply.

    Returns
    -------
    Document
        The parsed document.

    Raises
    ------
    ResourceError
        If the input exceeds the size limit.
    StructuralError
        If the metadata block is missing or invalid, or content comes
        before the first section header.
    ValidationError
        If strict is set and any error was reported.
    """
    result = parse(text, settings=settings)

    if result.document is None:
        fatal = next(d for d in result.diagnostics if d.fatal)
        error_class = ResourceError if fatal.code == ResourceError.code else StructuralError
        raise error_class(fatal.message, line=fatal.line, column=fatal.column, code=fatal.code)

    if strict and result.errors:
        first = result.errors[0]
        raise ValidationError(first.message, line=first.line, column=first.column, code=first.code)

    return result.document
