"""Parser and structural validator for VNA Carnatic music notation.

This library reads VNA text (a metadata block followed by sections of paired
swara and sahitya lines) into an immutable document tree, and reports every
structural and alignment problem as a located diagnostic.

Examples
--------
>>> from vna_parser import parse, tokenize_swara, tokenize_sahitya

>>> # Decompose single tokens
>>> [str(note) for note in tokenize_swara("SRSD.").notes]
['S', 'R', 'S', 'D.']
>>> [unit.text for unit in tokenize_sahitya("nin`nu-").units]
['nin', 'nu', '-']

>>> # Parse a whole document
>>> text = '''---
... title: "Test"
... raga: "mohanam"
... tala: "adi"
... ---
... [pallavi]
... G,G, R,,, ||
... ninn uk ||
... '''
>>> document, diagnostics = parse(text)
>>> [d.code for d in diagnostics]
['token_length_mismatch']
"""

from vna_parser.diagnostics import Diagnostic, DiagnosticCollector, Severity
from vna_parser.errors import NotationError, ResourceError, StructuralError, ValidationError
from vna_parser.models import Natural, ParsedNote, Rest, Sustain, SyllableUnit
from vna_parser.notation import (
    Document,
    Metadata,
    ParseResult,
    Phrase,
    Section,
    format_text,
    parse,
    parse_document,
    resolve_document,
    resolve_phrase,
    validate,
)
from vna_parser.sahitya import SahityaToken, tokenize_sahitya
from vna_parser.settings import ParserSettings
from vna_parser.swara import SwaraToken, tokenize_swara

__all__ = [
    "Diagnostic",
    "DiagnosticCollector",
    "Document",
    "Metadata",
    "Natural",
    "NotationError",
    "ParseResult",
    "ParsedNote",
    "ParserSettings",
    "Phrase",
    "ResourceError",
    "Rest",
    "SahityaToken",
    "Section",
    "Severity",
    "StructuralError",
    "Sustain",
    "SwaraToken",
    "SyllableUnit",
    "ValidationError",
    "format_text",
    "parse",
    "parse_document",
    "resolve_document",
    "resolve_phrase",
    "tokenize_sahitya",
    "tokenize_swara",
    "validate",
]
