"""Frontmatter reading for VNA documents.

The metadata block opens the document between two ``---`` lines and holds
``key: value`` pairs and ``#`` comments. Values may be wrapped in one pair of
matching quotes.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from types import MappingProxyType

from vna_parser.diagnostics import DiagnosticCollector
from vna_parser.errors import StructuralError
from vna_parser.notation.gati import is_conventional_gati
from vna_parser.notation.line_detector import COMMENT_MARK
from vna_parser.notation.models import DEFAULT_GATI, DEFAULT_TEMPO, Metadata
from vna_parser.settings import ParserSettings, settings as default_settings

logger = logging.getLogger(__name__)

DELIMITER = "---"
QUOTES = ('"', "'")

REQUIRED_FIELDS = ("title", "raga", "tala")
TEXT_FIELDS = ("composer", "language", "type", "key")
INTEGER_FIELDS = ("tempo", "gati")


@dataclass(frozen=True)
class Frontmatter:
    """The metadata together with the index of the first body line."""

    metadata: Metadata
    body_start: int


def unquote(value: str) -> str:
    """Strip one matching pair of leading/trailing quotes.

    Examples
    --------
    >>> unquote('"mohanam"')
    'mohanam'
    >>> unquote("'adi'")
    'adi'
    >>> unquote('"half')
    '"half'
    """
    if len(value) >= 2 and value[0] == value[-1] and value[0] in QUOTES:
        return value[1:-1]
    return value


def _first_content_line(lines: Sequence[str]) -> int | None:
    for index, line in enumerate(lines):
        if line.strip():
            return index
    return None


def _find_delimiter(lines: Sequence[str], start: int) -> int | None:
    for index in range(start, len(lines)):
        if lines[index].strip() == DELIMITER:
            return index
    return None


def _parse_integer(key: str, value: str, line: int) -> int:
    try:
        number = int(value)
    except ValueError:
        msg = f"Metadata field '{key}' must be an integer, got '{value}'"
        raise StructuralError(msg, line=line, code="invalid_metadata_value") from None
    if key == "gati" and number <= 0:
        msg = f"Metadata field 'gati' must be a positive integer, got {number}"
        raise StructuralError(msg, line=line, code="invalid_metadata_value")
    return number


def read_frontmatter(
    lines: Sequence[str],
    diagnostics: DiagnosticCollector,
    config: ParserSettings | None = None,
) -> Frontmatter:
    """Read and check the metadata block.

    Parameters
    ----------
    lines : Sequence[str]
        All lines of the input, without newline characters.
    diagnostics : DiagnosticCollector
        Receives non-fatal warnings.
    config : ParserSettings | None
        Tempo thresholds. The module defaults are used when None.

    Returns
    -------
    Frontmatter
        The metadata and the index of the line after the closing delimiter.

    Raises
    ------
    StructuralError
        If the first non-blank line is not a delimiter, the block is not
        closed, a required field is missing, or a numeric field is not a
        valid integer.
    """
    config = config or default_settings

    opening = _first_content_line(lines)
    if opening is None or lines[opening].strip() != DELIMITER:
        msg = "Missing metadata block: the first line must be '---'"
        raise StructuralError(msg, line=1 if opening is None else opening + 1, code="missing_metadata")

    closing = _find_delimiter(lines, opening + 1)
    if closing is None:
        msg = "Metadata block is not closed: expected a second '---' line"
        raise StructuralError(msg, line=opening + 1, code="unclosed_metadata")

    entries: list[tuple[str, str]] = []
    comments: list[tuple[int, str]] = []
    values: dict[str, str] = {}
    key_lines: dict[str, int] = {}

    for index in range(opening + 1, closing):
        line_number = index + 1
        stripped = lines[index].strip()
        if not stripped:
            continue
        if stripped.startswith(COMMENT_MARK):
            comments.append((len(entries), stripped[len(COMMENT_MARK) :].strip()))
            continue

        key, sep, raw_value = stripped.partition(":")
        key = key.strip()
        if not sep or not key:
            diagnostics.warning(
                line_number,
                f"Ignoring metadata line without 'key: value': {stripped}",
                code="malformed_metadata_line",
            )
            continue

        value = unquote(raw_value.strip())
        if key in values:
            diagnostics.warning(
                line_number,
                f"Duplicate metadata field '{key}'; the last value is used",
                code="duplicate_metadata_field",
            )
            removed = next(i for i, (k, _) in enumerate(entries) if k == key)
            del entries[removed]
            comments = [(p - 1 if p > removed else p, text) for p, text in comments]
        entries.append((key, value))
        values[key] = value
        key_lines[key] = line_number

    for name in REQUIRED_FIELDS:
        if not values.get(name, "").strip():
            msg = f"Missing required metadata field: {name}"
            raise StructuralError(msg, line=key_lines.get(name, opening + 1), code="missing_metadata_field")

    tempo = DEFAULT_TEMPO
    if "tempo" in values:
        tempo = _parse_integer("tempo", values["tempo"], key_lines["tempo"])
        if not config.min_tempo <= tempo <= config.max_tempo:
            diagnostics.warning(
                key_lines["tempo"],
                f"Unusual tempo: {tempo} BPM (typical range: {config.min_tempo}-{config.max_tempo})",
                code="unusual_tempo",
            )

    gati = DEFAULT_GATI
    if "gati" in values:
        gati = _parse_integer("gati", values["gati"], key_lines["gati"])
        if not is_conventional_gati(gati):
            diagnostics.warning(
                key_lines["gati"],
                f"Unusual gati value: {gati} (typical values: 3, 4, 5, 7, 9)",
                code="unusual_gati",
            )

    known = set(REQUIRED_FIELDS) | set(TEXT_FIELDS) | set(INTEGER_FIELDS)
    extra = {k: v for k, v in values.items() if k not in known}
    if extra:
        logger.debug("Keeping unknown metadata fields: %s", sorted(extra))

    metadata = Metadata(
        title=values["title"],
        raga=values["raga"],
        tala=values["tala"],
        tempo=tempo,
        gati=gati,
        composer=values.get("composer"),
        language=values.get("language"),
        type=values.get("type"),
        key=values.get("key"),
        extra=MappingProxyType(extra),
        entries=tuple(entries),
        comments=tuple(comments),
        line=opening + 1,
    )
    return Frontmatter(metadata=metadata, body_start=closing + 1)
