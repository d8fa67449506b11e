"""Data models for VNA documents.

This module defines the document tree produced by a parse call: metadata,
sections and phrases, plus the column-aware tokens used while scanning.
All types are immutable.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vna_parser.diagnostics import Diagnostic
    from vna_parser.models import ParsedNote

DEFAULT_TEMPO = 60
DEFAULT_GATI = 4


def _empty_mapping() -> Mapping[str, str]:
    return MappingProxyType({})


@dataclass(frozen=True)
class Token:
    """A token with column span information.

    Parameters
    ----------
    text : str
        The token text content.
    start : int
        Inclusive start column (0-indexed).
    end : int
        Exclusive end column.

    Examples
    --------
    >>> token = Token(text="G,G,", start=0, end=4)
    >>> token.start, token.end
    (0, 4)
    """

    text: str
    start: int
    end: int


@dataclass(frozen=True)
class BeatMarker:
    """A ``|`` or ``||`` marker found in a notation line.

    Parameters
    ----------
    position : int
        Number of tokens before the marker.
    text : str
        The marker as written.
    column : int
        0-indexed column of the marker.
    """

    position: int
    text: str
    column: int


@dataclass(frozen=True)
class NotationLine:
    """A tokenized note or lyric line.

    Parameters
    ----------
    tokens : tuple[Token, ...]
        The tokens, beat markers excluded.
    markers : tuple[BeatMarker, ...]
        Every beat marker on the line, terminal ones included.
    """

    tokens: tuple[Token, ...]
    markers: tuple[BeatMarker, ...]

    @property
    def texts(self) -> tuple[str, ...]:
        return tuple(t.text for t in self.tokens)

    @property
    def beat_positions(self) -> tuple[int, ...]:
        """Token indices at which a beat boundary falls.

        Markers before the first token or after the last one are not beat
        boundaries, and adjacent markers count once.
        """
        positions: list[int] = []
        for marker in self.markers:
            if 0 < marker.position < len(self.tokens) and marker.position not in positions:
                positions.append(marker.position)
        return tuple(positions)


@dataclass(frozen=True)
class Metadata:
    """Frontmatter of a VNA document.

    Parameters
    ----------
    title, raga, tala : str
        Required, non-empty.
    tempo : int
        Beats per minute.
    gati : int
        Default rhythmic subdivision for the whole document.
    composer, language, type, key : str | None
        Optional descriptive fields.
    extra : Mapping[str, str]
        Keys this version does not know, kept verbatim.
    entries : tuple[tuple[str, str], ...]
        Every ``key: value`` pair in written order, values unquoted.
    comments : tuple[tuple[int, str], ...]
        Comments inside the block, each with the number of entries written
        before it.
    line : int
        Line number of the opening delimiter.
    """

    title: str
    raga: str
    tala: str
    tempo: int = DEFAULT_TEMPO
    gati: int = DEFAULT_GATI
    composer: str | None = None
    language: str | None = None
    type: str | None = None
    key: str | None = None
    extra: Mapping[str, str] = field(default_factory=_empty_mapping)
    entries: tuple[tuple[str, str], ...] = ()
    comments: tuple[tuple[int, str], ...] = ()
    line: int = 1


@dataclass(frozen=True)
class Phrase:
    """A paired note line and lyric line.

    Parameters
    ----------
    swara_tokens : tuple[str, ...]
        Note tokens, beat markers excluded.
    sahitya_tokens : tuple[str, ...]
        Lyric tokens, beat markers excluded.
    beat_positions : tuple[int, ...]
        Token indices of inner beat markers on the note line.
    phrase_analysis : str | None
        Text of the optional ``phrases =`` line.
    line_gati : int | None
        Line-level gati override.
    line_tala : str | None
        Line-level tala override.
    source_line : int
        Line number of the note line.
    swara_raw, sahitya_raw : str
        The two lines as written (stripped).
    notes : tuple[tuple[ParsedNote, ...], ...]
        Decoded notes for each note token.
    token_gati : tuple[int | None, ...]
        Inline gati override of each note token.
    preceding_comments : tuple[str, ...]
        Comments written directly before the phrase.
    annotations : Mapping[str, str]
        Line-level ``@key: value`` annotations as written.
    """

    swara_tokens: tuple[str, ...]
    sahitya_tokens: tuple[str, ...]
    beat_positions: tuple[int, ...]
    source_line: int
    phrase_analysis: str | None = None
    line_gati: int | None = None
    line_tala: str | None = None
    swara_raw: str = ""
    sahitya_raw: str = ""
    notes: tuple[tuple[ParsedNote, ...], ...] = ()
    token_gati: tuple[int | None, ...] = ()
    preceding_comments: tuple[str, ...] = ()
    annotations: Mapping[str, str] = field(default_factory=_empty_mapping)

    @property
    def sahitya_line(self) -> int:
        return self.source_line + 1


@dataclass(frozen=True)
class Section:
    """A named section containing phrases.

    Parameters
    ----------
    name : str
        The section name (e.g. "pallavi", "charanam").
    phrases : tuple[Phrase, ...]
        The phrases within this section.
    comments : tuple[str, ...]
        Every comment in the section, in order.
    annotations : Mapping[str, str]
        Section-level ``@key: value`` annotations.
    gati : int | None
        Section-level gati override.
    tala : str | None
        Section-level tala override.
    line : int
        Line number of the section header.
    """

    name: str
    phrases: tuple[Phrase, ...] = ()
    comments: tuple[str, ...] = ()
    annotations: Mapping[str, str] = field(default_factory=_empty_mapping)
    gati: int | None = None
    tala: str | None = None
    line: int = 0


@dataclass(frozen=True)
class Document:
    """Complete parsed VNA document.

    Parameters
    ----------
    metadata : Metadata
        The frontmatter.
    sections : tuple[Section, ...]
        All sections in order.
    comments : tuple[str, ...]
        Comments written before the first section.
    """

    metadata: Metadata
    sections: tuple[Section, ...]
    comments: tuple[str, ...] = ()

    def phrases(self) -> Iterator[tuple[Section, Phrase]]:
        """Yield every phrase together with its section."""
        for section in self.sections:
            for phrase in section.phrases:
                yield section, phrase


@dataclass(frozen=True)
class ParseResult:
    """Outcome of a parse call.

    ``document`` is None exactly when ``diagnostics`` holds a fatal entry.
    The result unpacks as ``document, diagnostics``.
    """

    document: Document | None
    diagnostics: tuple[Diagnostic, ...]

    def __iter__(self) -> Iterator[object]:
        yield self.document
        yield self.diagnostics

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity == "error")

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity == "warning")

    @property
    def ok(self) -> bool:
        return self.document is not None and not self.errors
