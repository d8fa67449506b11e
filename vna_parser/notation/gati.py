"""Gati and tala resolution.

Gati and tala can be set at four levels. From highest to lowest precedence:

1. a token suffix such as ``SRG:3`` (gati only),
2. an annotation directly before a phrase,
3. an annotation at the top of a section,
4. the document metadata.

Each level is an optional layer, and the effective value is the first layer
that is set. Results are computed on demand and never stored on the document.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from vna_parser.notation.models import Document, Phrase, Section

T = TypeVar("T")

LayerName = Literal["token", "line", "section", "document"]

CONVENTIONAL_GATI = frozenset({3, 4, 5, 7, 9})

GATI_NAMES: dict[int, str] = {
    3: "tisra",
    4: "catusra",
    5: "khanda",
    7: "misra",
    9: "sankirna",
}

# Tala patterns: + is a clap (laghu start), 0 a wave, 2-9 finger counts
TALA_PATTERN_CHARS = frozenset("+023456789")
KNOWN_TALA_PATTERNS: dict[str, str] = {
    "+234+0+0": "Adi",
    "0++234": "Rupaka",
    "+230+00": "Misra Chapu",
    "+23+0+0": "Triputa",
    "+0+0": "Khanda Chapu",
    "++++++++": "All claps",
}


@dataclass(frozen=True)
class Layer(Generic[T]):
    """One level of the override hierarchy."""

    name: LayerName
    value: T | None


@dataclass(frozen=True)
class Resolved(Generic[T]):
    """A resolved value and the layer that supplied it."""

    value: T
    source: LayerName


def first_match(layers: Sequence[Layer[T]]) -> Resolved[T]:
    """Return the first layer that holds a value.

    Parameters
    ----------
    layers : Sequence[Layer[T]]
        Layers ordered from highest to lowest precedence.

    Returns
    -------
    Resolved[T]
        The winning value and its layer.

    Raises
    ------
    ValueError
        If no layer holds a value.

    Examples
    --------
    >>> first_match([Layer("line", None), Layer("section", 3), Layer("document", 4)])
    Resolved(value=3, source='section')
    """
    for layer in layers:
        if layer.value is not None:
            return Resolved(value=layer.value, source=layer.name)
    msg = "No layer holds a value"
    raise ValueError(msg)


def gati_layers(
    document: Document, section: Section, phrase: Phrase, token_gati: int | None = None
) -> list[Layer[int]]:
    return [
        Layer("token", token_gati),
        Layer("line", phrase.line_gati),
        Layer("section", section.gati),
        Layer("document", document.metadata.gati),
    ]


def tala_layers(document: Document, section: Section, phrase: Phrase) -> list[Layer[str]]:
    return [
        Layer("line", phrase.line_tala),
        Layer("section", section.tala),
        Layer("document", document.metadata.tala),
    ]


@dataclass(frozen=True)
class PhraseTiming:
    """Effective gati and tala of one phrase.

    Parameters
    ----------
    gati : Resolved[int]
        Phrase gati, from the line, section or document layer.
    tala : Resolved[str]
        Phrase tala, from the line, section or document layer.
    token_gati : tuple[Resolved[int], ...]
        Effective gati of each note token, token suffixes included.
    """

    gati: Resolved[int]
    tala: Resolved[str]
    token_gati: tuple[Resolved[int], ...]


def resolve_phrase(document: Document, section: Section, phrase: Phrase) -> PhraseTiming:
    """Resolve the effective gati and tala of a phrase.

    Examples
    --------
    >>> from vna_parser.notation.models import Metadata
    >>> meta = Metadata(title="t", raga="mohanam", tala="adi", gati=4)
    >>> phrase = Phrase(swara_tokens=("SRG",), sahitya_tokens=("abc",),
    ...                 beat_positions=(), source_line=8, token_gati=(3,))
    >>> section = Section(name="pallavi", phrases=(phrase,), gati=5)
    >>> doc = Document(metadata=meta, sections=(section,))
    >>> timing = resolve_phrase(doc, section, phrase)
    >>> timing.gati.value, timing.token_gati[0].value
    (5, 3)
    """
    overrides = phrase.token_gati or (None,) * len(phrase.swara_tokens)
    return PhraseTiming(
        gati=first_match(gati_layers(document, section, phrase)),
        tala=first_match(tala_layers(document, section, phrase)),
        token_gati=tuple(
            first_match(gati_layers(document, section, phrase, token_gati)) for token_gati in overrides
        ),
    )


def effective_gati(
    document: Document, section: Section, phrase: Phrase, token_index: int | None = None
) -> int:
    """Effective gati of a phrase, or of one of its tokens when token_index is given."""
    token_gati = None
    if token_index is not None and token_index < len(phrase.token_gati):
        token_gati = phrase.token_gati[token_index]
    return first_match(gati_layers(document, section, phrase, token_gati)).value


def effective_tala(document: Document, section: Section, phrase: Phrase) -> str:
    """Effective tala of a phrase."""
    return first_match(tala_layers(document, section, phrase)).value


def resolve_document(document: Document) -> Iterator[tuple[Section, Phrase, PhraseTiming]]:
    """Yield the timing of every phrase, for rendering and export layers."""
    for section, phrase in document.phrases():
        yield section, phrase, resolve_phrase(document, section, phrase)


def is_conventional_gati(gati: int) -> bool:
    return gati in CONVENTIONAL_GATI


def is_tala_pattern(tala: str) -> bool:
    """Check whether tala is written as a clap/wave/finger pattern.

    Examples
    --------
    >>> is_tala_pattern("+234+0+0")
    True
    >>> is_tala_pattern("adi")
    False
    """
    return bool(tala) and all(ch in TALA_PATTERN_CHARS for ch in tala)


def is_known_tala_pattern(tala: str) -> bool:
    return tala in KNOWN_TALA_PATTERNS
