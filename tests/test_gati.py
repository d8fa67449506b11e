"""Tests for gati and tala resolution."""

import pytest

from vna_parser.notation import (
    Document,
    effective_gati,
    effective_tala,
    parse_document,
    resolve_document,
    resolve_phrase,
)
from vna_parser.notation.gati import (
    Layer,
    Resolved,
    first_match,
    is_conventional_gati,
    is_known_tala_pattern,
    is_tala_pattern,
)

TEXT = """---
title: "Test"
raga: "mohanam"
tala: "+234+0+0"
gati: 4
---
[pallavi]
SR GM ||
sa ri ||

[anupallavi]
@gati: 3
@tala: "+0+0"
SR GM ||
sa ri ||

@gati: 5
@tala: "0++234"
GM PD ||
ga ma ||

PD NS ||
pa da ||

[charanam]
SRG:3 MPD ||
sa`ri`ga ma`pa`da ||
"""


@pytest.fixture
def document() -> Document:
    """Parse the cascade sample strictly."""
    return parse_document(TEXT, strict=True)


class TestFirstMatch:
    """Tests for first_match function."""

    def test_first_set_layer_wins(self) -> None:
        layers = [Layer("token", None), Layer("line", 5), Layer("section", 3), Layer("document", 4)]
        assert first_match(layers) == Resolved(value=5, source="line")

    def test_falls_through_to_document(self) -> None:
        layers = [Layer("line", None), Layer("section", None), Layer("document", 4)]
        assert first_match(layers) == Resolved(value=4, source="document")

    def test_no_value(self) -> None:
        """An all-empty stack cannot be resolved."""
        with pytest.raises(ValueError):
            first_match([Layer("line", None)])


class TestGatiCascade:
    """Gati precedence across the four levels."""

    def test_document_default(self, document) -> None:
        """Without overrides the document gati applies."""
        section = document.sections[0]
        timing = resolve_phrase(document, section, section.phrases[0])
        assert timing.gati == Resolved(value=4, source="document")

    def test_section_override(self, document) -> None:
        """A section annotation applies to phrases without their own."""
        section = document.sections[1]
        assert effective_gati(document, section, section.phrases[0]) == 3
        assert effective_gati(document, section, section.phrases[2]) == 3

    def test_line_override_is_local(self, document) -> None:
        """A line override applies to its phrase only."""
        section = document.sections[1]
        timing = resolve_phrase(document, section, section.phrases[1])
        assert timing.gati == Resolved(value=5, source="line")
        assert effective_gati(document, section, section.phrases[2]) == 3

    def test_token_override(self, document) -> None:
        """A token suffix beats every other level for that token."""
        section = document.sections[2]
        phrase = section.phrases[0]
        timing = resolve_phrase(document, section, phrase)

        assert timing.gati.value == 4
        assert timing.token_gati[0] == Resolved(value=3, source="token")
        assert timing.token_gati[1] == Resolved(value=4, source="document")
        assert effective_gati(document, section, phrase, token_index=0) == 3
        assert effective_gati(document, section, phrase, token_index=1) == 4

    def test_resolution_leaves_document_unchanged(self, document) -> None:
        """Resolving stores nothing on the tree."""
        before = document
        list(resolve_document(document))
        assert document == before
        assert document.sections[2].phrases[0].line_gati is None


class TestTalaCascade:
    """Tala precedence across three levels."""

    def test_document_tala(self, document) -> None:
        section = document.sections[0]
        assert effective_tala(document, section, section.phrases[0]) == "+234+0+0"

    def test_section_tala(self, document) -> None:
        section = document.sections[1]
        timing = resolve_phrase(document, section, section.phrases[0])
        assert timing.tala == Resolved(value="+0+0", source="section")

    def test_line_tala(self, document) -> None:
        section = document.sections[1]
        assert effective_tala(document, section, section.phrases[1]) == "0++234"
        assert effective_tala(document, section, section.phrases[2]) == "+0+0"


class TestResolveDocument:
    """Tests for resolve_document function."""

    def test_every_phrase(self, document) -> None:
        """Every phrase is resolved in order."""
        gatis = [timing.gati.value for _, _, timing in resolve_document(document)]
        assert gatis == [4, 3, 5, 3, 4]


class TestPatterns:
    """Gati and tala value checks."""

    @pytest.mark.parametrize(("gati", "expected"), [(3, True), (4, True), (9, True), (6, False), (1, False)])
    def test_conventional_gati(self, gati: int, expected: bool) -> None:
        assert is_conventional_gati(gati) is expected

    @pytest.mark.parametrize(
        ("tala", "expected"),
        [("+234+0+0", True), ("+0+0", True), ("+1", False), ("adi", False), ("", False)],
    )
    def test_is_tala_pattern(self, tala: str, expected: bool) -> None:
        assert is_tala_pattern(tala) is expected

    def test_known_patterns(self) -> None:
        assert is_known_tala_pattern("0++234") is True
        assert is_known_tala_pattern("+2+2") is False
