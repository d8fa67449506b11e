"""Tests for the VNA document parser."""

import pytest

from vna_parser import (
    Natural,
    ParserSettings,
    ResourceError,
    StructuralError,
    ValidationError,
    parse,
    parse_document,
    resolve_document,
    validate,
)

HEADER = """---
title: "Test"
raga: "mohanam"
tala: "adi"
---
"""


def doc(body: str) -> str:
    return HEADER + body


def codes(text: str) -> list[str | None]:
    return [d.code for d in validate(text)]


class TestParseBasic:
    """Test basic parsing functionality."""

    def test_single_phrase(self) -> None:
        """A well-formed phrase yields tokens and beats with no errors."""
        result = parse(doc("[pallavi]\nG,G, R,,, | SSRR GGRR ||\nninn ukō- | ri-- ---- ||\n"))

        assert result.document is not None
        assert result.document.metadata.title == "Test"
        assert len(result.document.sections) == 1

        section = result.document.sections[0]
        assert section.name == "pallavi"
        assert len(section.phrases) == 1

        phrase = section.phrases[0]
        assert phrase.swara_tokens == ("G,G,", "R,,,", "SSRR", "GGRR")
        assert phrase.sahitya_tokens == ("ninn", "ukō-", "ri--", "----")
        assert phrase.beat_positions == (2,)
        assert result.errors == ()

    def test_unpacks(self) -> None:
        """A result unpacks into document and diagnostics."""
        document, diagnostics = parse(doc("[pallavi]\nG,G, ||\nninn ||\n"))
        assert document is not None
        assert diagnostics == ()

    def test_source_lines(self) -> None:
        """Phrases know where their lines are."""
        document = parse_document(doc("[pallavi]\n\nG,G, ||\nninn ||\n"))
        phrase = document.sections[0].phrases[0]
        assert phrase.source_line == 8
        assert phrase.sahitya_line == 9
        assert document.sections[0].line == 6

    def test_notes_are_decoded(self) -> None:
        """Each swara token carries its decoded notes."""
        phrase = parse_document(doc("[pallavi]\nSRSD. ||\nyunnā ||\n")).sections[0].phrases[0]
        assert phrase.notes[0][-1] == Natural(letter="D", octave=-1)

    def test_multiple_sections(self) -> None:
        """Sections are kept in order."""
        text = doc("[pallavi]\nSR GM ||\nsa ri ||\n\n[anupallavi]\nGM PD ||\nga ma ||\n")
        document = parse_document(text)
        assert [s.name for s in document.sections] == ["pallavi", "anupallavi"]

    def test_phrase_analysis(self) -> None:
        """A phrases line attaches to the phrase above it."""
        text = doc("[pallavi]\nSR GM ||\nsa ri ||\nphrases = (_ *)\n")
        phrase = parse_document(text).sections[0].phrases[0]
        assert phrase.phrase_analysis == "(_ *)"

    def test_comments(self) -> None:
        """Comments are kept on the document, section and phrase."""
        text = doc("# intro\n[pallavi]\n# first\nSR GM ||\nsa ri ||\n# last\n")
        document = parse_document(text)
        assert document.comments == ("intro",)
        assert document.sections[0].comments == ("first", "last")
        assert document.sections[0].phrases[0].preceding_comments == ("first",)

    def test_crlf_line_endings(self) -> None:
        """Windows line endings parse the same."""
        text = doc("[pallavi]\nSR GM ||\nsa ri ||\n").replace("\n", "\r\n")
        assert parse(text).ok

    def test_calls_are_independent(self) -> None:
        """Parsing one text leaves no trace on the next."""
        bad = doc("[pallavi]\nG,G, R,,, ||\nninn uk ||\n")
        good = doc("[pallavi]\nSR GM ||\nsa ri ||\n")
        assert parse(bad).errors
        assert parse(good).diagnostics == ()


class TestAnnotations:
    """Section and line annotations."""

    def test_section_annotations(self) -> None:
        """Annotations before the first phrase belong to the section."""
        text = doc('[pallavi]\n@gati: 3\n@tala: "+0+0"\nSR GM ||\nsa ri ||\n')
        section = parse_document(text).sections[0]
        assert section.gati == 3
        assert section.tala == "+0+0"
        assert dict(section.annotations) == {"gati": "3", "tala": "+0+0"}
        assert section.phrases[0].line_gati is None

    def test_line_annotations(self) -> None:
        """Annotations after a phrase apply to the next phrase only."""
        text = doc("[pallavi]\nSR GM ||\nsa ri ||\n@gati: 5\nGM PD ||\nga ma ||\nPD NS ||\npa da ||\n")
        phrases = parse_document(text).sections[0].phrases
        assert [p.line_gati for p in phrases] == [None, 5, None]
        assert dict(phrases[1].annotations) == {"gati": "5"}

    def test_line_tala(self) -> None:
        text = doc('[pallavi]\nSR GM ||\nsa ri ||\n@tala: "+0+0"\nGM PD ||\nga ma ||\n')
        assert parse_document(text).sections[0].phrases[1].line_tala == "+0+0"

    def test_invalid_gati_annotation(self) -> None:
        """A non-numeric gati is an error and is ignored."""
        text = doc("[pallavi]\n@gati: fast\nSR GM ||\nsa ri ||\n")
        result = parse(text)
        assert [d.code for d in result.errors] == ["invalid_gati"]
        assert result.document.sections[0].gati is None

    def test_unusual_gati_annotation(self) -> None:
        assert "unusual_gati" in codes(doc("[pallavi]\n@gati: 6\nSR GM ||\nsa ri ||\n"))

    def test_malformed_annotation(self) -> None:
        assert "malformed_annotation" in codes(doc("[pallavi]\n@gati\nSR GM ||\nsa ri ||\n"))

    def test_first_phrase_override(self) -> None:
        """A repeated key under the header overrides the first phrase only."""
        text = doc("[pallavi]\n@gati: 3\n@gati: 5\nSR GM ||\nsa ri ||\nGM PD ||\nga ma ||\n")
        document = parse_document(text)
        section = document.sections[0]
        assert section.gati == 3
        assert [p.line_gati for p in section.phrases] == [5, None]

        timings = [timing.gati for _, _, timing in resolve_document(document)]
        assert [g.value for g in timings] == [5, 3]
        assert [g.source for g in timings] == ["line", "section"]

    def test_blank_line_ends_section_block(self) -> None:
        """After a blank line, annotations belong to the first phrase."""
        text = doc('[pallavi]\n@gati: 3\n\n@tala: "+0+0"\nSR GM ||\nsa ri ||\nGM PD ||\nga ma ||\n')
        section = parse_document(text).sections[0]
        assert section.gati == 3
        assert section.tala is None
        assert [p.line_tala for p in section.phrases] == ["+0+0", None]

    def test_non_ascii_digit_gati(self) -> None:
        """Superscript digits are rejected, not converted."""
        result = parse(doc("[pallavi]\n@gati: \u00b2\nSR GM ||\nsa ri ||\n"))
        assert [d.code for d in result.errors] == ["invalid_gati"]
        assert result.document.sections[0].gati is None


class TestStructuralRecovery:
    """Recoverable structural problems."""

    def test_empty_section_name(self) -> None:
        """An unnamed section is skipped and the next one is parsed."""
        text = doc("[ ]\nSR GM ||\nsa ri ||\n[charanam]\nGM PD ||\nga ma ||\n")
        result = parse(text)
        assert [d.code for d in result.errors] == ["empty_section_name"]
        assert [s.name for s in result.document.sections] == ["charanam"]

    def test_empty_section(self) -> None:
        """A section without phrases is a warning."""
        result = parse(doc("[pallavi]\n# nothing yet\n"))
        assert [d.code for d in result.warnings] == ["empty_section"]
        assert result.errors == ()

    def test_mixed_case_note_line(self) -> None:
        """A whole line of mixed-case swaras is still a note line."""
        result = parse(doc("[pallavi]\nSrgm PdNs ||\nabcd efgh ||\n"))
        assert result.errors == ()
        assert len(result.document.sections[0].phrases) == 1
        assert [d.code for d in result.warnings] == ["mixed_case_swara", "mixed_case_swara"]

    def test_lyric_without_notes(self) -> None:
        """A lyric line with no note line above it is an error."""
        result = parse(doc("[pallavi]\nsa ri ||\nSR GM ||\nsa ri ||\n"))
        assert [d.code for d in result.errors] == ["lyric_without_notes"]
        assert len(result.document.sections[0].phrases) == 1

    def test_incomplete_phrase(self) -> None:
        """A note line followed by another note line is incomplete."""
        result = parse(doc("[pallavi]\nS R ||\nGM PD ||\nga ma ||\n"))
        assert [d.code for d in result.errors] == ["incomplete_phrase"]
        assert result.errors[0].line == 7
        assert result.document.sections[0].phrases[0].swara_tokens == ("GM", "PD")

    def test_note_line_at_end(self) -> None:
        result = parse(doc("[pallavi]\nS R ||\n"))
        assert [d.code for d in result.errors] == ["incomplete_phrase"]

    def test_blank_line_inside_phrase(self) -> None:
        """The lyric line must directly follow the note line."""
        result = parse(doc("[pallavi]\nS R ||\n\nsa ri ||\n"))
        assert [d.code for d in result.errors] == ["incomplete_phrase", "lyric_without_notes"]

    def test_stray_phrase_analysis(self) -> None:
        result = parse(doc("[pallavi]\nphrases = (_ *)\nSR GM ||\nsa ri ||\n"))
        assert [d.code for d in result.errors] == ["stray_phrase_analysis"]

    def test_diagnostics_sorted_by_line(self) -> None:
        """Diagnostics come back in line order."""
        text = doc("[pallavi]\nS R ||\nsa ||\nG M ||\nga ||\n")
        lines = [d.line for d in validate(text)]
        assert lines == sorted(lines)
        assert len(lines) == 2


class TestFatalErrors:
    """Problems that prevent a document."""

    def test_missing_raga(self) -> None:
        """A missing required field gives no document."""
        text = '---\ntitle: "Test"\ntala: "adi"\n---\n[pallavi]\nSR GM ||\nsa ri ||\n'
        result = parse(text)
        assert result.document is None
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].fatal is True
        assert result.diagnostics[0].code == "missing_metadata_field"
        assert result.ok is False

    def test_missing_raga_raises(self) -> None:
        text = '---\ntitle: "Test"\ntala: "adi"\n---\n'
        with pytest.raises(StructuralError):
            parse_document(text)

    def test_no_metadata(self) -> None:
        result = parse("[pallavi]\nSR GM ||\nsa ri ||\n")
        assert result.document is None
        assert result.diagnostics[0].code == "missing_metadata"

    def test_content_outside_section(self) -> None:
        """Phrases before any header reject the whole document."""
        result = parse(doc("SR GM ||\nsa ri ||\n[pallavi]\nGM PD ||\nga ma ||\n"))
        assert result.document is None
        (fatal,) = result.diagnostics
        assert fatal.fatal is True
        assert fatal.code == "content_outside_section"
        assert fatal.line == 6

    def test_content_outside_section_raises(self) -> None:
        with pytest.raises(StructuralError) as excinfo:
            parse_document(doc("# intro\nSR GM ||\nsa ri ||\n[pallavi]\nGM PD ||\nga ma ||\n"))
        assert excinfo.value.code == "content_outside_section"
        assert excinfo.value.line == 7

    def test_delimiter_line_in_body_is_not_metadata(self) -> None:
        """Without a leading block, a later --- line does not open one."""
        result = parse("[pallavi]\nS, R, ||\n---\ntitle: x\n---\n")
        assert result.document is None
        assert result.diagnostics[0].code == "missing_metadata"
        assert result.diagnostics[0].line == 1

    def test_input_too_large(self) -> None:
        """Input over the limit is refused."""
        config = ParserSettings(max_input_chars=50)
        result = parse(doc("[pallavi]\nSR GM ||\nsa ri ||\n"), settings=config)
        assert result.document is None
        assert result.diagnostics[0].code == "input_too_large"
        assert result.diagnostics[0].fatal is True

    def test_input_too_large_raises(self) -> None:
        config = ParserSettings(max_input_chars=50)
        with pytest.raises(ResourceError):
            parse_document(doc("[pallavi]\nSR GM ||\nsa ri ||\n"), settings=config)

    def test_limit_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The limit can be set through the environment."""
        monkeypatch.setenv("VNA_MAX_INPUT_CHARS", "10")
        assert ParserSettings().max_input_chars == 10


class TestValidationScenarios:
    """End-to-end validation results."""

    def test_length_mismatch(self) -> None:
        """A short lyric token gives exactly one error at its index."""
        result = parse(doc("[pallavi]\nG,G, R,,, ||\nninn uk ||\n"))
        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.code == "token_length_mismatch"
        assert "position 2" in error.message
        assert error.line == 8
        assert error.column == 6

    def test_unusual_tempo(self) -> None:
        """tempo 500 parses with exactly one warning and no errors."""
        text = '---\ntitle: "Test"\nraga: "mohanam"\ntala: "adi"\ntempo: 500\n---\n[pallavi]\nG,G, R,,, ||\nninn kōri ||\n'
        result = parse(text)
        assert result.document is not None
        assert result.document.metadata.tempo == 500
        assert result.errors == ()
        assert [d.code for d in result.diagnostics] == ["unusual_tempo"]

    def test_non_ascii_digit_token_gati(self) -> None:
        """A superscript gati suffix is an invalid suffix, not a crash."""
        result = parse(doc("[pallavi]\nSRG:\u00b2 MPD ||\nabc def ||\n"))
        assert [d.code for d in result.errors] == ["invalid_token_gati"]
        assert result.document.sections[0].phrases[0].token_gati == (None, None)

    def test_strict_raises_on_error(self) -> None:
        """Strict mode turns the first error into an exception."""
        with pytest.raises(ValidationError) as excinfo:
            parse_document(doc("[pallavi]\nG,G, R,,, ||\nninn uk ||\n"), strict=True)
        assert excinfo.value.code == "token_length_mismatch"

    def test_lenient_returns_document(self) -> None:
        document = parse_document(doc("[pallavi]\nG,G, R,,, ||\nninn uk ||\n"))
        assert document.sections[0].phrases[0].sahitya_tokens == ("ninn", "uk")
