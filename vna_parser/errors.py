"""Exceptions raised while reading VNA text."""

from __future__ import annotations


class NotationError(ValueError):
    """Base class for problems found in VNA text.

    Parameters
    ----------
    message : str
        Human-readable description.
    line : int
        1-based line number the problem is attached to.
    column : int | None
        1-based column, if known.
    code : str | None
        Machine-readable identifier. Defaults to the class code.
    """

    code = "notation_error"

    def __init__(
        self, message: str, line: int = 1, column: int | None = None, code: str | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        if code is not None:
            self.code = code


class StructuralError(NotationError):
    """The text does not have the shape of a VNA document."""

    code = "structural_error"


class ValidationError(NotationError):
    """Paired note and lyric lines disagree."""

    code = "validation_error"


class ResourceError(NotationError):
    """The input is larger than the configured ceiling."""

    code = "input_too_large"
