"""Severity-tagged diagnostics with source locations.

A DiagnosticCollector is created for each parse call and owned by it, so
concurrent parses never share one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from vna_parser.errors import NotationError

Severity = Literal["error", "warning", "info"]


@dataclass(frozen=True)
class Diagnostic:
    """A single issue found in the input.

    Parameters
    ----------
    severity : Severity
        One of "error", "warning" or "info".
    message : str
        Human-readable description.
    line : int
        1-based line number.
    column : int | None
        1-based column, if known.
    code : str | None
        Stable machine-readable identifier (e.g. "token_count_mismatch").
    fatal : bool
        True if the issue prevented a Document from being built.
    """

    severity: Severity
    message: str
    line: int
    column: int | None = None
    code: str | None = None
    fatal: bool = False

    def __str__(self) -> str:
        location = f"{self.line}" if self.column is None else f"{self.line}:{self.column}"
        return f"{location}: {self.severity}: {self.message}"


class DiagnosticCollector:
    """Accumulates diagnostics in the order they are reported."""

    def __init__(self) -> None:
        self._items: list[Diagnostic] = []

    def __len__(self) -> int:
        return len(self._items)

    def add(
        self,
        severity: Severity,
        line: int,
        message: str,
        *,
        column: int | None = None,
        code: str | None = None,
        fatal: bool = False,
    ) -> None:
        self._items.append(
            Diagnostic(
                severity=severity,
                message=message,
                line=line,
                column=column,
                code=code,
                fatal=fatal,
            )
        )

    def error(self, line: int, message: str, *, column: int | None = None, code: str | None = None) -> None:
        self.add("error", line, message, column=column, code=code)

    def warning(self, line: int, message: str, *, column: int | None = None, code: str | None = None) -> None:
        self.add("warning", line, message, column=column, code=code)

    def info(self, line: int, message: str, *, column: int | None = None, code: str | None = None) -> None:
        self.add("info", line, message, column=column, code=code)

    def report(self, exc: NotationError, *, fatal: bool = False) -> None:
        """Record a caught NotationError as an error diagnostic."""
        self.add("error", exc.line, exc.message, column=exc.column, code=exc.code, fatal=fatal)

    @property
    def has_fatal(self) -> bool:
        return any(d.fatal for d in self._items)

    def has_code(self, *codes: str) -> bool:
        return any(d.code in codes for d in self._items)

    def sorted(self) -> tuple[Diagnostic, ...]:
        """Return all diagnostics ordered by line, keeping report order within a line."""
        return tuple(sorted(self._items, key=lambda d: d.line))
