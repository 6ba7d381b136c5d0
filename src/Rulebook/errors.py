"""Exception hierarchy shared across rulebook parsing, validation, and rendering.

A rulebook run spans YAML parsing, schema validation, cross-reference checks,
and HTML generation.  User-facing failures from those stages derive from
:class:`RulebookParseError` so callers can render a source excerpt pointing at
the offending document position.  Caller mistakes such as rendering before an
index was loaded raise :class:`RulebookStateError` instead; they carry no
source position and are not meant to be shown as diagnostics.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.text import Text

__all__ = [
    "RulebookError",
    "RulebookParseError",
    "SyntacticParseError",
    "SchemaValidationError",
    "CrossReferenceError",
    "GenerationError",
    "RulebookStateError",
    "ImportFormatError",
    "ConfigError",
]

_CONTEXT_LINES = 2


class RulebookError(RuntimeError):
    """Base exception for rulebook processing failures."""


class RulebookParseError(RulebookError):
    """Reportable failure tied to an optional position in a source document.

    Attributes:
        message: Human readable description of the failure.
        source: Full text of the document the failure refers to.
        file: Name of the document the failure refers to.
        line: 1-based line of the failure position.
        column: 1-based column of the failure position.
    """

    def __init__(
        self,
        message: str,
        *,
        source: str = "",
        file: str = "",
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.source = source
        self.file = file
        self.line = line if line is not None else 1
        self.column = column if column is not None else 1

    def has_excerpt(self) -> bool:
        """Return ``True`` when source, file, and position are all available."""

        return self.source != "" and self.file != "" and self.line >= 1 and self.column >= 1

    def render(self, colors: bool = False) -> str:
        """Render the error as a source excerpt or a bare ``ERROR:`` line.

        Args:
            colors: Emit ANSI colour sequences suitable for a terminal.

        Returns:
            Multi-line excerpt with a caret under the failing column when the
            error carries a source position, else ``ERROR: <message>``.
        """

        if not self.has_excerpt():
            return f"ERROR: {self.message}"
        text = self._excerpt()
        if not colors:
            return text.plain
        console = Console(force_terminal=True, color_system="standard", width=10_000, highlight=False)
        with console.capture() as capture:
            console.print(text, end="", soft_wrap=True)
        return capture.get()

    def _excerpt(self) -> Text:
        lines = self.source.split("\n")
        line_no = min(self.line, len(lines))
        first = max(1, line_no - _CONTEXT_LINES)
        width = len(str(line_no))

        text = Text()
        text.append(f"{self.file}:{self.line}:{self.column}: ", style="bold")
        text.append("ERROR: ", style="bold red")
        text.append(self.message + "\n")
        for number in range(first, line_no + 1):
            content = lines[number - 1].rstrip("\r")
            marker = ">" if number == line_no else " "
            style = "bold" if number == line_no else "dim"
            text.append(f"{marker} {number:>{width}} | ", style="dim")
            text.append(content + "\n", style=style)
        text.append(" " * (width + 5), style="dim")
        text.append(" " * (self.column - 1) + "^", style="bold red")
        return text


class SyntacticParseError(RulebookParseError):
    """Raised when a document is not well-formed YAML."""


class SchemaValidationError(RulebookParseError):
    """Raised when a well-formed document is rejected by its closed schema."""


class CrossReferenceError(RulebookParseError):
    """Raised when a reference does not resolve against the repository."""


class GenerationError(RulebookParseError):
    """Raised when the model is inconsistent in a way only rendering detects."""


class RulebookStateError(RulebookError):
    """Raised when an operation runs before its preconditions were met."""


class ImportFormatError(RulebookError):
    """Raised when a JSON export envelope cannot be imported."""


class ConfigError(RulebookError):
    """Raised when settings or input locations are invalid."""
