"""Nested-scope text builder used to assemble indented markup.

The builder keeps an explicit tree of :class:`Line` and :class:`Scope`
nodes plus a stack of currently open scopes.  All writes go to the deepest
open scope, so callers never track indentation themselves; rendering is a
depth-first walk that indents each line by ``indent * depth`` spaces.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Union

from .errors import RulebookStateError

__all__ = ["Line", "MarkupBuilder", "Scope"]


@dataclass(slots=True)
class Line:
    text: str


@dataclass(slots=True)
class Scope:
    entries: List[Union[Line, "Scope"]] = field(default_factory=list)


class MarkupBuilder:
    """Build nested markup line by line.

    Examples:
        >>> html = MarkupBuilder()
        >>> html.group("<ul>", "</ul>", lambda html: html.add("<li>x</li>"))
        >>> print(html.render(indent=2), end="")
        <ul>
          <li>x</li>
        </ul>
    """

    def __init__(self) -> None:
        self.root = Scope()
        self._stack: List[Scope] = [self.root]

    @property
    def focus(self) -> Scope:
        return self._stack[-1]

    @property
    def depth(self) -> int:
        return len(self._stack) - 1

    def add(self, text: str) -> None:
        """Append ``text`` as a new line of the deepest open scope."""

        self.focus.entries.append(Line(text))

    def append(self, text: str) -> None:
        """Extend the last line of the deepest open scope, or start one."""

        entries = self.focus.entries
        if entries and isinstance(entries[-1], Line):
            entries[-1].text += text
        else:
            entries.append(Line(text))

    def open(self) -> Scope:
        scope = Scope()
        self.focus.entries.append(scope)
        self._stack.append(scope)
        return scope

    def close(self) -> None:
        if len(self._stack) == 1:
            raise RulebookStateError("already at top-level")
        self._stack.pop()

    @contextmanager
    def scope(self, prefix: str, suffix: str) -> Iterator["MarkupBuilder"]:
        """Emit ``prefix``, nest the block one level deeper, then emit ``suffix``.

        Scopes the block leaves open are closed before ``suffix`` is written.
        """

        self.add(prefix)
        depth = self.depth
        self.open()
        yield self
        while self.depth > depth:
            self.close()
        self.add(suffix)

    def group(self, prefix: str, suffix: str, body: Callable[["MarkupBuilder"], None]) -> None:
        with self.scope(prefix, suffix):
            body(self)

    def render(self, indent: int = 4, level: int = 0) -> str:
        """Concatenate all lines depth-first, indenting by ``indent`` per level."""

        pad = " " * indent
        out: List[str] = []

        def walk(scope: Scope, depth: int) -> None:
            for entry in scope.entries:
                if isinstance(entry, Line):
                    out.append(pad * depth + entry.text + "\n")
                else:
                    walk(entry, depth + 1)

        walk(self.root, level)
        return "".join(out)
