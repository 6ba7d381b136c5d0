# === NAVMAP v1 ===
# {
#   "module": "Rulebook.references",
#   "purpose": "Recognise and parse the reference literal forms used in rulebook documents",
#   "sections": [
#     {"id": "patterns", "name": "Reference Patterns", "anchor": "PAT", "kind": "constants"},
#     {"id": "types", "name": "Parsed Reference Types", "anchor": "TYP", "kind": "api"},
#     {"id": "parsers", "name": "Parsing Helpers", "anchor": "PRS", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Reference literal grammar for rulebook documents.

Aspect documents point at other parts of the rulebook with four disjoint
literal forms:

- context reference ``ctx:<Namespace>.<Name>[#<fragment>]`` into the index
  context map,
- aspect reference ``aspect:<Id>[#<SubId>]`` to an aspect or one of its
  assessment levels,
- URL reference ``http(s):...``,
- inline markdown ``md:<text>``.

The helpers here are pure; resolving references against a repository is the
job of :mod:`Rulebook.crossrefs`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

__all__ = [
    "ASPECT_REF_PATTERN",
    "CONTEXT_REF_PATTERN",
    "MARKDOWN_REF_PATTERN",
    "URL_REF_PATTERN",
    "AspectRef",
    "ContextRef",
    "MarkdownRef",
    "RefKind",
    "UrlRef",
    "classify_reference",
    "is_aspect_ref",
    "is_context_ref",
    "is_markdown_ref",
    "is_url_ref",
    "parse_aspect_ref",
    "parse_context_ref",
    "parse_reference",
]

# --- Reference Patterns ---

CONTEXT_REF_PATTERN = re.compile(
    r"^ctx:([A-Za-z][A-Za-z0-9_-]*(?:\.[A-Za-z][A-Za-z0-9_-]*)*)(?:#(.+))?$"
)
ASPECT_REF_PATTERN = re.compile(r"^aspect:([A-Za-z0-9_-]+)(?:#(.+))?$")
URL_REF_PATTERN = re.compile(r"^https?:.+$")
MARKDOWN_REF_PATTERN = re.compile(r"^md:(.+)$", re.DOTALL)
EMAIL_PATTERN = re.compile(r"^.+?@[a-z0-9_][a-z0-9_-]+(?:\.[a-z0-9_][a-z0-9_-]+)*$")
DATE_PATTERN = re.compile(r"^20\d{2}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$")

# Examples quoted in "must be ..." validation messages.
CONTEXT_REF_EXPECTED = "a context reference (e.g. ctx:Foo.Bar.Quux)"
ASPECT_REF_EXPECTED = "an aspect reference (e.g. aspect:FOO-BAR-QUUX)"
URL_REF_EXPECTED = "a URL reference (e.g. https://foo.bar.quux/)"
MARKDOWN_REF_EXPECTED = "a prose reference in Markdown format"
EMAIL_EXPECTED = "an email address (e.g. foo@bar.quux)"
DATE_EXPECTED = "a date in YYYY-MM-DD format"


class RefKind(str, Enum):
    """Literal form of a reference string."""

    CONTEXT = "ctx"
    ASPECT = "aspect"
    URL = "url"
    MARKDOWN = "md"


# --- Parsed Reference Types ---


@dataclass(frozen=True, slots=True)
class ContextRef:
    """Parsed ``ctx:`` reference.

    ``path`` is the dotted path after the prefix; ``namespace`` and ``name``
    are its first and second segments as used for anchors.
    """

    path: str
    fragment: Optional[str] = None

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self.path.split("."))

    @property
    def namespace(self) -> str:
        return self.segments[0]

    @property
    def name(self) -> str:
        segments = self.segments
        return segments[1] if len(segments) > 1 else ""


@dataclass(frozen=True, slots=True)
class AspectRef:
    """Parsed ``aspect:`` reference with an optional assessment level id."""

    aspect_id: str
    sub_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class UrlRef:
    url: str


@dataclass(frozen=True, slots=True)
class MarkdownRef:
    text: str


Reference = Union[ContextRef, AspectRef, UrlRef, MarkdownRef]


# --- Parsing Helpers ---


def is_context_ref(value: str) -> bool:
    return CONTEXT_REF_PATTERN.match(value) is not None


def is_aspect_ref(value: str) -> bool:
    return ASPECT_REF_PATTERN.match(value) is not None


def is_url_ref(value: str) -> bool:
    return URL_REF_PATTERN.match(value) is not None


def is_markdown_ref(value: str) -> bool:
    return MARKDOWN_REF_PATTERN.match(value) is not None


def parse_context_ref(value: str) -> Optional[ContextRef]:
    """Parse a ``ctx:`` literal, returning ``None`` when it is malformed."""

    match = CONTEXT_REF_PATTERN.match(value)
    if match is None:
        return None
    return ContextRef(path=match.group(1), fragment=match.group(2))


def parse_aspect_ref(value: str) -> Optional[AspectRef]:
    """Parse an ``aspect:`` literal, returning ``None`` when it is malformed."""

    match = ASPECT_REF_PATTERN.match(value)
    if match is None:
        return None
    return AspectRef(aspect_id=match.group(1), sub_id=match.group(2))


def classify_reference(value: str) -> Optional[RefKind]:
    """Return the literal form of ``value`` or ``None`` if none matches."""

    if is_context_ref(value):
        return RefKind.CONTEXT
    if is_aspect_ref(value):
        return RefKind.ASPECT
    if is_url_ref(value):
        return RefKind.URL
    if is_markdown_ref(value):
        return RefKind.MARKDOWN
    return None


def parse_reference(value: str) -> Optional[Reference]:
    """Parse any of the four literal forms.

    Examples:
        >>> parse_reference("ctx:Security.Encryption#at-rest")
        ContextRef(path='Security.Encryption', fragment='at-rest')
        >>> parse_reference("aspect:ABC#L1")
        AspectRef(aspect_id='ABC', sub_id='L1')
        >>> parse_reference("foo:bar") is None
        True
    """

    kind = classify_reference(value)
    if kind is RefKind.CONTEXT:
        return parse_context_ref(value)
    if kind is RefKind.ASPECT:
        return parse_aspect_ref(value)
    if kind is RefKind.URL:
        return UrlRef(url=value)
    if kind is RefKind.MARKDOWN:
        match = MARKDOWN_REF_PATTERN.match(value)
        assert match is not None
        return MarkdownRef(text=match.group(1))
    return None
