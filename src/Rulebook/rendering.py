"""HTML fragments for markdown text and reference literals."""

from __future__ import annotations

import html
import re

from markdown_it import MarkdownIt

from .errors import GenerationError

__all__ = ["escape_html", "md_to_html", "ref_to_html"]

_CONTEXT_RENDER = re.compile(r"^ctx:([^.]+)\.([^.]+)(?:#(.+))?$")
_ASPECT_RENDER = re.compile(r"^aspect:(.+)$")
_ASPECT_SUB_RENDER = re.compile(r"^(.+)#(.+)$")
_URL_RENDER = re.compile(r"^https?:.+")
_MARKDOWN_RENDER = re.compile(r"^md:(.+)$", re.DOTALL)

_PARAGRAPH_OPEN = re.compile(r"^\s*<p>")
_PARAGRAPH_CLOSE = re.compile(r"</p>\s*$")

# GFM line breaks plus typographic quotes, dashes, and ellipses.
_MARKDOWN = (
    MarkdownIt("commonmark", {"breaks": True, "typographer": True})
    .enable(["replacements", "smartquotes", "table", "strikethrough"])
)


def escape_html(text: str) -> str:
    """Escape ``& < > " '`` for use in element content and attribute values."""

    return html.escape(text, quote=True).replace("&#x27;", "&#039;")


def md_to_html(markdown: str) -> str:
    """Render markdown to HTML without the wrapping paragraph of single blocks."""

    rendered = _MARKDOWN.render(markdown)
    rendered = _PARAGRAPH_OPEN.sub("", rendered, count=1)
    return _PARAGRAPH_CLOSE.sub("", rendered, count=1)


def ref_to_html(ref: str) -> str:
    """Render a reference literal as an HTML fragment.

    Raises:
        GenerationError: If ``ref`` matches none of the reference forms.
    """

    match = _CONTEXT_RENDER.match(ref)
    if match is not None:
        namespace, name, fragment = (escape_html(part) if part else part for part in match.groups())
        label = f"{name} # {fragment}" if fragment else name
        return (
            f'<a href="#ctx-{namespace}-{name}">{namespace}<span class="rarr">&#x25B6;</span>'
            f"<strong>{label}</strong></a>"
        )
    match = _ASPECT_RENDER.match(ref)
    if match is not None:
        target = match.group(1)
        sub = _ASPECT_SUB_RENDER.match(target)
        if sub is not None:
            aspect_id, level_id = escape_html(sub.group(1)), escape_html(sub.group(2))
            return (
                f'<a href="#{aspect_id}-{level_id}"><strong>{aspect_id}</strong>'
                f'<span class="rarr">&#x25B7;</span><strong>{level_id}</strong></a>'
            )
        target = escape_html(target)
        return f'<a href="#{target}"><strong>{target}</strong></a>'
    if _URL_RENDER.match(ref):
        url = escape_html(ref)
        return f'<a href="{url}">{url}</a>'
    match = _MARKDOWN_RENDER.match(ref)
    if match is not None:
        return md_to_html(match.group(1))
    raise GenerationError(f'bad reference: "{ref}"')
