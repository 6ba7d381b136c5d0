"""Splice generated body markup into the packaged HTML template."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

__all__ = ["PLACEHOLDERS", "TEMPLATE_DIR", "load_template_part", "render_template"]

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
PLACEHOLDERS = ("@icon@", "@js@", "@css@", "@html@")

_PARTS = {
    "html": "rulebook.html",
    "icon": "rulebook-icon.svg",
    "css": "rulebook.css",
    "js": "rulebook.js",
}


@lru_cache(maxsize=None)
def load_template_part(part: str) -> str:
    """Return the text of a packaged template part (html, icon, css, js)."""

    return (TEMPLATE_DIR / _PARTS[part]).read_text(encoding="utf-8")


def render_template(body: str) -> str:
    """Substitute icon, script, stylesheet, and body into the HTML template.

    Each placeholder is replaced once, in that order.
    """

    document = load_template_part("html")
    document = document.replace("@icon@", load_template_part("icon"), 1)
    document = document.replace("@js@", load_template_part("js"), 1)
    document = document.replace("@css@", load_template_part("css"), 1)
    document = document.replace("@html@", body, 1)
    return document
