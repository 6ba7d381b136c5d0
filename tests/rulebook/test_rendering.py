"""HTML fragments for reference literals and markdown text."""

from __future__ import annotations

import pytest

from Rulebook.errors import GenerationError
from Rulebook.rendering import escape_html, md_to_html, ref_to_html


def test_context_reference_anchor():
    assert ref_to_html("ctx:Security.Encryption") == (
        '<a href="#ctx-Security-Encryption">Security<span class="rarr">&#x25B6;</span>'
        "<strong>Encryption</strong></a>"
    )


def test_context_reference_with_fragment():
    html = ref_to_html("ctx:Security.Encryption#at-rest")
    assert "<strong>Encryption # at-rest</strong>" in html
    assert 'href="#ctx-Security-Encryption"' in html


def test_aspect_reference_anchors():
    assert ref_to_html("aspect:ENC") == '<a href="#ENC"><strong>ENC</strong></a>'
    assert ref_to_html("aspect:ENC#L5") == (
        '<a href="#ENC-L5"><strong>ENC</strong><span class="rarr">&#x25B7;</span>'
        "<strong>L5</strong></a>"
    )


def test_url_reference_is_escaped():
    assert ref_to_html("https://example.com/?a=1&b=2") == (
        '<a href="https://example.com/?a=1&amp;b=2">https://example.com/?a=1&amp;b=2</a>'
    )


def test_markdown_reference():
    assert ref_to_html("md:see *this*") == "see <em>this</em>"


def test_bad_reference():
    with pytest.raises(GenerationError, match='bad reference: "foo:bar"'):
        ref_to_html("foo:bar")


def test_markdown_single_paragraph_is_unwrapped():
    assert md_to_html("**bold** text") == "<strong>bold</strong> text"


def test_markdown_line_breaks_and_typography():
    html = md_to_html('line one\n"quoted"')
    assert "<br />" in html
    assert "“quoted”" in html


def test_escape_html():
    assert escape_html("<a href='x'>&\"") == "&lt;a href=&#039;x&#039;&gt;&amp;&quot;"
