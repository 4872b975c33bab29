from pathlib import Path

import pytest

from quire import renderers
from quire.errors import ConversionError
from quire.renderers import MarkdownRenderer, _generate_heading_id

SOURCE = Path("posts/example.md")


def render(text: str) -> str:
    return MarkdownRenderer().render(text, SOURCE)


def test_heading_and_emphasis():
    html = render("# Title\n\nSome *text*.")
    assert '<h1 id="title">Title</h1>' in html
    assert "<p>Some <em>text</em>.</p>" in html


def test_commonmark_basics():
    html = render(
        "## Section\n\n"
        "A [link](https://nextjs.org) and **bold**.\n\n"
        "    indented code\n\n"
        "- one\n- two\n\n"
        "1. first\n2. second\n"
    )
    assert '<h2 id="section">Section</h2>' in html
    assert '<a href="https://nextjs.org">link</a>' in html
    assert "<strong>bold</strong>" in html
    assert "<ul>" in html and "<li>one</li>" in html
    assert "<ol>" in html and "<li>second</li>" in html
    assert "<pre><code>indented code" in html


def test_duplicate_headings_get_unique_ids():
    html = render("## Notes\n\n## Notes\n")
    assert 'id="notes"' in html
    assert 'id="notes-1"' in html


def test_heading_ids_do_not_leak_between_renders():
    renderer = MarkdownRenderer()
    renderer.render("# Intro", SOURCE)
    assert 'id="intro"' in renderer.render("# Intro", SOURCE)


def test_fenced_code_is_highlighted():
    html = render("```python\nprint('hi')\n```\n")
    assert 'class="highlight"' in html


def test_unknown_language_falls_back_to_escaped_block():
    html = render("```nosuchlang\n<tag> & more\n```\n")
    assert '<pre><code class="language-nosuchlang">&lt;tag&gt; &amp; more' in html


def test_raw_html_passes_through():
    html = render('<div class="hero">Hi</div>\n')
    assert '<div class="hero">Hi</div>' in html


def test_plugins_enabled():
    html = render("~~old~~\n\n| a | b |\n|---|---|\n| 1 | 2 |\n")
    assert "<del>old</del>" in html
    assert "<table>" in html


def test_empty_body_renders_empty():
    assert render("") == ""


def test_renderer_failure_becomes_conversion_error(monkeypatch):
    def broken_create_markdown(**kwargs):
        def parse(text):
            raise RuntimeError("parser exploded")

        return parse

    monkeypatch.setattr(renderers.mistune, "create_markdown", broken_create_markdown)
    with pytest.raises(ConversionError) as excinfo:
        render("# Title")
    assert excinfo.value.source_path == SOURCE
    assert isinstance(excinfo.value.original_error, RuntimeError)


def test_generate_heading_id():
    assert _generate_heading_id("Hello, World!") == "hello-world"
    assert _generate_heading_id("<em>Styled</em> heading") == "styled-heading"
    assert _generate_heading_id("???") == ""
