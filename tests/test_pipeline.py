"""Tests for the full Markdown -> HTML pipeline."""

import datetime

import pytest

from md2medium import convert_file, convert_string
from md2medium.config import ConversionConfig
from md2medium.exceptions import ParseError, TransformError
from md2medium.frontmatter_parser import FrontMatter
from md2medium.MarkdownToHtml import (
    MarkdownToHtml,
    ResolvedAsset,
    base_url,
    compose_final_markdown,
    render_note,
)


POST = (
    "---\n"
    "title: My Post\n"
    "date: 2024-03-01\n"
    "tags: [python, medium]\n"
    "---\n"
    "Intro paragraph.\n"
    "\n"
    "![diagram](img/diagram.png \"Architecture\")\n"
    "\n"
    "![logo](https://example.com/logo.png)\n"
)


def test_concrete_local_image(resolver):
    result = convert_string("# T\n\n![alt](img/a.png)\n", resolver=resolver)

    assert '<img src="https://cdn/a.png" alt="alt" title="">' in result.html
    assert result.html.count("<img") == 1


def test_concrete_remote_image(resolver):
    result = convert_string("![x](https://example.com/b.png)\n", resolver=resolver)

    assert '<img src="https://example.com/b.png" alt="x" title="">' in result.html
    assert resolver.calls == []
    assert result.assets == []


def test_full_post(resolver):
    result = convert_string(POST.encode("utf-8"), resolver=resolver)

    assert result.front_matter.title == "My Post"
    assert result.front_matter.tags == ["python", "medium"]
    assert result.html.startswith("<h1>My Post</h1>\n<p>Intro paragraph.</p>\n")
    assert '<img src="https://cdn/diagram.png" alt="diagram" title="Architecture">' in result.html
    assert '<img src="https://example.com/logo.png" alt="logo" title="">' in result.html
    assert result.assets == [ResolvedAsset("img/diagram.png", "https://cdn/diagram.png")]


def test_conversion_is_idempotent(resolver):
    first = convert_string(POST, resolver=resolver).html
    second = convert_string(POST, resolver=resolver).html

    assert first == second


def test_resolver_error_aborts_pipeline(make_resolver):
    resolver = make_resolver(fail_on="img/diagram.png")
    source = POST + "\n![later](img/later.png)\n"

    with pytest.raises(TransformError) as exc_info:
        convert_string(source, resolver=resolver)

    assert exc_info.value.path == "img/diagram.png"
    assert "img/later.png" not in resolver.calls


def test_front_matter_error_stops_before_resolver(resolver):
    with pytest.raises(ParseError):
        convert_string("---\ntitle: [broken\n---\n![a](a.png)\n", resolver=resolver)
    assert resolver.calls == []


def test_default_resolver_keeps_local_paths():
    result = convert_string("![a](img/a.png)\n")

    assert '<img src="img/a.png" alt="a" title="">' in result.html
    assert result.assets == [ResolvedAsset("img/a.png", "img/a.png")]


def test_convert_to_html_returns_string(resolver):
    html = MarkdownToHtml.convert_to_html("![a](a.png)\n", resolver)

    assert html == '<p><img src="https://cdn/a.png" alt="a" title=""></p>\n'


def test_compose_adds_title_and_note():
    fm = FrontMatter(title="Hello", date=datetime.datetime(2024, 3, 1))
    note = ("Originally published at [{{ BaseURL }}]({{ CanonicalURL }}) "
            "on {{ Date.strftime('%Y-%m-%d') }}.")

    markdown = compose_final_markdown("\nBody\n", fm, "https://blog.example.com/2024/hello/", note)

    assert markdown == (
        "# Hello\n\n"
        "\nBody\n"
        "\n\n"
        "Originally published at [https://blog.example.com](https://blog.example.com/2024/hello/) "
        "on 2024-03-01."
    )


def test_compose_without_title_or_note():
    assert compose_final_markdown("Body\n", FrontMatter()) == "Body\n"


def test_note_uses_title():
    assert render_note("*{{ Title }}*", "", FrontMatter(title="T")) == "*T*"


def test_note_with_undefined_variable_is_fatal():
    with pytest.raises(ParseError) as exc_info:
        render_note("By {{ Author }}", "https://x.org/", FrontMatter())
    assert exc_info.value.section == "template"


def test_note_with_syntax_error_is_fatal():
    with pytest.raises(ParseError):
        compose_final_markdown("Body", FrontMatter(), "", "{{ Title ")


def test_base_url():
    assert base_url("https://blog.example.com:8443/a/b?q=1") == "https://blog.example.com:8443"
    assert base_url("") == ""
    assert base_url("not a url") == ""


def test_note_is_rendered_into_html(resolver):
    result = convert_string(
        POST,
        resolver=resolver,
        canonical_url="https://blog.example.com/my-post/",
        original_note="Originally published at <{{ CanonicalURL }}>.",
    )

    assert result.html.endswith(
        '<p>Originally published at '
        '<a href="https://blog.example.com/my-post/">https://blog.example.com/my-post/</a>.</p>\n'
    )


def test_gfm_config(resolver):
    class GFMConfig(ConversionConfig):
        ENABLE_GFM = True

    result = convert_string("| a |\n|---|\n| ![i](i.png) |\n", resolver=resolver, config=GFMConfig())

    assert "<table>" in result.html
    assert '<img src="https://cdn/i.png" alt="i" title="">' in result.html


def test_convert_file(tmp_path, resolver):
    md = tmp_path / "post.md"
    md.write_text(POST, encoding="utf-8")
    out = tmp_path / "post.html"

    result = convert_file(str(md), output_path=str(out), resolver=resolver)

    assert out.read_text(encoding="utf-8") == result.html
    assert resolver.calls == ["img/diagram.png"]
