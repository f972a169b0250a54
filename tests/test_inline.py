from __future__ import annotations

import re

from loom_md.inline import render_inline, render_inline_for_mode, render_inline_with_markers

TAG_RE = re.compile(r"</?[a-z]+[^>]*>")


def test_inline_markdown() -> None:
    result = render_inline("This is **bold** and *italic* and `code`")
    assert "<strong>bold</strong>" in result
    assert "<em>italic</em>" in result
    assert "<code>code</code>" in result


def test_inline_markdown_with_markers() -> None:
    result = render_inline_with_markers("This is **bold** and *italic*")
    assert result == "This is <strong>**bold**</strong> and <em>*italic*</em>"


def test_bold_italic_combination() -> None:
    assert render_inline("This is ***bold and italic***") == (
        "This is <strong><em>bold and italic</em></strong>"
    )
    assert render_inline_with_markers("***x***") == "<strong><em>***x***</em></strong>"


def test_underscore_forms() -> None:
    assert render_inline("__b__ and _i_") == "<strong>b</strong> and <em>i</em>"
    assert render_inline_with_markers("__b__ and _i_") == (
        "<strong>__b__</strong> and <em>_i_</em>"
    )


def test_strikethrough() -> None:
    assert render_inline("This is ~~strikethrough~~") == "This is <del>strikethrough</del>"
    assert render_inline_with_markers("~~1~~") == "<del>~~1~~</del>"


def test_links() -> None:
    text = "Check out [this link](https://example.com)"
    assert render_inline(text) == 'Check out <a href="https://example.com">this link</a>'
    assert render_inline_with_markers(text) == (
        'Check out <a href="https://example.com">[this link](https://example.com)</a>'
    )


def test_later_rules_see_earlier_output() -> None:
    assert render_inline("**`a`**") == "<strong><code>a</code></strong>"
    assert render_inline_with_markers("**`a`**") == "<strong>**<code>`a`</code>**</strong>"


def test_no_html_escaping() -> None:
    assert render_inline("<b>x</b> & y") == "<b>x</b> & y"


def test_unmatched_markers_are_left_alone() -> None:
    assert render_inline("2 * 3 = 6") == "2 * 3 = 6"
    assert render_inline_with_markers("a ` b") == "a ` b"


def test_markers_and_hidden_share_structure() -> None:
    samples = [
        "a **b** *c* ~~d~~ `e` [f](g) ***h*** __i__ _j_",
        "***x***",
        "**bold** then *it*",
        "~~1~~ `2` **3**",
    ]
    for text in samples:
        hidden = render_inline(text)
        shown = render_inline_with_markers(text)
        assert TAG_RE.findall(hidden) == TAG_RE.findall(shown)
        assert len(shown) > len(hidden)


def test_render_for_mode() -> None:
    assert render_inline_for_mode("*a*", is_editing=False) == "<em>a</em>"
    assert render_inline_for_mode("*a*", is_editing=True) == "<em>*a*</em>"


def test_control_characters_in_input_survive() -> None:
    text = "a\x020\x03b **c**"
    assert render_inline_with_markers(text) == "a\x020\x03b <strong>**c**</strong>"
    assert render_inline_with_markers("\x02\x0210\x03") == "\x02\x0210\x03"
