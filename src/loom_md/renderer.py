# -*- coding: utf-8 -*-
"""
Single-line markdown → HTML.

Every line is rendered on its own from a snapshot of the whole document.
The line is first classified against fenced code and math blocks, then run
through an ordered table of line rules; the first rule that matches renders
the fragment. Nothing here keeps state between calls.
"""

import html
import re
from dataclasses import dataclass
from typing import Any, Callable, List, NamedTuple, Tuple

from loom_md.blocks import CODE_BLOCK, MATH_BLOCK, classify_line
from loom_md.inline import render_inline_for_mode
from loom_md.models import BlockState, LineRenderResult, RenderRequest


# ---------------------------------------------------------------------------
# Block-level patterns
# ---------------------------------------------------------------------------

LANG_RE = re.compile(r'^```(\w+)?')
HR_RE = re.compile(r'^(-{3,}|\*{3,}|_{3,})$')
HEADER_RE = re.compile(r'^(#{1,6})\s+(.+)$')
LIST_RE = re.compile(r'^(\s*)([-*+]|\d+\.)\s+(.+)$')
BLOCKQUOTE_RE = re.compile(r'^>\s*(.+)$')

HR_GLYPHS = '─' * 39
BULLET = '•'
LIST_INDENT_PX = 20


def escape_html(text: str) -> str:
    """Escape &, < and > for text content."""
    return html.escape(text, quote=False)


@dataclass(frozen=True)
class LineContext:
    """What every line rule gets to look at."""
    line: str
    is_editing: bool
    block_kind: str
    block: BlockState

    @property
    def is_boundary(self) -> bool:
        return self.block.is_start or self.block.is_end


def _result(html_fragment: str, boundary: bool = False) -> LineRenderResult:
    return LineRenderResult(html=html_fragment, is_code_block_boundary=boundary)


# ---------------------------------------------------------------------------
# Fenced blocks
# ---------------------------------------------------------------------------

def _is_code_boundary(ctx: LineContext) -> bool:
    return ctx.block_kind == CODE_BLOCK and ctx.is_boundary


def _render_code_boundary(ctx: LineContext, _: Any) -> LineRenderResult:
    fence = ctx.line.strip()
    shown = escape_html(fence) if ctx.is_editing else ''

    if ctx.block.is_start:
        m = LANG_RE.match(fence)
        lang = (m.group(1) or '') if m else ''
        return _result(f'<span class="code-block-start" data-lang="{lang}">{shown}</span>', True)

    return _result(f'<span class="code-block-end">{shown}</span>', True)


def _is_code_interior(ctx: LineContext) -> bool:
    return ctx.block_kind == CODE_BLOCK and not ctx.is_boundary


def _render_code_interior(ctx: LineContext, _: Any) -> LineRenderResult:
    if ctx.is_editing:
        # Plain span while editing: a <code> element would mangle the raw view
        return _result(f'<span class="code-block-line-editing">{escape_html(ctx.line)}</span>')
    return _result(f'<code class="code-block-line">{escape_html(ctx.line)}</code>')


def _is_math_boundary(ctx: LineContext) -> bool:
    return ctx.block_kind == MATH_BLOCK and ctx.is_boundary


def _render_math_boundary(ctx: LineContext, _: Any) -> LineRenderResult:
    shown = escape_html(ctx.line.strip()) if ctx.is_editing else ''
    css_class = 'math-block-start' if ctx.block.is_start else 'math-block-end'
    return _result(f'<span class="{css_class}">{shown}</span>', True)


def _is_math_interior(ctx: LineContext) -> bool:
    return ctx.block_kind == MATH_BLOCK and not ctx.is_boundary


def _render_math_interior(ctx: LineContext, _: Any) -> LineRenderResult:
    # LaTeX is left as-is for the display surface's math typesetter
    if ctx.is_editing:
        return _result(f'<span class="math-block-line-editing">{escape_html(ctx.line)}</span>')
    return _result(f'<span class="math-block-line">{escape_html(ctx.line)}</span>')


# ---------------------------------------------------------------------------
# Plain lines
# ---------------------------------------------------------------------------

def _is_blank(ctx: LineContext) -> bool:
    return not ctx.line.strip()


def _render_blank(ctx: LineContext, _: Any) -> LineRenderResult:
    return _result('<br>')


def _match_hr(ctx: LineContext):
    return HR_RE.match(ctx.line.strip())


def _render_hr(ctx: LineContext, _: Any) -> LineRenderResult:
    if ctx.is_editing:
        return _result(f'<span class="hr">{escape_html(ctx.line)}</span>')
    return _result(f'<span class="hr">{HR_GLYPHS}</span>')


def _match_header(ctx: LineContext):
    return HEADER_RE.match(ctx.line)


def _render_header(ctx: LineContext, m: 're.Match[str]') -> LineRenderResult:
    hashes = m.group(1)
    level = len(hashes)
    text = render_inline_for_mode(m.group(2), ctx.is_editing)

    if ctx.is_editing:
        return _result(f'<span class="heading h{level}">{hashes} {text}</span>')
    return _result(f'<span class="heading h{level}">{text}</span>')


def _match_list_item(ctx: LineContext):
    return LIST_RE.match(ctx.line)


def _render_list_item(ctx: LineContext, m: 're.Match[str]') -> LineRenderResult:
    indent, marker, content = m.group(1), m.group(2), m.group(3)
    text = render_inline_for_mode(content, ctx.is_editing)

    if ctx.is_editing:
        # Keep indentation and marker exactly as typed
        return _result(f'<span class="list-item">{indent}{marker} {text}</span>')

    is_ordered = marker[0].isdigit()
    marker_class = 'ordered' if is_ordered else 'unordered'
    shown_marker = marker if is_ordered else BULLET
    padding = len(indent) * LIST_INDENT_PX
    return _result(
        f'<span class="list-item" style="padding-left: {padding}px">'
        f'<span class="list-marker {marker_class}">{shown_marker}</span>'
        f'{text}'
        f'</span>'
    )


def _match_blockquote(ctx: LineContext):
    return BLOCKQUOTE_RE.match(ctx.line)


def _render_blockquote(ctx: LineContext, m: 're.Match[str]') -> LineRenderResult:
    text = render_inline_for_mode(m.group(1), ctx.is_editing)
    if ctx.is_editing:
        return _result(f'<span class="blockquote">&gt; {text}</span>')
    return _result(f'<span class="blockquote">{text}</span>')


def _render_paragraph(ctx: LineContext, _: Any) -> LineRenderResult:
    return _result(render_inline_for_mode(ctx.line, ctx.is_editing))


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

class LineRule(NamedTuple):
    """A line category: `matches` returns something truthy to claim the line."""
    name: str
    matches: Callable[[LineContext], Any]
    render: Callable[[LineContext, Any], LineRenderResult]


# First match wins, top to bottom
LINE_RULES: Tuple[LineRule, ...] = (
    LineRule('code-boundary', _is_code_boundary, _render_code_boundary),
    LineRule('code-line', _is_code_interior, _render_code_interior),
    LineRule('math-boundary', _is_math_boundary, _render_math_boundary),
    LineRule('math-line', _is_math_interior, _render_math_interior),
    LineRule('blank', _is_blank, _render_blank),
    LineRule('hr', _match_hr, _render_hr),
    LineRule('header', _match_header, _render_header),
    LineRule('list-item', _match_list_item, _render_list_item),
    LineRule('blockquote', _match_blockquote, _render_blockquote),
)

PARAGRAPH_RULE = LineRule('paragraph', lambda ctx: True, _render_paragraph)


def build_context(request: RenderRequest) -> LineContext:
    """Classify the requested line against fenced blocks."""
    kind, state = classify_line(request.line_index, request.all_lines)
    return LineContext(
        line=request.line,
        is_editing=request.is_editing,
        block_kind=kind,
        block=state,
    )


def match_rule(ctx: LineContext) -> Tuple[LineRule, Any]:
    """Return the first rule claiming the line, and what its matcher returned."""
    for rule in LINE_RULES:
        found = rule.matches(ctx)
        if found:
            return rule, found
    return PARAGRAPH_RULE, True


def line_category(request: RenderRequest) -> str:
    """Name of the rule that renders this line ("header", "code-line", ...)."""
    rule, _ = match_rule(build_context(request))
    return rule.name


def render_markdown_line(request: RenderRequest) -> LineRenderResult:
    """
    Render one markdown line to an HTML fragment.

    Args:
        request: Target line, its index, the full document snapshot and
                 the editing flag. `line_index` must be a valid index into
                 `all_lines`; it is not checked here.

    Returns:
        LineRenderResult with the HTML and the fence boundary flag
    """
    ctx = build_context(request)
    rule, found = match_rule(ctx)
    return rule.render(ctx, found)


def render_line(all_lines: List[str], line_index: int, is_editing: bool = False) -> LineRenderResult:
    """Shortcut for ``render_markdown_line(RenderRequest.for_line(...))``."""
    return render_markdown_line(RenderRequest.for_line(all_lines, line_index, is_editing))
