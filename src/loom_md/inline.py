# -*- coding: utf-8 -*-
"""
Inline markdown → HTML.

Bold, italic, bold+italic, strikethrough, inline code and links, in two
flavours: markers hidden (preview) and markers kept inside the tags
(editing overlay). No HTML escaping happens here; block interiors must be
escaped by the caller instead of being passed through.
"""

import re
from typing import Dict, List, Pattern, Tuple


# ---------------------------------------------------------------------------
# Placeholder system for re-emitted markers
# ---------------------------------------------------------------------------
# In the with-markers flavour the punctuation written back into the output
# must not be picked up again by a later rule (``<strong>**x**</strong>``
# would otherwise turn into italics). Markers are emitted as placeholders and
# restored once every rule has run.

_MARKER_PH = '\x02%d\x03'

_MARKERS = ['***', '**', '__', '*', '_', '~~', '`', '[', '](', ')']

_MARKER_PLACEHOLDERS: Dict[str, str] = {
    marker: _MARKER_PH % idx for idx, marker in enumerate(_MARKERS)
}

# A literal \x02 in the input gets a placeholder of its own, so user text
# can never spell out a marker placeholder
_LITERAL_STX_PH = _MARKER_PH % len(_MARKERS)


def _ph(marker: str) -> str:
    return _MARKER_PLACEHOLDERS[marker]


def _protect_input(text: str) -> str:
    return text.replace('\x02', _LITERAL_STX_PH)


def _restore_markers(text: str) -> str:
    """Replace marker placeholders with the original punctuation."""
    for marker, placeholder in _MARKER_PLACEHOLDERS.items():
        text = text.replace(placeholder, marker)
    return text.replace(_LITERAL_STX_PH, '\x02')


# ---------------------------------------------------------------------------
# Patterns (compiled once, shared read-only)
# ---------------------------------------------------------------------------

BOLD_ITALIC_RE = re.compile(r'\*\*\*(.+?)\*\*\*')
BOLD_RE = re.compile(r'\*\*(.+?)\*\*')
BOLD_UNDERSCORE_RE = re.compile(r'__(.+?)__')
ITALIC_RE = re.compile(r'\*(.+?)\*')
ITALIC_UNDERSCORE_RE = re.compile(r'_(.+?)_')
STRIKE_RE = re.compile(r'~~(.+?)~~')
CODE_RE = re.compile(r'`([^`]+)`')
LINK_RE = re.compile(r'\[([^\]]+)\]\(([^)]+)\)')

# (pattern, hidden template, with-markers template), applied top to bottom.
# Every rule runs over the output of the rules above it, never over its own.
_INLINE_RULES: List[Tuple[Pattern[str], str, str]] = [
    # Bold + italic must come before bold and italic alone
    (
        BOLD_ITALIC_RE,
        r'<strong><em>\1</em></strong>',
        '<strong><em>' + _ph('***') + r'\1' + _ph('***') + '</em></strong>',
    ),
    # Bold: **text** or __text__
    (BOLD_RE, r'<strong>\1</strong>', '<strong>' + _ph('**') + r'\1' + _ph('**') + '</strong>'),
    (BOLD_UNDERSCORE_RE, r'<strong>\1</strong>', '<strong>' + _ph('__') + r'\1' + _ph('__') + '</strong>'),
    # Italic: *text* or _text_
    (ITALIC_RE, r'<em>\1</em>', '<em>' + _ph('*') + r'\1' + _ph('*') + '</em>'),
    (ITALIC_UNDERSCORE_RE, r'<em>\1</em>', '<em>' + _ph('_') + r'\1' + _ph('_') + '</em>'),
    # Strikethrough: ~~text~~
    (STRIKE_RE, r'<del>\1</del>', '<del>' + _ph('~~') + r'\1' + _ph('~~') + '</del>'),
    # Inline code: `text`
    (CODE_RE, r'<code>\1</code>', '<code>' + _ph('`') + r'\1' + _ph('`') + '</code>'),
    # Links: [text](url)
    (
        LINK_RE,
        r'<a href="\2">\1</a>',
        r'<a href="\2">' + _ph('[') + r'\1' + _ph('](') + r'\2' + _ph(')') + '</a>',
    ),
]


def render_inline(text: str) -> str:
    """Convert inline markdown to HTML, dropping the markdown punctuation."""
    for pattern, hidden, _ in _INLINE_RULES:
        text = pattern.sub(hidden, text)
    return text


def render_inline_with_markers(text: str) -> str:
    """Convert inline markdown to HTML, keeping the punctuation inside the tags."""
    text = _protect_input(text)
    for pattern, _, with_markers in _INLINE_RULES:
        text = pattern.sub(with_markers, text)
    return _restore_markers(text)


def render_inline_for_mode(text: str, is_editing: bool) -> str:
    """Pick the with-markers variant when editing, the hidden one otherwise."""
    if is_editing:
        return render_inline_with_markers(text)
    return render_inline(text)
