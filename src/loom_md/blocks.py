# -*- coding: utf-8 -*-
"""
Fenced block detection.

Decides, for a single line of a document snapshot, whether the line opens,
closes or lies inside a fenced code block (```) or a fenced math block ($$).
Each query rescans the document from the first line up to the target line,
so the answer depends only on ``all_lines[:line_index + 1]`` and never on
state left over from an earlier call. Classifying every line of an n-line
document therefore costs O(n^2).
"""

from typing import Callable, List, Sequence, Tuple

from loom_md.models import BlockState

CODE_BLOCK = "code"
MATH_BLOCK = "math"

CODE_FENCE = "```"
MATH_FENCE = "$$"


def is_code_fence(line: str) -> bool:
    """True for lines whose trimmed text starts with three backticks."""
    return line.strip().startswith(CODE_FENCE)


def is_math_fence(line: str) -> bool:
    """True for lines whose trimmed text is exactly ``$$``."""
    return line.strip() == MATH_FENCE


def _classify(
    line_index: int,
    all_lines: Sequence[str],
    is_fence: Callable[[str], bool]
) -> BlockState:
    inside = False

    for i, line in enumerate(all_lines):
        if i > line_index:
            break

        if is_fence(line):
            if i == line_index:
                # Boundary line: opens the block if we were outside, closes it otherwise
                return BlockState(in_block=True, is_start=not inside, is_end=inside)
            inside = not inside

    # An unclosed fence keeps every following line inside the block
    return BlockState(in_block=inside, is_start=False, is_end=False)


def classify_code_block(line_index: int, all_lines: Sequence[str]) -> BlockState:
    """
    Classify a line against fenced code blocks.

    Args:
        line_index: 0-based index of the line to classify
        all_lines: Every line of the document, in order

    Returns:
        BlockState(in_block, is_start, is_end)
    """
    return _classify(line_index, all_lines, is_code_fence)


def classify_math_block(line_index: int, all_lines: Sequence[str]) -> BlockState:
    """
    Classify a line against fenced math blocks.

    Args:
        line_index: 0-based index of the line to classify
        all_lines: Every line of the document, in order

    Returns:
        BlockState(in_block, is_start, is_end)
    """
    return _classify(line_index, all_lines, is_math_fence)


def classify_line(line_index: int, all_lines: Sequence[str]) -> Tuple[str, BlockState]:
    """
    Classify a line against both block kinds, code fences first.

    Math fences are only looked at when the line is neither a code fence
    nor inside a code block, so a ``$$`` inside code stays code.

    Returns:
        (kind, state) where kind is "code", "math" or "" for plain lines
    """
    code_state = classify_code_block(line_index, all_lines)
    if code_state.in_block:
        return CODE_BLOCK, code_state

    math_state = classify_math_block(line_index, all_lines)
    if math_state.in_block:
        return MATH_BLOCK, math_state

    return "", math_state


def classify_document(all_lines: List[str]) -> List[Tuple[str, BlockState]]:
    """Classify every line of a document (quadratic, one rescan per line)."""
    return [classify_line(i, all_lines) for i in range(len(all_lines))]
