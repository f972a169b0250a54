# -*- coding: utf-8 -*-
"""
Batch rendering.

Maps the line renderer over a list of independent requests. Small batches
run in the calling thread; larger ones go through a worker pool. Output
order always matches input order.
"""

import logging
import os
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple, Type, Union

from loom_md.models import LineRenderResult, RenderRequest
from loom_md.renderer import render_markdown_line

logger = logging.getLogger(__name__)

# Batches above this size are fanned out to a pool
PARALLEL_THRESHOLD = 50

_TRUTHY = ("1", "true", "yes")


def get_render_executor() -> Tuple[Type[Executor], int]:
    """
    Executor class and worker count for parallel batches.

    Threads by default. Environment overrides:
    - LOOM_RENDER_USE_PROCESSES=1: use ProcessPoolExecutor instead.
    - LOOM_RENDER_WORKERS=N: number of workers (default: CPU count).
    """
    use_processes = os.getenv("LOOM_RENDER_USE_PROCESSES", "0").lower() in _TRUTHY
    executor_cls = ProcessPoolExecutor if use_processes else ThreadPoolExecutor

    default_workers = os.cpu_count() or 4
    try:
        max_workers = int(os.getenv("LOOM_RENDER_WORKERS", str(default_workers)))
    except ValueError:
        logger.warning("Ignoring non-integer LOOM_RENDER_WORKERS")
        max_workers = default_workers

    return executor_cls, max(1, max_workers)


def render_markdown_batch(
    requests: Sequence[RenderRequest],
    executor: Optional[Executor] = None
) -> List[LineRenderResult]:
    """
    Render many lines at once.

    Args:
        requests: Render requests, each carrying its own document snapshot
        executor: Pool to use for large batches. It is not shut down here.
                  When omitted a pool is created per batch.

    Returns:
        One result per request, in request order
    """
    if len(requests) <= PARALLEL_THRESHOLD:
        return [render_markdown_line(request) for request in requests]

    if executor is not None:
        return list(executor.map(render_markdown_line, requests))

    executor_cls, max_workers = get_render_executor()
    logger.debug(
        f"Rendering {len(requests)} lines with {executor_cls.__name__}({max_workers})"
    )
    # Bigger chunks keep process pools from pickling one request at a time
    chunksize = max(1, len(requests) // (max_workers * 4))
    with executor_cls(max_workers=max_workers) as pool:
        return list(pool.map(render_markdown_line, requests, chunksize=chunksize))


def split_lines(text: str) -> List[str]:
    """
    Split document text into lines the way the editor numbers them.

    Only ``\\n`` and ``\\r\\n`` end a line; form feeds, ``\\u2028`` and the
    other separators ``str.splitlines`` knows stay inside the line. A final
    newline does not open an extra line, and an empty document has one
    empty line.
    """
    lines = text.split("\n")
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def build_requests(
    all_lines: List[str],
    is_editing: bool = False,
    start: int = 0,
    stop: Optional[int] = None
) -> List[RenderRequest]:
    """
    Requests for a slice of a document (for example the visible viewport).

    Args:
        all_lines: Full document snapshot
        is_editing: Editing flag for every request
        start: First line index
        stop: One past the last line index (default: end of document)
    """
    stop = len(all_lines) if stop is None else min(stop, len(all_lines))
    return [
        RenderRequest(
            line=all_lines[i],
            line_index=i,
            all_lines=all_lines,
            is_editing=is_editing,
        )
        for i in range(max(0, start), stop)
    ]


def render_document(
    document: Union[str, List[str]],
    is_editing: bool = False,
    executor: Optional[Executor] = None
) -> List[LineRenderResult]:
    """Render every line of a document given as text or as a list of lines."""
    all_lines = split_lines(document) if isinstance(document, str) else list(document)
    return render_markdown_batch(build_requests(all_lines, is_editing), executor=executor)
