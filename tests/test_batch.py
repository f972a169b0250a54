from __future__ import annotations

from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor

import pytest

from loom_md import batch
from loom_md.batch import (
    PARALLEL_THRESHOLD,
    build_requests,
    get_render_executor,
    render_document,
    render_markdown_batch,
    split_lines,
)
from loom_md.renderer import render_markdown_line


class ExplodingExecutor(Executor):
    def map(self, *args, **kwargs):
        raise AssertionError("executor should not be used")


class RecordingExecutor(ThreadPoolExecutor):
    def __init__(self) -> None:
        super().__init__(max_workers=2)
        self.map_calls = 0

    def map(self, *args, **kwargs):
        self.map_calls += 1
        return super().map(*args, **kwargs)


def _document(n: int) -> list:
    base = ["# Title", "```py", "x = 1", "```", "- item", "> quote", "**b**", ""]
    return [base[i % len(base)] for i in range(n)]


@pytest.mark.parametrize("n", [1, PARALLEL_THRESHOLD, PARALLEL_THRESHOLD + 1, 1000])
def test_batch_preserves_order(n: int) -> None:
    requests = build_requests(_document(n))
    results = render_markdown_batch(requests)
    assert results == [render_markdown_line(r) for r in requests]


def test_empty_batch() -> None:
    assert render_markdown_batch([]) == []


def test_small_batch_runs_inline() -> None:
    requests = build_requests(_document(PARALLEL_THRESHOLD))
    results = render_markdown_batch(requests, executor=ExplodingExecutor())
    assert len(results) == PARALLEL_THRESHOLD


def test_large_batch_uses_given_executor() -> None:
    requests = build_requests(_document(PARALLEL_THRESHOLD + 1))
    with RecordingExecutor() as executor:
        results = render_markdown_batch(requests, executor=executor)
        assert executor.map_calls == 1
        # Still usable: the batch does not shut it down
        assert executor.submit(lambda: 1).result() == 1
    assert results == [render_markdown_line(r) for r in requests]


def test_get_render_executor_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOOM_RENDER_USE_PROCESSES", raising=False)
    monkeypatch.delenv("LOOM_RENDER_WORKERS", raising=False)
    monkeypatch.setattr(batch.os, "cpu_count", lambda: 3)
    assert get_render_executor() == (ThreadPoolExecutor, 3)


def test_get_render_executor_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOOM_RENDER_USE_PROCESSES", "TRUE")
    monkeypatch.setenv("LOOM_RENDER_WORKERS", "7")
    assert get_render_executor() == (ProcessPoolExecutor, 7)


def test_get_render_executor_bad_workers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOOM_RENDER_USE_PROCESSES", raising=False)
    monkeypatch.setattr(batch.os, "cpu_count", lambda: None)
    monkeypatch.setenv("LOOM_RENDER_WORKERS", "many")
    assert get_render_executor() == (ThreadPoolExecutor, 4)

    monkeypatch.setenv("LOOM_RENDER_WORKERS", "0")
    assert get_render_executor() == (ThreadPoolExecutor, 1)


def test_split_lines() -> None:
    assert split_lines("") == [""]
    assert split_lines("\n") == [""]
    assert split_lines("a\r\nb\n") == ["a", "b"]
    assert split_lines("a\n\nb") == ["a", "", "b"]


def test_split_lines_keeps_other_separators() -> None:
    assert split_lines("a\x0cb\x1cc\u2028d\re\nf") == ["a\x0cb\x1cc\u2028d\re", "f"]


def test_build_requests_slice() -> None:
    lines = ["a", "b", "c", "d"]
    requests = build_requests(lines, is_editing=True, start=1, stop=3)
    assert [(r.line, r.line_index, r.is_editing) for r in requests] == [
        ("b", 1, True),
        ("c", 2, True),
    ]
    assert all(r.all_lines == lines for r in requests)
    assert len(build_requests(lines, stop=99)) == 4


def test_render_document_from_text() -> None:
    results = render_document("# T\n```\nx\n```")
    assert [r.is_code_block_boundary for r in results] == [False, True, False, True]
    assert results[0].html == '<span class="heading h1">T</span>'


def test_render_document_from_lines_editing() -> None:
    results = render_document(["*a*"], is_editing=True)
    assert [r.html for r in results] == ["<em>*a*</em>"]


def test_requests_share_one_snapshot() -> None:
    lines = ["a"] * 5
    requests = build_requests(lines)
    assert requests[0].all_lines is requests[1].all_lines
    assert requests[4].all_lines is lines


def test_large_batch_in_process_pool(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOOM_RENDER_USE_PROCESSES", "1")
    monkeypatch.setenv("LOOM_RENDER_WORKERS", "2")
    requests = build_requests(_document(PARALLEL_THRESHOLD + 1), is_editing=True)
    results = render_markdown_batch(requests)
    assert results == [render_markdown_line(r) for r in requests]
