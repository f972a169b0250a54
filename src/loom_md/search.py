# -*- coding: utf-8 -*-
"""
Search and replace over markdown documents.

Works on document text in memory, or on every .md file below a directory.
"""

import logging
import os
import re
from pathlib import Path
from typing import List, Optional, Pattern, Union

from loom_md.batch import split_lines
from loom_md.exceptions import SearchError, SearchPatternError
from loom_md.models import FileSearchResult, ReplaceResult, SearchMatch, SearchOptions

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


def build_pattern(query: str, options: Optional[SearchOptions] = None) -> Pattern[str]:
    """
    Compile the query according to the search flags.

    Args:
        query: Search text, or a regular expression when `use_regex` is set
        options: Search flags (defaults: case-insensitive literal search)

    Returns:
        Compiled pattern

    Raises:
        SearchPatternError: if the query is not a valid regular expression
    """
    options = options or SearchOptions()

    if options.use_regex:
        pattern = query
    elif options.whole_word:
        pattern = rf"\b{re.escape(query)}\b"
    else:
        pattern = re.escape(query)

    flags = 0 if options.case_sensitive else re.IGNORECASE
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise SearchPatternError(query, str(e)) from e


def search_in_content(
    query: str,
    content: str,
    options: Optional[SearchOptions] = None
) -> List[SearchMatch]:
    """
    Find every match of `query` in `content`, line by line.

    Line and column numbers are 1-based. An empty query matches nothing.
    """
    if not query:
        return []

    regex = build_pattern(query, options)
    matches: List[SearchMatch] = []

    for line_num, line in enumerate(split_lines(content), start=1):
        for m in regex.finditer(line):
            if m.start() == m.end():
                continue
            matches.append(SearchMatch(
                line=line_num,
                column=m.start() + 1,
                length=m.end() - m.start(),
                text=m.group(0),
                line_text=line,
            ))

    return matches


def replace_in_content(
    query: str,
    replacement: str,
    content: str,
    options: Optional[SearchOptions] = None
) -> ReplaceResult:
    """
    Replace every match of `query` in `content`.

    The replacement is literal unless `use_regex` is set, in which case
    group references such as ``\\1`` are expanded.

    Raises:
        SearchPatternError: if the query or the regex replacement template is invalid
    """
    if not query:
        return ReplaceResult(new_content=content, replaced_count=0)

    options = options or SearchOptions()
    regex = build_pattern(query, options)

    if options.use_regex:
        try:
            new_content, count = regex.subn(replacement, content)
        except re.error as e:
            raise SearchPatternError(replacement, str(e)) from e
    else:
        new_content, count = regex.subn(lambda _: replacement, content)

    return ReplaceResult(new_content=new_content, replaced_count=count)


def search_in_directory(
    query: str,
    dir_path: Union[str, Path],
    options: Optional[SearchOptions] = None
) -> List[FileSearchResult]:
    """
    Search every markdown file below `dir_path`.

    Symlinked directories are not followed; unreadable files are skipped.

    Returns:
        One entry per file with at least one match, ordered by path

    Raises:
        SearchError: if `dir_path` is not an existing directory
    """
    if not query:
        return []

    root = Path(dir_path)
    if not root.is_dir():
        raise SearchError(f"Directory does not exist: {root}", details={"path": str(root)})

    # Compile once up front so a bad pattern fails before any file is read
    build_pattern(query, options)

    results: List[FileSearchResult] = []

    for current, _dirs, files in os.walk(root, followlinks=False):
        for name in files:
            file_path = Path(current) / name
            if file_path.suffix != MARKDOWN_SUFFIX or not file_path.is_file():
                continue

            try:
                content = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.debug(f"Skipping unreadable file {file_path}: {e}")
                continue

            matches = search_in_content(query, content, options)
            if matches:
                results.append(FileSearchResult(file_path=str(file_path), matches=matches))

    results.sort(key=lambda r: r.file_path)
    logger.debug(f"Search '{query}' in {root}: {len(results)} file(s) matched")
    return results
