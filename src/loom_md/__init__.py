"""
loom-md.

Line-oriented markdown → HTML rendering for editor views.
"""

__version__ = "0.1.0"

from loom_md.models import (
    RenderRequest,
    LineRenderResult,
    BlockState,
    SearchOptions,
    SearchMatch,
    FileSearchResult,
    ReplaceResult,
    ThemeConfig,
    AppConfig,
)
from loom_md.blocks import (
    classify_code_block,
    classify_math_block,
    classify_line,
)
from loom_md.inline import (
    render_inline,
    render_inline_with_markers,
)
from loom_md.renderer import render_markdown_line, render_line
from loom_md.batch import render_markdown_batch, render_document
from loom_md.search import (
    search_in_content,
    replace_in_content,
    search_in_directory,
)
from loom_md.config import ConfigManager, get_config_manager
from loom_md.exceptions import (
    LoomError,
    ConfigError,
    ThemeNotFoundError,
    SearchError,
    SearchPatternError,
)

__all__ = [
    # Models
    "RenderRequest",
    "LineRenderResult",
    "BlockState",
    "SearchOptions",
    "SearchMatch",
    "FileSearchResult",
    "ReplaceResult",
    "ThemeConfig",
    "AppConfig",
    # Rendering
    "classify_code_block",
    "classify_math_block",
    "classify_line",
    "render_inline",
    "render_inline_with_markers",
    "render_markdown_line",
    "render_line",
    "render_markdown_batch",
    "render_document",
    # Search
    "search_in_content",
    "replace_in_content",
    "search_in_directory",
    # Workspace
    "ConfigManager",
    "get_config_manager",
    # Exceptions
    "LoomError",
    "ConfigError",
    "ThemeNotFoundError",
    "SearchError",
    "SearchPatternError",
]
