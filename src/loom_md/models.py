"""
Pydantic models for loom-md.

Rendering requests/results, search results and workspace configuration.
"""

from typing import Optional, List, Dict, Any, NamedTuple
from pydantic import BaseModel, ConfigDict, Field, SkipValidation


# ===== RENDERING MODELS =====

class RenderRequest(BaseModel):
    """One line to render, together with the document snapshot it belongs to."""
    model_config = ConfigDict(frozen=True)

    line: str
    line_index: int = Field(ge=0, description="0-based index of `line` in `all_lines`")
    # Borrowed from the caller, never copied: every request of a batch shares one list
    all_lines: SkipValidation[List[str]]
    is_editing: bool = Field(default=False, description="Keep markdown markers visible")

    @classmethod
    def for_line(
        cls,
        all_lines: List[str],
        line_index: int,
        is_editing: bool = False
    ) -> "RenderRequest":
        """Build a request for `all_lines[line_index]`."""
        return cls(
            line=all_lines[line_index],
            line_index=line_index,
            all_lines=all_lines,
            is_editing=is_editing,
        )


class LineRenderResult(BaseModel):
    """HTML fragment for a single line."""
    model_config = ConfigDict(frozen=True)

    html: str
    is_code_block_boundary: bool = False


class BlockState(NamedTuple):
    """Membership of one line in a fenced block. Recomputed on every call."""
    in_block: bool
    is_start: bool
    is_end: bool


# ===== SEARCH MODELS =====

class SearchOptions(BaseModel):
    """Search flags."""
    case_sensitive: bool = False
    whole_word: bool = False
    use_regex: bool = False


class SearchMatch(BaseModel):
    """A single match inside a document."""
    line: int = Field(description="1-based line number")
    column: int = Field(description="1-based column of the first matched character")
    length: int
    text: str
    line_text: str


class FileSearchResult(BaseModel):
    """Matches found in one file."""
    file_path: str
    matches: List[SearchMatch]


class ReplaceResult(BaseModel):
    """Outcome of replace-all."""
    new_content: str
    replaced_count: int


# ===== WORKSPACE CONFIG MODELS =====

class ThemeConfig(BaseModel):
    """Theme file: a named set of CSS variables."""
    name: str
    author: Optional[str] = None
    version: Optional[str] = None
    variables: Dict[str, str] = Field(default_factory=dict)


class AppConfig(BaseModel):
    """Settings stored in .loom/config.json."""
    current_theme: str = "dark"
    status_bar_visible: bool = True
    keybinds: Dict[str, str] = Field(default_factory=dict)
    confirm_file_delete: bool = True
    confirm_folder_delete: bool = True
    custom_settings: Dict[str, Any] = Field(default_factory=dict)
