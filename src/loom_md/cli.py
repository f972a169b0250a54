"""
Command line interface for loom-md.

Usage:
    loom-md render notes.md
    loom-md render notes.md --editing --line 3
    loom-md search "TODO" ./notes
    loom-md replace "Hello" "Hi" notes.md
    loom-md init ./notes
    loom-md theme list -f ./notes
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from loom_md import __version__
from loom_md.batch import build_requests, render_markdown_batch, split_lines
from loom_md.config import BUILTIN_THEMES, ConfigManager, get_theme_without_folder
from loom_md.exceptions import ConfigError, LoomError
from loom_md.models import FileSearchResult, SearchOptions
from loom_md.search import replace_in_content, search_in_content, search_in_directory

console = Console()

logger = logging.getLogger(__name__)


def error(message: str) -> None:
    """Print an error."""
    console.print(f"[red]✗[/red] {escape(message)}")


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[blue]ℹ[/blue] {message}")


def setup_logging(verbose: bool) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def search_options(case_sensitive: bool, whole_word: bool, regex: bool) -> SearchOptions:
    return SearchOptions(case_sensitive=case_sensitive, whole_word=whole_word, use_regex=regex)


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LoomError(f"Failed to read file: {e}", details={"path": str(path)}) from e


def search_flags(func):
    """Shared --case-sensitive / --whole-word / --regex options."""
    func = click.option("--regex", "-r", is_flag=True, help="Treat the query as a regular expression")(func)
    func = click.option("--whole-word", "-w", is_flag=True, help="Match whole words only")(func)
    func = click.option("--case-sensitive", "-c", is_flag=True, help="Case-sensitive search")(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.version_option(__version__, prog_name="loom-md")
@click.pass_context
def main(ctx, verbose: bool):
    """loom-md - line-oriented markdown renderer."""
    ctx.ensure_object(dict)
    setup_logging(verbose)


# ===== RENDER COMMANDS =====

@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--editing", "-e", is_flag=True, help="Keep markdown markers visible")
@click.option("--line", "-l", "line_number", type=int, help="Render only this line (1-based)")
@click.option("--html", "raw_html", is_flag=True, help="Print bare HTML fragments")
def render(file_path: Path, editing: bool, line_number: Optional[int], raw_html: bool):
    """Render a markdown file line by line."""
    try:
        all_lines = split_lines(read_text(file_path))
        
        if line_number is not None:
            if not 1 <= line_number <= len(all_lines):
                error(f"Line {line_number} is out of range (1-{len(all_lines)})")
                sys.exit(1)
            requests = build_requests(all_lines, editing, line_number - 1, line_number)
        else:
            requests = build_requests(all_lines, editing)
        
        results = render_markdown_batch(requests)
        
        if raw_html:
            for result in results:
                click.echo(result.html)
            return
        
        table = Table(title=f"{file_path.name} ({'editing' if editing else 'preview'})")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Fence", width=5)
        table.add_column("HTML")
        
        for request, result in zip(requests, results):
            table.add_row(
                str(request.line_index + 1),
                "⎯" if result.is_code_block_boundary else "",
                escape(result.html),
            )
        
        console.print(table)
        
    except LoomError as e:
        error(e.message)
        sys.exit(1)


# ===== SEARCH COMMANDS =====

@main.command()
@click.argument("query")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@search_flags
def search(query: str, path: Path, case_sensitive: bool, whole_word: bool, regex: bool):
    """Search a markdown file, or every .md file below a directory."""
    options = search_options(case_sensitive, whole_word, regex)
    
    try:
        if path.is_dir():
            file_results = search_in_directory(query, path, options)
        else:
            matches = search_in_content(query, read_text(path), options)
            file_results = [FileSearchResult(file_path=str(path), matches=matches)] if matches else []
    except LoomError as e:
        error(e.message)
        sys.exit(1)
    
    if not file_results:
        info("Nothing found")
        return
    
    table = Table(title=f"Search results: {escape(query)}")
    table.add_column("File", style="cyan")
    table.add_column("Line", justify="right")
    table.add_column("Col", justify="right")
    table.add_column("Text")
    
    total = 0
    for file_result in file_results:
        for m in file_result.matches:
            table.add_row(file_result.file_path, str(m.line), str(m.column), escape(m.line_text.strip()))
            total += 1
    
    console.print(table)
    info(f"{total} match(es) in {len(file_results)} file(s)")


@main.command()
@click.argument("query")
@click.argument("replacement")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@search_flags
@click.option("--dry-run", is_flag=True, help="Only report how many matches would be replaced")
def replace(
    query: str,
    replacement: str,
    file_path: Path,
    case_sensitive: bool,
    whole_word: bool,
    regex: bool,
    dry_run: bool
):
    """Replace every match in a markdown file."""
    options = search_options(case_sensitive, whole_word, regex)
    
    try:
        result = replace_in_content(query, replacement, read_text(file_path), options)
        
        if result.replaced_count and not dry_run:
            file_path.write_text(result.new_content, encoding="utf-8")
            logger.debug(f"Wrote {file_path}")
    except OSError as e:
        error(f"Failed to write file: {e}")
        sys.exit(1)
    except LoomError as e:
        error(e.message)
        sys.exit(1)
    
    if dry_run:
        info(f"{result.replaced_count} match(es) would be replaced")
    else:
        success(f"Replaced {result.replaced_count} match(es)")


# ===== WORKSPACE COMMANDS =====

@main.command()
@click.argument("folder", type=click.Path(file_okay=False, path_type=Path))
def init(folder: Path):
    """Create the .loom workspace directory in FOLDER."""
    try:
        manager = ConfigManager(folder)
        manager.initialize()
        success(f"Workspace ready: [bold]{escape(str(manager.loom_dir))}[/bold]")
    except LoomError as e:
        error(e.message)
        sys.exit(1)


@main.group()
@click.option(
    "--folder", "-f",
    envvar="LOOM_FOLDER",
    type=click.Path(file_okay=False, path_type=Path),
    help="Opened folder (without it only built-in themes are available)"
)
@click.pass_context
def theme(ctx, folder: Optional[Path]):
    """Manage themes."""
    ctx.ensure_object(dict)
    ctx.obj["folder"] = folder


def _manager(ctx) -> Optional[ConfigManager]:
    folder = ctx.obj.get("folder")
    return ConfigManager(folder) if folder else None


def _require_manager(ctx) -> ConfigManager:
    manager = _manager(ctx)
    if manager is None:
        raise ConfigError("No folder given. Use --folder or LOOM_FOLDER")
    return manager


@theme.command("list")
@click.pass_context
def theme_list(ctx):
    """List available themes."""
    try:
        manager = _manager(ctx)
        names = manager.list_themes() if manager else sorted(BUILTIN_THEMES)
        current = manager.get_config().current_theme if manager else None
    except LoomError as e:
        error(e.message)
        sys.exit(1)
    
    if not names:
        info("No themes installed. Run: loom-md init")
        return
    
    table = Table(title="Themes")
    table.add_column("", width=2)
    table.add_column("Name", style="cyan")
    for name in names:
        table.add_row("→" if name == current else "", name)
    console.print(table)


@theme.command("show")
@click.argument("name")
@click.pass_context
def theme_show(ctx, name: str):
    """Show the variables of a theme."""
    try:
        manager = _manager(ctx)
        theme_config = manager.load_theme(name) if manager else get_theme_without_folder(name)
    except LoomError as e:
        error(e.message)
        sys.exit(1)
    
    title = theme_config.name
    if theme_config.author:
        title += f" by {theme_config.author}"
    table = Table(title=escape(title))
    table.add_column("Variable", style="cyan")
    table.add_column("Value")
    for key, value in theme_config.variables.items():
        table.add_row(key, value)
    console.print(table)


@theme.command("set")
@click.argument("name")
@click.pass_context
def theme_set(ctx, name: str):
    """Select the current theme."""
    try:
        _require_manager(ctx).set_theme(name)
        success(f"Theme set to: [bold]{escape(name)}[/bold]")
    except LoomError as e:
        error(e.message)
        sys.exit(1)


@theme.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def theme_import(ctx, source: Path):
    """Import a theme JSON file into the custom themes."""
    try:
        key = _require_manager(ctx).import_theme(source)
        success(f"Imported theme: [bold]{escape(key)}[/bold]")
    except LoomError as e:
        error(e.message)
        sys.exit(1)


@theme.command("export")
@click.argument("name")
@click.argument("dest", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def theme_export(ctx, name: str, dest: Path):
    """Export a theme to a JSON file."""
    try:
        _require_manager(ctx).export_theme(name, dest)
        success(f"Exported {escape(name)} to {escape(str(dest))}")
    except LoomError as e:
        error(e.message)
        sys.exit(1)


if __name__ == "__main__":
    main()
