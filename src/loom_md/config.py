"""
Workspace configuration and themes.

Settings and themes live in a `.loom` directory inside the opened folder:

    .loom/
        config.json
        themes/built-in/*.json
        themes/custom/*.json
        plugins/
"""

import json
import logging
import shutil
from pathlib import Path
from typing import Optional, List, Dict, Union

from pydantic import ValidationError

from loom_md.exceptions import ConfigError, ThemeNotFoundError
from loom_md.models import AppConfig, ThemeConfig

logger = logging.getLogger(__name__)

# =============================================================================
# BUILT-IN THEMES
# =============================================================================

_DARK_VARIABLES = {
    # Base colors
    "bg-primary": "#1e1e1e",
    "bg-secondary": "#252526",
    "bg-tertiary": "#2d2d30",
    "text-primary": "#d4d4d4",
    "text-secondary": "#858585",
    "border-color": "#3e3e42",
    "accent-color": "#007acc",
    "accent-hover": "#0098ff",
    # Heading colors
    "heading-color": "#4ec9b0",
    "h1-color": "#569cd6",
    "h2-color": "#4ec9b0",
    "h3-color": "#dcdcaa",
    "h4-color": "#9cdcfe",
    "h5-color": "#c586c0",
    "h6-color": "#858585",
    # Syntax colors
    "code-bg": "#1e1e1e",
    "code-color": "#ce9178",
    "link-color": "#3794ff",
    "blockquote-border": "#007acc",
    "blockquote-bg": "#1e1e1e",
    "table-border": "#3e3e42",
    "table-header-bg": "#2d2d30",
    "list-marker": "#569cd6",
    "hr-color": "#3e3e42",
}

_LIGHT_VARIABLES = {
    # Base colors
    "bg-primary": "#ffffff",
    "bg-secondary": "#f3f3f3",
    "bg-tertiary": "#e8e8e8",
    "text-primary": "#1e1e1e",
    "text-secondary": "#6e6e6e",
    "border-color": "#d4d4d4",
    "accent-color": "#007acc",
    "accent-hover": "#005a9e",
    # Heading colors
    "heading-color": "#267f99",
    "h1-color": "#0066cc",
    "h2-color": "#267f99",
    "h3-color": "#795e26",
    "h4-color": "#0066cc",
    "h5-color": "#af00db",
    "h6-color": "#6e6e6e",
    # Syntax colors
    "code-bg": "#f5f5f5",
    "code-color": "#a31515",
    "link-color": "#0066cc",
    "blockquote-border": "#007acc",
    "blockquote-bg": "#f5f5f5",
    "table-border": "#d4d4d4",
    "table-header-bg": "#e8e8e8",
    "list-marker": "#0066cc",
    "hr-color": "#d4d4d4",
}


def default_dark_theme() -> ThemeConfig:
    """Built-in dark theme."""
    return ThemeConfig(name="Dark", author="Loom.md", version="1.0.0", variables=dict(_DARK_VARIABLES))


def default_light_theme() -> ThemeConfig:
    """Built-in light theme."""
    return ThemeConfig(name="Light", author="Loom.md", version="1.0.0", variables=dict(_LIGHT_VARIABLES))


BUILTIN_THEMES = {
    "dark": default_dark_theme,
    "light": default_light_theme,
}


def get_theme_without_folder(theme_name: str) -> ThemeConfig:
    """
    Theme lookup when no folder is open: only built-in themes exist.

    Raises:
        ThemeNotFoundError: for anything but a built-in theme name
    """
    factory = BUILTIN_THEMES.get(theme_name)
    if factory is None:
        raise ThemeNotFoundError(theme_name, details={"reason": "no folder is open"})
    return factory()


def _write_json(path: Path, data: Dict) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def _read_theme(path: Path) -> ThemeConfig:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return ThemeConfig(**json.load(f))
    except (OSError, json.JSONDecodeError, TypeError, ValidationError) as e:
        raise ConfigError(f"Failed to read theme file {path}: {e}", details={"path": str(path)}) from e


class ConfigManager:
    """Configuration of one opened folder."""
    
    LOOM_DIR_NAME = ".loom"
    CONFIG_FILE_NAME = "config.json"
    
    def __init__(self, folder_path: Union[str, Path]):
        """
        Bind the manager to a folder.
        
        Args:
            folder_path: The opened folder; `.loom` lives directly inside it
        
        Raises:
            ConfigError: if the folder does not exist or is not a directory
        """
        folder = Path(folder_path)
        if not folder.exists():
            raise ConfigError(f"Folder does not exist: {folder}")
        if not folder.is_dir():
            raise ConfigError(f"Path is not a directory: {folder}")
        
        self.folder = folder
        self._config: Optional[AppConfig] = None
    
    @property
    def loom_dir(self) -> Path:
        return self.folder / self.LOOM_DIR_NAME
    
    @property
    def config_file(self) -> Path:
        return self.loom_dir / self.CONFIG_FILE_NAME
    
    @property
    def builtin_themes_dir(self) -> Path:
        return self.loom_dir / "themes" / "built-in"
    
    @property
    def custom_themes_dir(self) -> Path:
        return self.loom_dir / "themes" / "custom"
    
    @property
    def plugins_dir(self) -> Path:
        return self.loom_dir / "plugins"
    
    def initialize(self) -> None:
        """
        Create the .loom tree.
        
        Existing config.json and theme files are left untouched.
        """
        for directory in (self.builtin_themes_dir, self.custom_themes_dir, self.plugins_dir):
            directory.mkdir(parents=True, exist_ok=True)
        
        if not self.config_file.exists():
            self.save(AppConfig())
            logger.info(f"Created default config: {self.config_file}")
        
        for key, factory in BUILTIN_THEMES.items():
            theme_path = self.builtin_themes_dir / f"{key}.json"
            if not theme_path.exists():
                _write_json(theme_path, factory().model_dump())
                logger.debug(f"Wrote built-in theme: {theme_path}")
    
    def load(self) -> AppConfig:
        """
        Read config.json.
        
        Returns:
            Stored configuration, or defaults when the file does not exist
        
        Raises:
            ConfigError: if the file cannot be read or parsed
        """
        if not self.config_file.exists():
            self._config = AppConfig()
            return self._config
        
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._config = AppConfig(**data)
        except (OSError, json.JSONDecodeError, TypeError, ValidationError) as e:
            raise ConfigError(
                f"Failed to parse config file: {e}",
                details={"path": str(self.config_file)},
            ) from e
        
        return self._config
    
    def save(self, config: Optional[AppConfig] = None) -> None:
        """
        Write config.json.
        
        Args:
            config: Configuration to store. Defaults to the current one.
        """
        if config is not None:
            self._config = config
        
        if self._config is None:
            return
        
        self.loom_dir.mkdir(parents=True, exist_ok=True)
        _write_json(self.config_file, self._config.model_dump())
    
    def get_config(self) -> AppConfig:
        """Current configuration (loaded on first access)."""
        if self._config is None:
            return self.load()
        return self._config
    
    def set_theme(self, theme_name: str) -> None:
        """
        Switch the current theme.
        
        Raises:
            ThemeNotFoundError: if no such theme is installed
        """
        self.load_theme(theme_name)
        config = self.get_config()
        config.current_theme = theme_name
        self.save(config)
        logger.info(f"Theme changed to: {theme_name}")
    
    # ===== THEME METHODS =====
    
    def load_theme(self, theme_name: str) -> ThemeConfig:
        """
        Load a theme by name, built-in themes first, then custom ones.
        
        Raises:
            ThemeNotFoundError: if neither folder has `<theme_name>.json`
        """
        for directory in (self.builtin_themes_dir, self.custom_themes_dir):
            theme_path = directory / f"{theme_name}.json"
            if theme_path.exists():
                return _read_theme(theme_path)
        
        raise ThemeNotFoundError(theme_name)
    
    def current_theme(self) -> ThemeConfig:
        """Theme selected in config.json."""
        return self.load_theme(self.get_config().current_theme)
    
    def list_themes(self) -> List[str]:
        """
        Names of installed themes.
        
        Returns:
            Built-in theme names followed by custom ones, each group sorted
        """
        themes: List[str] = []
        for directory in (self.builtin_themes_dir, self.custom_themes_dir):
            if directory.exists():
                themes.extend(sorted(p.stem for p in directory.glob("*.json") if p.is_file()))
        return themes
    
    def import_theme(self, source_path: Union[str, Path]) -> str:
        """
        Copy an external theme file into themes/custom.
        
        Args:
            source_path: Theme JSON file to import
        
        Returns:
            Key the theme is stored under (lowercased theme name)
        
        Raises:
            ConfigError: if the file is missing or not a valid theme
        """
        source = Path(source_path)
        if not source.exists():
            raise ConfigError(f"Source theme file does not exist: {source}")
        
        theme = _read_theme(source)
        key = theme.name.lower()
        
        self.custom_themes_dir.mkdir(parents=True, exist_ok=True)
        dest = self.custom_themes_dir / f"{key}.json"
        try:
            shutil.copyfile(source, dest)
        except OSError as e:
            raise ConfigError(f"Failed to import theme: {e}") from e
        
        logger.info(f"Imported theme '{theme.name}' to {dest}")
        return key
    
    def export_theme(self, theme_name: str, dest_path: Union[str, Path]) -> None:
        """
        Write an installed theme to `dest_path` as JSON.
        
        Raises:
            ThemeNotFoundError: if the theme is not installed
            ConfigError: if the destination cannot be written
        """
        theme = self.load_theme(theme_name)
        try:
            _write_json(Path(dest_path), theme.model_dump())
        except OSError as e:
            raise ConfigError(f"Failed to write theme file: {e}") from e
        logger.info(f"Exported theme '{theme_name}' to {dest_path}")


# Global config manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(folder_path: Optional[Union[str, Path]] = None) -> ConfigManager:
    """
    Return the shared ConfigManager.
    
    Args:
        folder_path: Folder to bind to. Passing a folder rebinds the manager.
    
    Raises:
        ConfigError: if no folder has been opened yet
    """
    global _config_manager
    
    if folder_path is not None:
        if _config_manager is None or Path(folder_path) != _config_manager.folder:
            _config_manager = ConfigManager(folder_path)
    elif _config_manager is None:
        raise ConfigError("No folder path provided")
    
    return _config_manager
