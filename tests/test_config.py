from __future__ import annotations

import json
from pathlib import Path

import pytest

from loom_md import config as config_module
from loom_md.config import (
    BUILTIN_THEMES,
    ConfigManager,
    default_dark_theme,
    default_light_theme,
    get_config_manager,
    get_theme_without_folder,
)
from loom_md.exceptions import ConfigError, ThemeNotFoundError
from loom_md.models import AppConfig


@pytest.fixture
def manager(tmp_path: Path) -> ConfigManager:
    m = ConfigManager(tmp_path)
    m.initialize()
    return m


def test_manager_requires_directory(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        ConfigManager(tmp_path / "missing")

    file_path = tmp_path / "file.md"
    file_path.write_text("x", encoding="utf-8")
    with pytest.raises(ConfigError):
        ConfigManager(file_path)


def test_initialize_creates_tree(manager: ConfigManager) -> None:
    assert manager.config_file.is_file()
    assert manager.plugins_dir.is_dir()
    assert manager.custom_themes_dir.is_dir()
    assert (manager.builtin_themes_dir / "dark.json").is_file()
    assert (manager.builtin_themes_dir / "light.json").is_file()

    data = json.loads(manager.config_file.read_text(encoding="utf-8"))
    assert data["current_theme"] == "dark"
    assert data["status_bar_visible"] is True


def test_initialize_keeps_existing_config(manager: ConfigManager) -> None:
    manager.save(AppConfig(current_theme="light"))
    ConfigManager(manager.folder).initialize()
    assert ConfigManager(manager.folder).load().current_theme == "light"


def test_load_defaults_without_file(tmp_path: Path) -> None:
    assert ConfigManager(tmp_path).load() == AppConfig()


def test_load_malformed_config(manager: ConfigManager) -> None:
    manager.config_file.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError):
        manager.load()


def test_save_and_reload(manager: ConfigManager) -> None:
    config = manager.get_config()
    config.keybinds["save"] = "Ctrl+S"
    config.custom_settings["font_size"] = 14
    manager.save()

    reloaded = ConfigManager(manager.folder).load()
    assert reloaded.keybinds == {"save": "Ctrl+S"}
    assert reloaded.custom_settings == {"font_size": 14}


def test_list_themes(manager: ConfigManager) -> None:
    (manager.custom_themes_dir / "zeta.json").write_text(
        json.dumps({"name": "Zeta"}), encoding="utf-8"
    )
    (manager.custom_themes_dir / "alpha.json").write_text(
        json.dumps({"name": "Alpha"}), encoding="utf-8"
    )
    assert manager.list_themes() == ["dark", "light", "alpha", "zeta"]


def test_load_builtin_theme(manager: ConfigManager) -> None:
    theme = manager.load_theme("dark")
    assert theme == default_dark_theme()
    assert theme.variables["bg-primary"] == "#1e1e1e"


def test_load_missing_theme(manager: ConfigManager) -> None:
    with pytest.raises(ThemeNotFoundError) as excinfo:
        manager.load_theme("nope")
    assert excinfo.value.theme_name == "nope"


def test_set_theme(manager: ConfigManager) -> None:
    manager.set_theme("light")
    assert ConfigManager(manager.folder).load().current_theme == "light"
    assert manager.current_theme().name == "Light"


def test_set_unknown_theme_leaves_config(manager: ConfigManager) -> None:
    with pytest.raises(ThemeNotFoundError):
        manager.set_theme("nope")
    assert manager.load().current_theme == "dark"


def test_import_and_export_theme(manager: ConfigManager, tmp_path: Path) -> None:
    source = tmp_path / "mine.json"
    source.write_text(
        json.dumps({"name": "Solar", "variables": {"bg-primary": "#002b36"}}),
        encoding="utf-8",
    )

    key = manager.import_theme(source)
    assert key == "solar"
    assert "solar" in manager.list_themes()
    assert manager.load_theme("solar").variables == {"bg-primary": "#002b36"}

    dest = tmp_path / "out.json"
    manager.export_theme("solar", dest)
    assert json.loads(dest.read_text(encoding="utf-8"))["name"] == "Solar"


def test_import_invalid_theme(manager: ConfigManager, tmp_path: Path) -> None:
    source = tmp_path / "broken.json"
    source.write_text(json.dumps({"variables": {}}), encoding="utf-8")
    with pytest.raises(ConfigError):
        manager.import_theme(source)

    with pytest.raises(ConfigError):
        manager.import_theme(tmp_path / "missing.json")


def test_builtin_themes_share_variables() -> None:
    assert set(BUILTIN_THEMES) == {"dark", "light"}
    assert set(default_dark_theme().variables) == set(default_light_theme().variables)


def test_get_theme_without_folder() -> None:
    assert get_theme_without_folder("light").name == "Light"
    with pytest.raises(ThemeNotFoundError):
        get_theme_without_folder("solar")


def test_get_config_manager(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(config_module, "_config_manager", None)

    with pytest.raises(ConfigError):
        get_config_manager()

    first = get_config_manager(tmp_path)
    assert get_config_manager() is first
    assert get_config_manager(tmp_path) is first

    other = tmp_path / "other"
    other.mkdir()
    assert get_config_manager(other).folder == other
