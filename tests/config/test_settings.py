"""Tests for the settings.conf manager."""

import pytest

from create_react_app.config import Paths, SettingsManager


@pytest.fixture
def manager(tmp_path):
    """Provide a settings manager rooted in a temporary directory."""
    return SettingsManager(tmp_path / "config")


def test_missing_file_writes_defaults(manager):
    """Test that the first load creates settings.conf."""
    settings = manager.load_settings()

    assert manager.settings_file.exists()
    assert settings == SettingsManager.get_default_settings()
    assert settings["network"]["yarn_registry_host"] == "registry.yarnpkg.com"
    assert settings["network"]["timeout_seconds"] == 10


def test_round_trip(manager):
    """Test that saved settings load back unchanged."""
    settings = manager.get_default_settings()
    settings["log_level"] = "DEBUG"
    settings["network"]["timeout_seconds"] = 30
    manager.save_settings(settings)

    assert manager.load_settings() == settings


def test_values_are_normalized(manager):
    """Test that level names are upper-cased."""
    manager.config_dir.mkdir(parents=True)
    manager.settings_file.write_text(
        "[DEFAULT]\nlog_level = debug\n\n[network]\ntimeout_seconds = 5\n"
    )

    settings = manager.load_settings()

    assert settings["log_level"] == "DEBUG"
    assert settings["console_log_level"] == "INFO"
    assert settings["network"]["timeout_seconds"] == 5


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("[DEFAULT]\nlog_level = LOUD\n", "Invalid log_level"),
        ("[network]\ntimeout_seconds = soon\n", "Invalid timeout_seconds"),
        ("not an ini file", "Invalid settings file"),
    ],
)
def test_invalid_files(manager, content, message):
    """Test that bad values raise ValueError."""
    manager.config_dir.mkdir(parents=True)
    manager.settings_file.write_text(content)

    with pytest.raises(ValueError, match=message):
        manager.load_settings()


def test_config_dir_override(monkeypatch, tmp_path):
    """Test the CREATE_REACT_APP_CONFIG_DIR override."""
    monkeypatch.setenv("CREATE_REACT_APP_CONFIG_DIR", str(tmp_path))
    assert Paths.config_dir() == tmp_path
    assert SettingsManager().settings_file == tmp_path / "settings.conf"
