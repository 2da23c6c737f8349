"""Settings manager for the INI configuration file."""

import configparser
import logging
from pathlib import Path

from create_react_app.config.paths import Paths
from create_react_app.constants import (
    CONFIG_VERSION,
    DEFAULT_CONSOLE_LOG_LEVEL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_YARN_REGISTRY_HOST,
    KEY_CONFIG_VERSION,
    KEY_CONSOLE_LOG_LEVEL,
    KEY_LOG_LEVEL,
    KEY_TIMEOUT_SECONDS,
    KEY_YARN_REGISTRY_HOST,
    SECTION_DEFAULT,
    SECTION_NETWORK,
)
from create_react_app.domain.types import NetworkSettings, Settings

logger = logging.getLogger(__name__)

_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_FILE_HEADER = """\
# create-react-app settings
#
# log_level          level written to create-react-app.log
# console_log_level  level printed to the terminal
# yarn_registry_host host probed to decide whether yarn runs offline
# timeout_seconds    connect timeout for archive downloads
"""


class SettingsManager:
    """Manages the settings.conf INI file."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize settings manager.

        Args:
            config_dir: Configuration directory path
                (defaults to Paths.config_dir())

        """
        self.config_dir = config_dir or Paths.config_dir()
        self.settings_file = Paths.settings_file(self.config_dir)

    @staticmethod
    def get_default_settings() -> Settings:
        """Return default settings values."""
        return {
            KEY_CONFIG_VERSION: CONFIG_VERSION,
            KEY_LOG_LEVEL: DEFAULT_LOG_LEVEL,
            KEY_CONSOLE_LOG_LEVEL: DEFAULT_CONSOLE_LOG_LEVEL,
            SECTION_NETWORK: {
                KEY_YARN_REGISTRY_HOST: DEFAULT_YARN_REGISTRY_HOST,
                KEY_TIMEOUT_SECONDS: DEFAULT_TIMEOUT_SECONDS,
            },
        }

    def _create_parser(self) -> configparser.ConfigParser:
        """Create a parser pre-populated with defaults."""
        defaults = self.get_default_settings()
        config = configparser.ConfigParser(
            inline_comment_prefixes=("#", ";"),
            interpolation=None,
        )
        config.read_dict(
            {
                SECTION_DEFAULT: {
                    KEY_CONFIG_VERSION: defaults[KEY_CONFIG_VERSION],
                    KEY_LOG_LEVEL: defaults[KEY_LOG_LEVEL],
                    KEY_CONSOLE_LOG_LEVEL: defaults[KEY_CONSOLE_LOG_LEVEL],
                },
                SECTION_NETWORK: {
                    key: str(value)
                    for key, value in defaults[SECTION_NETWORK].items()
                },
            }
        )
        return config

    def load_settings(self) -> Settings:
        """Load settings, writing a default file if none exists.

        Returns:
            Loaded settings

        Raises:
            ValueError: If the file cannot be parsed or holds invalid values

        """
        config = self._create_parser()

        if self.settings_file.exists():
            try:
                config.read(self.settings_file, encoding="utf-8")
            except configparser.Error as e:
                msg = f"Invalid settings file {self.settings_file}: {e}"
                raise ValueError(msg) from e
        else:
            logger.debug("Creating default settings at %s", self.settings_file)
            self.save_settings(self.get_default_settings())

        return self._convert_to_settings(config)

    def save_settings(self, settings: Settings) -> None:
        """Write settings to settings.conf.

        Args:
            settings: Settings to save

        """
        self.config_dir.mkdir(parents=True, exist_ok=True)
        network = settings[SECTION_NETWORK]
        with self.settings_file.open("w", encoding="utf-8") as f:
            f.write(_FILE_HEADER)
            f.write(f"\n[{SECTION_DEFAULT}]\n")
            f.write(f"{KEY_CONFIG_VERSION} = {settings[KEY_CONFIG_VERSION]}\n")
            f.write(f"{KEY_LOG_LEVEL} = {settings[KEY_LOG_LEVEL]}\n")
            f.write(
                f"{KEY_CONSOLE_LOG_LEVEL} = "
                f"{settings[KEY_CONSOLE_LOG_LEVEL]}\n"
            )
            f.write(f"\n[{SECTION_NETWORK}]\n")
            f.write(
                f"{KEY_YARN_REGISTRY_HOST} = "
                f"{network[KEY_YARN_REGISTRY_HOST]}\n"
            )
            f.write(
                f"{KEY_TIMEOUT_SECONDS} = {network[KEY_TIMEOUT_SECONDS]}\n"
            )

    def _convert_to_settings(
        self, config: configparser.ConfigParser
    ) -> Settings:
        """Convert a parsed INI file into typed settings.

        Raises:
            ValueError: If a level name or the timeout is invalid

        """
        defaults = config[SECTION_DEFAULT]
        log_level = defaults.get(KEY_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper()
        console_level = defaults.get(
            KEY_CONSOLE_LOG_LEVEL, DEFAULT_CONSOLE_LOG_LEVEL
        ).upper()
        for key, level in (
            (KEY_LOG_LEVEL, log_level),
            (KEY_CONSOLE_LOG_LEVEL, console_level),
        ):
            if level not in _VALID_LEVELS:
                msg = f"Invalid {key} '{level}' in {self.settings_file}"
                raise ValueError(msg)

        network_section = config[SECTION_NETWORK]
        try:
            timeout = network_section.getint(
                KEY_TIMEOUT_SECONDS, DEFAULT_TIMEOUT_SECONDS
            )
        except ValueError as e:
            msg = f"Invalid {KEY_TIMEOUT_SECONDS} in {self.settings_file}"
            raise ValueError(msg) from e

        network: NetworkSettings = {
            KEY_YARN_REGISTRY_HOST: network_section.get(
                KEY_YARN_REGISTRY_HOST, DEFAULT_YARN_REGISTRY_HOST
            ).strip(),
            KEY_TIMEOUT_SECONDS: timeout,
        }
        return {
            KEY_CONFIG_VERSION: defaults.get(
                KEY_CONFIG_VERSION, CONFIG_VERSION
            ),
            KEY_LOG_LEVEL: log_level,
            KEY_CONSOLE_LOG_LEVEL: console_level,
            SECTION_NETWORK: network,
        }
