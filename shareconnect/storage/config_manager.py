"""
Manages loading, validation, and migration of the INI settings file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from shareconnect.exceptions import ConfigurationError
from shareconnect.models.config import AppSettings

log = logging.getLogger(__name__)

SETTINGS_SECTION = "settings"


class ConfigManager:
    """Handles all operations related to the application's `config.ini`."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_settings(self, cli_options: dict[str, Any] | None = None) -> AppSettings:
        """
        Loads settings from the INI file, applies CLI overrides, and validates them.
        A missing file is created with default values.

        Raises:
            ConfigurationError: If the file cannot be parsed or validation fails.
        """
        if not self.config_file_path.is_file():
            log.debug(f"No settings file at '{self.config_file_path}', writing defaults.")
            self.save_settings({})

        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e

        if not self._parser.has_section(SETTINGS_SECTION):
            self._parser.add_section(SETTINGS_SECTION)

        if self._migrate_if_needed():
            log.info(
                "[yellow]Configuration file was updated with new default values."
                "[/yellow]"
            )

        settings_from_file = self._get_settings_as_dict()

        if cli_options:
            settings_from_file.update(
                {k: v for k, v in cli_options.items() if v is not None}
            )

        try:
            config_dir = self.config_file_path.parent
            return AppSettings(**settings_from_file, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_settings(self, settings: dict[str, Any]) -> None:
        """Writes a complete settings file, filling unspecified keys with defaults."""
        config = configparser.ConfigParser(interpolation=None)
        config[SETTINGS_SECTION] = {}
        defaults = AppSettings()

        for key in sorted(AppSettings.get_ini_keys()):
            value = settings.get(key, getattr(defaults, key))
            config[SETTINGS_SECTION][key] = _to_ini(value)

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def _get_settings_as_dict(self) -> dict[str, Any]:
        """Reads the settings section; blank values mean 'use the default'."""
        section = self._parser[SETTINGS_SECTION]
        try:
            values = {
                "api_timeout": _optional(section, section.getfloat, "api_timeout"),
                "metadata_timeout": _optional(section, section.getfloat, "metadata_timeout"),
                "injection_retry_delay": _optional(
                    section, section.getfloat, "injection_retry_delay"
                ),
                "max_injection_attempts": _optional(
                    section, section.getint, "max_injection_attempts"
                ),
                "browser_headless": _optional(
                    section, section.getboolean, "browser_headless"
                ),
            }
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e

        # api_timeout and max_injection_attempts are legitimately empty (None).
        nullable = {"api_timeout", "max_injection_attempts"}
        return {k: v for k, v in values.items() if v is not None or k in nullable}

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing settings file."""
        defaults = AppSettings()
        section = self._parser[SETTINGS_SECTION]
        needs_saving = False

        for key in sorted(AppSettings.get_ini_keys()):
            if key not in section:
                section[key] = _to_ini(getattr(defaults, key))
                needs_saving = True
                log.debug(
                    f"Migrating config: added missing key '{key}' with "
                    f"value '{section[key]}'."
                )

        if needs_saving:
            try:
                with open(self.config_file_path, "w", encoding="utf-8") as f:
                    self._parser.write(f)
            except OSError as e:
                log.error(f"Could not save migrated configuration file: {e}")
                return False

        return needs_saving


def _to_ini(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _optional(section: configparser.SectionProxy, getter, key: str) -> Any:
    if not section.get(key, "").strip():
        return None
    return getter(key)
