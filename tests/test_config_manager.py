import pytest

from shareconnect.exceptions import ConfigurationError
from shareconnect.storage.config_manager import ConfigManager


class TestConfigManager:

    def test_missing_file_is_created_with_defaults(self, tmp_path):
        config_file = tmp_path / "sub" / "config.ini"

        settings = ConfigManager(config_file).load_settings()

        assert config_file.is_file()
        assert settings.api_timeout is None
        assert settings.metadata_timeout == 10.0
        assert settings.max_injection_attempts == 30
        assert settings.config_path == str(config_file.parent)

    def test_values_are_read(self, tmp_path):
        config_file = tmp_path / "config.ini"
        config_file.write_text(
            "[settings]\napi_timeout = 15\nmetadata_timeout = 4\n"
            "injection_retry_delay = 0.5\nmax_injection_attempts = 0\n"
            "browser_headless = true\n",
            encoding="utf-8",
        )

        settings = ConfigManager(config_file).load_settings()

        assert settings.api_timeout == 15.0
        assert settings.metadata_timeout == 4.0
        assert settings.injection_retry_delay == 0.5
        assert settings.max_injection_attempts is None
        assert settings.browser_headless is True

    def test_missing_keys_are_migrated(self, tmp_path):
        config_file = tmp_path / "config.ini"
        config_file.write_text("[settings]\nmetadata_timeout = 3\n", encoding="utf-8")

        settings = ConfigManager(config_file).load_settings()
        text = config_file.read_text(encoding="utf-8")

        assert settings.metadata_timeout == 3.0
        assert "injection_retry_delay = 1.0" in text
        assert "max_injection_attempts = 30" in text

    def test_cli_overrides(self, tmp_path):
        settings = ConfigManager(tmp_path / "config.ini").load_settings(
            {"browser_headless": True, "api_timeout": None}
        )
        assert settings.browser_headless is True

    def test_invalid_values(self, tmp_path):
        config_file = tmp_path / "config.ini"
        config_file.write_text("[settings]\nmetadata_timeout = soon\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            ConfigManager(config_file).load_settings()

    def test_failed_validation(self, tmp_path):
        config_file = tmp_path / "config.ini"
        config_file.write_text("[settings]\nmetadata_timeout = -2\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            ConfigManager(config_file).load_settings()
