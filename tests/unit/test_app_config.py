"""Unit tests for the app_config module."""
import os
import logging

import pytest
import yaml

from translocale.app_config import (
    DEFAULT_BASE_URL,
    DEFAULT_LANGUAGES,
    DEFAULT_OUTPUT_DIR,
    AppConfig,
    load_app_config,
)


def write_config(directory, config, file_name='translocale.yaml'):
    config_path = os.path.join(str(directory), file_name)
    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(config, f)
    return config_path


class TestAppConfig:
    """Test cases for the AppConfig dataclass."""

    def test_app_config_creation(self):
        config = AppConfig(
            project_root="/test/root",
            config_file_path="/test/root/translocale.yaml",
            api_key="tl_key",
            base_url="https://example.test",
            languages=["en", "es"],
            output_dir="lib/l10n",
            logger=logging.getLogger("translocale"),
        )

        assert config.api_key == "tl_key"
        assert config.languages == ["en", "es"]


class TestLoadAppConfig:
    """Test cases for the load_app_config function."""

    def test_load_config_with_valid_yaml_file(self, clean_environment):
        write_config(clean_environment, {
            "api": {"key": "tl_from_yaml", "base_url": "https://yaml.example.test"},
            "languages": ["de", "fr"],
            "output_dir": "assets/l10n",
            "logging": {"log_level": "DEBUG"},
        })

        config = load_app_config()

        assert config.project_root == str(clean_environment)
        assert config.config_file_path == os.path.join(str(clean_environment), 'translocale.yaml')
        assert config.api_key == "tl_from_yaml"
        assert config.base_url == "https://yaml.example.test"
        assert config.languages == ["de", "fr"]
        assert config.output_dir == "assets/l10n"
        assert config.logger.level == logging.DEBUG

    def test_load_config_with_missing_file_uses_defaults(self, clean_environment, capsys):
        config = load_app_config(require_api_key=False)

        assert config.api_key is None
        assert config.base_url == DEFAULT_BASE_URL
        assert config.languages == DEFAULT_LANGUAGES
        assert config.output_dir == DEFAULT_OUTPUT_DIR
        assert "not found" in capsys.readouterr().err

    def test_invalid_yaml_uses_defaults(self, clean_environment, capsys):
        with open(os.path.join(str(clean_environment), 'translocale.yaml'), 'w', encoding='utf-8') as f:
            f.write("languages: [en\n  bad: :")

        config = load_app_config(require_api_key=False)

        assert config.languages == DEFAULT_LANGUAGES
        assert "Invalid YAML" in capsys.readouterr().err

    def test_non_dictionary_yaml_uses_defaults(self, clean_environment, capsys):
        write_config(clean_environment, ["en", "es"])

        config = load_app_config(require_api_key=False)

        assert config.languages == DEFAULT_LANGUAGES
        assert "YAML dictionary" in capsys.readouterr().err

    def test_load_config_with_environment_overrides(self, clean_environment):
        write_config(clean_environment, {"api": {"key": "tl_from_yaml", "base_url": "https://yaml.example.test"}})
        os.environ['TRANSLOCALE_API_KEY'] = 'tl_from_env'
        os.environ['TRANSLOCALE_BASE_URL'] = 'https://env.example.test'

        config = load_app_config()

        assert config.api_key == 'tl_from_env'
        assert config.base_url == 'https://env.example.test'

    def test_load_config_with_dotenv_file(self, clean_environment):
        with open(os.path.join(str(clean_environment), '.env'), 'w', encoding='utf-8') as f:
            f.write("TRANSLOCALE_API_KEY=tl_from_dotenv\n")

        config = load_app_config()

        assert config.api_key == 'tl_from_dotenv'

    def test_custom_config_file_path(self, clean_environment):
        custom_path = write_config(clean_environment, {"languages": ["ja"]}, file_name='custom.yaml')
        os.environ['TRANSLOCALE_CONFIG_FILE'] = 'custom.yaml'

        config = load_app_config(require_api_key=False)

        assert config.config_file_path == custom_path
        assert config.languages == ["ja"]

    def test_missing_api_key_exits(self, clean_environment):
        write_config(clean_environment, {"languages": ["en"]})

        with pytest.raises(SystemExit) as exc_info:
            load_app_config()

        assert exc_info.value.code == 1

    def test_numeric_language_codes_are_strings(self, clean_environment):
        write_config(clean_environment, {"languages": ["en", 1]})

        config = load_app_config(require_api_key=False)

        assert config.languages == ["en", "1"]
