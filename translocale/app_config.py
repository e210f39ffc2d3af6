"""Application configuration for the translocale tooling."""
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from translocale.logging_config import setup_logger

CONFIG_FILE_NAME = 'translocale.yaml'
DEFAULT_BASE_URL = 'https://translocale-server-mnigboo-tayormi.globeapp.dev'
DEFAULT_OUTPUT_DIR = 'lib/l10n'
DEFAULT_LANGUAGES = ['en']


@dataclass
class AppConfig:
    """Application configuration dataclass."""
    project_root: str
    config_file_path: str

    # Server
    api_key: Optional[str]
    base_url: str

    # Output
    languages: List[str]
    output_dir: str

    logger: logging.Logger


def _compute_project_root() -> str:
    """The project is the directory the tool is run from."""
    return os.path.abspath(os.getcwd())


def _load_dotenv_file(project_root: str) -> Optional[str]:
    """Load ``.env`` from the project root, returning its path when found."""
    dotenv_path = os.path.join(project_root, '.env')
    if os.path.exists(dotenv_path):
        load_dotenv(dotenv_path)
        return dotenv_path
    return None


def _resolve_config_path(project_root: str) -> str:
    default_config_path = os.path.join(project_root, CONFIG_FILE_NAME)
    config_file = os.environ.get('TRANSLOCALE_CONFIG_FILE', default_config_path)
    if not os.path.isabs(config_file):
        config_file = os.path.abspath(config_file)
    return config_file


def _load_yaml_config(config_file: str) -> Dict[str, Any]:
    """Load the YAML configuration file; problems are reported and defaults used."""
    config: Dict[str, Any] = {}
    try:
        if not os.path.exists(config_file):
            print(f"Warning: Configuration file '{config_file}' not found. Using default configuration.",
                  file=sys.stderr)
            print("Tip: Create a translocale.yaml file or set the TRANSLOCALE_CONFIG_FILE environment variable.",
                  file=sys.stderr)
            return config

        with open(config_file, 'r', encoding='utf-8') as config_file_stream:
            loaded_config = yaml.safe_load(config_file_stream)
            if loaded_config is None:
                print(f"Warning: Configuration file '{config_file}' is empty. Using default configuration.",
                      file=sys.stderr)
            elif isinstance(loaded_config, dict):
                config = loaded_config
            else:
                print(f"Error: Configuration file '{config_file}' must contain a YAML dictionary. Using defaults.",
                      file=sys.stderr)

    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file '{config_file}': {e}", file=sys.stderr)
        print("Please check your YAML syntax. Using default configuration.", file=sys.stderr)
    except OSError as e:
        print(f"Error: Could not read configuration file '{config_file}': {e}", file=sys.stderr)
        print("Using default configuration.", file=sys.stderr)

    return config


def _setup_logger_from_config(config: Dict[str, Any]) -> logging.Logger:
    """Set up logger based on configuration."""
    log_config = config.get('logging') or {}
    log_level_str = str(log_config.get('log_level', 'INFO')).upper()
    log_file_path = log_config.get('log_file_path')
    log_to_console = log_config.get('log_to_console', True)
    return setup_logger(log_level_str, log_file_path, log_to_console)


def _resolve_api_key(api_config: Dict[str, Any], require_api_key: bool, logger: logging.Logger) -> Optional[str]:
    api_key = os.environ.get('TRANSLOCALE_API_KEY') or api_config.get('key')
    if api_key:
        return str(api_key)
    if require_api_key:
        logger.critical("CRITICAL: No Translocale API key configured.")
        logger.critical("Set 'api.key' in translocale.yaml or the TRANSLOCALE_API_KEY environment variable.")
        sys.exit(1)
    return None


def load_app_config(require_api_key: bool = True) -> AppConfig:
    """
    Load application configuration from the YAML file and environment variables.

    Args:
        require_api_key: Exit with status 1 when no API key can be found.

    Returns:
        AppConfig: The loaded application configuration.
    """
    project_root = _compute_project_root()
    dotenv_path = _load_dotenv_file(project_root)

    config_file = _resolve_config_path(project_root)
    config = _load_yaml_config(config_file)

    logger = _setup_logger_from_config(config)
    if dotenv_path:
        logger.debug("Loaded environment variables from: %s", dotenv_path)

    api_config = config.get('api') or {}
    api_key = _resolve_api_key(api_config, require_api_key, logger)
    base_url = os.environ.get('TRANSLOCALE_BASE_URL') or api_config.get('base_url') or DEFAULT_BASE_URL

    languages = [str(language) for language in config.get('languages') or DEFAULT_LANGUAGES]

    return AppConfig(
        project_root=project_root,
        config_file_path=config_file,
        api_key=api_key,
        base_url=base_url,
        languages=languages,
        output_dir=config.get('output_dir') or DEFAULT_OUTPUT_DIR,
        logger=logger,
    )
