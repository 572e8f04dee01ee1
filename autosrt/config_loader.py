"""Handles loading configuration from YAML files."""

import copy
import yaml
import os
import logging
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    'output_dir': None,
    'ffmpeg_path': None,
    'ffprobe_path': None,
    'audio_channels': 1,
    'audio_sample_rate_hz': None,
    'language_code': 'en-US',
    'cue_duration_ms': 2000,
    'google_credentials_file': None,
    'transcription_timeout_seconds': None,
    'max_attempts': 1,
    'retry_backoff_seconds': 2.0,
    'keep_audio': True,
    'max_workers': 2,
    'log_dir': 'logs',
    'log_file': 'autosrt.log',
}

POSITIVE_INT_KEYS = ('cue_duration_ms', 'max_attempts', 'max_workers', 'audio_channels')

def validate_config(config: dict) -> dict:
    """
    Checks the values the pipeline depends on.

    Raises:
        ConfigurationError: If a value is out of range or of the wrong type.
    """
    for key in POSITIVE_INT_KEYS:
        value = config.get(key)
        if key == 'audio_channels' and value is None:
            continue
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise ConfigurationError(f"'{key}' must be a positive integer, got {value!r}")
    sample_rate = config.get('audio_sample_rate_hz')
    if sample_rate is not None and (not isinstance(sample_rate, int) or isinstance(sample_rate, bool) or sample_rate <= 0):
        raise ConfigurationError(f"'audio_sample_rate_hz' must be a positive integer or null, got {sample_rate!r}")
    backoff = config.get('retry_backoff_seconds')
    if not isinstance(backoff, (int, float)) or isinstance(backoff, bool) or backoff < 0:
        raise ConfigurationError(f"'retry_backoff_seconds' must be a non-negative number, got {backoff!r}")
    timeout = config.get('transcription_timeout_seconds')
    if timeout is not None and (not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0):
        raise ConfigurationError(f"'transcription_timeout_seconds' must be a positive number or null, got {timeout!r}")
    if not config.get('language_code'):
        raise ConfigurationError("'language_code' must not be empty")
    return config

def default_config() -> dict:
    """Returns a fresh copy of the built-in defaults."""
    return copy.deepcopy(DEFAULT_CONFIG)

class ConfigLoader:
    """Loads configuration settings from a YAML file."""

    def load_config(self, config_path: str) -> dict:
        """
        Loads configuration from the specified YAML file path.

        Values from the file are merged over DEFAULT_CONFIG and validated.

        Args:
            config_path: The path to the YAML configuration file.

        Returns:
            A dictionary containing the loaded configuration settings.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML,
                              if there are other reading errors, or if a
                              value is invalid.
        """
        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
            logger.error(f"Configuration path is not a file: {config_path}")
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except IOError as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")

        unknown = sorted(set(loaded) - set(DEFAULT_CONFIG))
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")

        config = default_config()
        config.update({key: value for key, value in loaded.items() if key in DEFAULT_CONFIG})
        validate_config(config)
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config
