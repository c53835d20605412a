"""Simple YAML configuration loader for Omi Recorder."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from ..exceptions import ConfigurationError
from ..models.recognition import RecognitionConfig

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    'recognition': {
        'language': 'en-US',
        'interim_results': True,
        'continuous': True,
        'contextual_strings': [],
        'max_alternatives': 1,
    },
    'engine': {
        'backend': 'google',
    },
    'google_cloud': {
        'model': 'latest_long',
        'use_enhanced': True,
    },
    'audio': {
        'sample_rate': 16000,
        'chunk_size': 1600,
        'channels': 1,
    },
    'timer': {
        'interval_seconds': 1.0,
    },
    'logging': {
        'level': 'INFO',
        'file_path': 'data/logs/omirecorder.log',
        'console_output': True,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class RecorderConfig:
    """Omi Recorder configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, the built-in
                        defaults are used.
        """
        self.config_file = Path(config_path) if config_path else None

        if self.config_file is None:
            logger.info("No configuration file given, using defaults")
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            return

        if not self.config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        if not loaded:
            raise ConfigurationError("Configuration file is empty")
        if not isinstance(loaded, dict):
            raise ConfigurationError("Configuration file must contain a mapping")

        config = _merge(DEFAULT_CONFIG, loaded)

        # Resolve relative paths
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        for section, key in (('google_cloud', 'credentials_path'),
                             ('logging', 'file_path')):
            path = config.get(section, {}).get(key)
            if path and not os.path.isabs(path):
                config[section][key] = str(config_dir / path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'recognition.language').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'engine.backend')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_recognition_config(self) -> RecognitionConfig:
        """Options handed to the engine on every session start."""
        return RecognitionConfig.from_dict(self.get('recognition', {}))

    def get_google_credentials_path(self) -> Optional[str]:
        """Get Google credentials path.

        Returns None when unset so the client falls back to application
        default credentials.
        """
        creds_path = self.get('google_cloud.credentials_path')
        if not creds_path:
            return None

        creds_file = Path(creds_path)
        if not creds_file.exists():
            raise ConfigurationError(f"Google credentials file not found: {creds_path}")

        return str(creds_file.absolute())

    def get_timer_interval(self) -> float:
        interval = float(self.get('timer.interval_seconds', 1.0))
        if interval <= 0:
            raise ConfigurationError(f"timer.interval_seconds must be positive, got {interval}")
        return interval
