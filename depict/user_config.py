"""
User configuration management for DePict.

Supports configuration from multiple sources (in order of priority):
1. Command-line flags (highest priority)
2. Environment variables
3. User config file (~/.depict/config.json)
4. Default values from config.py (lowest priority)

Example config.json:
{
    "default_radius": 8,
    "default_workers": 4,
    "hash_size": 16,
    "hash_algorithm": "phash",
    "db_filename": "depict.db"
}
"""

import json
import os
from pathlib import Path
from typing import Any, Optional
import logging

from .config import (
    DEFAULT_RADIUS,
    DEFAULT_WORKERS,
    DEFAULT_HASH_SIZE,
    DEFAULT_HASH_ALGORITHM,
    DB_FILENAME,
)

logger = logging.getLogger(__name__)


class UserConfig:
    """
    Manages user configuration from file and environment variables.

    File contents are lazy-loaded and cached.
    """

    _instance: Optional['UserConfig'] = None
    _config_data: Optional[dict] = None

    def __new__(cls):
        """Singleton pattern to ensure one config instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def config_dir(self) -> Path:
        """Get the configuration directory path."""
        env_dir = os.getenv('DEPICT_CONFIG_DIR')
        if env_dir:
            return Path(env_dir)
        return Path.home() / '.depict'

    @property
    def config_file_path(self) -> Path:
        """Get the configuration file path."""
        return self.config_dir / 'config.json'

    def _load_config_file(self) -> dict:
        """Load configuration from JSON file."""
        if not self.config_file_path.exists():
            return {}

        try:
            with open(self.config_file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load config file {self.config_file_path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {self.config_file_path}: expected a JSON object")
            return {}
        logger.debug(f"Loaded configuration from {self.config_file_path}")
        return data

    def _get_config_data(self) -> dict:
        """Get cached config data (lazy loading)."""
        if self._config_data is None:
            self._config_data = self._load_config_file()
        return self._config_data

    def reload(self):
        """Reload configuration from file."""
        self._config_data = None

    def get(self, key: str, default: Any = None, env_var: Optional[str] = None) -> Any:
        """
        Get a configuration value with priority:
        1. Environment variable (if env_var specified)
        2. Config file
        3. Default value

        Args:
            key: Configuration key
            default: Default value if not found
            env_var: Optional environment variable name to check

        Returns:
            Configuration value
        """
        if env_var:
            env_value = os.getenv(env_var)
            if env_value is not None:
                # Try to parse as JSON so numbers come back as numbers
                try:
                    return json.loads(env_value)
                except (json.JSONDecodeError, TypeError):
                    return env_value

        config_data = self._get_config_data()
        if key in config_data:
            return config_data[key]

        return default

    @property
    def default_radius(self) -> Any:
        """Search radius: a preset name or a non-negative integer."""
        return self.get('default_radius', default=DEFAULT_RADIUS, env_var='DEPICT_RADIUS')

    @property
    def default_workers(self) -> int:
        """Number of parallel workers for fingerprinting."""
        return self.get('default_workers', default=DEFAULT_WORKERS, env_var='DEPICT_WORKERS')

    @property
    def hash_size(self) -> int:
        """Perceptual hash size."""
        return self.get('hash_size', default=DEFAULT_HASH_SIZE, env_var='DEPICT_HASH_SIZE')

    @property
    def hash_algorithm(self) -> str:
        """Perceptual hash algorithm."""
        return self.get('hash_algorithm', default=DEFAULT_HASH_ALGORITHM, env_var='DEPICT_HASH_ALGORITHM')

    @property
    def db_filename(self) -> str:
        """Database file name created inside the scanned directory."""
        return self.get('db_filename', default=DB_FILENAME, env_var='DEPICT_DB_FILENAME')

    def create_example_config(self) -> bool:
        """Create an example configuration file."""
        example_config = {
            "_comment": "DePict User Configuration",
            "default_radius": DEFAULT_RADIUS,
            "default_workers": DEFAULT_WORKERS,
            "hash_size": DEFAULT_HASH_SIZE,
            "hash_algorithm": DEFAULT_HASH_ALGORITHM,
            "db_filename": DB_FILENAME,
        }

        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, 'w', encoding='utf-8') as f:
                json.dump(example_config, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to create example config: {e}")
            return False

        logger.info(f"Created example config file at {self.config_file_path}")
        return True


# Global instance
_user_config = UserConfig()


def get_user_config() -> UserConfig:
    """Get the global UserConfig instance."""
    return _user_config
