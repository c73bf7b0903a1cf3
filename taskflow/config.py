"""
Configuration module for TaskFlow

Handles user configuration settings stored in ~/.taskflow/config.json
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "db_path": None,
    "fuzzy_threshold": 60,
    "search_limit": 10,
    "default_sort_by": "created_at",
    "default_sort_order": "desc",
    "log_level": "WARNING",
}


class Config:
    """Configuration manager for TaskFlow."""

    def __init__(self, config_dir: str = None):
        """
        Initialize configuration.

        Args:
            config_dir: Directory for config file (default: ~/.taskflow)
        """
        if config_dir is None:
            # Check for environment variable first, then fall back to default
            env_config_dir = os.environ.get("TASKFLOW_CONFIG_DIR")
            if env_config_dir:
                config_dir = env_config_dir
            else:
                config_dir = os.path.expanduser("~/.taskflow")

        self.config_dir = Path(config_dir)
        self.config_file = self.config_dir / "config.json"
        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file or create default."""
        if not self.config_dir.exists():
            self.config_dir.mkdir(parents=True, exist_ok=True)

        if not self.config_file.exists():
            default_config = dict(DEFAULT_CONFIG)
            self._save_config(default_config)
            return default_config

        try:
            with open(self.config_file, "r") as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            # If config is corrupted, recreate with defaults
            logger.warning("Config file %s is unreadable (%s); recreating defaults", self.config_file, e)
            default_config = dict(DEFAULT_CONFIG)
            self._save_config(default_config)
            return default_config

    def _save_config(self, config: Dict[str, Any]) -> None:
        """Save configuration to file."""
        try:
            with open(self.config_file, "w") as f:
                json.dump(config, f, indent=2)
        except IOError as e:
            logger.warning("Could not write config file %s: %s", self.config_file, e)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Configuration key
            default: Default value if key doesn't exist

        Returns:
            Configuration value
        """
        value = self._config.get(key)
        if value is None:
            return default if default is not None else DEFAULT_CONFIG.get(key)
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            key: Configuration key
            value: Value to set
        """
        self._config[key] = value
        self._save_config(self._config)

    def get_db_path(self) -> str:
        """Get the database path; TASKFLOW_DB_PATH overrides the config file."""
        env_db_path = os.environ.get("TASKFLOW_DB_PATH")
        if env_db_path:
            return env_db_path

        db_path = self.get("db_path")
        if db_path:
            return os.path.expanduser(db_path)
        return str(self.config_dir / "tasks.db")

    def set_db_path(self, db_path: str) -> None:
        self.set("db_path", db_path)

    def get_fuzzy_threshold(self) -> int:
        """Get the minimum score (0-100) for @~ project matches."""
        return int(self.get("fuzzy_threshold", 60))

    def set_fuzzy_threshold(self, threshold: int) -> None:
        """Set the minimum score for @~ project matches."""
        if not 0 <= threshold <= 100:
            raise ValueError(f"Fuzzy threshold must be between 0 and 100: {threshold}")
        self.set("fuzzy_threshold", threshold)

    def get_search_limit(self) -> int:
        """Get how many projects a fuzzy lookup considers first."""
        return int(self.get("search_limit", 10))

    def get_default_sort_by(self) -> str:
        return self.get("default_sort_by", "created_at")

    def get_default_sort_order(self) -> str:
        return self.get("default_sort_order", "desc")

    def get_log_level(self) -> str:
        return str(self.get("log_level", "WARNING")).upper()
