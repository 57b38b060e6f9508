#!/usr/bin/env python3
"""
cmdwise Configuration Management
Handles the configuration file, environment variables, and defaults
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional
from .exceptions import ConfigurationError
from .logger import LEVEL_NAMES, logger


class ConfigManager:
    """Manage cmdwise configuration"""

    DEFAULT_CONFIG = {
        "engine": {
            "source_limit": 50,
            "max_results": 20,
            "recent_commands": 10
        },
        "history": {
            "files": ["~/.bash_history", "~/.zsh_history"],
            "max_entries": 1000
        },
        "context": {
            "cache_ttl_seconds": 5,
            "git_timeout_seconds": 0.5
        },
        "learning": {
            "enabled": True,
            "data_directory": "~/.cmdwise/data",
            "save_every": 5
        },
        "logging": {
            "level": "WARNING",
            "directory": "~/.cmdwise/logs"
        }
    }

    # The engine never returns more than 20 results or remembers more than 10 commands
    UPPER_BOUNDS = {
        "engine.max_results": 20,
        "engine.recent_commands": 10,
    }

    ENV_PREFIX = "CMDWISE_"

    def __init__(self, config_file: Optional[Path] = None, environ: Optional[Dict[str, str]] = None):
        self.config_file = Path(config_file) if config_file else Path.home() / ".cmdwise" / "config.json"
        self.config_dir = self.config_file.parent
        self._environ = os.environ if environ is None else environ
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from files and environment"""
        config = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r') as f:
                    file_config = json.load(f)
                if isinstance(file_config, dict):
                    self._deep_merge(config, file_config)
                    logger.debug(f"Loaded configuration from {self.config_file}")
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to load config file: {e}")

        self._load_from_env(config)

        return config

    def _deep_merge(self, base: Dict, overlay: Dict):
        """Deep merge overlay config into base"""
        for key, value in overlay.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _load_from_env(self, config: Dict):
        """Load configuration from environment variables"""
        # Pattern: CMDWISE_SECTION_KEY=value
        for env_key, env_value in self._environ.items():
            if env_key.startswith(self.ENV_PREFIX):
                parts = env_key[len(self.ENV_PREFIX):].lower().split("_", 1)
                if len(parts) == 2:
                    section, key = parts
                    if section in config and isinstance(config[section], dict):
                        config[section][key] = self._parse_env_value(env_value)

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """Parse environment variable value to appropriate type"""
        if value.lower() in ('true', 'yes', 'on'):
            return True
        elif value.lower() in ('false', 'no', 'off'):
            return False
        elif value.isdigit():
            return int(value)
        elif os.pathsep in value:
            return [item for item in value.split(os.pathsep) if item]
        else:
            try:
                return float(value)
            except ValueError:
                return value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value with dot notation

        Args:
            key: Configuration key (e.g., "history.max_entries")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value = self.config
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default
        return value

    def get_path(self, key: str) -> Optional[Path]:
        """Get a configured path with ``~`` expanded"""
        value = self.get(key)
        if not value:
            return None
        return Path(os.path.expanduser(str(value)))

    def set(self, key: str, value: Any):
        """Set configuration value with dot notation"""
        parts = key.split(".")
        config = self.config

        for part in parts[:-1]:
            if not isinstance(config.get(part), dict):
                config[part] = {}
            config = config[part]

        config[parts[-1]] = value
        logger.debug(f"Configuration updated: {key} = {value}")

    def save(self) -> Path:
        """
        Save configuration to file

        Returns:
            Path to saved configuration file
        """
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w') as f:
                json.dump(self.config, f, indent=2)
            logger.info(f"Configuration saved to {self.config_file}")
            return self.config_file
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration: {e}")

    def reset_to_defaults(self):
        """Reset configuration to defaults"""
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        logger.info("Configuration reset to defaults")

    def validate(self):
        """Validate configuration"""
        for key in ("engine.source_limit", "engine.max_results", "engine.recent_commands",
                    "history.max_entries", "learning.save_every"):
            value = self.get(key)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"{key} must be a positive integer", config_key=key)

        for key, ceiling in self.UPPER_BOUNDS.items():
            if self.get(key) > ceiling:
                raise ConfigurationError(f"{key} must be at most {ceiling}", config_key=key)

        level = self.get("logging.level")
        if not isinstance(level, str) or level.upper() not in LEVEL_NAMES:
            raise ConfigurationError(
                f"logging.level must be one of {', '.join(LEVEL_NAMES)}", config_key="logging.level"
            )

        for key in ("context.cache_ttl_seconds", "context.git_timeout_seconds"):
            value = self.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise ConfigurationError(f"{key} must be a non-negative number", config_key=key)

        files = self.get("history.files")
        if isinstance(files, str):
            self.set("history.files", [files])
        elif not isinstance(files, list):
            raise ConfigurationError("history.files must be a list of paths", config_key="history.files")

        logger.debug("Configuration validation passed")

    def to_dict(self) -> Dict[str, Any]:
        """Get entire configuration as dictionary"""
        return copy.deepcopy(self.config)

    def print_config(self, console=None):
        """Print configuration in readable format"""
        from rich.console import Console
        from rich.syntax import Syntax

        console = console or Console()
        config_str = json.dumps(self.config, indent=2)
        syntax = Syntax(config_str, "json", theme="monokai", line_numbers=False)
        console.print(syntax)


# Singleton instance
config = ConfigManager()
