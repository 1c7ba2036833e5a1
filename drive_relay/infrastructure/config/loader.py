"""
Configuration loading and saving utilities.

This module provides functionality to load configuration from files and
environment variables.
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import yaml

from .models import ApplicationConfig


class ConfigLoader:
    """Configuration loader supporting YAML/JSON files and environment overrides."""

    def __init__(self, env_prefix: str = "DRIVE_RELAY_") -> None:
        self._env_prefix = env_prefix

    def load_config(self, config_file: Optional[str] = None) -> ApplicationConfig:
        """
        Load configuration from file and environment variables.

        Args:
            config_file: Path to configuration file (optional)

        Returns:
            Loaded and validated configuration
        """
        config_data: Dict[str, Any] = {}

        if config_file:
            config_data = self._load_from_file(config_file)

        env_overrides = self._load_from_environment()
        config_data = self._merge_configs(config_data, env_overrides)

        config = ApplicationConfig.from_dict(config_data)
        config.config_file_path = config_file

        return config

    def save_config(self, config: ApplicationConfig, file_path: str, format: str = "yaml") -> None:
        """
        Save configuration to file.

        Args:
            config: Configuration to save
            file_path: Output file path
            format: File format (yaml or json)
        """
        config_data = config.to_dict()
        config_data.pop("config_file_path", None)

        if format.lower() == "yaml":
            self._save_yaml(config_data, file_path)
        elif format.lower() == "json":
            self._save_json(config_data, file_path)
        else:
            raise ValueError(f"Unsupported format: {format}")

    def _load_from_file(self, file_path: str) -> Dict[str, Any]:
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {file_path}")

        if path.suffix.lower() in ['.yaml', '.yml']:
            return self._load_yaml(file_path)
        elif path.suffix.lower() == '.json':
            return self._load_json(file_path)
        else:
            raise ValueError(
                f"Unsupported configuration file format: {path.suffix}")

    def _load_yaml(self, file_path: str) -> Dict[str, Any]:
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {file_path}: {e}")

    def _load_json(self, file_path: str) -> Dict[str, Any]:
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f)  # type: ignore[no-any-return]
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {file_path}: {e}")

    def _save_yaml(self, data: Dict[str, Any], file_path: str) -> None:
        with open(file_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, default_flow_style=False, indent=2, sort_keys=False)

    def _save_json(self, data: Dict[str, Any], file_path: str) -> None:
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    def _env_mappings(self) -> Dict[str, Tuple[str, Callable[[str], Any]]]:
        p = self._env_prefix
        return {
            f"{p}DEBUG": ("debug", self._parse_bool),
            f"{p}ENVIRONMENT": ("environment", str),
            f"{p}HOST": ("server.host", str),
            f"{p}PORT": ("server.port", int),
            f"{p}UPLOAD_FOLDER_ID": ("drive.parent_folder_id", str),
            f"{p}SINGLE_SHOT_THRESHOLD": ("upload.single_shot_threshold", int),
            f"{p}CHUNK_SIZE": ("upload.chunk_size", int),
            f"{p}MAX_FILE_SIZE": ("upload.max_file_size", int),
            f"{p}SESSION_MAX_AGE": ("upload.session_max_age", int),
            f"{p}RELAY_TIMEOUT": ("upload.relay_timeout", float),
            f"{p}CREDENTIAL_PROVIDER": ("credentials.provider", str),
            f"{p}OAUTH_CLIENT_ID": ("credentials.client_id", str),
            f"{p}OAUTH_CLIENT_SECRET": ("credentials.client_secret", str),
            f"{p}OAUTH_REFRESH_TOKEN": ("credentials.refresh_token", str),
            f"{p}ACCESS_TOKEN": ("credentials.static_token", str),
            f"{p}SHARED_KEY": ("security.shared_secret", str),
            f"{p}ALLOWED_ORIGINS": ("security.allowed_origins", self._parse_list),
            f"{p}LOG_LEVEL": ("logging.level", str),
            f"{p}LOG_DIR": ("logging.log_directory", str),
        }

    def _load_from_environment(self) -> Dict[str, Any]:
        """Load configuration overrides from environment variables."""
        config: Dict[str, Any] = {}

        for env_var, (config_path, converter) in self._env_mappings().items():
            value = os.getenv(env_var)
            if value is not None:
                try:
                    converted_value = converter(value)
                except (ValueError, TypeError) as e:
                    raise ValueError(
                        f"Invalid value for {env_var}: {value} ({e})")
                self._set_nested_value(config, config_path, converted_value)

        return config

    def _parse_bool(self, value: str) -> bool:
        return value.lower() in ('true', '1', 'yes', 'on', 'enabled')

    def _parse_list(self, value: str) -> List[str]:
        return [item.strip() for item in value.split(',') if item.strip()]

    def _set_nested_value(self, config: Dict[str, Any], path: str, value: Any) -> None:
        """Set a nested configuration value using dot notation."""
        keys = path.split('.')
        current = config

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result
