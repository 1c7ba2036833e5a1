"""
Tests for configuration loader.

This module tests the ConfigLoader class including file loading,
environment variable processing, and configuration merging.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict
from unittest.mock import patch

import pytest
import yaml

from drive_relay.infrastructure.config.loader import ConfigLoader
from drive_relay.infrastructure.config.models import ApplicationConfig


class TestConfigLoader:
    """Test cases for ConfigLoader class."""

    @pytest.fixture
    def config_loader(self) -> ConfigLoader:
        return ConfigLoader()

    @pytest.fixture
    def sample_config_dict(self) -> Dict[str, Any]:
        return {
            "name": "Test Relay",
            "debug": True,
            "environment": "testing",
            "server": {"host": "127.0.0.1", "port": 9000},
            "drive": {"parent_folder_id": "folder-1"},
            "upload": {"chunk_size": 8 * 1024 * 1024, "session_max_age": 600},
            "credentials": {"provider": "static", "static_token": "tok"},
            "security": {"shared_secret": "s3cret", "allowed_origins": ["https://app.example"]},
            "logging": {"level": "DEBUG", "file_enabled": False},
        }

    @pytest.fixture(autouse=True)
    def clean_environment(self):
        with patch.dict(os.environ, {}, clear=False):
            for key in list(os.environ):
                if key.startswith("DRIVE_RELAY_"):
                    del os.environ[key]
            yield

    def test_load_without_file_gives_defaults(self, config_loader: ConfigLoader) -> None:
        config = config_loader.load_config()

        assert config == ApplicationConfig()
        assert config.config_file_path is None

    def test_load_yaml(self, config_loader: ConfigLoader, sample_config_dict, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(sample_config_dict), encoding="utf-8")

        config = config_loader.load_config(str(path))

        assert config.name == "Test Relay"
        assert config.server.port == 9000
        assert config.drive.parent_folder_id == "folder-1"
        assert config.upload.chunk_size == 8 * 1024 * 1024
        assert config.upload.single_shot_threshold == 6 * 1024 * 1024
        assert config.security.allowed_origins == ["https://app.example"]
        assert config.config_file_path == str(path)

    def test_load_json(self, config_loader: ConfigLoader, sample_config_dict, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps(sample_config_dict), encoding="utf-8")

        config = config_loader.load_config(str(path))

        assert config.credentials.provider == "static"
        assert config.credentials.static_token == "tok"

    def test_empty_yaml_file(self, config_loader: ConfigLoader, tmp_path: Path) -> None:
        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")

        assert config_loader.load_config(str(path)).name == "Drive Relay"

    def test_missing_file(self, config_loader: ConfigLoader) -> None:
        with pytest.raises(FileNotFoundError):
            config_loader.load_config("does-not-exist.yaml")

    def test_unsupported_format(self, config_loader: ConfigLoader, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("name = 'x'", encoding="utf-8")

        with pytest.raises(ValueError):
            config_loader.load_config(str(path))

    def test_invalid_yaml(self, config_loader: ConfigLoader, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("server: [unclosed", encoding="utf-8")

        with pytest.raises(ValueError):
            config_loader.load_config(str(path))

    def test_invalid_json(self, config_loader: ConfigLoader, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError):
            config_loader.load_config(str(path))

    def test_environment_overrides(self, config_loader: ConfigLoader, sample_config_dict, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(sample_config_dict), encoding="utf-8")

        env = {
            "DRIVE_RELAY_PORT": "9100",
            "DRIVE_RELAY_UPLOAD_FOLDER_ID": "folder-env",
            "DRIVE_RELAY_SHARED_KEY": "env-secret",
            "DRIVE_RELAY_ALLOWED_ORIGINS": "https://a.example, https://b.example",
            "DRIVE_RELAY_DEBUG": "false",
            "DRIVE_RELAY_RELAY_TIMEOUT": "120.5",
        }
        with patch.dict(os.environ, env):
            config = config_loader.load_config(str(path))

        assert config.server.port == 9100
        assert config.server.host == "127.0.0.1"
        assert config.drive.parent_folder_id == "folder-env"
        assert config.security.shared_secret == "env-secret"
        assert config.security.allowed_origins == ["https://a.example", "https://b.example"]
        assert config.debug is False
        assert config.upload.relay_timeout == 120.5

    def test_oauth_environment_variables(self, config_loader: ConfigLoader) -> None:
        env = {
            "DRIVE_RELAY_OAUTH_CLIENT_ID": "cid",
            "DRIVE_RELAY_OAUTH_CLIENT_SECRET": "csecret",
            "DRIVE_RELAY_OAUTH_REFRESH_TOKEN": "rtoken",
        }
        with patch.dict(os.environ, env):
            config = config_loader.load_config()

        assert config.credentials.client_id == "cid"
        assert config.credentials.client_secret == "csecret"
        assert config.credentials.refresh_token == "rtoken"

    def test_invalid_environment_value(self, config_loader: ConfigLoader) -> None:
        with patch.dict(os.environ, {"DRIVE_RELAY_PORT": "not-a-port"}):
            with pytest.raises(ValueError, match="DRIVE_RELAY_PORT"):
                config_loader.load_config()

    def test_custom_prefix(self) -> None:
        with patch.dict(os.environ, {"RELAY_PORT": "9200"}):
            config = ConfigLoader(env_prefix="RELAY_").load_config()

        assert config.server.port == 9200

    @pytest.mark.parametrize("fmt,suffix", [("yaml", "yaml"), ("json", "json")])
    def test_save_and_reload(self, config_loader: ConfigLoader, tmp_path: Path, fmt: str, suffix: str) -> None:
        original = ApplicationConfig()
        original.server.port = 8123
        original.config_file_path = "ignored.yaml"
        path = tmp_path / f"saved.{suffix}"

        config_loader.save_config(original, str(path), fmt)
        reloaded = config_loader.load_config(str(path))

        assert reloaded.server.port == 8123
        assert "config_file_path" not in path.read_text(encoding="utf-8")

    def test_save_unsupported_format(self, config_loader: ConfigLoader, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            config_loader.save_config(ApplicationConfig(), str(tmp_path / "x.ini"), "ini")

    def test_merge_configs_is_recursive(self, config_loader: ConfigLoader) -> None:
        merged = config_loader._merge_configs(
            {"server": {"host": "a", "port": 1}, "debug": False},
            {"server": {"port": 2}, "debug": True}
        )

        assert merged == {"server": {"host": "a", "port": 2}, "debug": True}
