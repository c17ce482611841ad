"""Tests for configuration loading."""

import json

import pytest
from pydantic import ValidationError

from core.config import CONFIG_ENV_VAR, Config, config_path, load_config


class TestLoadConfig:
    def test_creates_default_when_missing(self, tmp_path):
        path = tmp_path / "nested" / "config.json"

        config = load_config(path)

        assert config == Config()
        assert json.loads(path.read_text())["proxy"]["mount_path"] == "/api/ext/loyalty"

    def test_reads_existing_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "loyalty": {"guid": "g", "api_key": "k", "api_url": {"v2": "https://x/v2"}},
                    "platform": {"name": "static", "static_users": {"t": {"id": 5, "email": "e@x"}}},
                }
            )
        )

        config = load_config(path)

        assert config.loyalty.guid == "g"
        assert config.loyalty.api_url.v2 == "https://x/v2"
        assert config.loyalty.api_url.v1 == "https://loyalty.yotpo.com/api/v1"
        assert config.platform.static_users["t"].id == 5

    def test_backs_up_corrupted_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{broken")

        config = load_config(path)

        assert config == Config()
        assert (tmp_path / "config.json.bak").read_text() == "{broken"

    def test_backs_up_invalid_values(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"proxy": {"port": "not-a-port"}}))

        config = load_config(path)

        assert config.proxy.port == 8080
        assert (tmp_path / "config.json.bak").exists()

    def test_env_override(self, tmp_path, monkeypatch):
        target = tmp_path / "custom.json"
        monkeypatch.setenv(CONFIG_ENV_VAR, str(target))

        assert config_path() == target


def test_config_is_immutable():
    config = Config()

    with pytest.raises(ValidationError):
        config.loyalty.guid = "changed"
