"""Tests for request logs, redaction and CLI configuration checks."""

import json

from cli import config_problems
from core.config import Config, LoyaltySettings, PlatformSettings
from ui.log_utils import clear_logs, redact_headers, redact_params, write_upstream_log


def test_redact_headers():
    redacted = redact_headers(
        {"x-api-key": "secret-api-key-value", "x-guid": "short", "Accept": "application/json"}
    )

    assert redacted == {"x-api-key": "secret...alue", "x-guid": "***", "Accept": "application/json"}


def test_redact_params_masks_token():
    assert redact_params([("token", "abc"), ("page", "2")]) == [("token", "***"), ("page", "2")]


def test_write_upstream_log_and_clear(tmp_path):
    path = write_upstream_log(
        "actions",
        "v2",
        "POST",
        path="/actions",
        params=[],
        headers={"x-api-key": "secret-api-key-value"},
        body={"type": "purchase"},
        log_root=tmp_path,
    )

    entry = json.loads(path.read_text())
    assert path.parent == tmp_path / "upstream" / "actions"
    assert entry["headers"] == {"x-api-key": "secret...alue"}
    assert entry["body"] == {"type": "purchase"}

    clear_logs(tmp_path)

    assert not (tmp_path / "upstream").exists()


class TestConfigProblems:
    def test_missing_credentials(self):
        problems = config_problems(Config())

        assert len(problems) == 2
        assert "guid" in problems[0]
        assert "api_key" in problems[1]

    def test_unknown_platform(self):
        config = Config(
            loyalty=LoyaltySettings(guid="g", api_key="k"),
            platform=PlatformSettings(name="magento"),
        )

        problems = config_problems(config)

        assert len(problems) == 1
        assert problems[0].startswith("Unknown platform 'magento' (available: ")
        assert "rest" in problems[0]

    def test_valid(self, config):
        assert config_problems(config) == []
