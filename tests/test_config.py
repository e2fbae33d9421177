"""Tests for configuration loading."""

import json

from trimwire.config.loader import (
    camel_to_snake,
    convert_keys,
    load_config,
    save_config,
    snake_to_camel,
)
from trimwire.config.schema import DEFAULT_PROTECTED_TOOLS, Config


class TestKeyConversion:
    def test_camel_to_snake(self):
        assert camel_to_snake("pruneNotification") == "prune_notification"
        assert camel_to_snake("enabled") == "enabled"

    def test_snake_to_camel(self):
        assert snake_to_camel("show_summary") == "showSummary"

    def test_nested(self):
        data = {"tools": {"squash": {"showSummary": False}}, "items": [{"fooBar": 1}]}
        assert convert_keys(data) == {
            "tools": {"squash": {"show_summary": False}},
            "items": [{"foo_bar": 1}],
        }


class TestLoadConfig:
    def test_defaults_when_missing(self, tmp_path):
        config = load_config(tmp_path / "missing.json")
        assert config.enabled is True
        assert config.prune_notification == "detailed"
        assert config.notification_type == "chat"
        assert config.nudge.frequency == 10
        assert config.protected_tools == DEFAULT_PROTECTED_TOOLS

    def test_camel_case_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "pruneNotification": "minimal",
            "notificationType": "toast",
            "nudge": {"frequency": 3},
            "strategies": {"pruneTool": {"protectedTools": ["read"]}},
        }))
        config = load_config(path)
        assert config.prune_notification == "minimal"
        assert config.notification_type == "toast"
        assert config.nudge.frequency == 3
        assert config.protected_tools == ["read"]

    def test_invalid_json_falls_back(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        assert load_config(path).prune_notification == "detailed"

    def test_invalid_values_fall_back(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"nudge": {"frequency": 0}}))
        assert load_config(path).nudge.frequency == 10

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("TRIMWIRE_NUDGE__FREQUENCY", "7")
        monkeypatch.setenv("TRIMWIRE_PRUNE_NOTIFICATION", "off")
        config = Config()
        assert config.nudge.frequency == 7
        assert config.prune_notification == "off"

    def test_save_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        config = Config(prune_notification="minimal")
        save_config(config, path)

        raw = json.loads(path.read_text())
        assert raw["pruneNotification"] == "minimal"
        assert "showSummary" in raw["tools"]["squash"]
        assert load_config(path).prune_notification == "minimal"

    def test_state_path_expanded(self):
        config = Config(state_dir="~/trimwire-state")
        assert "~" not in str(config.state_path)
