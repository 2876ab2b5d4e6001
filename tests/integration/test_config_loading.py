"""Integration tests for configuration loading with layered precedence.

Tests the real load_config() function with actual YAML files, environment
variables, and CLI overrides to verify precedence: defaults < YAML < ENV < CLI.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from resolvarr.infrastructure.config.load import load_config

pytestmark = pytest.mark.integration


@pytest.fixture()
def yaml_config(tmp_path: Path) -> Path:
    """Write a minimal YAML config and return its path."""
    config = {
        "app_name": "resolvarr-test",
        "environment": "test",
        "http": {"timeout_seconds": 15.0, "user_agent": "TestAgent/1.0"},
        "logging": {"level": "DEBUG", "format": "console"},
        "resolver": {"hop_budget": 4, "gate_poll_attempts": 3},
        "hosts": {"aggregator": ["host-a"]},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config), encoding="utf-8")
    return path


class TestDefaultsOnly:
    def test_defaults_produce_valid_config(self) -> None:
        config = load_config()
        assert config.app_name == "resolvarr"
        assert config.environment == "dev"
        assert config.log_format == "console"
        assert config.resolver.hop_budget == 3
        assert config.resolver.gate_poll_attempts == 5
        assert config.resolver.gate_poll_interval_seconds == 2.0
        assert config.resolver.gate_wait_padding_seconds == 3.0
        assert config.hosts["hubcloud"] == ["hubcloud", "vcloud"]

    def test_prod_defaults_to_json_logs(self) -> None:
        config = load_config(cli_overrides={"environment": "prod"})
        assert config.log_format == "json"


class TestYamlOverrides:
    def test_yaml_overrides_defaults(self, yaml_config: Path) -> None:
        config = load_config(config_path=yaml_config)
        assert config.app_name == "resolvarr-test"
        assert config.http_timeout_seconds == 15.0
        assert config.http_user_agent == "TestAgent/1.0"
        assert config.log_level == "DEBUG"
        assert config.resolver.hop_budget == 4
        assert config.resolver.gate_poll_attempts == 3
        # Untouched resolver keys keep their defaults.
        assert config.resolver.max_concurrent == 8

    def test_hosts_section_merged_per_family(self, yaml_config: Path) -> None:
        config = load_config(config_path=yaml_config)
        assert config.hosts["aggregator"] == ["host-a"]
        assert config.hosts["gofile"] == ["gofile"]

    def test_unknown_host_family_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"hosts": {"mega": ["mega.nz"]}}), encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(config_path=path)

    def test_invalid_hop_budget_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"resolver": {"hop_budget": 0}}), encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(config_path=path)

    def test_non_mapping_yaml_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(config_path=path)

    def test_yaml_file_not_found_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "nonexistent.yaml")


class TestEnvOverrides:
    def test_env_overrides_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("RESOLVARR_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("RESOLVARR_RESOLVER_HOP_BUDGET", "6")
        monkeypatch.setenv("RESOLVARR_RESOLVER_GOFILE_TOKEN", "acct-token")

        config = load_config(config_path=yaml_config)
        assert config.log_level == "WARNING"
        assert config.resolver.hop_budget == 6
        assert config.resolver.gofile_token == "acct-token"
        assert config.app_name == "resolvarr-test"

    def test_dotenv_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("RESOLVARR_RESOLVER_MAX_CONCURRENT", raising=False)
        dotenv = tmp_path / ".env"
        dotenv.write_text("RESOLVARR_RESOLVER_MAX_CONCURRENT=3\n", encoding="utf-8")

        try:
            config = load_config(dotenv_path=dotenv)
        finally:
            # load_dotenv writes straight into os.environ.
            os.environ.pop("RESOLVARR_RESOLVER_MAX_CONCURRENT", None)
        assert config.resolver.max_concurrent == 3

    def test_dotenv_missing_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(dotenv_path=tmp_path / ".env")


class TestCliOverrides:
    def test_cli_beats_env_and_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("RESOLVARR_RESOLVER_HOP_BUDGET", "6")

        config = load_config(
            config_path=yaml_config,
            cli_overrides={"resolver_hop_budget": 2, "log_level": "ERROR"},
        )
        assert config.resolver.hop_budget == 2
        assert config.log_level == "ERROR"

    def test_cli_overrides_with_sectioned_format(self, yaml_config: Path) -> None:
        config = load_config(
            config_path=yaml_config,
            cli_overrides={"resolver": {"probe_terminal_urls": True}},
        )
        assert config.resolver.probe_terminal_urls is True
        assert config.resolver.hop_budget == 4


class TestSectionedDump:
    def test_round_trips_through_load(self, tmp_path: Path) -> None:
        original = load_config(cli_overrides={"resolver_hop_budget": 5})
        path = tmp_path / "dump.yaml"
        path.write_text(yaml.dump(original.to_sectioned_dict()), encoding="utf-8")

        reloaded = load_config(config_path=path)
        assert reloaded.resolver == original.resolver
        assert reloaded.hosts == original.hosts
