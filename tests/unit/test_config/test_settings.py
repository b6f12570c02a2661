"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from avswitcher.config.settings import (
    ChannelConfig,
    Settings,
    ViaConfig,
    load_settings,
)


class TestSettings:
    def test_default_settings(self) -> None:
        """Default Settings should be valid."""
        settings = Settings()
        assert settings.server.port == 8014
        assert settings.channel.device_port == 5000
        assert settings.via.port == 9982
        assert settings.logging.level == "INFO"

    def test_channel_config_defaults(self) -> None:
        config = ChannelConfig()
        assert config.welcome_timeout == 3.0
        assert config.response_timeout == 5.0
        assert config.idle_timeout == 10.0
        assert config.read_chunk_size == 128

    def test_via_config_defaults(self) -> None:
        config = ViaConfig()
        assert config.read_welcome is True
        assert config.pooled is False

    def test_invalid_values_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ChannelConfig(idle_timeout=0)
        with pytest.raises(ValidationError):
            ChannelConfig(device_port=70000)

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AVSWITCHER_CHANNEL__DEVICE_PORT", "5001")
        assert Settings().channel.device_port == 5001

    def test_load_settings_missing_file(self, tmp_path: Path) -> None:
        """load_settings with missing file should return defaults."""
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.channel.device_port == 5000

    def test_load_settings_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "avswitcher.yaml"
        path.write_text(
            "channel:\n"
            "  device_port: 5002\n"
            "  idle_timeout: 30\n"
            "via:\n"
            "  pooled: true\n"
        )
        settings = load_settings(path)
        assert settings.channel.device_port == 5002
        assert settings.channel.idle_timeout == 30.0
        assert settings.via.pooled is True
        assert settings.server.port == 8014

    def test_load_settings_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_settings(path).server.host == "0.0.0.0"
