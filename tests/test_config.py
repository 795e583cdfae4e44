"""Tests for secrets-fetch configuration models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from secrets_fetch.core.config import ClientConfig, LogConfig, RetryConfig


class TestRetryConfig:
    """Tests for RetryConfig."""

    def test_defaults(self) -> None:
        config = RetryConfig()
        assert config.max_attempts == 5
        assert config.base_delay_seconds == 0.5

    def test_zero_attempts_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RetryConfig(max_attempts=0)

    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RetryConfig(base_delay_seconds=-1)

    def test_zero_delay_allowed(self) -> None:
        assert RetryConfig(base_delay_seconds=0).base_delay_seconds == 0


class TestLogConfig:
    """Tests for LogConfig."""

    def test_defaults(self) -> None:
        config = LogConfig()
        assert config.level == "INFO"
        assert config.format == "console"
        assert config.file_path is None

    def test_both_requires_file_path(self) -> None:
        with pytest.raises(ValidationError, match="file_path is required"):
            LogConfig(format="both")

    def test_both_with_file_path(self, tmp_path: Path) -> None:
        config = LogConfig(format="both", file_path=tmp_path / "client.log")
        assert config.file_path == tmp_path / "client.log"

    def test_invalid_level(self) -> None:
        with pytest.raises(ValidationError):
            LogConfig(level="TRACE")  # type: ignore[arg-type]


class TestClientConfig:
    """Tests for ClientConfig."""

    def test_defaults(self) -> None:
        config = ClientConfig()
        assert config.api_host == "api.doppler.com"
        assert config.timeout_seconds == 30.0
        assert config.retry.max_attempts == 5

    def test_host_with_port_allowed(self) -> None:
        assert ClientConfig(api_host="localhost:8443").api_host == "localhost:8443"

    def test_host_is_stripped(self) -> None:
        assert ClientConfig(api_host="  api.doppler.com ").api_host == "api.doppler.com"

    @pytest.mark.parametrize(
        "host",
        ["", "   ", "https://api.doppler.com", "api.doppler.com/v3"],
        ids=["empty", "blank", "with-scheme", "with-path"],
    )
    def test_invalid_hosts(self, host: str) -> None:
        with pytest.raises(ValidationError):
            ClientConfig(api_host=host)

    def test_non_positive_timeout(self) -> None:
        with pytest.raises(ValidationError):
            ClientConfig(timeout_seconds=0)

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "client.yaml"
        path.write_text(
            "api_host: doppler.example.com\n"
            "timeout_seconds: 5\n"
            "retry:\n"
            "  max_attempts: 2\n"
            "  base_delay_seconds: 0.25\n"
            "logging:\n"
            "  level: DEBUG\n"
            "  format: json\n"
        )

        config = ClientConfig.from_yaml(path)

        assert config.api_host == "doppler.example.com"
        assert config.timeout_seconds == 5
        assert config.retry.max_attempts == 2
        assert config.retry.base_delay_seconds == 0.25
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "json"

    def test_from_empty_yaml_string(self) -> None:
        assert ClientConfig.from_yaml_string("") == ClientConfig()

    def test_from_yaml_string_invalid(self) -> None:
        with pytest.raises(ValidationError):
            ClientConfig.from_yaml_string("retry:\n  max_attempts: 0\n")
