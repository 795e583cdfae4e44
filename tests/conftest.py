"""Pytest fixtures for secrets-fetch tests."""

import logging
from collections.abc import Generator
from unittest.mock import AsyncMock, patch

import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None, None, None]:
    """Reset logging state before and after each test.

    This ensures test isolation for logging configuration.
    """
    import secrets_fetch.cli as cli_module

    original = (
        cli_module._log_config.level,
        cli_module._log_config.format,
        cli_module._log_config.file,
        cli_module._log_config.explicit,
        cli_module._log_config.configured,
    )

    cli_module._log_config.level = "WARNING"
    cli_module._log_config.format = "console"
    cli_module._log_config.file = None
    cli_module._log_config.explicit = False
    cli_module._log_config.configured = False

    structlog.reset_defaults()

    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level
    for handler in original_handlers:
        root_logger.removeHandler(handler)

    yield

    (
        cli_module._log_config.level,
        cli_module._log_config.format,
        cli_module._log_config.file,
        cli_module._log_config.explicit,
        cli_module._log_config.configured,
    ) = original

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(original_level)
    structlog.reset_defaults()


@pytest.fixture
def mock_sleep() -> Generator[AsyncMock, None, None]:
    """Replace the retry engine's backoff sleep with an instant AsyncMock."""
    with patch("secrets_fetch.execution.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


