"""Execution helpers: the retry engine wrapping every API call."""

from secrets_fetch.execution.retry import compute_backoff_delay, with_retry

__all__ = ["compute_backoff_delay", "with_retry"]
