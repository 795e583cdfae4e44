"""Core building blocks: configuration, errors, logging and constants."""
