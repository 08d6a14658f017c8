"""Logging, configuration and error handling helpers."""
