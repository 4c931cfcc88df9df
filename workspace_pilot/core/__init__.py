"""Ambient infrastructure: settings, logging and error types."""
