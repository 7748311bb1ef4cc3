"""Ambient infrastructure: configuration, logging and errors."""
