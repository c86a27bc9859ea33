"""Trove: files buried at a coordinate behind a secret phrase."""

__version__ = "0.1.0"
