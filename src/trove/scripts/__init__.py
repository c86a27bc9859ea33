"""Operational scripts (``python -m trove.scripts.<name>``)."""
