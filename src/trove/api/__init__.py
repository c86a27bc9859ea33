"""HTTP API of the Trove service."""
