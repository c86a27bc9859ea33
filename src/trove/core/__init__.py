"""Core primitives: settings, geometry, secrets and tier policy."""
