# src/trove/models/__init__.py
"""Persisted records: the SQL document table and the documents stored in it."""

from .access import AccessLogEntry, HuntMembership, RateLimitRecord, UserProfile
from .document import Document
from .drop import DiscoverableDrop, Drop, DropLocation, DropStats, HiddenDrop, HuntDrop
from .report import DropReport

__all__ = [
    "AccessLogEntry", "HuntMembership", "RateLimitRecord", "UserProfile",
    "Document",
    "DiscoverableDrop", "Drop", "DropLocation", "DropStats", "HiddenDrop", "HuntDrop",
    "DropReport",
]
