"""Repositories wrapping document store access per entity."""

from .access_repo import AccessLogRepository, HuntMembershipRepository, UserRepository
from .drop_repo import DropRepository
from .report_repo import ReportRepository

__all__ = [
    "AccessLogRepository",
    "DropRepository",
    "HuntMembershipRepository",
    "ReportRepository",
    "UserRepository",
]
