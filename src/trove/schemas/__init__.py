"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import CoordinateIn, ErrorResponse
from .drop import DropCreate, DropLocationView, DropMapItem, DropUpdate, DropView
from .hunt import HintRequest, HintResponse, HuntJoinRequest, HuntJoinResponse
from .unlock import (
    DisambiguationList,
    DropCandidate,
    UnearthRequest,
    UnlockByIdRequest,
    UnlockResult,
)
from .report import ReportCreate, ReportReceipt, ReportReview, ReportView
from .user import AccountView, AdminUpdate, ProfileResponse, ProfileUpdate, TierUpdate

__all__ = [
    "CoordinateIn", "ErrorResponse",
    "DropCreate", "DropUpdate", "DropView", "DropLocationView", "DropMapItem",
    "HuntJoinRequest", "HuntJoinResponse", "HintRequest", "HintResponse",
    "UnearthRequest", "UnlockByIdRequest", "UnlockResult", "DropCandidate", "DisambiguationList",
    "ReportCreate", "ReportReceipt", "ReportReview", "ReportView",
    "ProfileUpdate", "ProfileResponse", "TierUpdate", "AdminUpdate", "AccountView",
]
