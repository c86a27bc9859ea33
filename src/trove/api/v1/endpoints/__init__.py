"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .drops import router as drops_router
from .files import router as files_router
from .hunts import router as hunts_router
from .system import router as system_router
from .unlock import router as unlock_router
from .users import router as users_router

__all__ = [
    "unlock_router",
    "drops_router",
    "hunts_router",
    "users_router",
    "files_router",
    "system_router",
    "admin_router",
]
