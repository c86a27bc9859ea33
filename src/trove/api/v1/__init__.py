"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    drops_router,
    files_router,
    hunts_router,
    system_router,
    unlock_router,
    users_router,
)

__all__ = [
    "unlock_router",
    "drops_router",
    "hunts_router",
    "users_router",
    "files_router",
    "system_router",
    "admin_router",
]
