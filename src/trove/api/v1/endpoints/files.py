"""Signed download endpoint for the filesystem blob store."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Query
from fastapi.responses import FileResponse

from trove.api.v1.dependencies import ServicesDep
from trove.services.blobs import LocalBlobStore
from trove.services.errors import ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


@router.get("/{path:path}")
async def download_file(
    path: str,
    services: ServicesDep,
    token: Annotated[str, Query(min_length=1)],
) -> FileResponse:
    """Stream a blob named by a signed link issued on unlock."""
    blobs = services.blobs
    if not isinstance(blobs, LocalBlobStore):
        raise NotFoundError("File not found")
    try:
        target = blobs.resolve_signed(path, token)
    except PermissionError as err:
        logger.info("Rejected download link for %s: %s", path, err)
        raise ForbiddenError("Download link is invalid or has expired") from err
    except FileNotFoundError as err:
        raise NotFoundError("File not found") from err
    return FileResponse(target, filename=target.name)
