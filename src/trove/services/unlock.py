"""Authorization flow deciding whether a requester may download a drop's files.

One request walks these states:

    validate -> rate limit -> locate -> {not found | disambiguate | single}
    -> expiry -> access scope -> secret -> geofence -> issue

Every terminal outcome of a located (or searched-for) drop writes exactly one
access log entry. Invalid input, throttled requests and disambiguation lists
write none. Throttling runs before any store lookup or digest comparison.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from trove.core.geo import Coordinate, is_valid_coordinate, within_geofence
from trove.core.security import SecretHasher
from trove.db.time import utcnow
from trove.models.access import AccessLogEntry
from trove.models.drop import Drop, RetrievalMode
from trove.repositories import AccessLogRepository, DropRepository, UserRepository
from trove.schemas.unlock import DisambiguationList, DropCandidate, UnlockResult
from trove.services.blobs import BlobStore
from trove.services.errors import (
    GENERIC_NOT_FOUND_MESSAGE,
    ExpiredError,
    ForbiddenError,
    InternalError,
    InvalidInputError,
    LocationRequiredError,
    NotFoundError,
    RateLimitedError,
    TooFarError,
    TroveError,
)
from trove.services.identity import VerifiedIdentity
from trove.services.rate_limit import RateLimiter, rate_limit_key

logger = logging.getLogger(__name__)

DEFAULT_SIGNED_URL_TTL = timedelta(minutes=15)
SUCCESS_REASON = "unlocked"


@dataclass
class _Attempt:
    """What is known about the drop an attempt targets, for the access log."""

    identity: VerifiedIdentity | None
    ip_hash: str
    drop: Drop | None = None
    distance_m: float | None = None

    @property
    def identity_id(self) -> str | None:
        return self.identity.id if self.identity else None

    @property
    def mode(self) -> RetrievalMode:
        return self.drop.retrieval_mode if self.drop is not None else "remote"


class UnlockOrchestrator:
    """Sequences throttling, lookup, gating and issuance for unlock requests."""

    def __init__(
        self,
        *,
        drops: DropRepository,
        access_logs: AccessLogRepository,
        users: UserRepository,
        blobs: BlobStore,
        rate_limiter: RateLimiter,
        hasher: SecretHasher,
        signed_url_ttl: timedelta = DEFAULT_SIGNED_URL_TTL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._drops = drops
        self._access_logs = access_logs
        self._users = users
        self._blobs = blobs
        self._rate_limiter = rate_limiter
        self._hasher = hasher
        self._signed_url_ttl = signed_url_ttl
        self._clock = clock

    async def unlock_by_location(
        self,
        coordinate: Coordinate | None,
        secret: str | None,
        *,
        identity: VerifiedIdentity | None,
        ip_hash: str,
    ) -> UnlockResult | DisambiguationList:
        """Search every drop around `coordinate` that opens with `secret`.

        Returns:
            The unlock result when exactly one drop matches, or the candidate
            list when several do.

        Raises:
            TroveError: Any typed failure; a miss is always `NotFoundError`
                with the generic message, whatever the cause.
        """
        coordinate = self._require_coordinate(coordinate)
        secret = self._require_secret(secret)
        await self._throttle(identity, ip_hash)

        attempt = _Attempt(identity=identity, ip_hash=ip_hash)
        try:
            matches = await self._search(coordinate, secret)
            if not matches:
                raise NotFoundError()
            if len(matches) > 1:
                return await self._disambiguation(matches)

            # The digest was compared during the search; it is not compared twice.
            drop, attempt.distance_m = matches[0]
            attempt.drop = drop
            return await self._authorize(
                drop,
                attempt,
                secret=secret,
                coordinate=coordinate,
                secret_verified=True,
                forbidden_message=GENERIC_NOT_FOUND_MESSAGE,
            )
        except TroveError as err:
            await self._log_failure(attempt, err)
            raise
        except Exception as err:
            raise await self._internal(attempt, err) from err

    async def unlock_by_id(
        self,
        drop_id: str | None,
        secret: str | None,
        *,
        coordinate: Coordinate | None = None,
        identity: VerifiedIdentity | None,
        ip_hash: str,
    ) -> UnlockResult:
        """Unlock a drop named by id; the secret is always verified again.

        Raises:
            TroveError: Any typed failure of the authorization flow.
        """
        if not drop_id or not drop_id.strip():
            raise InvalidInputError("Drop id is required")
        if coordinate is not None:
            coordinate = self._require_coordinate(coordinate)
        secret = self._require_secret(secret)
        await self._throttle(identity, ip_hash)

        attempt = _Attempt(identity=identity, ip_hash=ip_hash)
        try:
            drop = await self._drops.get(drop_id.strip())
            if drop is None:
                raise NotFoundError("Drop not found")
            attempt.drop = drop
            return await self._authorize(
                drop,
                attempt,
                secret=secret,
                coordinate=coordinate,
                secret_verified=False,
                forbidden_message=None,
            )
        except TroveError as err:
            await self._log_failure(attempt, err)
            raise
        except Exception as err:
            raise await self._internal(attempt, err) from err

    @staticmethod
    def _require_coordinate(coordinate: Coordinate | None) -> Coordinate:
        if coordinate is None:
            raise InvalidInputError("Coordinate is required")
        if not is_valid_coordinate(coordinate.lat, coordinate.lng):
            raise InvalidInputError("Coordinate is out of range")
        return coordinate

    @staticmethod
    def _require_secret(secret: str | None) -> str:
        if not isinstance(secret, str) or not secret.strip():
            raise InvalidInputError("Secret phrase is required")
        return secret

    async def _throttle(self, identity: VerifiedIdentity | None, ip_hash: str) -> None:
        key = rate_limit_key(identity.id if identity else None, ip_hash)
        try:
            decision = await self._rate_limiter.check_and_record(key)
        except Exception as err:
            logger.exception("Rate limiter unavailable")
            raise InternalError() from err
        if not decision.allowed:
            retry_after = decision.retry_after.total_seconds() if decision.retry_after else 0.0
            logger.info("Unlock attempt throttled for %s", key.split(":", 1)[0])
            raise RateLimitedError(retry_after_seconds=math.ceil(retry_after))

    async def _search(self, coordinate: Coordinate, secret: str) -> list[tuple[Drop, float]]:
        """Return every drop whose geofence contains `coordinate` and whose digest matches."""
        in_range: list[tuple[Drop, float]] = []
        for drop in await self._drops.list():
            inside, distance = within_geofence(
                coordinate, drop.location.coordinate(), drop.geofence_radius_m
            )
            if inside:
                in_range.append((drop, distance))
        if not in_range:
            return []

        verdicts = await asyncio.gather(
            *(self._verify(secret, drop.secret_digest) for drop, _ in in_range)
        )
        return [match for match, ok in zip(in_range, verdicts, strict=True) if ok]

    async def _verify(self, secret: str, digest: str) -> bool:
        return await asyncio.to_thread(self._hasher.verify, secret, digest)

    async def _disambiguation(self, matches: list[tuple[Drop, float]]) -> DisambiguationList:
        async def _summary(drop: Drop, distance: float) -> DropCandidate:
            files, owner_name = await asyncio.gather(
                self._blobs.list(drop.storage_path),
                self._users.display_name(drop.owner_id),
            )
            return DropCandidate(
                id=drop.id,
                title=drop.title,
                description=drop.description,
                file_count=len(files),
                created_at=drop.created_at,
                owner_display_name=owner_name,
                distance_m=round(distance),
                view_count=drop.stats.view_count,
                unlock_count=drop.stats.unlock_count,
            )

        ordered = sorted(matches, key=lambda match: match[1])
        candidates = await asyncio.gather(*(_summary(drop, distance) for drop, distance in ordered))
        return DisambiguationList(candidates=list(candidates))

    async def _authorize(
        self,
        drop: Drop,
        attempt: _Attempt,
        *,
        secret: str,
        coordinate: Coordinate | None,
        secret_verified: bool,
        forbidden_message: str | None,
    ) -> UnlockResult:
        now = self._clock()

        if drop.is_expired(now):
            raise ExpiredError()

        # Ownership is checked before the digest so a request that can never
        # succeed costs no hash comparison.
        if drop.access_scope == "owner-only" and not drop.is_owned_by(attempt.identity_id):
            raise ForbiddenError(forbidden_message or "This drop can only be unlocked by its owner")

        if not secret_verified and not await self._verify(secret, drop.secret_digest):
            raise ForbiddenError(forbidden_message or "Incorrect secret phrase")

        if coordinate is not None:
            inside, attempt.distance_m = within_geofence(
                coordinate, drop.location.coordinate(), drop.geofence_radius_m
            )
            if not inside:
                raise TooFarError(attempt.distance_m, drop.geofence_radius_m)
        elif drop.retrieval_mode == "physical":
            raise LocationRequiredError()

        result = await self._issue(drop, attempt.distance_m, now)
        await self._record(
            AccessLogEntry(
                drop_id=drop.id,
                identity=attempt.identity_id,
                ip_hash=attempt.ip_hash,
                result="success",
                reason=SUCCESS_REASON,
                distance_m=attempt.distance_m,
                mode=attempt.mode,
                created_at=now,
            )
        )
        return result

    async def _issue(self, drop: Drop, distance_m: float | None, now: datetime) -> UnlockResult:
        files = await self._blobs.list(drop.storage_path)
        urls = await asyncio.gather(
            *(self._blobs.get_signed_read_url(blob.path, self._signed_url_ttl) for blob in files)
        )
        await self._drops.record_unlock(drop.id, now)
        logger.info("Drop %s unlocked (%d files)", drop.id, len(files))
        return UnlockResult(
            drop_id=drop.id,
            title=drop.title,
            description=drop.description,
            file_names=[blob.display_name for blob in files],
            download_urls=list(urls),
            created_at=drop.created_at,
            distance_m=round(distance_m) if distance_m is not None else None,
        )

    async def _log_failure(self, attempt: _Attempt, err: TroveError) -> None:
        await self._record(
            AccessLogEntry(
                drop_id=attempt.drop.id if attempt.drop is not None else None,
                identity=attempt.identity_id,
                ip_hash=attempt.ip_hash,
                result="failure",
                reason=err.kind,
                distance_m=attempt.distance_m,
                mode=attempt.mode,
                created_at=self._clock(),
            )
        )

    async def _internal(self, attempt: _Attempt, err: Exception) -> InternalError:
        drop_id = attempt.drop.id if attempt.drop is not None else None
        logger.exception("Unlock failed unexpectedly (drop=%s)", drop_id)
        internal = InternalError()
        await self._log_failure(attempt, internal)
        return internal

    async def _record(self, entry: AccessLogEntry) -> None:
        try:
            await self._access_logs.append(entry)
        except Exception:
            logger.exception("Failed to write access log entry for drop %s", entry.drop_id)

