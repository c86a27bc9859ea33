"""Wiring of stores and services from settings.

One `Services` instance is built at startup and kept on ``app.state``;
nothing below reads ambient globals after construction.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncEngine

from trove.core.security import SecretHasher
from trove.core.settings import Settings
from trove.db.session import build_engine, build_sessionmaker, create_tables
from trove.db.time import utcnow
from trove.repositories import (
    AccessLogRepository,
    DropRepository,
    HuntMembershipRepository,
    ReportRepository,
    UserRepository,
)
from trove.services.accounts import AccountService
from trove.services.blobs import BlobStore, LocalBlobStore, MemoryBlobStore
from trove.services.drops import DropService
from trove.services.hunts import HuntService
from trove.services.identity import JwtIdentityVerifier
from trove.services.rate_limit import (
    RateLimitBackend,
    RateLimiter,
    RedisRateLimitBackend,
    StoreRateLimitBackend,
)
from trove.services.reports import ReportService
from trove.services.store import DocumentStore, MemoryDocumentStore, SqlDocumentStore
from trove.services.unlock import UnlockOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything request handlers need, built once per process."""

    settings: Settings
    store: DocumentStore
    blobs: BlobStore
    identity: JwtIdentityVerifier
    rate_limiter: RateLimiter
    unlock: UnlockOrchestrator
    drops: DropService
    hunts: HuntService
    reports: ReportService
    accounts: AccountService
    users: UserRepository
    engine: AsyncEngine | None = None
    rate_limit_backend: RateLimitBackend | None = None

    async def startup(self) -> None:
        if self.engine is not None:
            await create_tables(self.engine)

    async def aclose(self) -> None:
        if isinstance(self.rate_limit_backend, RedisRateLimitBackend):
            await self.rate_limit_backend.close()
        if self.engine is not None:
            await self.engine.dispose()


def build_services(
    config: Settings,
    *,
    store: DocumentStore | None = None,
    blobs: BlobStore | None = None,
    rate_limit_backend: RateLimitBackend | None = None,
    hasher: SecretHasher | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> Services:
    """Build the service graph; explicit collaborators override settings."""
    engine: AsyncEngine | None = None
    if store is None:
        if config.store_backend == "sql":
            engine = build_engine(config.database_url, echo=config.sql_debug)
            store = SqlDocumentStore(build_sessionmaker(engine))
        else:
            store = MemoryDocumentStore()

    if blobs is None:
        if config.blob_backend == "local":
            blobs = LocalBlobStore(
                config.blob_root,
                base_url=config.public_base_url,
                signing_key=config.secret_key,
                algorithm=config.jwt_algorithm,
            )
        else:
            blobs = MemoryBlobStore()

    if rate_limit_backend is None:
        if config.rate_limit_backend == "redis":
            rate_limit_backend = RedisRateLimitBackend.from_url(config.redis_url)
        else:
            rate_limit_backend = StoreRateLimitBackend(store)

    if hasher is None:
        hasher = SecretHasher(
            time_cost=config.argon2_time_cost,
            memory_cost=config.argon2_memory_cost,
            parallelism=config.argon2_parallelism,
        )

    drops = DropRepository(store)
    users = UserRepository(store)
    rate_limiter = RateLimiter(
        rate_limit_backend,
        max_attempts=config.rate_limit_max_attempts,
        window=timedelta(seconds=config.rate_limit_window_seconds),
        clock=clock,
    )
    logger.info(
        "Services built (store=%s, blobs=%s, rate_limit=%s)",
        type(store).__name__,
        type(blobs).__name__,
        type(rate_limit_backend).__name__,
    )
    return Services(
        settings=config,
        store=store,
        blobs=blobs,
        identity=JwtIdentityVerifier(
            config.secret_key,
            algorithm=config.jwt_algorithm,
            default_ttl=timedelta(minutes=config.access_token_expire_minutes),
        ),
        rate_limiter=rate_limiter,
        unlock=UnlockOrchestrator(
            drops=drops,
            access_logs=AccessLogRepository(store),
            users=users,
            blobs=blobs,
            rate_limiter=rate_limiter,
            hasher=hasher,
            signed_url_ttl=timedelta(seconds=config.signed_url_ttl_seconds),
            clock=clock,
        ),
        drops=DropService(drops=drops, users=users, blobs=blobs, hasher=hasher, clock=clock),
        hunts=HuntService(
            drops=drops,
            memberships=HuntMembershipRepository(store),
            clock=clock,
        ),
        reports=ReportService(drops=drops, reports=ReportRepository(store), clock=clock),
        accounts=AccountService(users=users, clock=clock),
        users=users,
        engine=engine,
        rate_limit_backend=rate_limit_backend,
    )
