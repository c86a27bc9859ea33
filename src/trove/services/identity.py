"""Bearer-token identity verification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from jose import JWTError, jwt

from trove.core.tiers import Tier, normalize_tier
from trove.db.time import utcnow


@dataclass(frozen=True)
class VerifiedIdentity:
    """Identity established by a verified token. Trusted once returned."""

    id: str
    tier: Tier = "free"
    is_admin: bool = False


class JwtIdentityVerifier:
    """Verifies and mints HS256 JWTs carrying `sub`, `tier` and `admin` claims."""

    def __init__(
        self,
        secret_key: str,
        *,
        algorithm: str = "HS256",
        default_ttl: timedelta = timedelta(days=7),
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._default_ttl = default_ttl

    def verify(self, token: str | None) -> VerifiedIdentity | None:
        """Return the identity behind `token`, or None if it does not verify."""
        if not token:
            return None
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError:
            return None
        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            return None
        return VerifiedIdentity(
            id=subject,
            tier=normalize_tier(payload.get("tier")),
            is_admin=bool(payload.get("admin", False)),
        )

    def create_access_token(
        self,
        identity_id: str,
        *,
        tier: str = "free",
        is_admin: bool = False,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Mint a signed token for `identity_id`."""
        claims = {
            "sub": identity_id,
            "tier": normalize_tier(tier),
            "admin": is_admin,
            "exp": utcnow() + (expires_delta or self._default_ttl),
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)
