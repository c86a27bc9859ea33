"""Secret phrase digests and network address hashing.

Every secret phrase is normalized and stored as an Argon2id digest; there is
no fast-hash comparison path. Raw network addresses never leave this module:
callers receive a keyed BLAKE3 digest instead.
"""
from __future__ import annotations

import blake3
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from trove.core.settings import settings


def normalize_secret(secret: str) -> str:
    """Return the canonical form of a secret phrase (trimmed, lower-cased)."""
    return secret.strip().lower()


class SecretHasher:
    """Argon2id hashing of normalized secret phrases."""

    def __init__(self, *, time_cost: int, memory_cost: int, parallelism: int) -> None:
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    def hash(self, secret: str) -> str:
        """Return the encoded Argon2id digest of the normalized secret."""
        return self._hasher.hash(normalize_secret(secret))

    def verify(self, secret: str, digest: str) -> bool:
        """Check a secret against a stored digest.

        Args:
            secret: Phrase supplied by the requester.
            digest: Encoded digest stored on the drop.

        Returns:
            True on a match; False on a mismatch or a malformed digest. Never raises.
        """
        if not isinstance(secret, str) or not isinstance(digest, str) or not digest:
            return False
        try:
            return self._hasher.verify(digest, normalize_secret(secret))
        except (VerificationError, InvalidHashError):
            return False


def hash_ip(address: str, salt: str | None = None) -> str:
    """Return a salted digest of a network address.

    Args:
        address: Raw client address as seen by the server.
        salt: Optional salt override; defaults to the configured IP salt.

    Returns:
        Hex-encoded keyed BLAKE3 digest of the address.
    """
    key = blake3.blake3((salt or settings.effective_ip_hash_salt).encode("utf-8")).digest()
    return blake3.blake3(address.encode("utf-8"), key=key).hexdigest()
