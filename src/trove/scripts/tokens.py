"""Mint a bearer token for local testing.

Usage::

    python -m trove.scripts.tokens alice --tier premium
"""

import argparse
from datetime import timedelta

from trove.core.settings import settings
from trove.core.tiers import TIER_LIMITS
from trove.services.identity import JwtIdentityVerifier


def mint_token(identity_id: str, tier: str, *, admin: bool = False, minutes: int | None = None) -> str:
    """Return a signed token for `identity_id` using the configured secret key."""
    verifier = JwtIdentityVerifier(settings.secret_key, algorithm=settings.jwt_algorithm)
    ttl = timedelta(minutes=minutes or settings.access_token_expire_minutes)
    return verifier.create_access_token(identity_id, tier=tier, is_admin=admin, expires_delta=ttl)


def main() -> None:
    parser = argparse.ArgumentParser(description="Mint a Trove bearer token")
    parser.add_argument("identity", help="Identity id placed in the `sub` claim")
    parser.add_argument("--tier", choices=sorted(TIER_LIMITS), default="free")
    parser.add_argument("--admin", action="store_true", help="Grant the admin claim")
    parser.add_argument("--minutes", type=int, default=None, help="Token lifetime")
    args = parser.parse_args()

    print(mint_token(args.identity, args.tier, admin=args.admin, minutes=args.minutes))


if __name__ == "__main__":
    main()
