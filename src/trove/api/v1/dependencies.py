"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from trove.core.security import hash_ip
from trove.services.container import Services
from trove.services.errors import AuthenticationRequiredError
from trove.services.identity import VerifiedIdentity

# HTTP Bearer scheme; credentials are optional on unlock and hint endpoints
bearer_scheme = HTTPBearer(auto_error=False)

UNKNOWN_CLIENT = "unknown"


def get_services(request: Request) -> Services:
    """Return the service container built at startup."""
    return request.app.state.services


ServicesDep = Annotated[Services, Depends(get_services)]


async def get_optional_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    services: ServicesDep,
) -> VerifiedIdentity | None:
    """Resolve the caller's identity if a bearer token was sent.

    Args:
        credentials: HTTP Bearer token credentials, if any
        services: Service container

    Returns:
        The verified identity with stored account settings applied, or None
        for anonymous callers

    Raises:
        AuthenticationRequiredError: If a token was sent but does not verify
    """
    if credentials is None:
        return None
    identity = services.identity.verify(credentials.credentials)
    if identity is None:
        raise AuthenticationRequiredError("Could not validate credentials")
    return await services.accounts.resolve(identity)


OptionalIdentityDep = Annotated[VerifiedIdentity | None, Depends(get_optional_identity)]


def get_current_identity(identity: OptionalIdentityDep) -> VerifiedIdentity:
    """Require an authenticated caller."""
    if identity is None:
        raise AuthenticationRequiredError()
    return identity


CurrentIdentityDep = Annotated[VerifiedIdentity, Depends(get_current_identity)]


def get_client_ip_hash(request: Request, services: ServicesDep) -> str:
    """Return the salted digest of the caller's network address.

    The first ``X-Forwarded-For`` entry is used only when the deployment
    trusts its proxy. The raw address is never returned.
    """
    address = request.client.host if request.client else UNKNOWN_CLIENT
    if services.settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first = forwarded.split(",", 1)[0].strip()
        if first:
            address = first
    return hash_ip(address, services.settings.effective_ip_hash_salt)


ClientIpHashDep = Annotated[str, Depends(get_client_ip_hash)]
