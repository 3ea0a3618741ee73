# src/domains/auth/dependencies.py
import logging
from typing import Optional

import jwt
from fastapi import Depends, Header
from jwt import PyJWKClient

from src.core.settings import settings
from src.shared.exceptions import (
    AuthNotConfiguredError,
    InvalidTokenError,
    NotAuthenticatedError,
)
from src.shared.permissions.models import GlobalRole, OrganizationRole

from .models import Identity
from .types import AccessTokenPayload

logger = logging.getLogger(__name__)

_jwks_client = PyJWKClient(settings.JWKS_URL) if settings.JWKS_URL else None


def _decode_options() -> dict:
    return {"verify_aud": settings.JWT_AUDIENCE is not None}


def decode_access_token(token: str) -> AccessTokenPayload:
    """
    Verifies a JWT access token. Uses JWT_SECRET for development mode if
    available, otherwise falls back to the configured JWKS endpoint.
    """
    # Development mode: prefer JWT_SECRET if available
    if settings.JWT_SECRET:
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET,
                algorithms=[settings.JWT_ALGORITHM],
                audience=settings.JWT_AUDIENCE,
                options=_decode_options(),
            )
            return AccessTokenPayload(**dict(payload))
        except jwt.PyJWTError:
            raise InvalidTokenError("Invalid or expired token")

    # Production mode: use JWKS
    if not _jwks_client:
        raise AuthNotConfiguredError()
    try:
        signing_key = _jwks_client.get_signing_key_from_jwt(token).key
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=["RS256"],
            audience=settings.JWT_AUDIENCE,
            options=_decode_options(),
        )
        return AccessTokenPayload(**dict(payload))
    except jwt.PyJWTError:
        raise InvalidTokenError("Invalid or expired token")


def identity_from_payload(payload: AccessTokenPayload) -> Identity:
    """
    Build the caller identity from token claims.

    Role names the application does not know are dropped, so they can never
    grant anything.
    """
    if not payload.sub:
        raise InvalidTokenError("Token has no subject")

    global_roles = set()
    for name in payload.global_roles:
        try:
            global_roles.add(GlobalRole(name))
        except ValueError:
            logger.warning("Ignoring unknown global role %r for %s", name, payload.sub)

    organization_role = None
    if payload.organization_id and payload.organization_role:
        try:
            organization_role = OrganizationRole(payload.organization_role)
        except ValueError:
            logger.warning(
                "Ignoring unknown organization role %r for %s",
                payload.organization_role,
                payload.sub,
            )

    return Identity(
        user_id=payload.sub,
        email=payload.email,
        name=payload.name,
        global_roles=frozenset(global_roles),
        organization_id=payload.organization_id,
        organization_role=organization_role,
    )


def get_bearer_token(authorization: Optional[str]) -> str:
    """Extracts the token from a ``Bearer <token>`` Authorization header."""
    if not authorization or not authorization.startswith("Bearer "):
        raise InvalidTokenError("Missing token")
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise InvalidTokenError("Missing token")
    return token


async def get_optional_identity(
    authorization: Optional[str] = Header(None),
) -> Optional[Identity]:
    """
    Resolves the caller from the Authorization header.

    Returns None when no valid token is presented; the route guard turns
    that into a 401.
    """
    try:
        token = get_bearer_token(authorization)
        return identity_from_payload(decode_access_token(token))
    except InvalidTokenError as e:
        logger.debug("Rejected credentials: %s", e.detail)
        return None


async def get_current_identity(
    identity: Optional[Identity] = Depends(get_optional_identity),
) -> Identity:
    """Resolves the caller, raising 401 if there is none."""
    if identity is None:
        raise NotAuthenticatedError()
    return identity
