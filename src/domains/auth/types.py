"""Claim shapes of the access tokens accepted by the API."""

from typing import Optional

from pydantic import BaseModel, Field


class AccessTokenPayload(BaseModel):
    """Access token payload structure issued by the identity provider."""

    # Standard JWT claims
    sub: Optional[str] = Field(None, description="Subject (user ID)")
    iss: Optional[str] = Field(None, description="Token issuer")
    aud: Optional[str | list[str]] = Field(None, description="Token audience")
    exp: Optional[int] = Field(None, description="Expiration timestamp")
    iat: Optional[int] = Field(None, description="Issued at timestamp")
    nbf: Optional[int] = Field(None, description="Not before timestamp")
    jti: Optional[str] = Field(None, description="JWT ID")

    # Profile claims
    email: Optional[str] = Field(None, description="User email address")
    name: Optional[str] = Field(None, description="User display name")

    # Role claims
    global_roles: list[str] = Field(
        default_factory=list, description="Platform-wide role names"
    )
    organization_id: Optional[str] = Field(
        None, description="Active organization of the session"
    )
    organization_role: Optional[str] = Field(
        None, description="Role held in the active organization"
    )

    model_config = {"extra": "allow"}
