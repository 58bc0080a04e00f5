"""Identity assertions presented to the OAuth service.

An assertion is a short-lived HS256 JWT, signed with the key shared between
the auth server and the OAuth service, describing the state of an account
and session. It is minted per request and never stored.
"""

import logging
import time

import jwt
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from oauthdb.errors import AccountUnverified, OAuthDBError, SessionUnverified
from oauthdb.models import AccountCredentials
from oauthdb.validation import to_internal_error

logger = logging.getLogger(__name__)

ASSERTION_ALGORITHM = "HS256"
ASSERTION_LIFETIME_SECONDS = 60


class AssertionClaims(BaseModel):
    """Claims carried by an identity assertion."""

    model_config = ConfigDict(strict=True, frozen=True, populate_by_name=True)

    iss: str = Field(..., description="Issuer - identity provider domain")
    aud: str = Field(..., description="Audience - OAuth service URL")
    uid: str = Field(..., description="Account ID")
    generation: int = Field(..., alias="fxa-generation", description="Password set time")
    last_auth_at: int = Field(..., alias="fxa-lastAuthAt", description="Last authentication time")
    verified_email: str = Field(..., alias="fxa-verifiedEmail", description="Primary email")
    token_verified: bool = Field(..., alias="fxa-tokenVerified", description="Session verified")
    amr: list[str] = Field(..., alias="fxa-amr", description="Authentication methods")
    aal: int = Field(..., alias="fxa-aal", description="Authenticator assurance level")
    iat: int = Field(..., description="Issued at timestamp")
    exp: int = Field(..., description="Expiration timestamp")

    @field_validator("amr", mode="before")
    @classmethod
    def order_methods(cls, value: object) -> object:
        # Sets have no order of their own; sequences keep the caller's.
        if isinstance(value, (set, frozenset)):
            return sorted(value)
        if isinstance(value, tuple):
            return list(value)
        return value

    @classmethod
    def from_credentials(
        cls,
        credentials: AccountCredentials,
        audience: str,
        issuer: str,
        now: float,
    ) -> "AssertionClaims":
        """Build the claim set for an account at a given time."""
        iat = int(now)
        return cls(
            iss=issuer,
            aud=audience,
            uid=credentials.uid,
            generation=credentials.verifier_set_at,
            last_auth_at=credentials.last_auth_at(),
            verified_email=credentials.email,
            token_verified=credentials.token_verified,
            amr=credentials.authentication_methods,
            aal=credentials.authenticator_assurance_level,
            iat=iat,
            exp=iat + ASSERTION_LIFETIME_SECONDS,
        )


def sign_assertion(
    credentials: AccountCredentials,
    *,
    audience: str,
    issuer: str,
    secret_key: str | bytes,
    now: float | None = None,
) -> str:
    """Sign an identity assertion for an account.

    Args:
        credentials: Account and session state to vouch for.
        audience: OAuth service URL the assertion is meant for.
        issuer: Identity provider domain.
        secret_key: Shared HS256 key.
        now: Current epoch time in seconds (defaults to the system clock).

    Returns:
        Compact JWS string.

    Raises:
        InternalValidationError: If a credential field has the wrong type.
    """
    try:
        claims = AssertionClaims.from_credentials(
            credentials,
            audience=audience,
            issuer=issuer,
            now=time.time() if now is None else now,
        )
    except ValidationError as e:
        raise to_internal_error("assertion", e) from e
    return jwt.encode(
        claims.model_dump(by_alias=True),
        secret_key,
        algorithm=ASSERTION_ALGORITHM,
    )


def check_verification_state(credentials: AccountCredentials) -> OAuthDBError | None:
    """Decide whether an account and session may obtain key material.

    Returns:
        The error that blocks the request, or None if it may proceed.
    """
    if not credentials.email_verified:
        return AccountUnverified()
    if getattr(credentials, "must_verify", False) and not credentials.token_verified:
        return SessionUnverified()
    return None


def require_verified(credentials: AccountCredentials) -> None:
    """Raise if the account or session is not verified.

    Raises:
        AccountUnverified: The account's email is not verified.
        SessionUnverified: The session must be verified but is not.
    """
    error = check_verification_state(credentials)
    if error is not None:
        logger.info(
            "Rejecting key data request for unverified %s: uid=%s",
            "account" if isinstance(error, AccountUnverified) else "session",
            credentials.uid,
        )
        raise error
