"""Data models exchanged with the OAuth service."""

from collections.abc import Collection
from dataclasses import dataclass, field
from typing import Annotated, Protocol, runtime_checkable
from urllib.parse import urlsplit

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    StrictBool,
    StrictStr,
    StringConstraints,
    field_validator,
)

CLIENT_ID_PATTERN = r"^[0-9a-fA-F]{16}$"
SCOPE_TOKEN_PATTERN = r"[a-zA-Z0-9_\-./:]+"
SCOPE_PATTERN = rf"^{SCOPE_TOKEN_PATTERN}( {SCOPE_TOKEN_PATTERN})*$"
KEY_ROTATION_SECRET_PATTERN = r"^[0-9a-f]{64}$"

ClientId = Annotated[str, StringConstraints(strict=True, pattern=CLIENT_ID_PATTERN)]
ScopeString = Annotated[str, StringConstraints(strict=True, pattern=SCOPE_PATTERN)]
KeyRotationSecret = Annotated[
    str, StringConstraints(strict=True, pattern=KEY_ROTATION_SECRET_PATTERN)
]


class ClientInfo(BaseModel):
    """Metadata about a registered OAuth client."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: ClientId = Field(..., description="OAuth client ID")
    name: StrictStr = Field(..., description="Display name of the client")
    trusted: StrictBool = Field(..., description="Whether the client is a trusted first party")
    redirect_uri: StrictStr = Field(..., description="Registered redirect URI")

    @field_validator("redirect_uri")
    @classmethod
    def check_absolute_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if not parts.scheme or not parts.netloc:
            raise ValueError("redirect_uri must be an absolute URL")
        return value


class ScopedKey(BaseModel):
    """Key-rotation record for a single scope."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    identifier: StrictStr = Field(..., description="Scope identifier")
    key_rotation_secret: KeyRotationSecret = Field(
        ...,
        alias="keyRotationSecret",
        description="32-byte key rotation secret, hex encoded",
    )
    key_rotation_timestamp: int = Field(
        ...,
        alias="keyRotationTimestamp",
        strict=True,
        ge=0,
        description="Time of the last key rotation",
    )


class ScopedKeyData(RootModel[dict[str, ScopedKey]]):
    """Key-rotation records keyed by scope identifier."""

    model_config = ConfigDict(frozen=True)

    def __getitem__(self, scope: str) -> ScopedKey:
        return self.root[scope]

    def __iter__(self):
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def to_wire(self) -> dict[str, dict[str, object]]:
        """Serialise using the OAuth service's field names."""
        return self.model_dump(by_alias=True)


class KeyDataRequestParams(BaseModel):
    """Parameters of a scoped key data request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    client_id: ClientId = Field(..., description="OAuth client ID")
    scope: ScopeString = Field(..., description="Space-separated list of scopes")


@runtime_checkable
class AccountCredentials(Protocol):
    """Account and session state needed to vouch for a request.

    Implementations are read-only to this package. ``last_auth_at`` is a
    method so the timestamp is computed when the assertion is signed.
    """

    uid: str
    verifier_set_at: int
    email: str
    email_verified: bool
    token_verified: bool
    must_verify: bool
    authentication_methods: Collection[str]
    authenticator_assurance_level: int

    def last_auth_at(self) -> int:
        """Return the time of the last authentication, in seconds."""
        ...


@dataclass(frozen=True)
class SessionCredentials:
    """Credentials backed by a session token record.

    Record timestamps are in milliseconds.
    """

    uid: str
    verifier_set_at: int
    email: str
    created_at: int
    email_verified: bool = False
    token_verified: bool = False
    must_verify: bool = False
    verified_at: int | None = None
    authentication_methods: frozenset[str] = field(default_factory=frozenset)
    authenticator_assurance_level: int = 0

    def last_auth_at(self) -> int:
        return (self.verified_at or self.created_at) // 1000
