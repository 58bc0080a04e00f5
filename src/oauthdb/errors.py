"""Local error taxonomy and translation of OAuth service errors.

Every failure surfaced by the client is an :class:`OAuthDBError` subclass
with a stable ``errno``. Callers branch on the class or the errno, never on
the message.
"""

import logging
from enum import IntEnum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class ERRNO(IntEnum):
    """Local error numbers, as reported to end users by the auth server."""

    ACCOUNT_UNVERIFIED = 104
    SESSION_UNVERIFIED = 138
    UNKNOWN_CLIENT_ID = 162
    STALE_AUTH_AT = 164
    BACKEND_SERVICE_FAILURE = 203
    INTERNAL_VALIDATION_ERROR = 998


class RemoteErrno(IntEnum):
    """Error numbers reported by the OAuth service that have a local mapping."""

    UNKNOWN_CLIENT = 101
    STALE_AUTH_AT = 119


class OAuthDBError(Exception):
    """Base class for errors raised by the OAuth service client."""

    errno: ClassVar[ERRNO]
    status_code: ClassVar[int] = 500
    error: ClassVar[str] = "Internal Server Error"
    default_message: ClassVar[str] = "Unspecified error"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.details = details or {}

    @property
    def payload(self) -> dict[str, Any]:
        """Get the error body as the auth server would return it."""
        return {
            "code": self.status_code,
            "errno": int(self.errno),
            "error": self.error,
            "message": self.message,
            **self.details,
        }


class AccountUnverified(OAuthDBError):
    """The account's primary email address has not been verified."""

    errno = ERRNO.ACCOUNT_UNVERIFIED
    status_code = 400
    error = "Bad Request"
    default_message = "Unverified account"


class SessionUnverified(OAuthDBError):
    """The session must be verified before it can be used for this request."""

    errno = ERRNO.SESSION_UNVERIFIED
    status_code = 400
    error = "Bad Request"
    default_message = "Unverified session"


class UnknownClientId(OAuthDBError):
    """The OAuth service does not know the requested client."""

    errno = ERRNO.UNKNOWN_CLIENT_ID
    status_code = 400
    error = "Bad Request"
    default_message = "Unknown client_id"

    def __init__(self, client_id: str | None = None):
        super().__init__(details={"clientId": client_id})

    @property
    def client_id(self) -> str | None:
        return self.details["clientId"]


class StaleAuthAt(OAuthDBError):
    """The session authenticated too long ago for the requested operation."""

    errno = ERRNO.STALE_AUTH_AT
    status_code = 401
    error = "Unauthorized"
    default_message = "Stale authentication timestamp"

    def __init__(self, auth_at: int | None = None):
        super().__init__(details={"authAt": auth_at})

    @property
    def auth_at(self) -> int | None:
        return self.details["authAt"]


class BackendServiceFailure(OAuthDBError):
    """The OAuth service failed, was unreachable, or returned an unmapped error."""

    errno = ERRNO.BACKEND_SERVICE_FAILURE
    default_message = "A backend service request failed."

    def __init__(
        self,
        service: str = "oauth",
        operation: str = "unknown",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            details={"service": service, "operation": operation, **(details or {})},
        )


class InternalValidationError(OAuthDBError):
    """A request parameter or a response body did not match its schema."""

    errno = ERRNO.INTERNAL_VALIDATION_ERROR
    default_message = "An internal validation check failed."

    def __init__(self, schema: str, field: str = "", errors: list[dict[str, Any]] | None = None):
        super().__init__(
            details={"schema": schema, "field": field, "errors": errors or []},
        )

    @property
    def field(self) -> str:
        return self.details["field"]


class RemoteError(BaseModel):
    """Error body returned by the OAuth service."""

    model_config = ConfigDict(extra="allow", frozen=True)

    code: int | None = Field(default=None, description="HTTP status code")
    errno: int = Field(..., description="OAuth service error number")
    message: str = Field(default="", description="Human-readable message")

    @property
    def metadata(self) -> dict[str, Any]:
        """Get the domain-specific fields sent alongside the error."""
        return dict(self.model_extra or {})


def translate_remote_error(
    body: Any,
    status_code: int | None = None,
    operation: str = "unknown",
) -> OAuthDBError:
    """Map an OAuth service error body to a local error.

    Args:
        body: Decoded JSON error body (anything; it is untrusted).
        status_code: HTTP status of the response, if there was one.
        operation: Name of the client operation, for diagnostics.

    Returns:
        The local error to raise.
    """
    try:
        remote = RemoteError.model_validate(body)
    except ValidationError:
        logger.warning(
            "Unrecognised error body from OAuth service: operation=%s status=%s body=%r",
            operation,
            status_code,
            body,
        )
        return BackendServiceFailure(
            operation=operation,
            details={"status": status_code, "remoteBody": body},
        )

    if remote.errno == RemoteErrno.UNKNOWN_CLIENT:
        return UnknownClientId(remote.metadata.get("clientId"))
    if remote.errno == RemoteErrno.STALE_AUTH_AT:
        return StaleAuthAt(remote.metadata.get("authAt"))

    logger.warning(
        "Unmapped OAuth service errno: operation=%s errno=%d message=%s metadata=%r",
        operation,
        remote.errno,
        remote.message,
        remote.metadata,
    )
    return BackendServiceFailure(
        operation=operation,
        details={
            "remoteCode": remote.code,
            "remoteErrno": remote.errno,
            "remoteMessage": remote.message,
            "remoteMetadata": remote.metadata,
        },
    )
