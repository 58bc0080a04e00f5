"""Client for the OAuth service used by the accounts auth server.

Looks up OAuth client metadata and fetches scoped key data on behalf of
verified accounts, authenticating each key data request with a signed,
60-second identity assertion.
"""

from oauthdb.assertion import (
    ASSERTION_LIFETIME_SECONDS,
    AssertionClaims,
    check_verification_state,
    require_verified,
    sign_assertion,
)
from oauthdb.client import OAuthDBClient, get_oauthdb_client
from oauthdb.config import Settings, get_settings
from oauthdb.errors import (
    ERRNO,
    AccountUnverified,
    BackendServiceFailure,
    InternalValidationError,
    OAuthDBError,
    RemoteError,
    SessionUnverified,
    StaleAuthAt,
    UnknownClientId,
    translate_remote_error,
)
from oauthdb.log_config import configure_logging
from oauthdb.models import (
    AccountCredentials,
    ClientInfo,
    KeyDataRequestParams,
    ScopedKey,
    ScopedKeyData,
    SessionCredentials,
)
from oauthdb.validation import validate

__all__ = [
    # Client
    "OAuthDBClient",
    "get_oauthdb_client",
    # Config
    "Settings",
    "get_settings",
    "configure_logging",
    # Models
    "AccountCredentials",
    "ClientInfo",
    "KeyDataRequestParams",
    "ScopedKey",
    "ScopedKeyData",
    "SessionCredentials",
    # Assertions
    "ASSERTION_LIFETIME_SECONDS",
    "AssertionClaims",
    "check_verification_state",
    "require_verified",
    "sign_assertion",
    # Validation
    "validate",
    # Errors
    "ERRNO",
    "OAuthDBError",
    "AccountUnverified",
    "BackendServiceFailure",
    "InternalValidationError",
    "RemoteError",
    "SessionUnverified",
    "StaleAuthAt",
    "UnknownClientId",
    "translate_remote_error",
]
