"""Client for the OAuth service's client metadata and scoped key data APIs."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

import httpx

from oauthdb.assertion import require_verified, sign_assertion
from oauthdb.config import Settings, get_settings
from oauthdb.errors import BackendServiceFailure, InternalValidationError, translate_remote_error
from oauthdb.models import (
    AccountCredentials,
    ClientInfo,
    KeyDataRequestParams,
    ScopedKeyData,
)
from oauthdb.validation import validate

logger = logging.getLogger(__name__)


class OAuthDBClient:
    """Client for the OAuth service, used on behalf of signed-in accounts.

    Request parameters are validated before anything is sent, key data
    requests are refused locally for unverified accounts and sessions, and
    every response body is validated before it is returned. Remote errors
    are translated into :mod:`oauthdb.errors` exceptions.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the OAuth service client.

        Args:
            settings: Client settings (uses default if not provided).
            http_client: Optional HTTP client, e.g. for testing. When given,
                its base URL must point at the OAuth service and the caller
                owns its lifetime.
            clock: Source of the current epoch time in seconds.

        Raises:
            ValueError: If no signing key is configured.
        """
        self._settings = settings or get_settings()
        if not self._settings.oauth_secret_key.get_secret_value():
            raise ValueError("OAUTH_SECRET_KEY not configured")

        self._clock = clock
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            base_url=self._settings.oauth_url,
            timeout=self._settings.oauth_timeout,
        )

    @property
    def audience(self) -> str:
        """Get the audience of signed assertions."""
        return self._settings.oauth_url

    @property
    def issuer(self) -> str:
        """Get the issuer of signed assertions."""
        return self._settings.domain

    async def get_client_info(self, client_id: str) -> ClientInfo:
        """Fetch metadata about an OAuth client.

        Args:
            client_id: Hex client ID.

        Returns:
            Validated client metadata.

        Raises:
            InternalValidationError: If the client ID or the response is malformed.
            UnknownClientId: If the OAuth service does not know the client.
            BackendServiceFailure: On any other remote or transport failure.
        """
        client_id = validate("client_id", client_id)
        body = await self._request(
            "GET",
            self._settings.client_info_path.format(client_id=client_id),
            operation="getClientInfo",
        )
        return validate("client_info", body)

    async def get_scoped_key_data(
        self,
        credentials: AccountCredentials,
        params: KeyDataRequestParams | Mapping[str, Any],
    ) -> ScopedKeyData:
        """Fetch key-rotation data for the scopes a client is requesting.

        Args:
            credentials: Account and session making the request.
            params: ``client_id`` and space-separated ``scope``.

        Returns:
            Validated key data keyed by scope identifier.

        Raises:
            InternalValidationError: If the params or the response are malformed.
            AccountUnverified: If the account's email is not verified.
            SessionUnverified: If the session must be verified but is not.
            UnknownClientId: If the OAuth service does not know the client.
            StaleAuthAt: If the session authenticated too long ago.
            BackendServiceFailure: On any other remote or transport failure.
        """
        params = validate("key_data_params", params)
        require_verified(credentials)

        assertion = sign_assertion(
            credentials,
            audience=self.audience,
            issuer=self.issuer,
            secret_key=self._settings.oauth_secret_key.get_secret_value(),
            now=self._clock(),
        )
        body = await self._request(
            "POST",
            self._settings.key_data_path,
            json={
                "client_id": params.client_id,
                "scope": params.scope,
                "assertion": assertion,
            },
            operation="getScopedKeyData",
        )
        return validate("scoped_key_data", body)

    async def close(self) -> None:
        """Release the HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> OAuthDBClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body of a 2xx response."""
        logger.debug("OAuth service request: %s %s", method, path)
        try:
            response = await self._http_client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.exception("HTTP error calling OAuth service: %s", e)
            raise BackendServiceFailure(operation=operation) from e

        if response.is_success:
            try:
                return response.json()
            except ValueError as e:
                raise InternalValidationError(schema="json", field="body") from e

        try:
            error_body = response.json()
        except ValueError:
            error_body = response.text

        logger.debug(
            "OAuth service returned status=%d for %s %s",
            response.status_code,
            method,
            path,
        )
        raise translate_remote_error(
            error_body,
            status_code=response.status_code,
            operation=operation,
        )


# Global client instance
_oauthdb_client: OAuthDBClient | None = None


def get_oauthdb_client() -> OAuthDBClient:
    """Get the global OAuth service client instance.

    Returns:
        OAuthDBClient instance.
    """
    global _oauthdb_client
    if _oauthdb_client is None:
        _oauthdb_client = OAuthDBClient()
    return _oauthdb_client
