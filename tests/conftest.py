"""Pytest configuration and fixtures."""

import json
import os
from collections.abc import Callable

import httpx
import pytest
import pytest_asyncio

# Set test environment variables before importing package modules
os.environ["OAUTH_URL"] = "https://oauth.server.com"
os.environ["OAUTH_SECRET_KEY"] = "secret-key-oh-secret-key-oh-secret-key"
os.environ["DOMAIN"] = "accounts.example.com"

MOCK_UID = "ABCDEF"
MOCK_CLIENT_ID = "0123456789ABCDEF"
MOCK_CLIENT_INFO = {
    "id": MOCK_CLIENT_ID,
    "name": "mock client",
    "trusted": False,
    "redirect_uri": "http://mock.client.com/redirect",
}
MOCK_SCOPES = "mock-scope another-scope"
ZEROS = bytes(32).hex()


class MockOAuthServer:
    """Scripted OAuth service behind an httpx.MockTransport.

    Each queued reply is consumed by one request, in order. Every request
    received is recorded so tests can assert on what was (or was not) sent.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._replies: list[Callable[[httpx.Request], httpx.Response]] = []

    def reply(self, status_code: int, body: object) -> None:
        self._replies.append(lambda request: httpx.Response(status_code, json=body))

    def reply_text(self, status_code: int, text: str) -> None:
        self._replies.append(lambda request: httpx.Response(status_code, text=text))

    def fail(self, error: Exception) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise error

        self._replies.append(_raise)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._replies:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        return self._replies.pop(0)(request)

    def json_body(self, index: int = 0) -> dict:
        return json.loads(self.requests[index].content)

    @property
    def is_done(self) -> bool:
        return not self._replies


@pytest.fixture
def test_settings():
    """Provide test settings."""
    from oauthdb.config import Settings

    return Settings(
        oauth_url="https://oauth.server.com",
        oauth_secret_key="secret-key-oh-secret-key-oh-secret-key",
        domain="accounts.example.com",
    )


@pytest.fixture
def mock_credentials():
    """Provide credentials for a verified account and session."""
    from oauthdb.models import SessionCredentials

    return SessionCredentials(
        uid=MOCK_UID,
        verifier_set_at=12345,
        email=MOCK_UID + "@example.com",
        created_at=23456000,
        email_verified=True,
        token_verified=True,
        authentication_methods=frozenset({"pwd"}),
        authenticator_assurance_level=1,
    )


@pytest.fixture
def mock_server():
    """Provide a scripted OAuth service.

    There should be no pending replies at the end of a test.
    """
    server = MockOAuthServer()
    yield server
    assert server.is_done, "there should be no pending request mocks at the end of a test"


@pytest_asyncio.fixture
async def oauthdb(test_settings, mock_server):
    """Provide a client wired to the scripted OAuth service."""
    from oauthdb.client import OAuthDBClient

    http_client = httpx.AsyncClient(
        base_url=test_settings.oauth_url,
        transport=httpx.MockTransport(mock_server.handler),
    )
    client = OAuthDBClient(settings=test_settings, http_client=http_client)
    yield client
    await client.close()
    await http_client.aclose()
