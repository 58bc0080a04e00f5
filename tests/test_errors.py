"""Tests for the error taxonomy and remote error translation."""

import logging

import pytest

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


class TestErrors:
    """Tests for local error classes."""

    @pytest.mark.parametrize(
        "error,errno,status_code",
        [
            (AccountUnverified(), ERRNO.ACCOUNT_UNVERIFIED, 400),
            (SessionUnverified(), ERRNO.SESSION_UNVERIFIED, 400),
            (UnknownClientId("0123456789ABCDEF"), ERRNO.UNKNOWN_CLIENT_ID, 400),
            (StaleAuthAt(7), ERRNO.STALE_AUTH_AT, 401),
            (BackendServiceFailure(), ERRNO.BACKEND_SERVICE_FAILURE, 500),
            (InternalValidationError("client_id"), ERRNO.INTERNAL_VALIDATION_ERROR, 500),
        ],
    )
    def test_errno_and_status(self, error, errno, status_code):
        """Test that every error kind has a stable errno and status."""
        assert isinstance(error, OAuthDBError)
        assert error.errno == errno
        assert error.payload["errno"] == int(errno)
        assert error.payload["code"] == status_code

    def test_distinct_errnos(self):
        """Test that no two error kinds share an errno."""
        assert len({e.value for e in ERRNO}) == len(ERRNO)

    def test_unknown_client_id_payload(self):
        """Test the payload of UnknownClientId."""
        error = UnknownClientId("0123456789ABCDEF")

        assert error.client_id == "0123456789ABCDEF"
        assert error.payload == {
            "code": 400,
            "errno": 162,
            "error": "Bad Request",
            "message": "Unknown client_id",
            "clientId": "0123456789ABCDEF",
        }

    def test_stale_auth_at_payload(self):
        """Test the payload of StaleAuthAt."""
        error = StaleAuthAt(7)

        assert error.auth_at == 7
        assert error.payload["authAt"] == 7
        assert str(error) == "Stale authentication timestamp"


class TestRemoteError:
    """Tests for the RemoteError model."""

    def test_metadata(self):
        """Test that domain-specific fields are kept."""
        remote = RemoteError.model_validate(
            {"code": 400, "errno": 101, "message": "Unknown client", "clientId": "abc"}
        )

        assert remote.metadata == {"clientId": "abc"}


class TestTranslateRemoteError:
    """Tests for translate_remote_error."""

    def test_unknown_client(self):
        """Test that errno 101 maps to UnknownClientId."""
        error = translate_remote_error(
            {"code": 400, "errno": 101, "message": "Unknown client", "clientId": "0123456789ABCDEF"}
        )

        assert isinstance(error, UnknownClientId)
        assert error.payload["clientId"] == "0123456789ABCDEF"

    def test_unknown_client_without_code(self):
        """Test that a body without a code is still translated."""
        error = translate_remote_error(
            {"errno": 101, "message": "Unknown client", "clientId": "0123456789ABCDEF"}
        )

        assert isinstance(error, UnknownClientId)
        assert error.client_id == "0123456789ABCDEF"

    def test_stale_auth_at(self):
        """Test that errno 119 maps to StaleAuthAt."""
        error = translate_remote_error(
            {"code": 400, "errno": 119, "message": "Stale auth timestamp", "authAt": 7}
        )

        assert isinstance(error, StaleAuthAt)
        assert error.payload["authAt"] == 7

    def test_unmapped_errno(self, caplog):
        """Test that an unmapped errno is wrapped, not dropped."""
        with caplog.at_level(logging.WARNING, logger="oauthdb.errors"):
            error = translate_remote_error(
                {"code": 400, "errno": 108, "message": "Invalid token"},
                status_code=400,
                operation="getScopedKeyData",
            )

        assert isinstance(error, BackendServiceFailure)
        assert error.details == {
            "service": "oauth",
            "operation": "getScopedKeyData",
            "remoteCode": 400,
            "remoteErrno": 108,
            "remoteMessage": "Invalid token",
            "remoteMetadata": {},
        }
        assert "Unmapped OAuth service errno" in caplog.text

    @pytest.mark.parametrize(
        "body",
        [
            None,
            "oops",
            [],
            {"errno": "x"},
            {"message": "no errno"},
            {"code": 400.5, "errno": 999, "message": "diag text"},
        ],
    )
    def test_unrecognised_body(self, body, caplog):
        """Test that malformed error bodies become backend service failures."""
        with caplog.at_level(logging.WARNING, logger="oauthdb.errors"):
            error = translate_remote_error(body, status_code=503)

        assert isinstance(error, BackendServiceFailure)
        assert error.details["status"] == 503
        assert error.details["remoteBody"] == body
        assert repr(body) in caplog.text

    def test_unmapped_errno_keeps_metadata(self):
        """Test that extra fields of an unmapped error are kept."""
        error = translate_remote_error(
            {"code": 400, "errno": 108, "message": "Invalid token", "reason": "expired"}
        )

        assert error.details["remoteMetadata"] == {"reason": "expired"}
