"""
Unit Tests for Request Authentication
=====================================
Each rejection kind and the success path.
"""

from urllib.parse import urlencode

import pytest

from garden_api.auth import InMemoryIdentityResolver, RequestAuthenticator, extract_credentials
from garden_api.errors import ErrorKind
from garden_api.signing import AuthDecision, compute_signature

from helpers import NOW, SECRET, signed_query


class TestAuthenticateSuccess:
    """Tests for accepted requests."""

    def test_valid_username_request(self, authenticator):
        """alice -> 42 with a valid token."""
        result = authenticator.authenticate(signed_query({"username": "alice"}))

        assert result.decision == AuthDecision.ALLOW
        assert result.allowed
        assert result.identity == 42
        assert result.error is None

    def test_valid_email_request(self, authenticator):
        result = authenticator.authenticate(signed_query({"email": "bob@example.com"}))

        assert result.identity == 7

    def test_extra_parameters_are_signed(self, authenticator):
        query = signed_query({"username": "alice", "page": "2", "sort": "Desc"})

        assert authenticator.authenticate(query).allowed

    def test_delivery_hints_are_ignored(self, authenticator):
        """DeliveryType/DeliveryMethod may be added after signing."""
        query = signed_query({"username": "alice"}, DeliveryType="DATA", DeliveryMethod="JSON")

        assert authenticator.authenticate(query).allowed

    def test_username_takes_precedence_over_email(self, authenticator):
        """With both present only the username is resolved."""
        query = signed_query({"username": "alice", "email": "bob@example.com"})

        assert authenticator.authenticate(query).identity == 42

    @pytest.mark.parametrize("skew", [-300, 300])
    def test_window_boundary_accepted(self, authenticator, skew):
        query = signed_query({"username": "alice"}, timestamp=NOW + skew)

        assert authenticator.authenticate(query).allowed

    @pytest.mark.parametrize("timestamp", [f"{NOW}.0", f"{NOW + 12}.75"])
    def test_decimal_timestamp_accepted(self, authenticator, timestamp):
        """Numeric strings with a fractional part are still timestamps."""
        query = signed_query({"username": "alice"}, timestamp=timestamp)

        assert authenticator.authenticate(query).allowed


class TestAuthenticateRejections:
    """Tests for every rejection kind."""

    def _assert_blocked(self, result, kind):
        assert result.decision == AuthDecision.BLOCK
        assert result.reason_code == kind
        assert result.error.status == 401
        assert result.identity is None

    @pytest.mark.parametrize("query", ["", None])
    def test_missing_query(self, authenticator, query):
        self._assert_blocked(authenticator.authenticate(query), ErrorKind.MISSING_QUERY)

    def test_missing_identity(self, authenticator):
        self._assert_blocked(
            authenticator.authenticate(signed_query({"page": "1"})),
            ErrorKind.MISSING_IDENTITY,
        )

    def test_missing_timestamp(self, authenticator):
        query = urlencode({"username": "alice", "token": "abc"})

        self._assert_blocked(authenticator.authenticate(query), ErrorKind.MISSING_TIMESTAMP)

    @pytest.mark.parametrize("skew", [-301, 301, -86400])
    def test_expired(self, authenticator, skew):
        query = signed_query({"username": "alice"}, timestamp=NOW + skew)

        self._assert_blocked(authenticator.authenticate(query), ErrorKind.EXPIRED)

    @pytest.mark.parametrize("timestamp", ["yesterday", "inf", "nan"])
    def test_non_numeric_timestamp_is_expired(self, authenticator, timestamp):
        query = urlencode({"username": "alice", "timestamp": timestamp, "token": "abc"})

        self._assert_blocked(authenticator.authenticate(query), ErrorKind.EXPIRED)

    @pytest.mark.parametrize("login", ["username", "email"])
    def test_zero_login_is_missing(self, authenticator, login):
        query = signed_query({login: "0"})

        self._assert_blocked(authenticator.authenticate(query), ErrorKind.MISSING_IDENTITY)

    def test_zero_timestamp_is_missing(self, authenticator):
        query = urlencode({"username": "alice", "timestamp": "0", "token": "abc"})

        self._assert_blocked(authenticator.authenticate(query), ErrorKind.MISSING_TIMESTAMP)

    def test_zero_token_is_missing(self, authenticator):
        query = urlencode({"username": "alice", "timestamp": str(NOW), "token": "0"})

        self._assert_blocked(authenticator.authenticate(query), ErrorKind.MISSING_TOKEN)

    def test_missing_token(self, authenticator):
        query = urlencode({"username": "alice", "timestamp": str(NOW)})

        self._assert_blocked(authenticator.authenticate(query), ErrorKind.MISSING_TOKEN)

    def test_unknown_user(self, authenticator):
        self._assert_blocked(
            authenticator.authenticate(signed_query({"username": "mallory"})),
            ErrorKind.UNKNOWN_USER,
        )

    def test_bad_signature_one_character_off(self, authenticator):
        params = {"username": "alice", "timestamp": str(NOW)}
        token = compute_signature(params, SECRET)
        wrong = token[:-1] + ("a" if token[-1] != "a" else "b")
        query = urlencode({**params, "token": wrong})

        self._assert_blocked(authenticator.authenticate(query), ErrorKind.BAD_SIGNATURE)

    def test_bad_signature_wrong_secret(self, authenticator):
        query = signed_query({"username": "alice"}, secret="other-secret")

        self._assert_blocked(authenticator.authenticate(query), ErrorKind.BAD_SIGNATURE)

    def test_tampered_parameter(self, authenticator):
        query = signed_query({"username": "alice", "page": "1"}).replace("page=1", "page=2")

        self._assert_blocked(authenticator.authenticate(query), ErrorKind.BAD_SIGNATURE)

    def test_checks_run_in_order(self, authenticator):
        """An expired request from an unknown user reports the expiry."""
        query = signed_query({"username": "mallory"}, timestamp=NOW - 10_000)

        self._assert_blocked(authenticator.authenticate(query), ErrorKind.EXPIRED)


class TestIdentityResolution:
    """Tests for the identity collaborator."""

    def test_resolver_is_not_called_before_token_check(self, config):
        calls = []

        class RecordingResolver(InMemoryIdentityResolver):
            def resolve_by_username(self, username):
                calls.append(username)
                return super().resolve_by_username(username)

        authenticator = RequestAuthenticator(RecordingResolver(), config, clock=lambda: NOW)
        authenticator.authenticate(urlencode({"username": "alice", "timestamp": str(NOW)}))

        assert calls == []

    def test_resolve_prefers_username(self, resolver):
        assert resolver.resolve(username="bob", email="alice@example.com") == 7

    def test_resolve_nothing(self, resolver):
        assert resolver.resolve() is None

    def test_extract_credentials_blank_values(self):
        credentials = extract_credentials({"username": "", "email": "a@b.c", "timestamp": ""})

        assert credentials.username is None
        assert credentials.login == "a@b.c"
        assert credentials.timestamp is None
