"""
Unit tests for remember-me authentication and the login listeners.
"""

import base64
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import build_request, make_authenticator
from warden.modules.auth.authenticators import RememberMeAuthenticator
from warden.modules.auth.authenticators.remember_me import COOKIE_ATTR_NAME, decode_cookie
from warden.modules.auth.exceptions import RememberMeError, UserNotFoundError
from warden.modules.auth.factory import FirewallFactory
from warden.modules.auth.interfaces import SupportDecision
from warden.modules.auth.listeners import RememberMeListener, SessionListener
from warden.modules.auth.models import PostAuthenticationToken, RememberMeToken, User
from warden.modules.auth.session import SESSION_ID_KEY, SessionStrategy, SessionStrategyType
from warden.modules.auth.verifier import register_verification_listeners
from warden.modules.events.events import CredentialsValidEvent, CredentialsVerificationFailedEvent


def cookie(*parts):
    return base64.b64encode(":".join(parts).encode()).decode()


@pytest.fixture
def services():
    remember_me = MagicMock()
    remember_me.perform_login = AsyncMock(return_value=User("alice", roles=["ROLE_USER"]))
    remember_me.login_success = AsyncMock()
    remember_me.login_fail = AsyncMock()
    return remember_me


@pytest.fixture
def remember_me_firewall(services, token_storage, dispatcher, password_matcher, user_checker):
    register_verification_listeners(dispatcher, password_matcher, user_checker)
    dispatcher.add_subscriber(RememberMeListener(services, "main"))
    authenticator = RememberMeAuthenticator(
        services, "s3cr3t", token_storage, {"name": "REMEMBERME"}, SessionStrategy()
    )
    return FirewallFactory.assemble("main", {"remember_me": authenticator}, token_storage, dispatcher)


class TestDecodeCookie:
    def test_valid_cookie(self):
        assert decode_cookie(cookie("User", "alice", "1700000000", "hash")) == [
            "User", "alice", "1700000000", "hash"
        ]

    @pytest.mark.parametrize("value", ["not base64!", "", "%%%"])
    def test_undecodable_cookie(self, value):
        assert decode_cookie(value) in ([], [""])


class TestRememberMeAuthenticator:
    """Cookie-based re-authentication."""

    def test_lazy_support_with_cookie(self, services, token_storage):
        authenticator = RememberMeAuthenticator(services, "s3cr3t", token_storage, {"name": "REMEMBERME"})

        with token_storage.scope():
            request = build_request(cookies={"REMEMBERME": cookie("alice")})
            assert authenticator.supports(request) == SupportDecision.SUPPORTED_LAZILY
            assert authenticator.supports(build_request()) == SupportDecision.NOT_SUPPORTED

    def test_not_supported_when_token_stored(self, services, token_storage):
        authenticator = RememberMeAuthenticator(services, "s3cr3t", token_storage, {"name": "REMEMBERME"})

        with token_storage.scope(PostAuthenticationToken(User("bob"), "main")):
            request = build_request(cookies={"REMEMBERME": cookie("alice")})
            assert authenticator.supports(request) == SupportDecision.NOT_SUPPORTED

    def test_not_supported_after_cookie_cancelled(self, services, token_storage):
        authenticator = RememberMeAuthenticator(services, "s3cr3t", token_storage, {"name": "REMEMBERME"})
        request = build_request(cookies={"REMEMBERME": cookie("alice")})
        setattr(request.state, COOKIE_ATTR_NAME, None)

        with token_storage.scope():
            assert authenticator.supports(request) == SupportDecision.NOT_SUPPORTED

    @pytest.mark.asyncio
    async def test_valid_cookie_logs_in(self, remember_me_firewall, services, token_storage):
        request = build_request(cookies={"REMEMBERME": cookie("User", "alice", "1700000000", "hash")})

        with token_storage.scope():
            result = await remember_me_firewall.authenticate(request)
            token = token_storage.get_token()

        assert result.response is None
        assert isinstance(token, RememberMeToken)
        assert token.username == "alice"
        assert token.secret == "s3cr3t"
        services.perform_login.assert_awaited_once_with(["User", "alice", "1700000000", "hash"], request)
        # The remember-me authenticator never writes a new cookie itself
        services.login_success.assert_not_called()

    @pytest.mark.asyncio
    async def test_malformed_cookie_fails_once(self, remember_me_firewall, services, token_storage):
        services.perform_login.side_effect = RememberMeError("The cookie is invalid.")
        request = build_request(cookies={"REMEMBERME": "definitely-not-base64!"})

        with token_storage.scope():
            result = await remember_me_firewall.authenticate(request)
            assert token_storage.get_token() is None

        assert result.response is None
        services.login_fail.assert_awaited_once()
        failed_request, error = services.login_fail.await_args[0]
        assert failed_request is request
        assert isinstance(error, UserNotFoundError)

    @pytest.mark.asyncio
    async def test_success_renews_session(self, remember_me_firewall, token_storage):
        session = {"cart": [1, 2]}
        request = build_request(cookies={"REMEMBERME": cookie("alice")}, session=session)

        with token_storage.scope():
            await remember_me_firewall.authenticate(request)

        assert session["cart"] == [1, 2]
        assert SESSION_ID_KEY in session

    @pytest.mark.asyncio
    async def test_lazy_firewall_defers_until_resolved(self, services, token_storage, dispatcher, password_matcher, user_checker):
        register_verification_listeners(dispatcher, password_matcher, user_checker)
        authenticator = RememberMeAuthenticator(services, "s3cr3t", token_storage, {"name": "REMEMBERME"})
        firewall = FirewallFactory.assemble(
            "main", {"remember_me": authenticator}, token_storage, dispatcher, lazy=True
        )
        request = build_request(cookies={"REMEMBERME": cookie("alice")})

        with token_storage.scope():
            deferred = await firewall.authenticate(request)
            assert deferred.deferred
            assert deferred.token is None
            services.perform_login.assert_not_called()

            resolved = await firewall.resolve(request)

        assert not resolved.deferred
        assert resolved.identity == "alice"


class TestRememberMeListener:
    """Cookie creation and cancellation after login attempts."""

    @pytest.mark.asyncio
    async def test_success_calls_login_success(self, services):
        listener = RememberMeListener(services, "main")
        authenticator = make_authenticator(remember_me=True)
        request = build_request()
        response = MagicMock()
        token = PostAuthenticationToken(User("alice"), "main")

        await listener.on_valid_credentials(CredentialsValidEvent(authenticator, token, request, response, "main"))

        services.login_success.assert_awaited_once_with(request, response, token)

    @pytest.mark.asyncio
    async def test_failure_calls_login_fail(self, services):
        listener = RememberMeListener(services, "main")
        authenticator = make_authenticator(remember_me=True)
        request = build_request()
        error = UserNotFoundError()

        await listener.on_credentials_verification_failed(
            CredentialsVerificationFailedEvent(error, authenticator, request, None, "main")
        )

        services.login_fail.assert_awaited_once_with(request, error)

    @pytest.mark.asyncio
    async def test_ignores_authenticators_without_remember_me(self, services):
        listener = RememberMeListener(services, "main")
        token = PostAuthenticationToken(User("alice"), "main")

        await listener.on_valid_credentials(
            CredentialsValidEvent(make_authenticator(remember_me=False), token, build_request(), None, "main")
        )

        services.login_success.assert_not_called()

    @pytest.mark.asyncio
    async def test_ignores_other_firewalls(self, services):
        listener = RememberMeListener(services, "admin")
        token = PostAuthenticationToken(User("alice"), "main")

        await listener.on_valid_credentials(
            CredentialsValidEvent(make_authenticator(remember_me=True), token, build_request(), None, "main")
        )

        services.login_success.assert_not_called()


class TestSessionListener:
    """Session fixation protection."""

    def valid_event(self, session, firewall="main"):
        request = build_request(session=session)
        token = PostAuthenticationToken(User("alice"), firewall)
        return CredentialsValidEvent(make_authenticator(), token, request, None, firewall)

    def test_migrate_keeps_data(self):
        session = {"cart": [1]}

        SessionListener(SessionStrategy(SessionStrategyType.MIGRATE)).on_credentials_valid(self.valid_event(session))

        assert session["cart"] == [1]
        assert SESSION_ID_KEY in session

    def test_invalidate_drops_data(self):
        session = {"cart": [1]}

        SessionListener(SessionStrategy("invalidate")).on_credentials_valid(self.valid_event(session))

        assert "cart" not in session
        assert SESSION_ID_KEY in session

    def test_session_id_changes_on_each_login(self):
        session = {SESSION_ID_KEY: "old"}

        SessionListener(SessionStrategy()).on_credentials_valid(self.valid_event(session))

        assert session[SESSION_ID_KEY] != "old"

    def test_none_strategy(self):
        session = {"cart": [1]}

        SessionListener(SessionStrategy("none")).on_credentials_valid(self.valid_event(session))

        assert session == {"cart": [1]}

    def test_stateless_firewall_is_skipped(self):
        session = {"cart": [1]}
        strategy = MagicMock()

        SessionListener(strategy, stateless_firewalls=["main"]).on_credentials_valid(self.valid_event(session))

        strategy.on_authentication.assert_not_called()

    def test_requests_without_session_are_skipped(self):
        strategy = MagicMock()

        SessionListener(strategy).on_credentials_valid(self.valid_event(None))

        strategy.on_authentication.assert_not_called()
