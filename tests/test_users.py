"""
Tests for the default user provider, user checker and password matcher.
"""

import pytest

from warden.modules.auth.exceptions import (
    AccountExpiredError,
    CredentialsExpiredError,
    DisabledError,
    LockedError,
)
from warden.modules.auth.models import User
from warden.modules.auth.users import DefaultUserChecker, InMemoryUserProvider, Pbkdf2PasswordMatcher


class TestPbkdf2PasswordMatcher:
    @pytest.fixture
    def matcher(self):
        return Pbkdf2PasswordMatcher(iterations=1000)

    def test_hash_and_match(self, matcher):
        stored = matcher.hash("wonderland")

        assert stored.startswith("pbkdf2_sha256$1000$")
        assert matcher.matches(stored, "wonderland")
        assert not matcher.matches(stored, "Wonderland")

    def test_unknown_format_never_matches(self, matcher):
        assert not matcher.matches("plaintext", "plaintext")
        assert not matcher.matches("md5$1$salt$abc", "abc")

    @pytest.mark.parametrize(
        "stored",
        ["pbkdf2_sha256$abc$salt$00", "pbkdf2_sha256$0$salt$00", "pbkdf2_sha256$-5$salt$00"],
    )
    def test_invalid_iteration_count_never_matches(self, matcher, stored):
        assert matcher.matches(stored, "pw") is False

    def test_needs_rehash(self, matcher):
        assert matcher.needs_rehash(User("a", password=Pbkdf2PasswordMatcher(iterations=10).hash("x")))
        assert matcher.needs_rehash(User("a", password="legacy"))
        assert matcher.needs_rehash(User("a", password="pbkdf2_sha256$many$salt$abc"))
        assert not matcher.needs_rehash(User("a", password=matcher.hash("x")))
        assert not matcher.needs_rehash(User("a", password=None))


class TestDefaultUserChecker:
    @pytest.mark.parametrize(
        "flags, error",
        [
            ({"account_non_locked": False}, LockedError),
            ({"enabled": False}, DisabledError),
            ({"account_non_expired": False}, AccountExpiredError),
        ],
    )
    def test_pre_auth(self, flags, error):
        user = User("alice", **flags)

        with pytest.raises(error) as exc_info:
            DefaultUserChecker().check_pre_auth(user)
        assert exc_info.value.user is user

    def test_post_auth(self):
        checker = DefaultUserChecker()
        checker.check_post_auth(User("alice"))

        with pytest.raises(CredentialsExpiredError):
            checker.check_post_auth(User("alice", credentials_non_expired=False))


class TestInMemoryUserProvider:
    @pytest.mark.asyncio
    async def test_lookup_is_case_insensitive(self):
        provider = InMemoryUserProvider([User("Alice")])

        assert (await provider.load_user("alice")).username == "Alice"
        assert await provider.load_user("bob") is None

    def test_duplicate_users_rejected(self):
        provider = InMemoryUserProvider([User("alice")])

        with pytest.raises(ValueError):
            provider.create_user(User("ALICE"))

    @pytest.mark.asyncio
    async def test_upgrade_password(self):
        user = User("alice", password="old")
        provider = InMemoryUserProvider([user])

        await provider.upgrade_password(user, "new")

        assert (await provider.load_user("alice")).password == "new"
