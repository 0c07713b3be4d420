"""
Default collaborators: user provider, user checker and password matcher.

Applications usually replace these with their own storage and hashing.
"""

import hashlib
import logging
import secrets
from typing import Dict, Iterable, Optional

from .exceptions import (
    AccountExpiredError,
    CredentialsExpiredError,
    DisabledError,
    LockedError,
)
from .models import User

logger = logging.getLogger(__name__)

PBKDF2_PREFIX = "pbkdf2_sha256"


class InMemoryUserProvider:
    """User provider backed by a dict; supports password upgrades."""

    def __init__(self, users: Optional[Iterable[User]] = None):
        self.users: Dict[str, User] = {}
        for user in users or []:
            self.create_user(user)

    def create_user(self, user: User) -> None:
        key = user.username.lower()
        if key in self.users:
            raise ValueError(f'User "{user.username}" already exists.')
        self.users[key] = user

    async def load_user(self, identifier: str) -> Optional[User]:
        return self.users.get(identifier.lower())

    async def upgrade_password(self, user: User, new_hash: str) -> None:
        stored = self.users.get(user.username.lower())
        if stored is not None:
            stored.password = new_hash
        user.password = new_hash


class DefaultUserChecker:
    """Checks the account status flags of a User."""

    def check_pre_auth(self, user: User) -> None:
        if not user.account_non_locked:
            raise LockedError("User account is locked.", user=user)
        if not user.enabled:
            raise DisabledError("User account is disabled.", user=user)
        if not user.account_non_expired:
            raise AccountExpiredError("User account has expired.", user=user)

    def check_post_auth(self, user: User) -> None:
        if not user.credentials_non_expired:
            raise CredentialsExpiredError("User credentials have expired.", user=user)


class Pbkdf2PasswordMatcher:
    """
    PBKDF2-SHA256 password hashes in the form
    "pbkdf2_sha256$<iterations>$<salt>$<hex digest>".
    """

    def __init__(self, iterations: int = 600_000):
        self.iterations = iterations

    def hash(self, password: str, salt: Optional[str] = None) -> str:
        salt = salt or secrets.token_hex(16)
        digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), self.iterations)
        return f"{PBKDF2_PREFIX}${self.iterations}${salt}${digest.hex()}"

    def matches(self, stored: str, presented: str, salt: Optional[str] = None) -> bool:
        try:
            prefix, iterations, stored_salt, expected = stored.split("$", 3)
        except ValueError:
            logger.warning("Stored password hash has an unknown format")
            return False
        if prefix != PBKDF2_PREFIX:
            return False
        if not iterations.isdigit() or int(iterations) < 1:
            logger.warning("Stored password hash has an invalid iteration count")
            return False

        digest = hashlib.pbkdf2_hmac("sha256", presented.encode(), stored_salt.encode(), int(iterations))
        return secrets.compare_digest(digest.hex(), expected)

    def needs_rehash(self, user: User) -> bool:
        if not user.password:
            return False
        parts = user.password.split("$")
        if len(parts) != 4 or parts[0] != PBKDF2_PREFIX or not parts[1].isdigit():
            return True
        return int(parts[1]) < self.iterations
