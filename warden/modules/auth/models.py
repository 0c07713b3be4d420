"""
Warden security data models.

Users are resolved by authenticators; tokens wrap a user once the
pipeline has approved its credentials.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class User:
    """Resolved principal."""

    username: str
    password: Optional[str] = None
    roles: List[str] = field(default_factory=list)
    salt: Optional[str] = None
    enabled: bool = True
    account_non_locked: bool = True
    account_non_expired: bool = True
    credentials_non_expired: bool = True
    attributes: Dict[str, Any] = field(default_factory=dict)

    def erase_credentials(self) -> None:
        """Drop plain-text secret material kept around during login."""
        self.attributes.pop("plain_password", None)

    def __str__(self) -> str:
        return self.username


class Token:
    """
    Security context for one request.

    A token exposed through token storage is always authenticated;
    pre-authentication tokens only travel between the firewall and
    the provider.
    """

    def __init__(
        self,
        user: Optional[User],
        firewall: str,
        roles: Optional[List[str]] = None,
    ):
        self.user = user
        self.firewall = firewall
        self.roles: List[str] = list(roles if roles is not None else (user.roles if user else []))
        self.attributes: Dict[str, Any] = {}
        self._authenticated = False

    @property
    def authenticated(self) -> bool:
        return self._authenticated

    def set_authenticated(self, authenticated: bool) -> None:
        self._authenticated = authenticated

    @property
    def username(self) -> str:
        return self.user.username if self.user else ""

    def erase_credentials(self) -> None:
        if self.user is not None:
            self.user.erase_credentials()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": type(self).__name__,
            "username": self.username,
            "firewall": self.firewall,
            "roles": list(self.roles),
            "authenticated": self.authenticated,
        }

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(user={self.username!r}, firewall={self.firewall!r}, "
            f"authenticated={self.authenticated}, roles={self.roles!r})"
        )


class PostAuthenticationToken(Token):
    """Token issued after an authenticator approved the credentials."""

    def __init__(self, user: User, firewall: str, roles: Optional[List[str]] = None):
        super().__init__(user, firewall, roles)
        if not firewall:
            raise ValueError("firewall must not be empty.")
        self.set_authenticated(True)


class AnonymousToken(Token):
    """Token for visitors that presented no credentials."""

    def __init__(self, secret: str, username: str = "anon.", roles: Optional[List[str]] = None):
        super().__init__(User(username), firewall="", roles=roles or [])
        self.secret = secret
        self.set_authenticated(True)


class RememberMeToken(Token):
    """Token restored from a remember-me cookie."""

    def __init__(self, user: User, firewall: str, secret: str):
        super().__init__(user, firewall)
        if not secret:
            raise ValueError("secret must not be empty.")
        if not firewall:
            raise ValueError("firewall must not be empty.")
        self.secret = secret
        self.set_authenticated(True)


class PreAuthenticationToken(Token):
    """
    Unverified token carrying raw credentials.

    The authenticator_key routes the token to the authenticator that
    extracted the credentials.
    """

    def __init__(self, credentials: Any, authenticator_key: str, firewall: str = ""):
        super().__init__(None, firewall, roles=[])
        self.credentials = credentials
        self.authenticator_key = authenticator_key

    def set_authenticated(self, authenticated: bool) -> None:
        if authenticated:
            raise ValueError("A pre-authentication token cannot be marked as authenticated.")
        super().set_authenticated(False)

    def erase_credentials(self) -> None:
        self.credentials = None
