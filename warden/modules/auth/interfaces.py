"""Authentication interfaces following Black Box Design principles."""
from enum import Enum
from typing import Any, List, Optional, Protocol, Union, runtime_checkable

from starlette.requests import Request
from starlette.responses import Response

from .exceptions import AuthenticationError
from .models import Token, User


class SupportDecision(str, Enum):
    """Result of asking an authenticator whether it handles a request."""

    SUPPORTED = "supported"
    NOT_SUPPORTED = "not_supported"
    SUPPORTED_LAZILY = "supported_lazily"

    @classmethod
    def of(cls, value: Union["SupportDecision", bool, None]) -> "SupportDecision":
        """Normalize a plain bool returned by an authenticator."""
        if isinstance(value, cls):
            return value
        if value is True:
            return cls.SUPPORTED
        if value is False:
            return cls.NOT_SUPPORTED
        raise TypeError(f"supports() must return a SupportDecision or a bool, got {value!r}.")


class CredentialsCapability(str, Enum):
    """How the verifier checks the credentials of an authenticator."""

    PASSWORD = "password"
    TOKEN = "token"
    CUSTOM = "custom"


class Authenticator(Protocol):
    """Protocol for authenticators registered on a firewall."""

    capability: CredentialsCapability

    def supports(self, request: Request) -> Union[SupportDecision, bool]:
        """
        Cheap, side-effect free check.

        Returns:
            SUPPORTED, NOT_SUPPORTED or SUPPORTED_LAZILY (decision deferred)
        """
        ...

    async def get_credentials(self, request: Request) -> Any:
        """Extract raw credentials. Must not return None after a positive support decision."""
        ...

    async def get_user(self, credentials: Any) -> Optional[User]:
        """Resolve the principal, or None when it does not exist."""
        ...

    def create_authenticated_token(self, user: User, firewall: str) -> Token:
        ...

    async def on_authentication_success(
        self, request: Request, token: Token, firewall: str
    ) -> Optional[Response]:
        """None lets the request continue."""
        ...

    async def on_authentication_failure(
        self, request: Request, error: AuthenticationError
    ) -> Optional[Response]:
        """None lets the request continue unauthenticated."""
        ...

    def supports_remember_me(self) -> bool:
        ...


class PasswordAuthenticated(Protocol):
    """Extra method for authenticators with the PASSWORD capability."""

    def get_password(self, credentials: Any) -> Optional[str]:
        ...


class CustomAuthenticated(Protocol):
    """Extra method for authenticators with the CUSTOM capability."""

    async def check_credentials(self, credentials: Any, user: User) -> bool:
        ...


class TokenStorage(Protocol):
    """Holds the token of the current request."""

    def get_token(self) -> Optional[Token]:
        ...

    def set_token(self, token: Optional[Token]) -> None:
        ...


class UserChecker(Protocol):
    """Account status checks around credential verification."""

    def check_pre_auth(self, user: User) -> None:
        """Raise an AccountStatusError when the user may not log in."""
        ...

    def check_post_auth(self, user: User) -> None:
        ...


class PasswordMatcher(Protocol):
    """Password hashing collaborator."""

    def matches(self, stored: str, presented: str, salt: Optional[str]) -> bool:
        ...

    def hash(self, password: str, salt: Optional[str] = None) -> str:
        ...

    def needs_rehash(self, user: User) -> bool:
        ...


class UserProvider(Protocol):
    """Loads users by identifier."""

    async def load_user(self, identifier: str) -> Optional[User]:
        ...


@runtime_checkable
class PasswordUpgrader(Protocol):
    """User providers able to persist a freshly hashed password."""

    async def upgrade_password(self, user: User, new_hash: str) -> None:
        ...


class RememberMeServices(Protocol):
    """Remember-me cookie handling (cookie cryptography lives here)."""

    async def perform_login(self, cookie_parts: List[str], request: Request) -> Optional[User]:
        """Decode and validate cookie parts. Raise RememberMeError or return None on failure."""
        ...

    async def login_success(
        self, request: Request, response: Optional[Response], token: Token
    ) -> None:
        ...

    async def login_fail(self, request: Request, error: Optional[AuthenticationError] = None) -> None:
        ...


class SessionAuthenticationStrategy(Protocol):
    """Session fixation protection."""

    def on_authentication(self, request: Request, token: Token) -> None:
        ...
