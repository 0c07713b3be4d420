"""Shared defaults for authenticators."""

from typing import Any, Optional

from starlette.requests import Request
from starlette.responses import Response

from ..exceptions import AuthenticationError
from ..interfaces import CredentialsCapability
from ..models import PostAuthenticationToken, Token, User


class AbstractAuthenticator:
    """
    Base authenticator.

    Subclasses set capability and implement supports(),
    get_credentials() and get_user(). Hooks default to letting the
    request continue.
    """

    capability: Optional[CredentialsCapability] = None

    def supports(self, request: Request):
        raise NotImplementedError

    async def get_credentials(self, request: Request) -> Any:
        raise NotImplementedError

    async def get_user(self, credentials: Any) -> Optional[User]:
        raise NotImplementedError

    def create_authenticated_token(self, user: User, firewall: str) -> Token:
        return PostAuthenticationToken(user, firewall, user.roles)

    async def on_authentication_success(
        self, request: Request, token: Token, firewall: str
    ) -> Optional[Response]:
        return None

    async def on_authentication_failure(
        self, request: Request, error: AuthenticationError
    ) -> Optional[Response]:
        return None

    def supports_remember_me(self) -> bool:
        return False
