"""Anonymous authenticator: fills token storage for visitors without credentials."""

from typing import Any, Dict, Optional

from starlette.requests import Request

from ..interfaces import CredentialsCapability, TokenStorage
from ..models import AnonymousToken, Token, User
from .base import AbstractAuthenticator

ANONYMOUS_USERNAME = "anon."


class AnonymousAuthenticator(AbstractAuthenticator):
    """Always succeeds when no other token is stored."""

    capability = CredentialsCapability.TOKEN

    def __init__(self, secret: str, token_storage: TokenStorage):
        self.secret = secret
        self.token_storage = token_storage

    def supports(self, request: Request) -> bool:
        # Do not overwrite an already stored token (e.g. from the session)
        return self.token_storage.get_token() is None

    async def get_credentials(self, request: Request) -> Dict[str, Any]:
        return {}

    async def get_user(self, credentials: Any) -> Optional[User]:
        return User(ANONYMOUS_USERNAME)

    def create_authenticated_token(self, user: User, firewall: str) -> Token:
        return AnonymousToken(self.secret, ANONYMOUS_USERNAME, [])
