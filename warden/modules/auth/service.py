"""
Firewall Facade following Black Box Design principles.

This module provides:
- A single entry point the HTTP layer calls once per request
- Standardized authentication results
- Re-validation of tokens already present in storage
"""

import logging
from dataclasses import dataclass
from typing import Optional

from starlette.requests import Request
from starlette.responses import Response

from .exceptions import AuthenticationError, AuthenticationExpiredError
from .interfaces import SupportDecision, TokenStorage
from .manager import AuthenticatorManager
from .models import Token
from .provider import PreAuthenticationProvider

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """Standardized outcome of running the firewall on a request."""
    decision: SupportDecision
    token: Optional[Token] = None
    response: Optional[Response] = None
    deferred: bool = False

    @property
    def ok(self) -> bool:
        return self.token is not None and self.token.authenticated

    @property
    def identity(self) -> Optional[str]:
        return self.token.username if self.token else None


class Firewall:
    """
    One protected scope with its authenticators and token storage.

    This facade hides the manager/provider split from the HTTP layer.
    """

    def __init__(
        self,
        name: str,
        manager: AuthenticatorManager,
        provider: PreAuthenticationProvider,
        token_storage: TokenStorage,
        lazy: bool = False,
    ):
        self.name = name
        self.manager = manager
        self.provider = provider
        self.token_storage = token_storage
        self.lazy = lazy

    async def refresh_stored_token(self) -> Optional[Token]:
        """
        Re-validate the token found in storage.

        Expired tokens and tokens from unknown authenticators are
        removed (logout), never raised.
        """
        token = self.token_storage.get_token()
        if token is None or token.authenticated:
            return token

        try:
            token = await self.provider.authenticate(token)
        except AuthenticationExpiredError:
            logger.info(f"Stored token expired on firewall {self.name}: logging out")
            self.token_storage.set_token(None)
            return None
        except AuthenticationError as e:
            logger.info(f"Stored token rejected on firewall {self.name}: {e}")
            self.token_storage.set_token(None)
            return None

        self.token_storage.set_token(token)
        return token

    async def authenticate(self, request: Request) -> AuthResult:
        """Run the authentication pipeline for one request."""
        await self.refresh_stored_token()

        decision = self.manager.supports(request)
        if decision == SupportDecision.NOT_SUPPORTED:
            return AuthResult(decision=decision, token=self.token_storage.get_token())

        if decision == SupportDecision.SUPPORTED_LAZILY and self.lazy:
            # Candidates stay parked on request.state until resolve() is called
            logger.debug(f"Every authenticator of firewall {self.name} is lazy: deferring")
            return AuthResult(decision=decision, token=self.token_storage.get_token(), deferred=True)

        response = await self.manager.authenticate_request(request)

        return AuthResult(decision=decision, token=self.token_storage.get_token(), response=response)

    async def resolve(self, request: Request) -> AuthResult:
        """Finish a deferred (lazy) authentication, e.g. when a handler needs the user."""
        response = await self.manager.authenticate_request(request)
        return AuthResult(
            decision=SupportDecision.SUPPORTED_LAZILY,
            token=self.token_storage.get_token(),
            response=response,
        )
