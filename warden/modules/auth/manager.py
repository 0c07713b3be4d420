"""
Authenticator manager.

Selects the authenticators that apply to a request and runs the
credentials -> user -> verification -> token -> storage sequence for
the first one that still applies.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from starlette.requests import Request
from starlette.responses import Response

from ..events.dispatcher import EventDispatcher
from ..events.events import (
    CredentialsValidEvent,
    CredentialsVerificationFailedEvent,
    InteractiveLoginEvent,
)
from .exceptions import AuthenticationError, InvalidTokenTypeError, InvalidUsageError
from .interfaces import SupportDecision, TokenStorage
from .models import Token, User
from .pipeline import authenticate_via_authenticator

logger = logging.getLogger(__name__)

CANDIDATES_ATTRIBUTE = "_warden_authenticators"


class AuthenticatorManager:
    """
    Orchestrates the authenticators of one firewall.

    The manager keeps no per-request state: candidates selected by
    supports() are parked on request.state and read once by
    authenticate_request().
    """

    def __init__(
        self,
        authenticators: Dict[str, Any],
        token_storage: TokenStorage,
        event_dispatcher: EventDispatcher,
        firewall: str,
        erase_credentials: bool = True,
    ):
        """
        Initialize the manager.

        Args:
            authenticators: Authenticators keyed by a unique key, in priority order
            token_storage: Storage receiving the authenticated token
            event_dispatcher: Dispatcher carrying verification and hook listeners
            firewall: Scope key of this authenticator set
            erase_credentials: Clear secret material from tokens after login
        """
        self.authenticators: Tuple[Tuple[str, Any], ...] = tuple(authenticators.items())
        self.token_storage = token_storage
        self.event_dispatcher = event_dispatcher
        self.firewall = firewall
        self.erase_credentials = erase_credentials

    @property
    def _candidates_attribute(self) -> str:
        return f"{CANDIDATES_ATTRIBUTE}_{self.firewall}"

    def supports(self, request: Request) -> SupportDecision:
        """
        Select the authenticators that apply to the request.

        Returns:
            NOT_SUPPORTED when none applies, SUPPORTED_LAZILY when every
            candidate deferred its decision, SUPPORTED otherwise
        """
        logger.debug(
            f"Checking for authentication credentials on firewall {self.firewall} "
            f"({len(self.authenticators)} authenticators)"
        )

        candidates: List[Tuple[str, Any]] = []
        lazy = True
        for key, authenticator in self.authenticators:
            name = type(authenticator).__name__
            logger.debug(f"Checking support on authenticator {name}")

            decision = SupportDecision.of(authenticator.supports(request))
            if decision == SupportDecision.NOT_SUPPORTED:
                logger.debug(f"Authenticator {name} does not support the request")
                continue

            candidates.append((key, authenticator))
            lazy = lazy and decision == SupportDecision.SUPPORTED_LAZILY

        if not candidates:
            return SupportDecision.NOT_SUPPORTED

        setattr(request.state, self._candidates_attribute, candidates)

        return SupportDecision.SUPPORTED_LAZILY if lazy else SupportDecision.SUPPORTED

    async def authenticate_request(self, request: Request) -> Optional[Response]:
        """
        Run the candidates selected by supports().

        Returns:
            Response set by the attempted authenticator, or None to let
            the request continue
        """
        candidates = getattr(request.state, self._candidates_attribute, None)
        if candidates is not None:
            delattr(request.state, self._candidates_attribute)
        if not candidates:
            return None

        return await self._execute_authenticators(candidates, request)

    async def authenticate_user(
        self, user: User, authenticator: Any, request: Request
    ) -> Optional[Response]:
        """Log a user in programmatically (e.g. right after registration)."""
        token = authenticator.create_authenticated_token(user, self.firewall)
        if not isinstance(token, Token):
            raise InvalidTokenTypeError(
                f"The {type(authenticator).__name__}.create_authenticated_token() method must "
                f"return a Token. You returned {type(token).__name__}."
            )

        await self._save_authenticated_token(token, request)

        return await self._handle_authentication_success(token, request, authenticator)

    async def _execute_authenticators(
        self, candidates: List[Tuple[str, Any]], request: Request
    ) -> Optional[Response]:
        for key, authenticator in candidates:
            name = type(authenticator).__name__

            # Support is re-checked: an earlier step may have stored a token
            # since supports() ran (e.g. the session was loaded in between)
            if SupportDecision.of(authenticator.supports(request)) == SupportDecision.NOT_SUPPORTED:
                logger.debug(f"Skipping the {name} authenticator as it did not support the request")
                continue

            response = await self._execute_authenticator(key, authenticator, request)
            if response is not None:
                logger.debug(
                    f"The {name} authenticator set the response. Any later authenticator will not be called"
                )
            return response

        return None

    async def _execute_authenticator(
        self, key: str, authenticator: Any, request: Request
    ) -> Optional[Response]:
        name = type(authenticator).__name__
        try:
            logger.debug(f"Calling get_credentials() on authenticator {name} (key {key})")

            credentials = await authenticator.get_credentials(request)
            if credentials is None:
                raise InvalidUsageError(
                    f"The return value of {name}.get_credentials() must not be None. "
                    f"Return NOT_SUPPORTED from {name}.supports() instead."
                )

            token = await authenticate_via_authenticator(
                authenticator,
                credentials,
                self.firewall,
                self.event_dispatcher,
                erase_credentials=self.erase_credentials,
            )

            logger.info(f"Authenticator {name} successful: {token!r}")

            await self._save_authenticated_token(token, request)

        except AuthenticationError as e:
            logger.info(f"Authenticator {name} failed: {e}")

            return await self._handle_authentication_failure(e, request, authenticator)

        response = await self._handle_authentication_success(token, request, authenticator)
        if response is not None:
            logger.debug(f"Authenticator {name} set success response")
        else:
            logger.debug(f"Authenticator {name} set no success response: request continues")

        return response

    async def _save_authenticated_token(self, token: Token, request: Request) -> None:
        self.token_storage.set_token(token)

        await self.event_dispatcher.dispatch(InteractiveLoginEvent(request, token))

    async def _handle_authentication_success(
        self, token: Token, request: Request, authenticator: Any
    ) -> Optional[Response]:
        response = await authenticator.on_authentication_success(request, token, self.firewall)

        await self.event_dispatcher.dispatch(
            CredentialsValidEvent(authenticator, token, request, response, self.firewall)
        )

        return response

    async def _handle_authentication_failure(
        self, error: AuthenticationError, request: Request, authenticator: Any
    ) -> Optional[Response]:
        response = await authenticator.on_authentication_failure(request, error)

        await self.event_dispatcher.dispatch(
            CredentialsVerificationFailedEvent(error, authenticator, request, response, self.firewall)
        )

        # None means the request continues unauthenticated
        return response
