"""Listeners reacting to the outcome of an authentication attempt."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type

from ..events.dispatcher import Event
from ..events.events import CredentialsValidEvent, CredentialsVerificationFailedEvent
from .interfaces import RememberMeServices, SessionAuthenticationStrategy

logger = logging.getLogger(__name__)


class RememberMeListener:
    """
    Creates and deletes remember-me cookies.

    On success the cookie is written onto the response returned by the
    authenticator; on failure all remember-me cookies are cancelled.
    """

    def __init__(self, remember_me_services: RememberMeServices, firewall: str):
        self.remember_me_services = remember_me_services
        self.firewall = firewall

    @staticmethod
    def get_subscribed_events() -> Dict[Type[Event], List[Tuple[str, int]]]:
        return {
            CredentialsValidEvent: [("on_valid_credentials", 0)],
            CredentialsVerificationFailedEvent: [("on_credentials_verification_failed", 0)],
        }

    def _is_remember_me_enabled(self, authenticator: Any, firewall: str) -> bool:
        if firewall != self.firewall:
            # Listener belongs to another firewall
            return False

        if not authenticator.supports_remember_me():
            logger.debug(
                f"Remember me skipped: authenticator {type(authenticator).__name__} does not support it"
            )
            return False

        return True

    async def on_valid_credentials(self, event: CredentialsValidEvent) -> None:
        if not self._is_remember_me_enabled(event.authenticator, event.firewall):
            return

        await self.remember_me_services.login_success(event.request, event.response, event.token)

    async def on_credentials_verification_failed(self, event: CredentialsVerificationFailedEvent) -> None:
        if not self._is_remember_me_enabled(event.authenticator, event.firewall):
            return

        await self.remember_me_services.login_fail(event.request, event.error)


class SessionListener:
    """Applies the session strategy after a successful login."""

    def __init__(
        self,
        session_strategy: SessionAuthenticationStrategy,
        stateless_firewalls: Optional[Iterable[str]] = None,
    ):
        self.session_strategy = session_strategy
        self.stateless_firewalls = set(stateless_firewalls or [])

    @staticmethod
    def get_subscribed_events() -> Dict[Type[Event], List[Tuple[str, int]]]:
        return {CredentialsValidEvent: [("on_credentials_valid", 0)]}

    def on_credentials_valid(self, event: CredentialsValidEvent) -> None:
        if event.firewall in self.stateless_firewalls:
            return

        # Only requests that already carry a session are protected
        if not event.request.scope.get("session"):
            return

        self.session_strategy.on_authentication(event.request, event.token)
