"""
Events Module - Black Box Interface

Purpose: Notify listeners at well-defined points of the authentication pipeline
Interface: EventDispatcher.add_listener(), add_subscriber(), dispatch()
Hidden: Listener ordering, sync/async listener handling

Listeners may have side effects (cookies, audit logs) but do not decide
the authentication outcome, except verification listeners setting validity.
"""

from .dispatcher import Event, EventDispatcher
from .events import (
    AuthenticationSuccessEvent,
    CredentialsValidEvent,
    CredentialsVerificationFailedEvent,
    InteractiveLoginEvent,
    VerifyAuthenticatorCredentialsEvent,
)

__all__ = [
    "Event",
    "EventDispatcher",
    "AuthenticationSuccessEvent",
    "CredentialsValidEvent",
    "CredentialsVerificationFailedEvent",
    "InteractiveLoginEvent",
    "VerifyAuthenticatorCredentialsEvent",
]
