"""
Authentication Module - Black Box Interface

Purpose: Select, run and verify authenticators for a request
Interface: FirewallFactory.build() -> Firewall.authenticate(request)
Hidden: Candidate selection, verification listeners, token persistence

The pipeline pieces live in submodules (manager, verifier, provider,
authenticators); this package root only exposes the data types and
contracts so it stays importable from the events package.
"""

from .exceptions import (
    AuthenticationError,
    AuthenticationExpiredError,
    BadCredentialsError,
    InvalidTokenTypeError,
    InvalidUsageError,
    MisconfiguredAuthenticatorError,
    ProviderNotFoundError,
    UserNotFoundError,
)
from .interfaces import CredentialsCapability, SupportDecision
from .models import AnonymousToken, PostAuthenticationToken, PreAuthenticationToken, RememberMeToken, Token, User

__all__ = [
    "AnonymousToken",
    "AuthenticationError",
    "AuthenticationExpiredError",
    "BadCredentialsError",
    "CredentialsCapability",
    "InvalidTokenTypeError",
    "InvalidUsageError",
    "MisconfiguredAuthenticatorError",
    "PostAuthenticationToken",
    "PreAuthenticationToken",
    "ProviderNotFoundError",
    "RememberMeToken",
    "SupportDecision",
    "Token",
    "User",
    "UserNotFoundError",
]
