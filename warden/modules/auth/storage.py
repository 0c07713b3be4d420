"""Request-scoped token storage backed by a ContextVar."""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from .models import Token


class ContextTokenStorage:
    """
    Token storage isolated per request task.

    Each asyncio task runs in its own context copy, so concurrent
    requests never see each other's token. Use scope() to bound the
    lifetime of a token to one request.
    """

    def __init__(self, name: str = "warden_token"):
        self._var: ContextVar[Optional[Token]] = ContextVar(name, default=None)

    def get_token(self) -> Optional[Token]:
        return self._var.get()

    def set_token(self, token: Optional[Token]) -> None:
        self._var.set(token)

    @contextmanager
    def scope(self, initial: Optional[Token] = None) -> Iterator["ContextTokenStorage"]:
        """Start a fresh storage scope; the previous value is restored on exit."""
        reset_token = self._var.set(initial)
        try:
            yield self
        finally:
            self._var.reset(reset_token)
