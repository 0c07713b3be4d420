"""
Audit Module - Black Box Interface

Purpose: Keep an audit trail of authentication outcomes
Interface: AuditListener (event subscriber), AUDIT_KEY
Hidden: Event serialization, Redis list trimming

Replaceable with any audit sink; the pipeline only sees an event listener.
"""

import json
import logging
from datetime import UTC, datetime
from typing import Dict, List, Optional, Tuple, Type

from redis.exceptions import RedisError

from ..events.dispatcher import Event
from ..events.events import CredentialsValidEvent, CredentialsVerificationFailedEvent

logger = logging.getLogger(__name__)

AUDIT_KEY = "auth:audit"
AUDIT_MAX_EVENTS = 10000


class AuditListener:
    """Pushes authentication outcomes onto a Redis list."""

    def __init__(self, redis_client, key: str = AUDIT_KEY, max_events: int = AUDIT_MAX_EVENTS):
        """
        Initialize audit listener.

        Args:
            redis_client: Async Redis client
            key: Redis list receiving the events
            max_events: Number of events kept
        """
        self.redis = redis_client
        self.key = key
        self.max_events = max_events

    @staticmethod
    def get_subscribed_events() -> Dict[Type[Event], List[Tuple[str, int]]]:
        # Low priority: record the outcome after cookies and sessions were handled
        return {
            CredentialsValidEvent: [("on_credentials_valid", -128)],
            CredentialsVerificationFailedEvent: [("on_credentials_verification_failed", -128)],
        }

    async def on_credentials_valid(self, event: CredentialsValidEvent) -> None:
        await self._log_event(
            "authentication_success",
            {
                "firewall": event.firewall,
                "authenticator": type(event.authenticator).__name__,
                "user": event.token.username,
                "roles": list(event.token.roles),
            },
            self._client_host(event.request),
        )

    async def on_credentials_verification_failed(self, event: CredentialsVerificationFailedEvent) -> None:
        await self._log_event(
            "authentication_failure",
            {
                "firewall": event.firewall,
                "authenticator": type(event.authenticator).__name__,
                "error": event.error.to_dict(),
            },
            self._client_host(event.request),
        )

    @staticmethod
    def _client_host(request) -> Optional[str]:
        client = getattr(request, "client", None)
        return client.host if client else None

    async def _log_event(self, event_type: str, data: dict, client_host: Optional[str] = None):
        """
        Store a security event for audit.

        Args:
            event_type: Type of security event
            data: Event data
            client_host: Address of the client, when known
        """
        event = {
            "type": event_type,
            "data": data,
            "client_host": client_host,
            "timestamp": datetime.now(UTC).isoformat(),
        }

        try:
            await self.redis.lpush(self.key, json.dumps(event))
            await self.redis.ltrim(self.key, 0, self.max_events - 1)
        except RedisError as e:
            # Audit entries are best effort
            logger.warning(f"Failed to record {event_type} audit event: {e}")


__all__ = ["AuditListener", "AUDIT_KEY"]
