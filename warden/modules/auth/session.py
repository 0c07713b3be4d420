"""
Session fixation protection.

Works on the dict exposed by Starlette's SessionMiddleware as
request.session (request.scope["session"]).
"""

import logging
import uuid
from enum import Enum

from starlette.requests import Request

from .models import Token

logger = logging.getLogger(__name__)

SESSION_ID_KEY = "_warden_session_id"


class SessionStrategyType(str, Enum):
    NONE = "none"
    MIGRATE = "migrate"
    INVALIDATE = "invalidate"


class SessionStrategy:
    """
    Renews the session identity when a user logs in.

    - none: leave the session untouched
    - migrate: keep the data, issue a new session identifier
    - invalidate: drop all data, issue a new session identifier
    """

    def __init__(self, strategy: SessionStrategyType = SessionStrategyType.MIGRATE):
        self.strategy = SessionStrategyType(strategy)

    def on_authentication(self, request: Request, token: Token) -> None:
        if self.strategy == SessionStrategyType.NONE:
            return

        session = request.scope.get("session")
        if session is None:
            return

        if self.strategy == SessionStrategyType.INVALIDATE:
            session.clear()

        session[SESSION_ID_KEY] = str(uuid.uuid4())
        logger.debug(f"Session {self.strategy.value}d after login of {token.username}")
