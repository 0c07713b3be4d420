"""
Firewall Middleware Module - Black Box Interface

Purpose: Run the authentication pipeline in front of FastAPI applications
Interface: FirewallMiddleware, create_firewall_middleware()
Hidden: Token storage scoping, skip rules, error formatting

Can be used by any FastAPI app or sub-app that needs authentication.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from ..auth.exceptions import InvalidUsageError, LogicError
from ..auth.service import Firewall

logger = logging.getLogger(__name__)

REQUEST_STATE_TOKEN = "security_token"
REQUEST_STATE_FIREWALL = "firewall"


class FirewallMiddleware:
    """
    HTTP middleware running one firewall per request.

    The pipeline response (redirect, 401, ...) is returned as is;
    otherwise the request continues with the token exposed on
    request.state.security_token.
    """

    def __init__(
        self,
        firewall: Firewall,
        skip_paths: Optional[Dict[str, list]] = None,
        error_format: str = "json",
        log_attempts: bool = True,
    ):
        """
        Initialize firewall middleware.

        Args:
            firewall: Firewall built by FirewallFactory
            skip_paths: Dict of {path: [methods]} to skip authentication
            error_format: Error response format ("json" or "jsonrpc")
            log_attempts: Whether to log authentication outcomes
        """
        self.firewall = firewall
        self.skip_paths = skip_paths or {}
        self.error_format = error_format
        self.log_attempts = log_attempts

    def should_skip_auth(self, request: Request) -> bool:
        """Check if authentication should be skipped for this request."""
        path = str(request.url.path)
        method = request.method.upper()

        if path in self.skip_paths:
            allowed_methods = self.skip_paths[path]
            if "*" in allowed_methods or method in allowed_methods:
                return True

        return False

    def format_error(self, status_code: int, message: str, request_id: Optional[str] = None) -> Dict[str, Any]:
        """Format error response based on configured format."""
        if self.error_format == "jsonrpc":
            return {
                "jsonrpc": "2.0",
                "error": {
                    "code": -32700 if status_code == 401 else -32603,
                    "message": message
                },
                "id": request_id
            }
        else:
            return {
                "error": message,
                "status": status_code
            }

    async def __call__(self, request: Request, call_next):
        """Process the request through the firewall."""
        if self.should_skip_auth(request):
            if self.log_attempts:
                logger.debug(f"Skipping auth for {request.method} {request.url.path}")
            return await call_next(request)

        storage = self.firewall.token_storage
        initial = getattr(request.state, REQUEST_STATE_TOKEN, None)

        with storage.scope(initial):
            try:
                result = await self.firewall.authenticate(request)
            except (InvalidUsageError, LogicError) as e:
                # Setup bugs: surface as server errors, never as auth failures
                logger.error(f"Firewall {self.firewall.name} misconfigured: {e}")
                return JSONResponse(
                    status_code=500,
                    content=self.format_error(500, "Internal error during authentication")
                )

            if result.response is not None:
                if self.log_attempts:
                    logger.info(
                        f"Firewall {self.firewall.name} answered {request.method} {request.url.path} "
                        f"with status {result.response.status_code}"
                    )
                return result.response

            if self.log_attempts and result.token is not None:
                logger.debug(f"Request to {request.url.path} authenticated as {result.identity}")

            # Store authentication info for downstream use
            request.state.security_token = result.token
            request.state.firewall = self.firewall

            return await call_next(request)


def create_firewall_middleware(
    firewall: Firewall,
    skip_paths: Optional[List[str]] = None,
    error_format: str = "json"
) -> FirewallMiddleware:
    """
    Factory function to create firewall middleware.

    Args:
        firewall: Firewall built by FirewallFactory
        skip_paths: Paths skipped for every method
        error_format: "json" or "jsonrpc" error format

    Returns:
        Configured FirewallMiddleware instance
    """
    default_skip_paths = {
        "/health": ["GET"],
        "/metrics": ["GET"],
    }

    for path in skip_paths or []:
        default_skip_paths[path] = ["*"]

    return FirewallMiddleware(
        firewall=firewall,
        skip_paths=default_skip_paths,
        error_format=error_format
    )


# Module interface - what this module provides
__all__ = [
    "FirewallMiddleware",
    "create_firewall_middleware",
    "REQUEST_STATE_TOKEN",
]
