#!/usr/bin/env python3
"""
Warden - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Builds the firewall
3. Runs the API server

All authentication logic is in the modules, following black box principles.
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

import redis.asyncio as redis
import uvicorn
from fastapi import FastAPI, HTTPException, Request

from warden.config.provider import ConfigProvider, EnvConfigProvider
from warden.logging_config import configure_logging
from warden.modules.auth.factory import FirewallFactory
from warden.modules.auth.models import AnonymousToken
from warden.modules.auth.service import Firewall
from warden.modules.middleware import create_firewall_middleware

logger = logging.getLogger(__name__)


def get_redis_client(provider: ConfigProvider) -> redis.Redis:
    """Create Redis client from configuration (connections open lazily)."""
    redis_config = provider.get_redis_config()
    return redis.from_url(
        redis_config.url,
        password=redis_config.password,  # Passed separately to avoid URL encoding issues
        encoding="utf-8",
        decode_responses=True,
    )


def create_app(
    firewall: Firewall,
    skip_paths: Optional[List[str]] = None,
    redis_client: Optional[redis.Redis] = None,
) -> FastAPI:
    """Create the API application protected by the given firewall."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Warden API started (firewall {firewall.name})")

        yield

        logger.info("Shutting down Warden API...")
        if redis_client:
            await redis_client.close()

    app = FastAPI(title="Warden", lifespan=lifespan)
    firewall_middleware = create_firewall_middleware(firewall, skip_paths=skip_paths)

    @app.middleware("http")
    async def run_firewall(request: Request, call_next):
        return await firewall_middleware(request, call_next)

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.get("/me")
    async def me(request: Request):
        token = getattr(request.state, "security_token", None)
        if token is None or isinstance(token, AnonymousToken):
            raise HTTPException(status_code=401, detail="Authentication required")
        return token.to_dict()

    @app.get("/login")
    async def login(error: Optional[str] = None):
        return {"login_check": "POST username and password to the login check path", "error": error}

    return app


def build_app(provider: Optional[ConfigProvider] = None) -> FastAPI:
    """Build Redis client, firewall and application from configuration."""
    provider = provider or EnvConfigProvider()

    redis_client = get_redis_client(provider)
    firewall = FirewallFactory.build(provider, redis_client=redis_client)

    return create_app(
        firewall,
        skip_paths=provider.get_firewall_config().skip_paths,
        redis_client=redis_client,
    )


def main():
    """Run the API server."""
    provider = EnvConfigProvider()
    api_config = provider.get_api_config()
    configure_logging(api_config.log_level)

    uvicorn.run(build_app(provider), host=api_config.host, port=api_config.port, log_config=None)


if __name__ == "__main__":
    main()
