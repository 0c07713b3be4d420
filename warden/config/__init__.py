"""
Config Module - Black Box Interface

Purpose: Typed configuration for the firewall and its collaborators
Interface: ConfigProvider protocol, EnvConfigProvider
Hidden: Environment parsing, defaults

Can be replaced with different config systems by implementing ConfigProvider.
"""

from .provider import (
    APIConfig,
    ApiKeyConfig,
    ConfigProvider,
    EnvConfigProvider,
    FirewallConfig,
    JWTConfig,
    RedisConfig,
    RememberMeConfig,
)

__all__ = [
    "APIConfig",
    "ApiKeyConfig",
    "ConfigProvider",
    "EnvConfigProvider",
    "FirewallConfig",
    "JWTConfig",
    "RedisConfig",
    "RememberMeConfig",
]
