"""Singleton management for the MCP query gateway.

The connection gateway is the only process-wide object. It is created here,
at the composition root, and handed to the tool registry explicitly.
"""

from functools import lru_cache
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# Global singletons
_connection_gateway: Optional["ConnectionGateway"] = None


@lru_cache()
def get_app_config() -> "AppConfig":
    """Get the cached AppConfig instance."""
    from core.config import AppConfig
    config = AppConfig.from_env()
    logger.info(f"Loaded AppConfig: {config.database.db_type} @ {config.database.server}")
    return config


def get_connection_gateway(app_config: Optional["AppConfig"] = None) -> "ConnectionGateway":
    """Get the singleton ConnectionGateway instance.

    Args:
        app_config: Optional AppConfig. If None, uses get_app_config()

    Returns:
        ConnectionGateway instance (singleton)
    """
    global _connection_gateway

    if _connection_gateway is None:
        from database.gateway import ConnectionGateway

        app_cfg = app_config if app_config is not None else get_app_config()
        _connection_gateway = ConnectionGateway(app_cfg.database)
        logger.info("Initialized ConnectionGateway singleton")

    return _connection_gateway


async def shutdown_gateway():
    """Close the gateway pool, if one was ever opened."""
    global _connection_gateway
    if _connection_gateway is not None:
        await _connection_gateway.disconnect()
        _connection_gateway = None


def reset_singletons():
    """Reset all singletons (useful for testing)."""
    global _connection_gateway
    _connection_gateway = None
    get_app_config.cache_clear()
    logger.info("Reset all singletons")
