"""Configuration module for bizledger."""

from bizledger.config.logging import bind_user, configure_logging, get_logger
from bizledger.config.settings import FlatSettings, get_settings

__all__ = ["FlatSettings", "get_settings", "configure_logging", "get_logger", "bind_user"]
