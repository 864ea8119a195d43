"""
slokeeper configuration.

Pydantic-based settings read from environment variables and .env files.
"""

from slokeeper.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
