"""Configuration module for the OAuth service client."""

from oauthdb.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
