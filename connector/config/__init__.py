"""Configuration module for the Opal Authentik connector."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
