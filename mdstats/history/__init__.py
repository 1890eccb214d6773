"""Configuration history storage."""

from .store import ConfigurationHistory

__all__ = ["ConfigurationHistory"]
