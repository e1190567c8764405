"""API package for SQL Smart Search"""

from . import health, search

__all__ = ["health", "search"]
