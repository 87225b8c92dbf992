"""
Hello Directory

Greeting endpoint behind a cache-aside layer, plus a user directory
backed by a relational store.
"""

from .constants import APP_VERSION

__version__ = APP_VERSION
