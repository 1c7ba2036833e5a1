"""
Session storage implementations.
"""

from .memory import InMemorySessionStore

__all__ = [
    "InMemorySessionStore",
]
