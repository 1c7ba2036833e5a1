"""
API routers.
"""

from . import health, sessions, upload

__all__ = [
    "health",
    "sessions",
    "upload",
]
