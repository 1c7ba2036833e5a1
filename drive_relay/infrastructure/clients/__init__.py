"""
Storage backend clients.
"""

from .drive import GoogleDriveClient

__all__ = [
    "GoogleDriveClient",
]
