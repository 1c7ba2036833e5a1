"""
Upload services for the Drive Relay application.

This module provides the upload manager (session initiation, single-shot and
chunked relays, expiry sweeping) and the chunk range arithmetic it relies on.
"""

from .chunking import chunk_range, iter_ranges, total_chunks
from .manager import UploadManager

__all__ = [
    "UploadManager",
    "chunk_range",
    "iter_ranges",
    "total_chunks",
]
