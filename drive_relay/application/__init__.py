"""
Application layer containing startup and component wiring.

This layer builds the infrastructure components from configuration and
manages their lifecycle.
"""

from .startup import ApplicationStartup

__all__ = [
    "ApplicationStartup",
]
