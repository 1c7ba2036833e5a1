"""
Backend credential providers.
"""

from .providers import (
    StaticTokenProvider, OAuth2RefreshTokenProvider, create_credential_provider
)

__all__ = [
    "StaticTokenProvider",
    "OAuth2RefreshTokenProvider",
    "create_credential_provider",
]
