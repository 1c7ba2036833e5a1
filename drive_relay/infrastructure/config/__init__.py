"""
Configuration infrastructure: dataclass models and the file/environment loader.
"""

from .models import (
    ApplicationConfig, ServerConfig, DriveConfig, UploadConfig,
    CredentialsConfig, LoggingConfig, SecurityConfig
)
from .loader import ConfigLoader

__all__ = [
    "ApplicationConfig",
    "ServerConfig",
    "DriveConfig",
    "UploadConfig",
    "CredentialsConfig",
    "LoggingConfig",
    "SecurityConfig",
    "ConfigLoader",
]
