"""
Configuration models and data structures.

This module defines the configuration models used throughout the application,
providing type safety and validation for configuration values.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

MIB = 1024 * 1024

# Google Drive rejects non-final chunks whose size is not a multiple of 256 KiB
CHUNK_ALIGNMENT = 256 * 1024


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class DriveConfig:
    """Google Drive backend configuration."""
    upload_endpoint: str = "https://www.googleapis.com/upload/drive/v3/files"
    parent_folder_id: Optional[str] = None
    supports_all_drives: bool = True
    view_url_template: str = "https://drive.google.com/file/d/{file_id}/view"
    download_url_template: str = "https://drive.google.com/uc?id={file_id}"
    session_open_timeout: float = 30.0


@dataclass
class UploadConfig:
    """Upload session and relay configuration."""
    single_shot_threshold: int = 6 * MIB
    chunk_size: int = 5 * MIB
    max_file_size: Optional[int] = None
    session_max_age: int = 3600
    relay_timeout: float = 600.0


@dataclass
class CredentialsConfig:
    """Backend credential configuration."""
    provider: str = "oauth2"  # "oauth2" or "static"
    token_uri: str = "https://oauth2.googleapis.com/token"
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    refresh_token: Optional[str] = None
    static_token: Optional[str] = None
    expiry_margin: float = 60.0
    request_timeout: float = 30.0


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_directory: str = "logs"
    max_file_size: str = "10MB"
    backup_count: int = 5
    console_enabled: bool = True
    file_enabled: bool = True


@dataclass
class SecurityConfig:
    """Security configuration."""
    shared_secret: Optional[str] = None
    allowed_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    allowed_headers: List[str] = field(default_factory=lambda: [
        "Content-Type", "Content-Length", "Content-Range", "Authorization"
    ])
    allowed_methods: List[str] = field(default_factory=lambda: [
        "GET", "POST", "PUT", "DELETE"
    ])


@dataclass
class ApplicationConfig:
    """Main application configuration."""

    # Basic application settings
    name: str = "Drive Relay"
    version: str = "0.1.0"
    debug: bool = False
    environment: str = "production"

    # Component configurations
    server: ServerConfig = field(default_factory=ServerConfig)
    drive: DriveConfig = field(default_factory=DriveConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    credentials: CredentialsConfig = field(default_factory=CredentialsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)

    config_file_path: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate_port()
        self._validate_upload()
        self._validate_timeouts()
        self._validate_credentials()

    def _validate_port(self) -> None:
        if not (1 <= self.server.port <= 65535):
            raise ValueError(
                f"Server port must be between 1 and 65535, got {self.server.port}")

    def _validate_upload(self) -> None:
        upload = self.upload

        if upload.chunk_size <= 0:
            raise ValueError(f"Chunk size must be positive, got {upload.chunk_size}")
        if upload.chunk_size % CHUNK_ALIGNMENT != 0:
            raise ValueError(
                f"Chunk size must be a multiple of {CHUNK_ALIGNMENT} bytes, "
                f"got {upload.chunk_size}")
        if upload.single_shot_threshold <= 0:
            raise ValueError(
                f"Single-shot threshold must be positive, got {upload.single_shot_threshold}")
        if upload.max_file_size is not None and upload.max_file_size <= 0:
            raise ValueError(
                f"Maximum file size must be positive, got {upload.max_file_size}")
        if upload.session_max_age <= 0:
            raise ValueError(
                f"Session max age must be positive, got {upload.session_max_age}")

    def _validate_timeouts(self) -> None:
        timeouts = [
            ("Relay timeout", self.upload.relay_timeout),
            ("Session open timeout", self.drive.session_open_timeout),
            ("Token request timeout", self.credentials.request_timeout),
        ]

        for name, timeout in timeouts:
            if timeout <= 0:
                raise ValueError(f"{name} must be positive, got {timeout}")

    def _validate_credentials(self) -> None:
        if self.credentials.provider not in ("oauth2", "static"):
            raise ValueError(
                f"Unknown credential provider: {self.credentials.provider}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApplicationConfig':
        """Create configuration from dictionary."""
        return cls(
            name=data.get('name', 'Drive Relay'),
            version=data.get('version', '0.1.0'),
            debug=data.get('debug', False),
            environment=data.get('environment', 'production'),
            server=ServerConfig(**data.get('server', {})),
            drive=DriveConfig(**data.get('drive', {})),
            upload=UploadConfig(**data.get('upload', {})),
            credentials=CredentialsConfig(**data.get('credentials', {})),
            logging=LoggingConfig(**data.get('logging', {})),
            security=SecurityConfig(**data.get('security', {})),
            config_file_path=data.get('config_file_path')
        )
