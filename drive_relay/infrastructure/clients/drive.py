"""
Google Drive resumable-upload client.

Speaks the two halves of the protocol: opening a resumable session (which
yields a capability URL in the ``Location`` header) and writing bytes to that
URL, either whole or as ``Content-Range`` addressed chunks.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from ...core.domain.errors import BackendError, RelayTimeoutError
from ...core.domain.session import FileDescriptor
from ...core.interfaces.upload import BackendReply, IStorageBackend
from ..config.models import DriveConfig

logger = logging.getLogger(__name__)


def extract_error_message(body: str, default: str) -> str:
    """Pull ``error.message`` out of a Google API error body."""
    try:
        data = json.loads(body)
    except ValueError:
        return default
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
    return default


class GoogleDriveClient(IStorageBackend):
    """aiohttp-based client for the Drive v3 resumable upload endpoint."""

    def __init__(self, config: DriveConfig, relay_timeout: float) -> None:
        self._config = config
        self._relay_timeout = relay_timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self._stats = {
            "sessions_opened": 0,
            "writes": 0,
            "timeouts": 0,
        }

    @property
    def name(self) -> str:
        return "GoogleDriveClient"

    async def start(self) -> None:
        if self._session is not None:
            return
        # Per-request timeouts are set on each call
        self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=None))
        logger.info("Google Drive client started")

    async def stop(self) -> None:
        if self._session is None:
            return
        await self._session.close()
        self._session = None
        logger.info("Google Drive client stopped")

    async def check_health(self) -> Dict[str, Any]:
        running = self._session is not None and not self._session.closed
        return {
            "healthy": running,
            "status": "running" if running else "stopped",
            "details": {
                "upload_endpoint": self._config.upload_endpoint,
                "relay_timeout": self._relay_timeout,
                "statistics": dict(self._stats),
            }
        }

    def _client(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError("Google Drive client is not started")
        return self._session

    async def open_resumable_session(
        self,
        access_token: str,
        file_name: str,
        file_size: int,
        mime_type: str
    ) -> str:
        metadata: Dict[str, Any] = {"name": file_name}
        if self._config.parent_folder_id:
            metadata["parents"] = [self._config.parent_folder_id]

        params = {"uploadType": "resumable"}
        if self._config.supports_all_drives:
            params["supportsAllDrives"] = "true"

        headers = {
            "Authorization": f"Bearer {access_token}",
            "X-Upload-Content-Type": mime_type,
            "X-Upload-Content-Length": str(file_size),
        }

        timeout = aiohttp.ClientTimeout(total=self._config.session_open_timeout)

        try:
            async with self._client().post(
                self._config.upload_endpoint,
                params=params,
                json=metadata,
                headers=headers,
                timeout=timeout,
                allow_redirects=False
            ) as response:
                body = await response.text()
                if response.status != 200:
                    message = extract_error_message(body, "Failed to initialize upload")
                    logger.warning(
                        f"Backend refused resumable session for {file_name!r}: "
                        f"{response.status} {message}")
                    raise BackendError(
                        f"{message} ({response.status})",
                        backend_status=response.status,
                        details=body or None
                    )

                upload_url = response.headers.get("Location")
        except asyncio.TimeoutError as e:
            raise RelayTimeoutError("Timed out opening backend upload session") from e
        except aiohttp.ClientError as e:
            raise BackendError(f"Failed to create backend session: {e}") from e

        if not upload_url:
            raise BackendError("No upload URL received from backend", backend_status=200)

        self._stats["sessions_opened"] += 1
        return upload_url

    async def put_bytes(
        self,
        upload_url: str,
        access_token: str,
        body: bytes,
        mime_type: str,
        content_range: Optional[str] = None
    ) -> BackendReply:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": mime_type,
        }
        if content_range is not None:
            headers["Content-Range"] = content_range

        timeout = aiohttp.ClientTimeout(total=self._relay_timeout)

        try:
            # 308 means "resume incomplete" here, not a redirect
            async with self._client().put(
                upload_url,
                data=body,
                headers=headers,
                timeout=timeout,
                allow_redirects=False
            ) as response:
                text = await response.text()
                status = response.status
        except asyncio.TimeoutError as e:
            self._stats["timeouts"] += 1
            logger.warning(f"Relay write timed out after {self._relay_timeout}s ({content_range or 'whole body'})")
            raise RelayTimeoutError(
                "Relay to backend timed out; the same byte range may be resent"
            ) from e
        except aiohttp.ClientError as e:
            logger.error(f"Relay write failed: {e}")
            raise BackendError(f"Relay to backend failed: {e}") from e

        self._stats["writes"] += 1

        parsed: Optional[Dict[str, Any]] = None
        if text:
            try:
                loaded = json.loads(text)
                if isinstance(loaded, dict):
                    parsed = loaded
            except ValueError:
                parsed = None

        return BackendReply(status=status, body=text, json=parsed)

    def describe_file(self, file_id: str) -> FileDescriptor:
        return FileDescriptor(
            file_id=file_id,
            view_url=self._config.view_url_template.format(file_id=file_id),
            download_url=self._config.download_url_template.format(file_id=file_id)
        )
