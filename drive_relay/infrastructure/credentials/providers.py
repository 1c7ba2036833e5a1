"""
Credential providers for the storage backend.

``OAuth2RefreshTokenProvider`` exchanges a long-lived refresh token for
short-lived access tokens and reuses an access token only while it is inside
its declared lifetime (minus a safety margin). ``StaticTokenProvider`` serves
a fixed token and is meant for development and tests.
"""

import asyncio
import logging
import time
from typing import Callable, Optional

import aiohttp

from ...core.domain.errors import AuthError
from ...core.interfaces.lifecycle import IStartable, IStoppable
from ...core.interfaces.upload import ICredentialProvider
from ..config.models import CredentialsConfig

logger = logging.getLogger(__name__)


class StaticTokenProvider(ICredentialProvider):
    """Provider returning a preconfigured token."""

    def __init__(self, token: Optional[str]) -> None:
        self._token = token

    async def get_access_token(self) -> str:
        if not self._token:
            raise AuthError("No static access token configured")
        return self._token


class OAuth2RefreshTokenProvider(ICredentialProvider, IStartable, IStoppable):
    """OAuth2 refresh-token grant against a token endpoint."""

    def __init__(
        self,
        config: CredentialsConfig,
        clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._config = config
        self._clock = clock
        self._session: Optional[aiohttp.ClientSession] = None
        self._token: Optional[str] = None
        self._expires_at = 0.0
        self._refresh_lock = asyncio.Lock()

    def _client(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.request_timeout)
            )
        return self._session

    async def start(self) -> None:
        self._client()

    async def stop(self) -> None:
        if self._session is not None:
            await self._session.close()
        self._session = None
        self._token = None

    def _token_is_fresh(self) -> bool:
        return self._token is not None and self._clock() < self._expires_at

    async def get_access_token(self) -> str:
        if self._token_is_fresh():
            return self._token  # type: ignore[return-value]

        async with self._refresh_lock:
            if self._token_is_fresh():
                return self._token  # type: ignore[return-value]
            return await self._refresh()

    async def _refresh(self) -> str:
        config = self._config
        if not (config.client_id and config.client_secret and config.refresh_token):
            raise AuthError("OAuth2 client credentials are not configured")

        form = {
            "grant_type": "refresh_token",
            "client_id": config.client_id,
            "client_secret": config.client_secret,
            "refresh_token": config.refresh_token,
        }

        try:
            async with self._client().post(config.token_uri, data=form) as response:
                payload = await response.json(content_type=None)
                if not isinstance(payload, dict):
                    raise ValueError(f"unexpected token response: {type(payload).__name__}")
                if response.status != 200:
                    reason = payload.get("error_description") or payload.get("error")
                    logger.error(f"Token refresh rejected ({response.status}): {reason}")
                    raise AuthError(
                        "Failed to refresh OAuth2 access token",
                        details=str(reason) if reason else None
                    )
            token = payload.get("access_token")
            expires_in = float(payload.get("expires_in", 0))
        except AuthError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, TypeError, ValueError) as e:
            logger.error(f"Token refresh failed: {e}")
            raise AuthError("Failed to refresh OAuth2 access token", details=str(e)) from e

        if not token or not isinstance(token, str):
            raise AuthError("Token endpoint returned no access token")

        self._token = token
        self._expires_at = self._clock() + max(0.0, expires_in - config.expiry_margin)

        logger.debug(f"Access token refreshed, valid for {expires_in:.0f}s")
        return token


def create_credential_provider(config: CredentialsConfig) -> ICredentialProvider:
    """Build the provider selected by configuration."""
    if config.provider == "static":
        return StaticTokenProvider(config.static_token)
    if config.provider == "oauth2":
        return OAuth2RefreshTokenProvider(config)
    raise ValueError(f"Unknown credential provider: {config.provider}")
