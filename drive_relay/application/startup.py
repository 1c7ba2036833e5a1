"""
Application startup and configuration logic.

This module builds the upload relay's components from configuration and
manages their startup and shutdown sequence.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.interfaces.lifecycle import IStartable, IStoppable
from ..core.interfaces.upload import (
    ICredentialProvider, ISessionStore, IStorageBackend, IUploadManager
)
from ..infrastructure.clients.drive import GoogleDriveClient
from ..infrastructure.config.models import ApplicationConfig
from ..infrastructure.credentials.providers import create_credential_provider
from ..infrastructure.services.upload.manager import UploadManager
from ..infrastructure.storage.memory import InMemorySessionStore

logger = logging.getLogger(__name__)


class ApplicationStartup:
    """
    Manages application startup and service configuration.

    Components are started in dependency order (credentials, backend client,
    upload manager) and stopped in reverse order.
    """

    def __init__(
        self,
        config: ApplicationConfig,
        store: Optional[ISessionStore] = None,
        credentials: Optional[ICredentialProvider] = None,
        backend: Optional[IStorageBackend] = None
    ) -> None:
        self._config = config
        self._started_components: List[Any] = []

        self.session_store: ISessionStore = store or InMemorySessionStore()
        self.credentials: ICredentialProvider = (
            credentials or create_credential_provider(config.credentials)
        )
        self.backend: IStorageBackend = backend or GoogleDriveClient(
            config.drive, relay_timeout=config.upload.relay_timeout
        )
        self.upload_manager: IUploadManager = UploadManager(
            store=self.session_store,
            credentials=self.credentials,
            backend=self.backend,
            config=config.upload
        )

        self._startup_order: List[Any] = [
            self.credentials,
            self.backend,
            self.upload_manager,
        ]

    @property
    def config(self) -> ApplicationConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        return bool(self._started_components)

    async def start_application(self) -> None:
        """
        Start all application components in the correct order.

        If a component fails to start, the components started before it are
        stopped again and the error is re-raised.
        """
        logger.info("Starting application components...")

        for component in self._startup_order:
            if not isinstance(component, IStartable):
                continue

            component_name = _component_name(component)
            try:
                logger.debug(f"Starting component: {component_name}")
                await component.start()
                self._started_components.append(component)
                logger.info(f"Started component: {component_name}")
            except Exception as e:
                logger.error(f"Failed to start component {component_name}: {e}")
                await self.stop_application()
                raise

        logger.info("Application startup completed successfully")

    async def stop_application(self) -> None:
        """Stop all started components in reverse order."""
        logger.info("Stopping application components...")

        for component in reversed(self._started_components):
            component_name = _component_name(component)
            try:
                if isinstance(component, IStoppable):
                    await component.stop()
                    logger.info(f"Stopped component: {component_name}")
            except Exception as e:
                logger.error(f"Error stopping component {component_name}: {e}")
                # Continue stopping other components

        self._started_components.clear()
        logger.info("Application shutdown completed")

    async def check_health(self) -> Dict[str, Any]:
        """Collect the health report of every health-checkable component."""
        components: Dict[str, Any] = {}
        for component in (self.backend, self.upload_manager):
            try:
                components[component.name] = await component.check_health()
            except Exception as e:
                components[component.name] = {
                    "healthy": False,
                    "status": "error",
                    "details": {"error": str(e)}
                }
        return components


def _component_name(component: Any) -> str:
    return getattr(component, "name", type(component).__name__)
