"""
Lifecycle interfaces for components that hold resources between requests.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class IStartable(ABC):
    """Interface for components that can be started."""

    @abstractmethod
    async def start(self) -> None:
        """
        Acquire the resources the component needs (connection pools and the like).

        Raises:
            Exception: If the component fails to start.
        """
        pass


class IStoppable(ABC):
    """Interface for components that can be stopped."""

    @abstractmethod
    async def stop(self) -> None:
        """Release resources. Must be safe to call on a component that never started."""
        pass


class IHealthCheckable(ABC):
    """Interface for components that can report their health status."""

    @abstractmethod
    async def check_health(self) -> Dict[str, Any]:
        """
        Check the health status of the component.

        Returns:
            Dict with at least:
            - 'healthy': bool
            - 'status': str describing current status
            - 'details': Dict with additional health details
        """
        pass


class IComponent(IStartable, IStoppable, IHealthCheckable):
    """Base interface for long-lived application components."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the component name."""
        pass
