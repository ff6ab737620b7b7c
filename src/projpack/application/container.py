"""
Application service container.

Wires the configuration and services together for use by interface layers
(the CLI, or any other front end embedding projpack).
"""

from typing import Optional

from loguru import logger

from ..core.config import PackConfig, get_default_config
from .services.pack_service import PackService


class ServiceContainer:
    """Holds the configuration and lazily builds the pack service."""

    def __init__(self, config: Optional[PackConfig] = None):
        self._config = config or get_default_config()
        self._pack_service: Optional[PackService] = None

    @property
    def config(self) -> PackConfig:
        return self._config

    @property
    def pack_service(self) -> PackService:
        """Get or create the pack service."""
        if self._pack_service is None:
            self._pack_service = PackService(config=self._config)
            logger.debug("Pack service initialized")
        return self._pack_service

    def configure(self, config: PackConfig) -> None:
        """Replace the configuration; the service is rebuilt on next access."""
        self._config = config
        self._pack_service = None

    def reset(self):
        """Reset the service container (useful for testing)."""
        self._config = get_default_config()
        self._pack_service = None
        logger.debug("Service container reset")


# Global service container instance
_service_container: Optional[ServiceContainer] = None


def get_service_container() -> ServiceContainer:
    """Get the global service container instance."""
    global _service_container
    if _service_container is None:
        _service_container = ServiceContainer()
    return _service_container


def set_service_container(container: ServiceContainer):
    """Set the global service container (useful for testing)."""
    global _service_container
    _service_container = container
