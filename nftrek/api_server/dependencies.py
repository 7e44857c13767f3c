"""
Dependency injection for the API server.

Each app instance keeps its DependencyContainer on ``app.state.container``;
routers reach it through the get_* functions below.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request

from nftrek.config import AppConfig
from nftrek.integrations.das_rpc_client import AssetGalleryClient

from .services import OrchestratorRegistry, StatusWebSocketManager

logger = logging.getLogger(__name__)


class DependencyContainer:
    """Container for managing application dependencies."""

    def __init__(self):
        self._settings: Optional[AppConfig] = None
        self._registry: Optional[OrchestratorRegistry] = None
        self._status_manager: Optional[StatusWebSocketManager] = None
        self._gallery_client: Optional[AssetGalleryClient] = None
        self._initialized = False

    def initialize(
        self,
        settings: AppConfig,
        registry: OrchestratorRegistry,
        status_manager: StatusWebSocketManager,
        gallery_client: AssetGalleryClient,
    ):
        """Initialize the container with concrete instances."""
        self._settings = settings
        self._registry = registry
        self._status_manager = status_manager
        self._gallery_client = gallery_client
        self._initialized = True
        logger.info("Dependency container initialized")

    @property
    def settings(self) -> AppConfig:
        if not self._initialized or not self._settings:
            raise HTTPException(status_code=500, detail="Settings not configured")
        return self._settings

    @property
    def registry(self) -> OrchestratorRegistry:
        if not self._initialized or not self._registry:
            raise HTTPException(status_code=500, detail="Session registry not configured")
        return self._registry

    @property
    def status_manager(self) -> StatusWebSocketManager:
        if not self._initialized or not self._status_manager:
            raise HTTPException(status_code=500, detail="Status manager not configured")
        return self._status_manager

    @property
    def gallery_client(self) -> AssetGalleryClient:
        if not self._initialized or not self._gallery_client:
            raise HTTPException(status_code=500, detail="Gallery client not configured")
        return self._gallery_client

    def get_health_status(self) -> Dict[str, Any]:
        return {
            "initialized": self._initialized,
            "registry_ready": self._registry is not None,
            "status_manager_ready": self._status_manager is not None,
            "gallery_client_ready": self._gallery_client is not None,
        }


def get_dependency_container(request: Request) -> DependencyContainer:
    return request.app.state.container


def get_settings(container: DependencyContainer = Depends(get_dependency_container)) -> AppConfig:
    return container.settings


def get_registry(container: DependencyContainer = Depends(get_dependency_container)) -> OrchestratorRegistry:
    return container.registry


def get_status_manager(
    container: DependencyContainer = Depends(get_dependency_container),
) -> StatusWebSocketManager:
    return container.status_manager


def get_gallery_client(container: DependencyContainer = Depends(get_dependency_container)) -> AssetGalleryClient:
    return container.gallery_client
