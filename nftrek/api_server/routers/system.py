"""
System router - service status and provider configuration.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends

from nftrek import __version__
from nftrek.config import AppConfig
from nftrek.integrations.image_storage_manager import ImageStorageManager

from ..dependencies import DependencyContainer, get_dependency_container, get_registry, get_settings
from ..services import OrchestratorRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/status")
async def get_system_status(
    settings: AppConfig = Depends(get_settings),
    registry: OrchestratorRegistry = Depends(get_registry),
    container: DependencyContainer = Depends(get_dependency_container),
):
    """Overall service status: configured providers and active sessions."""
    storage = ImageStorageManager.from_config(settings.storage)
    storage_status = {client.name: client.is_configured() for client in storage.clients}
    storage_status["embed_threshold_bytes"] = storage.embed_threshold_bytes

    return {
        "service": "nftrek_api",
        "version": __version__,
        "timestamp": datetime.now().isoformat(),
        "providers": {
            "mint_rpc": bool(settings.mint.rpc_url),
            "geocode": {
                "opencage": bool(settings.geocode.opencage_api_key),
                "nominatim": True,
            },
            "storage": storage_status,
        },
        "sessions": registry.summary(),
        "status_clients": container.status_manager.connection_count(),
        "dependencies": container.get_health_status(),
    }
