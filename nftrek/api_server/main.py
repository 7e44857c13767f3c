"""
Main FastAPI server with modular router architecture.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from nftrek import __version__
from nftrek.config import AppConfig, get_settings
from nftrek.core.orchestrator import MintOrchestrator
from nftrek.integrations.das_rpc_client import AssetGalleryClient

from .dependencies import DependencyContainer
from .routers import gallery, mint, system
from .services import OrchestratorRegistry, StatusWebSocketManager
from .services.session_registry import OrchestratorFactory

logger = logging.getLogger(__name__)


class NFTrekAPIServer:
    """API server for the NFTrek web client."""

    def __init__(
        self,
        settings: Optional[AppConfig] = None,
        orchestrator_factory: Optional[OrchestratorFactory] = None,
        gallery_client: Optional[AssetGalleryClient] = None,
    ):
        self.settings = settings or get_settings()
        self._start_time = datetime.now()

        self.app = FastAPI(
            title="NFTrek API",
            description="Mint geo-tagged photos as compressed NFTs",
            version=__version__,
            lifespan=self._lifespan,
        )

        self.status_manager = StatusWebSocketManager()
        self.registry = OrchestratorRegistry(
            orchestrator_factory or self._default_factory,
            self.status_manager,
            idle_ttl_seconds=self.settings.server.session_idle_ttl_seconds,
            max_sessions=self.settings.server.max_sessions,
        )
        self.gallery_client = gallery_client or AssetGalleryClient.from_config(self.settings.mint)

        self.container = DependencyContainer()
        self.container.initialize(self.settings, self.registry, self.status_manager, self.gallery_client)
        self.app.state.container = self.container

        self._setup_middleware()
        self._setup_routers()
        self._setup_websocket_routes()

    def _default_factory(self, session_id: str) -> MintOrchestrator:
        return MintOrchestrator.from_config(self.settings, session_id=session_id)

    def _setup_middleware(self):
        """Configure CORS for the web client."""
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=self.settings.server.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _setup_routers(self):
        self.app.include_router(mint.router)
        self.app.include_router(gallery.router)
        self.app.include_router(system.router)

        @self.app.get("/health")
        async def root_health_check():
            """Root-level health check endpoint for container orchestration."""
            return {
                "status": "healthy",
                "timestamp": datetime.now().isoformat(),
                "uptime_seconds": (datetime.now() - self._start_time).total_seconds(),
                "service": "nftrek_api",
            }

    def _setup_websocket_routes(self):
        @self.app.websocket("/ws/status/{session_id}")
        async def websocket_status(websocket: WebSocket, session_id: str):
            """Stream a session's pipeline status updates."""
            await self.status_manager.connect(session_id, websocket)
            orchestrator = self.registry.get(session_id)
            if orchestrator is not None:
                await websocket.send_json({
                    "status": orchestrator.status.value,
                    "message": None,
                    "session_id": session_id,
                })
            try:
                while True:
                    # Keep the connection open; clients do not send anything meaningful
                    await websocket.receive_text()
            except WebSocketDisconnect:
                self.status_manager.disconnect(session_id, websocket)

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        yield
        self.registry.dispose_all()
        logger.info("NFTrek API shut down, sessions disposed")


def create_api_server(
    settings: Optional[AppConfig] = None,
    orchestrator_factory: Optional[OrchestratorFactory] = None,
    gallery_client: Optional[AssetGalleryClient] = None,
) -> FastAPI:
    """Factory function to create the API server."""
    server = NFTrekAPIServer(settings, orchestrator_factory, gallery_client)
    return server.app
