"""
Services module for API server utilities.
"""

from .session_registry import OrchestratorRegistry
from .websocket_manager import StatusWebSocketManager

__all__ = ["OrchestratorRegistry", "StatusWebSocketManager"]
