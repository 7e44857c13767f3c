"""
API Server package for the NFTrek web client.

This package provides a FastAPI-based REST API that runs mint attempts,
streams their progress over WebSockets and lists a wallet's collection.
"""

from .main import NFTrekAPIServer, create_api_server

__all__ = ["NFTrekAPIServer", "create_api_server"]
