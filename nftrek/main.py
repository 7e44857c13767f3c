"""
Main entry point for the NFTrek service.

Two commands are available:
1. serve: run the API server for the web client
2. mint: run one mint attempt from the command line, for a photo on disk
   and coordinates given as arguments
"""

import argparse
import asyncio
import logging
from typing import List, Optional

import uvicorn

from nftrek.config import settings
from nftrek.core.location import StaticPositionSource
from nftrek.core.models import StatusUpdate
from nftrek.core.orchestrator import MintOrchestrator
from nftrek.exceptions import NFTrekBaseException
from nftrek.utils.data_url import data_url_from_file
from nftrek.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nftrek", description="Mint geo-tagged photos as compressed NFTs")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default=settings.server.host)
    serve.add_argument("--port", type=int, default=settings.server.port)

    mint = subparsers.add_parser("mint", help="Mint one photo from the command line")
    mint.add_argument("--image", required=True, help="Path to the photo")
    mint.add_argument("--owner", required=True, help="Wallet address that will own the NFT")
    mint.add_argument("--lat", type=float, required=True, help="Latitude of the photo")
    mint.add_argument("--lon", type=float, required=True, help="Longitude of the photo")

    return parser


def print_status(update: StatusUpdate) -> None:
    print(f"[{update.status.value}] {update.message}")


async def run_mint(image_path: str, owner: str, latitude: float, longitude: float) -> int:
    """Run one attempt and report it on stdout; returns a process exit code."""
    image = data_url_from_file(image_path)
    source = StaticPositionSource(latitude=latitude, longitude=longitude)
    orchestrator = MintOrchestrator.from_config(settings, position_source=source, session_id="cli")
    orchestrator.subscribe(print_status)

    try:
        result = await orchestrator.run(image, owner)
    except NFTrekBaseException as e:
        print(f"Error: {e.user_message} ({e})")
        return 1
    except Exception as e:
        logger.error(f"Mint failed: {e}", exc_info=True)
        print(f"Error: {e}")
        return 1
    finally:
        orchestrator.dispose()

    print(f"Asset ID: {result.asset_id}")
    for warning in orchestrator.last_attempt.warnings:
        print(f"Warning: {warning}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(settings.log_level, settings.log_format, settings.log_file)

    if args.command == "serve":
        from nftrek.api_server import create_api_server

        app = create_api_server(settings)
        logger.info(f"Starting NFTrek API on {args.host}:{args.port}")
        uvicorn.run(app, host=args.host, port=args.port, log_config=None)
        return 0

    return asyncio.run(run_mint(args.image, args.owner, args.lat, args.lon))
