"""
Gallery router - lists the NFTrek assets a wallet owns.
"""

import logging

import httpx
from fastapi import APIRouter, Depends

from nftrek.exceptions import NFTrekBaseException
from nftrek.integrations.das_rpc_client import AssetGalleryClient

from ..dependencies import get_gallery_client
from ..schemas import ErrorResponse, GalleryItem, GalleryResponse
from .mint import error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/gallery", tags=["gallery"])


@router.get("/{owner}", response_model=GalleryResponse, responses={
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
})
async def get_gallery(owner: str, gallery_client: AssetGalleryClient = Depends(get_gallery_client)):
    """Collection assets owned by a wallet, newest first."""
    try:
        assets = await gallery_client.fetch_collection(owner)
    except (NFTrekBaseException, httpx.HTTPError) as e:
        logger.error(f"Error fetching gallery for {owner}: {e}")
        return error_response(e, {"owner": owner})

    items = [GalleryItem(**AssetGalleryClient.to_gallery_item(asset)) for asset in assets]
    return GalleryResponse(owner=owner, count=len(items), items=items)
