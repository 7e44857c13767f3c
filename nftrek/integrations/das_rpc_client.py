"""
Compressed NFT RPC Clients

JSON-RPC 2.0 clients for the compressed NFT / Digital Asset Standard API
(e.g. Helius): minting with mintCompressedNft, verifying with getAsset and
listing a wallet's collection with getAssetsByOwner.

Minting is the only state-changing call in the pipeline and is never retried
here; a retry could mint a duplicate asset.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from ..config import MintConfig
from ..core.models import MintRequest, MintResult, VerificationResult
from ..exceptions import ConfigurationError, MintEmptyResultError, MintRpcError

logger = logging.getLogger(__name__)

IPFS_FALLBACK_GATEWAYS = [
    "https://ipfs.io/ipfs",
    "https://cloudflare-ipfs.com/ipfs",
    "https://gateway.pinata.cloud/ipfs",
]


class JsonRpcClient:
    """Minimal JSON-RPC 2.0 transport over HTTPS POST."""

    def __init__(self, rpc_url: Optional[str], timeout: float = 30.0):
        self.rpc_url = rpc_url
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.rpc_url)

    def _require_endpoint(self) -> str:
        if not self.rpc_url:
            raise ConfigurationError("Mint RPC URL is not configured (set MINT_RPC_URL)")
        return self.rpc_url

    async def call(self, method: str, params: Dict[str, Any], request_id: str) -> Dict[str, Any]:
        """
        Issue one JSON-RPC call and return the decoded response envelope.

        Raises:
            ConfigurationError: if no endpoint is configured (before any network call)
            httpx.HTTPError: on transport failures, or non-2xx responses without an RPC error body
        """
        url = self._require_endpoint()
        payload = {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": method,
            "params": params,
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
            try:
                body = response.json()
            except ValueError:
                body = None

            # RPC servers may pair an error object with a non-2xx status
            if isinstance(body, dict) and body.get("error"):
                return body
            response.raise_for_status()

        return body if isinstance(body, dict) else {}


def _rpc_error_message(error: Any, default: str) -> str:
    if isinstance(error, dict):
        return error.get("message") or default
    return str(error) or default


class MintClient(JsonRpcClient):
    """Mints compressed NFTs."""

    def __init__(self, rpc_url: Optional[str], timeout: float = 60.0):
        super().__init__(rpc_url, timeout)

    @classmethod
    def from_config(cls, config: MintConfig) -> "MintClient":
        return cls(config.rpc_url, config.request_timeout)

    async def mint(self, request: MintRequest) -> MintResult:
        """
        Mint one compressed NFT.

        Raises:
            ConfigurationError: endpoint unset, raised before any network call
            MintRpcError: the response carried an RPC error object
            MintEmptyResultError: the response carried neither error nor result
            httpx.HTTPError: transport failure
        """
        logger.info(f"MintClient: minting '{request.name}' for {request.owner}")
        body = await self.call("mintCompressedNft", request.to_rpc_params(), "nftrek-mint")

        error = body.get("error")
        if error:
            message = _rpc_error_message(error, "Failed to mint NFT")
            code = error.get("code") if isinstance(error, dict) else None
            logger.error(f"MintClient: RPC error {code}: {message}")
            raise MintRpcError(message, code)

        result = body.get("result")
        if not result:
            logger.error(f"MintClient: response carried no result: {body}")
            raise MintEmptyResultError()

        asset_id = result.get("assetId") if isinstance(result, dict) else None
        if not asset_id:
            logger.error(f"MintClient: result carried no assetId: {result}")
            raise MintEmptyResultError("Mint RPC result carried no assetId")

        logger.info(f"MintClient: minted asset {asset_id}")
        return MintResult(asset_id=asset_id)


class VerificationClient(JsonRpcClient):
    """Confirms a freshly minted asset is retrievable. Best effort, never raises."""

    @classmethod
    def from_config(cls, config: MintConfig) -> "VerificationClient":
        return cls(config.rpc_url, config.verify_timeout)

    async def verify(self, asset_id: str) -> VerificationResult:
        params = {"id": asset_id, "displayOptions": {"showFungible": True}}
        try:
            body = await self.call("getAsset", params, "nftrek-verify")
        except Exception as e:
            logger.warning(f"VerificationClient: getAsset for {asset_id} failed: {e}")
            return VerificationResult(asset_id=asset_id, verified=False, warning=f"Verification failed: {e}")

        error = body.get("error")
        if error:
            message = _rpc_error_message(error, "Failed to fetch NFT")
            logger.warning(f"VerificationClient: getAsset error for {asset_id}: {message}")
            return VerificationResult(asset_id=asset_id, verified=False, warning=f"Verification failed: {message}")

        asset = body.get("result")
        if not isinstance(asset, dict):
            logger.warning(f"VerificationClient: asset {asset_id} not found yet")
            return VerificationResult(asset_id=asset_id, verified=False, warning="Asset not found yet")

        image = ((asset.get("content") or {}).get("links") or {}).get("image")
        if not image:
            logger.warning(f"VerificationClient: asset {asset_id} has no image link")
            return VerificationResult(
                asset_id=asset_id, verified=False, asset=asset, warning="Asset has no image link"
            )

        logger.info(f"VerificationClient: asset {asset_id} verified")
        return VerificationResult(asset_id=asset_id, verified=True, asset=asset)


def normalize_image_url(image_url: str) -> str:
    """Route IPFS URLs through the primary public gateway; leave others untouched."""
    if not image_url or image_url.startswith("data:"):
        return image_url or ""
    if "/ipfs/" in image_url:
        cid = image_url.split("/ipfs/", 1)[1]
        return f"{IPFS_FALLBACK_GATEWAYS[0]}/{cid}"
    return image_url


def gateway_alternatives(image_url: str) -> List[str]:
    """Other gateways serving the same IPFS content, in fallback order."""
    if "/ipfs/" not in (image_url or ""):
        return []
    cid = image_url.split("/ipfs/", 1)[1]
    urls = [f"{gateway}/{cid}" for gateway in IPFS_FALLBACK_GATEWAYS]
    return [url for url in urls if url != image_url]


def _attribute(asset: Dict[str, Any], trait_type: str) -> Optional[str]:
    attributes = (((asset.get("content") or {}).get("metadata") or {}).get("attributes")) or []
    for attribute in attributes:
        if isinstance(attribute, dict) and attribute.get("trait_type") == trait_type:
            return attribute.get("value")
    return None


def _created_sort_key(asset: Dict[str, Any]) -> float:
    created = _attribute(asset, "Created")
    if not created:
        return float("-inf")
    try:
        return datetime.fromisoformat(created).timestamp()
    except ValueError:
        return float("-inf")


class AssetGalleryClient(JsonRpcClient):
    """Lists the NFTrek assets a wallet owns, newest first."""

    def __init__(self, rpc_url: Optional[str], collection_name: str, symbol: str, timeout: float = 30.0):
        super().__init__(rpc_url, timeout)
        self.collection_name = collection_name
        self.symbol = symbol

    @classmethod
    def from_config(cls, config: MintConfig) -> "AssetGalleryClient":
        return cls(config.rpc_url, config.collection_name, config.symbol, config.verify_timeout)

    def is_collection_asset(self, asset: Dict[str, Any]) -> bool:
        name = (((asset.get("content") or {}).get("metadata") or {}).get("name")) or ""
        if self.collection_name in name:
            return True
        return any(
            group.get("group_value") == self.symbol
            for group in asset.get("grouping") or []
            if isinstance(group, dict)
        )

    async def fetch_collection(self, owner: str) -> List[Dict[str, Any]]:
        """
        Fetch the owner's collection assets.

        Raises:
            ConfigurationError: endpoint unset
            MintRpcError: the response carried an RPC error object
            httpx.HTTPError: transport failure
        """
        params = {
            "ownerAddress": owner,
            "page": 1,
            "limit": 1000,
            "displayOptions": {"showFungible": False, "showNativeBalance": False},
        }
        body = await self.call("getAssetsByOwner", params, "nftrek-get-assets")

        error = body.get("error")
        if error:
            raise MintRpcError(_rpc_error_message(error, "Failed to fetch NFTs"))

        items = ((body.get("result") or {}).get("items")) or []
        assets = [asset for asset in items if isinstance(asset, dict) and self.is_collection_asset(asset)]
        assets.sort(key=_created_sort_key, reverse=True)
        logger.debug(f"AssetGalleryClient: {len(assets)} of {len(items)} assets belong to {self.collection_name}")
        return assets

    @staticmethod
    def to_gallery_item(asset: Dict[str, Any]) -> Dict[str, Any]:
        """Flatten an asset into what the gallery view renders."""
        metadata = (asset.get("content") or {}).get("metadata") or {}
        links = (asset.get("content") or {}).get("links") or {}
        image = metadata.get("image") or links.get("image") or ""
        return {
            "id": asset.get("id"),
            "name": metadata.get("name"),
            "description": metadata.get("description"),
            "image": normalize_image_url(image),
            "image_fallbacks": gateway_alternatives(normalize_image_url(image)),
            "location": _attribute(asset, "Location"),
            "minted_at": _attribute(asset, "Minted At") or _attribute(asset, "Created"),
            "attributes": metadata.get("attributes") or [],
        }
