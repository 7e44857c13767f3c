"""
IPFS Storage Clients

Upload clients for the pinning services used to persist captured photos.
Each client posts the raw bytes as a multipart form with bearer-token auth
and turns the returned content identifier into a public gateway URL.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

import httpx

from ..core.models import StorageMethod

logger = logging.getLogger(__name__)


class StorageUploadError(Exception):
    """Raised when an upload succeeds at HTTP level but the body is unusable."""


class IPFSStorageClient(ABC):
    """Base class for a pinning service in the storage cascade."""

    name: str = "ipfs"
    method: StorageMethod

    def __init__(
        self,
        api_key: Optional[str],
        upload_url: str,
        gateway_url: str,
        timeout: float = 120.0,
        placeholder_values: Iterable[str] = (),
    ):
        self.api_key = api_key
        self.upload_url = upload_url
        self.gateway_url = gateway_url.rstrip("/")
        self.timeout = timeout
        self.placeholder_values = {value.strip().lower() for value in placeholder_values}

    def is_configured(self) -> bool:
        """A client is usable only with a real (non-placeholder) credential."""
        if not self.api_key or not self.api_key.strip():
            return False
        return self.api_key.strip().lower() not in self.placeholder_values

    def _get_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def get_gateway_url(self, cid: str) -> str:
        return f"{self.gateway_url}/{cid}"

    @abstractmethod
    def extract_cid(self, body: Dict[str, Any]) -> Optional[str]:
        """Pull the content identifier out of the service's response body."""

    async def upload(self, data: bytes, filename: str, content_type: str) -> str:
        """
        Upload bytes and return their public gateway URL.

        Raises:
            httpx.HTTPError: on transport failures and non-2xx responses
            StorageUploadError: when the response carries no content identifier
        """
        files = {"file": (filename, data, content_type)}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.upload_url,
                files=files,
                headers=self._get_headers(),
            )
            response.raise_for_status()
            try:
                body = response.json()
            except ValueError as e:
                raise StorageUploadError(f"{self.name}: response is not JSON") from e

        cid = self.extract_cid(body) if isinstance(body, dict) else None
        if not cid:
            raise StorageUploadError(f"{self.name}: upload succeeded but no CID in response: {body}")

        url = self.get_gateway_url(cid)
        logger.info(f"{type(self).__name__}: uploaded {len(data)} bytes as {cid}")
        return url


class NFTStorageClient(IPFSStorageClient):
    """NFT.Storage uploads (response: {"ok": true, "value": {"cid": ...}})."""

    name = "nft_storage"
    method = StorageMethod.NFT_STORAGE

    def extract_cid(self, body: Dict[str, Any]) -> Optional[str]:
        value = body.get("value")
        if isinstance(value, dict):
            return value.get("cid")
        return None


class PinataClient(IPFSStorageClient):
    """Pinata pinFileToIPFS uploads (response: {"IpfsHash": ...})."""

    name = "pinata"
    method = StorageMethod.PINATA

    def extract_cid(self, body: Dict[str, Any]) -> Optional[str]:
        return body.get("IpfsHash")
