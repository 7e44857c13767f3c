"""
Image Storage Manager

Persists a captured photo so the mint request can reference it by URL.
Small photos are embedded directly as data URLs. Larger ones are uploaded to
the first configured pinning service that succeeds; if none does, the photo is
embedded anyway so persist() always yields a usable URL.
"""

import logging
import time
from typing import Dict, List, Optional, Sequence

from ..config import StorageConfig
from ..core.hashing import ContentHasher
from ..core.models import StorageMethod, StoredImageRef
from ..utils.data_url import decode_data_url, estimate_decoded_size, split_data_url
from ..utils.logging_config import metrics_logger
from .ipfs_storage_clients import IPFSStorageClient, NFTStorageClient, PinataClient

logger = logging.getLogger(__name__)


class ImageStorageManager:
    """Resolve a captured image to a durable URL through a storage cascade."""

    def __init__(
        self,
        clients: Sequence[IPFSStorageClient],
        embed_threshold_bytes: int = 314572,
        hasher: Optional[ContentHasher] = None,
    ):
        self.clients: List[IPFSStorageClient] = list(clients)
        self.embed_threshold_bytes = embed_threshold_bytes
        self.hasher = hasher or ContentHasher()
        # digest -> uploaded ref, so re-minting the same photo skips the upload
        self._uploaded: Dict[str, StoredImageRef] = {}

    @classmethod
    def from_config(cls, config: StorageConfig) -> "ImageStorageManager":
        clients = [
            NFTStorageClient(
                config.nft_storage_api_key,
                config.nft_storage_upload_url,
                config.ipfs_gateway_url,
                config.upload_timeout,
                config.placeholder_values,
            ),
            PinataClient(
                config.pinata_jwt,
                config.pinata_upload_url,
                config.pinata_gateway_url,
                config.upload_timeout,
                config.placeholder_values,
            ),
        ]
        return cls(clients, embed_threshold_bytes=config.embed_threshold_bytes)

    def is_any_provider_available(self) -> bool:
        return any(client.is_configured() for client in self.clients)

    @staticmethod
    def _embedded(image: str, digest: Optional[str] = None) -> StoredImageRef:
        return StoredImageRef(url=image, method=StorageMethod.EMBEDDED, content_digest=digest)

    async def persist(self, image: str) -> StoredImageRef:
        """Persist a data-URL image; never raises."""
        _, payload = split_data_url(image)
        approx_size = estimate_decoded_size(payload)
        if approx_size < self.embed_threshold_bytes:
            logger.debug(f"ImageStorageManager: embedding {approx_size} byte image directly")
            return self._embedded(image)

        try:
            decoded = decode_data_url(image)
        except ValueError as e:
            logger.error(f"ImageStorageManager: cannot decode image, embedding as-is: {e}")
            return self._embedded(image)

        if decoded.size < self.embed_threshold_bytes:
            return self._embedded(image)

        digest = self.hasher.digest(decoded.data)
        cached = self._uploaded.get(digest)
        if cached:
            logger.info(f"ImageStorageManager: image {digest[:12]} already stored at {cached.url}")
            return cached

        filename = f"nftrek-{digest[:16]}.{decoded.extension}"
        for client in self.clients:
            if not client.is_configured():
                logger.debug(f"ImageStorageManager: skipping unconfigured provider {client.name}")
                continue

            started = time.monotonic()
            try:
                url = await client.upload(decoded.data, filename, decoded.mime_type)
            except Exception as e:
                metrics_logger.log_provider_attempt(
                    "storage", client.name, (time.monotonic() - started) * 1000, False
                )
                logger.warning(f"ImageStorageManager: upload to {client.name} failed: {e}")
                continue

            metrics_logger.log_provider_attempt(
                "storage", client.name, (time.monotonic() - started) * 1000, True
            )
            ref = StoredImageRef(url=url, method=client.method, content_digest=digest)
            self._uploaded[digest] = ref
            return ref

        logger.warning(
            f"ImageStorageManager: no storage provider stored the {decoded.size} byte image, embedding it"
        )
        return self._embedded(image, digest)
