"""Content digests for captured images."""

import hashlib

from ..utils.data_url import decode_data_url


class ContentHasher:
    """SHA-256 over decoded image bytes, hex encoded."""

    def digest(self, data: bytes) -> str:
        return hashlib.sha256(data).hexdigest()

    def digest_data_url(self, image: str) -> str:
        return self.digest(decode_data_url(image).data)
