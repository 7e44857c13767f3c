"""
Data URL helpers.

Captured photos arrive as ``data:image/<fmt>;base64,<payload>`` strings.
A bare base64 payload without the ``data:`` header is accepted as well.
"""

import base64
import binascii
import mimetypes
from dataclasses import dataclass
from pathlib import Path

DEFAULT_MIME_TYPE = "image/jpeg"


@dataclass(frozen=True)
class DecodedImage:
    mime_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        subtype = self.mime_type.split("/", 1)[-1].lower()
        return "jpg" if subtype == "jpeg" else subtype


def split_data_url(image: str):
    """Return (mime_type, base64_payload) for a data URL or bare payload."""
    if image.startswith("data:") and "," in image:
        header, payload = image.split(",", 1)
        mime_type = header[len("data:"):].split(";", 1)[0] or DEFAULT_MIME_TYPE
        return mime_type, payload
    if "base64," in image:
        return DEFAULT_MIME_TYPE, image.split("base64,", 1)[1]
    return DEFAULT_MIME_TYPE, image


def estimate_decoded_size(payload: str) -> int:
    """Decoded byte count of a base64 payload, without decoding it."""
    payload = payload.strip()
    padding = len(payload) - len(payload.rstrip("="))
    return max(0, (len(payload) * 3) // 4 - padding)


def decode_data_url(image: str) -> DecodedImage:
    """
    Decode a data URL into raw bytes.

    Raises:
        ValueError: if the payload is not valid base64
    """
    mime_type, payload = split_data_url(image)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 image payload: {e}") from e
    return DecodedImage(mime_type=mime_type, data=data)


def encode_data_url(data: bytes, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def data_url_from_file(file_path: str) -> str:
    """Read an image file into a data URL, guessing the MIME type from its name."""
    path = Path(file_path)
    mime_type = mimetypes.guess_type(path.name)[0] or DEFAULT_MIME_TYPE
    return encode_data_url(path.read_bytes(), mime_type)
