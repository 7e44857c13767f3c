"""
Mint Pipeline Data Structures

Value types passed between the stages of one mint attempt. Everything that
crosses a stage boundary is immutable so a finished stage cannot be altered
by a later one.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Coordinates:
    """A single location fix."""
    latitude: float
    longitude: float

    def format_short(self) -> str:
        """Coordinates rounded to 4 decimal places, comma-joined."""
        return f"{self.latitude:.4f}, {self.longitude:.4f}"


class StorageMethod(Enum):
    """Where the image referenced by a mint request lives."""
    EMBEDDED = "embedded"
    NFT_STORAGE = "nft_storage"
    PINATA = "pinata"


@dataclass(frozen=True)
class StoredImageRef:
    """
    Result of persisting a captured image.

    Attributes:
        url: URL embedded in the mint request (gateway URL or the original data URL)
        method: Storage method that produced the URL
        content_digest: SHA-256 of the decoded bytes, when it was computed
    """
    url: str
    method: StorageMethod
    content_digest: Optional[str] = None


@dataclass(frozen=True)
class MintAttribute:
    trait_type: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"trait_type": self.trait_type, "value": self.value}


@dataclass(frozen=True)
class Creator:
    address: str
    share_percent: int


@dataclass(frozen=True)
class MintRequest:
    """
    Provider-agnostic parameters for one compressed NFT mint.

    Attributes keep their insertion order; it is the display order downstream.
    """
    name: str
    symbol: str
    owner: str
    description: str
    attributes: Tuple[MintAttribute, ...]
    image_url: str
    external_url: str
    royalty_basis_points: int
    creators: Tuple[Creator, ...]

    def to_rpc_params(self) -> Dict[str, Any]:
        """Render the params object of a mintCompressedNft call."""
        return {
            "name": self.name,
            "symbol": self.symbol,
            "owner": self.owner,
            "description": self.description,
            "attributes": [attribute.to_dict() for attribute in self.attributes],
            "imageUrl": self.image_url,
            "externalUrl": self.external_url,
            "sellerFeeBasisPoints": self.royalty_basis_points,
            "creators": [
                {"address": creator.address, "share": creator.share_percent}
                for creator in self.creators
            ],
        }


@dataclass
class VerificationResult:
    """Outcome of the best-effort getAsset check after a mint."""
    asset_id: str
    verified: bool
    asset: Optional[Dict[str, Any]] = None
    warning: Optional[str] = None


@dataclass
class MintResult:
    asset_id: str
    verification: Optional[VerificationResult] = None


class PipelineStatus(Enum):
    """Stages of a mint attempt, in the only order they may be entered."""
    IDLE = "idle"
    LOCATING = "locating"
    RESOLVING_PLACE = "resolving_place"
    PERSISTING_IMAGE = "persisting_image"
    BUILDING_REQUEST = "building_request"
    MINTING = "minting"
    VERIFYING = "verifying"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineStatus.COMPLETE, PipelineStatus.ERROR)


STAGE_ORDER: List[PipelineStatus] = [
    PipelineStatus.IDLE,
    PipelineStatus.LOCATING,
    PipelineStatus.RESOLVING_PLACE,
    PipelineStatus.PERSISTING_IMAGE,
    PipelineStatus.BUILDING_REQUEST,
    PipelineStatus.MINTING,
    PipelineStatus.VERIFYING,
    PipelineStatus.COMPLETE,
]

STATUS_MESSAGES: Dict[PipelineStatus, str] = {
    PipelineStatus.IDLE: "Ready to mint",
    PipelineStatus.LOCATING: "Getting your location...",
    PipelineStatus.RESOLVING_PLACE: "Finding the name of this place...",
    PipelineStatus.PERSISTING_IMAGE: "Saving your photo...",
    PipelineStatus.BUILDING_REQUEST: "Preparing your NFT...",
    PipelineStatus.MINTING: "Minting your NFT...",
    PipelineStatus.VERIFYING: "Verifying your NFT...",
    PipelineStatus.COMPLETE: "NFT minted successfully!",
    PipelineStatus.ERROR: "Minting failed",
}


@dataclass
class StatusUpdate:
    """Progress event emitted after every state transition."""
    status: PipelineStatus
    message: str
    session_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "session_id": self.session_id,
        }


@dataclass
class AttemptRecord:
    """Terminal summary of the most recent attempt; never holds the image."""
    status: PipelineStatus = PipelineStatus.IDLE
    result: Optional[MintResult] = None
    error: Optional[BaseException] = None
    warnings: List[str] = field(default_factory=list)
    place_name: Optional[str] = None
    storage_method: Optional[StorageMethod] = None
    content_digest: Optional[str] = None
