"""
Pydantic models for API requests and responses.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from nftrek.core.location import (
    PERMISSION_DENIED,
    POSITION_UNAVAILABLE,
    TIMEOUT,
    PositionSource,
    StaticPositionSource,
)

_ERROR_CODES = {
    "permission_denied": PERMISSION_DENIED,
    "unavailable": POSITION_UNAVAILABLE,
    "timeout": TIMEOUT,
}


class MintRequestBody(BaseModel):
    owner: Optional[str] = None
    image: Optional[str] = Field(None, description="Captured photo as a data URL")
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    accuracy: Optional[float] = None
    position_timestamp: Optional[float] = Field(
        None, description="Fix time in milliseconds since the epoch, as reported by the browser"
    )
    location_error: Optional[Literal["permission_denied", "unavailable", "timeout", "unsupported"]] = None
    session_id: Optional[str] = None

    def resolve_session_id(self) -> str:
        return self.session_id or self.owner or "anonymous"

    def to_position_source(self) -> Optional[PositionSource]:
        """The client's geolocation answer, or None if it has no geolocation."""
        if self.location_error == "unsupported":
            return None
        if self.location_error:
            return StaticPositionSource(error_code=_ERROR_CODES[self.location_error])
        if self.latitude is None or self.longitude is None:
            return None
        timestamp = self.position_timestamp / 1000.0 if self.position_timestamp is not None else None
        return StaticPositionSource(
            latitude=self.latitude,
            longitude=self.longitude,
            accuracy=self.accuracy,
            timestamp=timestamp,
        )


class MintResponse(BaseModel):
    status: str = "success"
    session_id: str
    asset_id: str
    place_name: Optional[str] = None
    storage_method: Optional[str] = None
    verified: bool = False
    warnings: List[str] = []
    timestamp: str


class ErrorResponse(BaseModel):
    status: str = "error"
    error_type: str
    message: str
    user_message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: str


class GalleryItem(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    image: str = ""
    image_fallbacks: List[str] = []
    location: Optional[str] = None
    minted_at: Optional[str] = None
    attributes: List[Dict[str, Any]] = []


class GalleryResponse(BaseModel):
    owner: str
    count: int
    items: List[GalleryItem]


class StatusResponse(BaseModel):
    """Standard API response format"""
    status: str
    message: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    timestamp: str
