"""Assembly of mintCompressedNft parameters."""

from datetime import datetime, timezone
from typing import Callable, Optional

from ..config import MintConfig
from .models import Coordinates, Creator, MintAttribute, MintRequest, StoredImageRef


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_time_of_day(moment: datetime) -> str:
    """Clock time as a browser would print it in en-US, e.g. ``3:07:09 PM``."""
    return moment.strftime("%I:%M:%S %p").lstrip("0")


def format_iso_timestamp(moment: datetime) -> str:
    """Millisecond precision UTC timestamp with a Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class MintRequestBuilder:
    """Builds immutable mint requests; performs no I/O."""

    def __init__(
        self,
        config: Optional[MintConfig] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.config = config or MintConfig()
        self.clock = clock

    def build(
        self,
        owner: str,
        place_name: str,
        coordinates: Coordinates,
        stored_image: StoredImageRef,
    ) -> MintRequest:
        now = self.clock()
        attributes = (
            MintAttribute("Latitude", f"{coordinates.latitude:.6f}"),
            MintAttribute("Longitude", f"{coordinates.longitude:.6f}"),
            MintAttribute("Location", place_name),
            MintAttribute("Collection", self.config.collection_label),
            MintAttribute("Created", now.date().isoformat()),
            MintAttribute("Minted At", format_iso_timestamp(now)),
            MintAttribute("Time", format_time_of_day(now)),
        )

        return MintRequest(
            name=f"{self.config.collection_name}: {place_name}",
            symbol=self.config.symbol,
            owner=owner,
            description=(
                f"This NFT represents your trek in {place_name}. "
                f"Location: Lat {coordinates.latitude:.4f}, Long {coordinates.longitude:.4f}"
            ),
            attributes=attributes,
            image_url=stored_image.url,
            external_url=self.config.external_url,
            royalty_basis_points=self.config.seller_fee_basis_points,
            creators=(Creator(address=owner, share_percent=100),),
        )
