"""
Tests for mint request assembly.
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from nftrek.config import MintConfig
from nftrek.core.mint_request import MintRequestBuilder, format_iso_timestamp, format_time_of_day
from nftrek.core.models import Coordinates, StorageMethod, StoredImageRef
from tests.test_utils import OWNER

FIXED_NOW = datetime(2024, 3, 9, 15, 7, 9, 123456, tzinfo=timezone.utc)
STORED = StoredImageRef("https://ipfs.io/ipfs/bafyCID", StorageMethod.NFT_STORAGE, "digest")
SAN_FRANCISCO = Coordinates(37.7749, -122.4194)


@pytest.fixture
def builder():
    return MintRequestBuilder(MintConfig(rpc_url=None), clock=lambda: FIXED_NOW)


class TestFormatting:

    def test_time_of_day_has_no_leading_zero(self):
        assert format_time_of_day(FIXED_NOW) == "3:07:09 PM"
        assert format_time_of_day(datetime(2024, 1, 1, 0, 5, 0)) == "12:05:00 AM"

    def test_iso_timestamp_millisecond_precision(self):
        assert format_iso_timestamp(FIXED_NOW) == "2024-03-09T15:07:09.123Z"


class TestMintRequestBuilder:

    def test_name_and_description(self, builder):
        request = builder.build(OWNER, "San Francisco", SAN_FRANCISCO, STORED)
        assert request.name == "NFTrek: San Francisco"
        assert request.description == (
            "This NFT represents your trek in San Francisco. "
            "Location: Lat 37.7749, Long -122.4194"
        )

    def test_attribute_order_and_values(self, builder):
        request = builder.build(OWNER, "San Francisco", SAN_FRANCISCO, STORED)
        assert [(a.trait_type, a.value) for a in request.attributes] == [
            ("Latitude", "37.774900"),
            ("Longitude", "-122.419400"),
            ("Location", "San Francisco"),
            ("Collection", "NFTrek Collection"),
            ("Created", "2024-03-09"),
            ("Minted At", "2024-03-09T15:07:09.123Z"),
            ("Time", "3:07:09 PM"),
        ]

    def test_owner_is_sole_creator(self, builder):
        request = builder.build(OWNER, "San Francisco", SAN_FRANCISCO, STORED)
        assert request.owner == OWNER
        assert len(request.creators) == 1
        assert request.creators[0].address == OWNER
        assert request.creators[0].share_percent == 100

    def test_collection_settings(self, builder):
        request = builder.build(OWNER, "San Francisco", SAN_FRANCISCO, STORED)
        assert request.symbol == "NFTREK"
        assert request.royalty_basis_points == 500
        assert request.external_url == "https://nftrek.vercel.app/"
        assert request.image_url == "https://ipfs.io/ipfs/bafyCID"

    def test_fallback_place_name_used_verbatim(self, builder):
        request = builder.build(OWNER, "37.7749, -122.4194", SAN_FRANCISCO, STORED)
        assert request.name == "NFTrek: 37.7749, -122.4194"

    def test_embedded_image_url_passed_through(self, builder):
        embedded = StoredImageRef("data:image/jpeg;base64,AAAA", StorageMethod.EMBEDDED)
        request = builder.build(OWNER, "Oakland", SAN_FRANCISCO, embedded)
        assert request.image_url == "data:image/jpeg;base64,AAAA"

    def test_request_is_immutable(self, builder):
        request = builder.build(OWNER, "San Francisco", SAN_FRANCISCO, STORED)
        with pytest.raises(FrozenInstanceError):
            request.name = "changed"

    def test_rpc_params(self, builder):
        params = builder.build(OWNER, "San Francisco", SAN_FRANCISCO, STORED).to_rpc_params()
        assert params["name"] == "NFTrek: San Francisco"
        assert params["imageUrl"] == "https://ipfs.io/ipfs/bafyCID"
        assert params["externalUrl"] == "https://nftrek.vercel.app/"
        assert params["sellerFeeBasisPoints"] == 500
        assert params["creators"] == [{"address": OWNER, "share": 100}]
        assert params["attributes"][0] == {"trait_type": "Latitude", "value": "37.774900"}

    def test_custom_collection(self):
        config = MintConfig(collection_name="Trails", symbol="TRL", seller_fee_basis_points=0)
        request = MintRequestBuilder(config, clock=lambda: FIXED_NOW).build(OWNER, "Bend", SAN_FRANCISCO, STORED)
        assert request.name == "Trails: Bend"
        assert request.symbol == "TRL"
        assert request.royalty_basis_points == 0
