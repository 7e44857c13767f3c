"""
Tests for the compressed NFT JSON-RPC clients.
"""

import httpx
import pytest

from nftrek.core.models import Coordinates, StorageMethod, StoredImageRef
from nftrek.core.mint_request import MintRequestBuilder
from nftrek.exceptions import ConfigurationError, MintEmptyResultError, MintRpcError
from nftrek.integrations.das_rpc_client import (
    AssetGalleryClient,
    JsonRpcClient,
    MintClient,
    VerificationClient,
    gateway_alternatives,
    normalize_image_url,
)
from tests.test_utils import OWNER, RPC_URL, mock_response, patched_http


@pytest.fixture
def mint_request():
    stored = StoredImageRef("https://ipfs.io/ipfs/bafy", StorageMethod.NFT_STORAGE)
    return MintRequestBuilder().build(OWNER, "San Francisco", Coordinates(37.7749, -122.4194), stored)


def asset(asset_id, name="NFTrek: Somewhere", created=None, minted_at=None, image="https://ipfs.io/ipfs/cid", grouping=None):
    attributes = [{"trait_type": "Location", "value": "Somewhere"}]
    if created:
        attributes.append({"trait_type": "Created", "value": created})
    if minted_at:
        attributes.append({"trait_type": "Minted At", "value": minted_at})
    return {
        "id": asset_id,
        "content": {
            "metadata": {"name": name, "description": "A trek", "attributes": attributes},
            "links": {"image": image},
        },
        "grouping": grouping or [],
    }


class TestJsonRpcClient:

    @pytest.mark.asyncio
    async def test_envelope(self):
        client = JsonRpcClient(RPC_URL)
        with patched_http() as (_, mock_client):
            mock_client.post.return_value = mock_response({"jsonrpc": "2.0", "id": "x", "result": {}})
            await client.call("getAsset", {"id": "abc"}, "x")

        args, kwargs = mock_client.post.call_args
        assert args[0] == RPC_URL
        assert kwargs["json"] == {"jsonrpc": "2.0", "id": "x", "method": "getAsset", "params": {"id": "abc"}}
        assert kwargs["headers"]["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_error_body_returned_despite_http_status(self):
        with patched_http() as (_, mock_client):
            mock_client.post.return_value = mock_response(
                {"error": {"code": -32000, "message": "Insufficient funds"}}, status_code=500
            )
            body = await JsonRpcClient(RPC_URL).call("mintCompressedNft", {}, "x")
        assert body["error"]["message"] == "Insufficient funds"

    @pytest.mark.asyncio
    async def test_http_status_without_rpc_error_raises(self):
        with patched_http() as (_, mock_client):
            mock_client.post.return_value = mock_response(json_error=ValueError("html"), status_code=502)
            with pytest.raises(httpx.HTTPStatusError):
                await JsonRpcClient(RPC_URL).call("getAsset", {}, "x")


class TestMintClient:

    @pytest.mark.asyncio
    async def test_unconfigured_endpoint_fails_before_network(self, mint_request):
        with patched_http() as (mock_client_class, _):
            with pytest.raises(ConfigurationError):
                await MintClient(None).mint(mint_request)
        mock_client_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_mint_success(self, mint_request):
        with patched_http() as (_, mock_client):
            mock_client.post.return_value = mock_response({"jsonrpc": "2.0", "result": {"assetId": "abc123"}})
            result = await MintClient(RPC_URL).mint(mint_request)

        assert result.asset_id == "abc123"
        payload = mock_client.post.call_args.kwargs["json"]
        assert payload["method"] == "mintCompressedNft"
        assert payload["params"]["owner"] == OWNER
        assert payload["params"]["imageUrl"] == "https://ipfs.io/ipfs/bafy"

    @pytest.mark.asyncio
    async def test_rpc_error_surfaces_message(self, mint_request):
        with patched_http() as (_, mock_client):
            mock_client.post.return_value = mock_response({"error": {"code": -32000, "message": "Insufficient funds"}})
            with pytest.raises(MintRpcError) as exc_info:
                await MintClient(RPC_URL).mint(mint_request)
        assert exc_info.value.message == "Insufficient funds"
        assert exc_info.value.code == -32000

    @pytest.mark.asyncio
    async def test_rpc_error_without_message_uses_default(self, mint_request):
        with patched_http() as (_, mock_client):
            mock_client.post.return_value = mock_response({"error": {"code": -1}})
            with pytest.raises(MintRpcError, match="Failed to mint NFT"):
                await MintClient(RPC_URL).mint(mint_request)

    @pytest.mark.asyncio
    async def test_neither_error_nor_result(self, mint_request):
        with patched_http() as (_, mock_client):
            mock_client.post.return_value = mock_response({"jsonrpc": "2.0", "id": "nftrek-mint"})
            with pytest.raises(MintEmptyResultError):
                await MintClient(RPC_URL).mint(mint_request)

    @pytest.mark.asyncio
    async def test_result_without_asset_id(self, mint_request):
        with patched_http() as (_, mock_client):
            mock_client.post.return_value = mock_response({"result": {"signature": "sig"}})
            with pytest.raises(MintEmptyResultError):
                await MintClient(RPC_URL).mint(mint_request)

    @pytest.mark.asyncio
    async def test_transport_failure_propagates_unchanged(self, mint_request):
        with patched_http() as (_, mock_client):
            mock_client.post.side_effect = httpx.ConnectError("connection refused")
            with pytest.raises(httpx.ConnectError):
                await MintClient(RPC_URL).mint(mint_request)
        assert mock_client.post.await_count == 1


class TestVerificationClient:

    @pytest.mark.asyncio
    async def test_verified_asset(self):
        with patched_http() as (_, mock_client):
            mock_client.post.return_value = mock_response({"result": asset("abc123")})
            result = await VerificationClient(RPC_URL).verify("abc123")

        assert result.verified
        assert result.warning is None
        params = mock_client.post.call_args.kwargs["json"]["params"]
        assert params == {"id": "abc123", "displayOptions": {"showFungible": True}}

    @pytest.mark.asyncio
    async def test_network_error_is_a_warning(self):
        with patched_http() as (_, mock_client):
            mock_client.post.side_effect = httpx.ConnectError("down")
            result = await VerificationClient(RPC_URL).verify("abc123")
        assert not result.verified
        assert result.asset_id == "abc123"
        assert "Verification failed" in result.warning

    @pytest.mark.asyncio
    async def test_unconfigured_is_a_warning(self):
        result = await VerificationClient(None).verify("abc123")
        assert not result.verified
        assert result.warning

    @pytest.mark.asyncio
    async def test_rpc_error_is_a_warning(self):
        with patched_http() as (_, mock_client):
            mock_client.post.return_value = mock_response({"error": {"message": "Asset not found"}})
            result = await VerificationClient(RPC_URL).verify("abc123")
        assert not result.verified
        assert "Asset not found" in result.warning

    @pytest.mark.asyncio
    async def test_missing_image_link_is_unverified(self):
        with patched_http() as (_, mock_client):
            mock_client.post.return_value = mock_response({"result": asset("abc123", image=None)})
            result = await VerificationClient(RPC_URL).verify("abc123")
        assert not result.verified
        assert result.asset["id"] == "abc123"


class TestImageUrls:

    def test_ipfs_url_routed_through_primary_gateway(self):
        assert normalize_image_url("https://gateway.pinata.cloud/ipfs/Qm") == "https://ipfs.io/ipfs/Qm"

    def test_other_urls_untouched(self):
        assert normalize_image_url("https://example.com/a.jpg") == "https://example.com/a.jpg"
        assert normalize_image_url("data:image/jpeg;base64,AAAA") == "data:image/jpeg;base64,AAAA"
        assert normalize_image_url("") == ""

    def test_gateway_alternatives_exclude_current(self):
        alternatives = gateway_alternatives("https://ipfs.io/ipfs/Qm")
        assert alternatives == [
            "https://cloudflare-ipfs.com/ipfs/Qm",
            "https://gateway.pinata.cloud/ipfs/Qm",
        ]
        assert gateway_alternatives("https://example.com/a.jpg") == []


class TestAssetGalleryClient:

    @pytest.fixture
    def client(self):
        return AssetGalleryClient(RPC_URL, "NFTrek", "NFTREK")

    @pytest.mark.asyncio
    async def test_filters_and_sorts_newest_first(self, client):
        items = [
            asset("old", created="2024-01-01"),
            asset("other", name="Some Other NFT"),
            asset("grouped", name="Unnamed", created="2024-02-01",
                  grouping=[{"group_key": "collection", "group_value": "NFTREK"}]),
            asset("new", created="2024-03-01"),
            asset("undated"),
        ]
        with patched_http() as (_, mock_client):
            mock_client.post.return_value = mock_response({"result": {"items": items}})
            assets = await client.fetch_collection(OWNER)

        assert [a["id"] for a in assets] == ["new", "grouped", "old", "undated"]
        payload = mock_client.post.call_args.kwargs["json"]
        assert payload["method"] == "getAssetsByOwner"
        assert payload["params"]["ownerAddress"] == OWNER
        assert payload["params"]["limit"] == 1000

    @pytest.mark.asyncio
    async def test_rpc_error_raises(self, client):
        with patched_http() as (_, mock_client):
            mock_client.post.return_value = mock_response({"error": {"message": "Invalid owner"}})
            with pytest.raises(MintRpcError, match="Invalid owner"):
                await client.fetch_collection("bad")

    @pytest.mark.asyncio
    async def test_unconfigured_endpoint(self):
        with pytest.raises(ConfigurationError):
            await AssetGalleryClient(None, "NFTrek", "NFTREK").fetch_collection(OWNER)

    def test_gallery_item(self):
        item = AssetGalleryClient.to_gallery_item(
            asset("abc", created="2024-03-09", minted_at="2024-03-09T15:07:09.123Z",
                  image="https://gateway.pinata.cloud/ipfs/Qm")
        )
        assert item["id"] == "abc"
        assert item["name"] == "NFTrek: Somewhere"
        assert item["image"] == "https://ipfs.io/ipfs/Qm"
        assert "https://gateway.pinata.cloud/ipfs/Qm" in item["image_fallbacks"]
        assert item["location"] == "Somewhere"
        assert item["minted_at"] == "2024-03-09T15:07:09.123Z"
