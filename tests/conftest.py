"""
Global test configuration and fixtures.
"""

import pytest

from nftrek.config import AppConfig, GeocodeConfig, LocationConfig, MintConfig, ServerConfig, StorageConfig
from tests.test_utils import RPC_URL, make_image


@pytest.fixture
def small_image() -> str:
    """A 50 KB photo, below the embedding threshold."""
    return make_image(50 * 1024)


@pytest.fixture
def large_image() -> str:
    """A 400 KB photo, above the embedding threshold."""
    return make_image(400 * 1024)


@pytest.fixture
def storage_config() -> StorageConfig:
    return StorageConfig(
        nft_storage_api_key="nft-storage-test-key",
        pinata_jwt="pinata-test-jwt",
        ipfs_gateway_url="https://ipfs.io/ipfs",
        pinata_gateway_url="https://gateway.pinata.cloud/ipfs",
    )


@pytest.fixture
def unconfigured_storage_config() -> StorageConfig:
    return StorageConfig(nft_storage_api_key=None, pinata_jwt=None)


@pytest.fixture
def mint_config() -> MintConfig:
    return MintConfig(rpc_url=RPC_URL)


@pytest.fixture
def app_config(mint_config, unconfigured_storage_config) -> AppConfig:
    """Settings built explicitly so tests never depend on the environment."""
    return AppConfig(
        log_level="DEBUG",
        location=LocationConfig(),
        geocode=GeocodeConfig(opencage_api_key=None),
        storage=unconfigured_storage_config,
        mint=mint_config,
        server=ServerConfig(allowed_origins=["http://localhost:3000"]),
    )
