"""
Centralized Configuration Management

This module provides centralized configuration management for the NFTrek service.
It loads and validates configuration from environment variables and .env files,
grouped into nested sections per pipeline concern.
"""

from typing import Optional, List

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LocationConfig(BaseSettings):
    """Geolocation policy applied to every position request."""

    model_config = SettingsConfigDict(env_prefix="LOCATION_")

    high_accuracy: bool = True
    timeout_seconds: float = 10.0
    maximum_age_seconds: float = 300.0  # cached fixes younger than 5 minutes are accepted


class GeocodeConfig(BaseSettings):
    """Reverse geocoding providers."""

    model_config = SettingsConfigDict(env_prefix="GEOCODE_")

    # OpenCage (keyed)
    opencage_api_key: Optional[str] = None
    opencage_url: str = "https://api.opencagedata.com/geocode/v1/json"

    # Nominatim (keyless, requires an identifying User-Agent)
    nominatim_url: str = "https://nominatim.openstreetmap.org/reverse"
    user_agent: str = "nftrek/0.1 (+https://nftrek.vercel.app/)"

    request_timeout: float = 10.0


class StorageConfig(BaseSettings):
    """Image storage providers and the embedding threshold."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    # NFT.Storage
    nft_storage_api_key: Optional[str] = None
    nft_storage_upload_url: str = "https://api.nft.storage/upload"
    ipfs_gateway_url: str = "https://ipfs.io/ipfs"

    # Pinata
    pinata_jwt: Optional[str] = None
    pinata_upload_url: str = "https://api.pinata.cloud/pinning/pinFileToIPFS"
    pinata_gateway_url: str = "https://gateway.pinata.cloud/ipfs"

    # Images smaller than this are embedded in the mint request as data URLs
    embed_threshold_bytes: int = 314572
    upload_timeout: float = 120.0

    # Values shipped in .env.example that must never be sent as credentials
    placeholder_values: List[str] = [
        "your_nft_storage_key_here",
        "your_pinata_jwt_here",
        "changeme",
    ]


class MintConfig(BaseSettings):
    """Compressed NFT minting RPC and collection metadata."""

    model_config = SettingsConfigDict(env_prefix="MINT_")

    rpc_url: Optional[str] = None  # e.g. https://devnet.helius-rpc.com/?api-key=...
    request_timeout: float = 60.0
    verify_timeout: float = 30.0

    collection_name: str = "NFTrek"
    symbol: str = "NFTREK"
    collection_label: str = "NFTrek Collection"
    external_url: str = "https://nftrek.vercel.app/"
    seller_fee_basis_points: int = 500


class ServerConfig(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="SERVER_")

    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: List[str] = ["http://localhost:3000"]

    # Per-session orchestrators idle this long are disposed
    session_idle_ttl_seconds: float = 900.0
    max_sessions: int = 1000


class AppConfig(BaseSettings):
    """
    Centralized application configuration with nested sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"
    log_file: Optional[str] = None

    # Nested configuration sections, built per instance so they see the loaded .env
    location: LocationConfig = Field(default_factory=LocationConfig)
    geocode: GeocodeConfig = Field(default_factory=GeocodeConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    mint: MintConfig = Field(default_factory=MintConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


# Global settings instance
def create_settings(env_file: str = ".env") -> AppConfig:
    """
    Create settings from environment variables and a .env file.

    The .env values are loaded into the process environment first so the
    prefixed sections pick them up; variables already set take precedence.
    """
    load_dotenv(env_file)
    return AppConfig(_env_file=env_file)


settings = create_settings()


def get_settings() -> AppConfig:
    """Get the global settings instance."""
    return settings
