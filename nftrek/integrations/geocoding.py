"""
Reverse Geocoding

Turns coordinates into a displayable place name by trying an ordered list of
providers. The first provider that answers with a usable name wins; a provider
that fails or is not configured is skipped. When every provider comes up
empty the coordinates themselves become the place name, so resolve() always
returns a non-empty string.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import GeocodeConfig
from ..core.models import Coordinates
from ..utils.logging_config import metrics_logger

logger = logging.getLogger(__name__)

# Most specific first
PLACE_FIELDS = ("city", "town", "village", "county", "state")


def extract_place_name(address: Optional[Dict[str, Any]]) -> Optional[str]:
    """Pick the most specific populated place field from an address object."""
    if not isinstance(address, dict):
        return None
    for key in PLACE_FIELDS:
        value = address.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


class GeocodeProvider(ABC):
    """One reverse geocoding service in the cascade."""

    name: str = "provider"

    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def try_resolve(self, coordinates: Coordinates) -> Optional[str]:
        """
        Look up a place name.

        Returns:
            The place name, or None when the service knows nothing usable

        Raises:
            httpx.HTTPError, ValueError: on transport failures or malformed bodies
        """


class OpenCageProvider(GeocodeProvider):
    """OpenCage geocoder (requires an API key)."""

    name = "opencage"

    def __init__(self, api_key: Optional[str], url: str, timeout: float = 10.0):
        self.api_key = api_key
        self.url = url
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def try_resolve(self, coordinates: Coordinates) -> Optional[str]:
        params = {
            "q": f"{coordinates.latitude},{coordinates.longitude}",
            "key": self.api_key,
            "no_annotations": 1,
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self.url, params=params)
            response.raise_for_status()
            data = response.json()

        results = data.get("results") or []
        if not results:
            return None
        return extract_place_name(results[0].get("components"))


class NominatimProvider(GeocodeProvider):
    """OpenStreetMap Nominatim reverse geocoder (keyless)."""

    name = "nominatim"

    def __init__(self, url: str, user_agent: str, timeout: float = 10.0):
        self.url = url
        self.user_agent = user_agent
        self.timeout = timeout

    async def try_resolve(self, coordinates: Coordinates) -> Optional[str]:
        params = {
            "format": "jsonv2",
            "lat": coordinates.latitude,
            "lon": coordinates.longitude,
        }
        headers = {"User-Agent": self.user_agent}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self.url, params=params, headers=headers)
            response.raise_for_status()
            data = response.json()

        return extract_place_name(data.get("address"))


class GeocodeResolver:
    """Resolve coordinates to a place name through a provider cascade."""

    def __init__(self, providers: Sequence[GeocodeProvider]):
        self.providers: List[GeocodeProvider] = list(providers)

    @classmethod
    def from_config(cls, config: GeocodeConfig) -> "GeocodeResolver":
        return cls([
            OpenCageProvider(config.opencage_api_key, config.opencage_url, config.request_timeout),
            NominatimProvider(config.nominatim_url, config.user_agent, config.request_timeout),
        ])

    async def resolve(self, coordinates: Coordinates) -> str:
        """Return a place name; never raises."""
        for provider in self.providers:
            if not provider.is_configured():
                logger.debug(f"GeocodeResolver: skipping unconfigured provider {provider.name}")
                continue

            started = time.monotonic()
            try:
                place = await provider.try_resolve(coordinates)
            except Exception as e:
                metrics_logger.log_provider_attempt(
                    "geocode", provider.name, (time.monotonic() - started) * 1000, False
                )
                logger.warning(f"GeocodeResolver: provider {provider.name} failed: {e}")
                continue

            metrics_logger.log_provider_attempt(
                "geocode", provider.name, (time.monotonic() - started) * 1000, bool(place)
            )
            if place:
                logger.info(f"GeocodeResolver: {provider.name} resolved {coordinates.format_short()} to {place}")
                return place
            logger.debug(f"GeocodeResolver: provider {provider.name} had no place for {coordinates.format_short()}")

        fallback = coordinates.format_short()
        logger.info(f"GeocodeResolver: all providers exhausted, using coordinates {fallback}")
        return fallback
