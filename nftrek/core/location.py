"""
Location Resolution

Wraps the platform geolocation capability behind one awaitable call with a
fixed accuracy/timeout/maximum-age policy and categorized failures.

The capability itself is a PositionSource. Browsers report their fix (or
their W3C GeolocationPositionError code) to the API server, which hands it to
the resolver as a StaticPositionSource.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from ..config import LocationConfig
from ..exceptions import LocationError, LocationErrorKind
from .models import Coordinates

logger = logging.getLogger(__name__)

# W3C GeolocationPositionError codes
PERMISSION_DENIED = 1
POSITION_UNAVAILABLE = 2
TIMEOUT = 3

_KIND_BY_CODE = {
    PERMISSION_DENIED: LocationErrorKind.PERMISSION_DENIED,
    POSITION_UNAVAILABLE: LocationErrorKind.UNAVAILABLE,
    TIMEOUT: LocationErrorKind.TIMEOUT,
}


@dataclass(frozen=True)
class PositionOptions:
    enable_high_accuracy: bool = True
    timeout: float = 10.0
    maximum_age: float = 300.0

    @classmethod
    def from_config(cls, config: LocationConfig) -> "PositionOptions":
        return cls(
            enable_high_accuracy=config.high_accuracy,
            timeout=config.timeout_seconds,
            maximum_age=config.maximum_age_seconds,
        )


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    timestamp: float = field(default_factory=time.time)


class PositionError(Exception):
    """Failure reported by a position source, carrying a W3C error code."""

    def __init__(self, code: int, message: str = ""):
        self.code = code
        super().__init__(message or f"Geolocation error code {code}")


class PositionSource(ABC):
    """Platform geolocation capability."""

    @abstractmethod
    async def get_current_position(self, options: PositionOptions) -> Position:
        """
        Return the current position.

        Raises:
            PositionError: when the platform declines or cannot produce a fix
        """


class StaticPositionSource(PositionSource):
    """
    A fix obtained elsewhere, typically by the browser.

    Either coordinates or an error code must be given. A fix older than the
    requested maximum age is reported as unavailable.
    """

    def __init__(
        self,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        accuracy: Optional[float] = None,
        timestamp: Optional[float] = None,
        error_code: Optional[int] = None,
    ):
        self.latitude = latitude
        self.longitude = longitude
        self.accuracy = accuracy
        self.timestamp = timestamp
        self.error_code = error_code

    async def get_current_position(self, options: PositionOptions) -> Position:
        if self.error_code is not None:
            raise PositionError(self.error_code, "Reported by client")
        if self.latitude is None or self.longitude is None:
            raise PositionError(POSITION_UNAVAILABLE, "No coordinates reported")

        timestamp = self.timestamp if self.timestamp is not None else time.time()
        age = time.time() - timestamp
        if age > options.maximum_age:
            raise PositionError(
                POSITION_UNAVAILABLE,
                f"Cached fix is {age:.0f}s old, maximum accepted age is {options.maximum_age:.0f}s",
            )

        return Position(
            latitude=self.latitude,
            longitude=self.longitude,
            accuracy=self.accuracy,
            timestamp=timestamp,
        )


class LocationResolver:
    """Resolve the device location under a fixed policy."""

    def __init__(
        self,
        source: Optional[PositionSource] = None,
        config: Optional[LocationConfig] = None,
    ):
        self.source = source
        self.options = PositionOptions.from_config(config or LocationConfig())

    async def resolve(self, source: Optional[PositionSource] = None) -> Coordinates:
        """
        Resolve the current coordinates.

        Args:
            source: Position source for this call, overriding the default one

        Raises:
            LocationError: categorized failure; never retried here
        """
        source = source or self.source
        if source is None:
            raise LocationError(LocationErrorKind.UNSUPPORTED, "No geolocation capability available")

        try:
            position = await asyncio.wait_for(
                source.get_current_position(self.options), timeout=self.options.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"LocationResolver: no fix within {self.options.timeout}s")
            raise LocationError(LocationErrorKind.TIMEOUT, f"No answer within {self.options.timeout}s")
        except PositionError as e:
            kind = _KIND_BY_CODE.get(e.code, LocationErrorKind.UNAVAILABLE)
            logger.warning(f"LocationResolver: position error {e.code}: {e}")
            raise LocationError(kind, str(e)) from e

        logger.debug(
            f"LocationResolver: resolved {position.latitude}, {position.longitude} "
            f"(accuracy={position.accuracy})"
        )
        return Coordinates(latitude=position.latitude, longitude=position.longitude)
