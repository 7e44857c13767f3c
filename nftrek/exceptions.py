"""
Custom Exception Classes

This module defines the exceptions a mint attempt can terminate with.
Each class carries a user_message category so callers can present
actionable guidance without inspecting internals.

Transport failures are not wrapped: httpx.HTTPError surfaces unchanged.
"""

from enum import Enum
from typing import Optional


class NFTrekBaseException(Exception):
    """Base exception for the NFTrek application."""

    user_message = "Something went wrong while minting your NFT. Please try again."


class PreconditionError(NFTrekBaseException):
    """Raised when a mint attempt starts without an owner or an image."""

    def __init__(self, missing: list):
        self.missing = list(missing)
        super().__init__(f"Cannot start mint attempt, missing: {', '.join(self.missing)}")

    @property
    def user_message(self) -> str:
        if "owner" in self.missing:
            return "Please connect your wallet first."
        return "Please capture an image first."


class LocationErrorKind(Enum):
    """Why a location fix could not be obtained."""

    PERMISSION_DENIED = "permission_denied"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"


_LOCATION_MESSAGES = {
    LocationErrorKind.PERMISSION_DENIED: "Location access was denied. Please allow location access and try again.",
    LocationErrorKind.UNAVAILABLE: "Your location could not be determined. Move to an open area and try again.",
    LocationErrorKind.TIMEOUT: "Getting your location took too long. Please try again.",
    LocationErrorKind.UNSUPPORTED: "Location services are not supported on this device.",
}


class LocationError(NFTrekBaseException):
    """Raised when the device location cannot be resolved."""

    def __init__(self, kind: LocationErrorKind, detail: Optional[str] = None):
        self.kind = kind
        self.detail = detail
        message = f"Location unavailable ({kind.value})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return _LOCATION_MESSAGES[self.kind]


class ConfigurationError(NFTrekBaseException):
    """Raised for configuration problems, such as a missing RPC endpoint."""

    user_message = "The minting service is not configured. Please contact the site operator."


class MintRpcError(NFTrekBaseException):
    """Raised when the mint RPC answers with a JSON-RPC error object."""

    user_message = "Minting failed. Please try again."

    def __init__(self, message: str, code: Optional[int] = None):
        self.message = message
        self.code = code
        super().__init__(message)


class MintEmptyResultError(NFTrekBaseException):
    """Raised when the mint RPC answers with neither an error nor a result."""

    user_message = "Minting failed: the minting service returned no result. Please try again."

    def __init__(self, message: str = "Mint RPC response carried neither error nor result"):
        super().__init__(message)


class PipelineBusyError(NFTrekBaseException):
    """Raised when a mint attempt is started while another one is in flight."""

    user_message = "A mint is already in progress. Please wait for it to finish."


class OrchestratorDisposedError(NFTrekBaseException):
    """Raised when a disposed orchestrator is asked to run."""

    user_message = "This minting session has ended. Please reload and try again."
