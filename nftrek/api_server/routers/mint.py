"""
Mint router - runs mint attempts and manages their sessions.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from nftrek.exceptions import (
    ConfigurationError,
    LocationError,
    MintEmptyResultError,
    MintRpcError,
    NFTrekBaseException,
    OrchestratorDisposedError,
    PipelineBusyError,
    PreconditionError,
)

from ..dependencies import get_registry
from ..schemas import ErrorResponse, MintRequestBody, MintResponse, StatusResponse
from ..services import OrchestratorRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mint", tags=["mint"])

_STATUS_CODES = {
    PreconditionError: 400,
    LocationError: 422,
    PipelineBusyError: 409,
    OrchestratorDisposedError: 409,
    ConfigurationError: 503,
    MintRpcError: 502,
    MintEmptyResultError: 502,
}

TRANSPORT_USER_MESSAGE = "Could not reach the minting service. Please check your connection and try again."


def error_response(error: Exception, details: Optional[Dict[str, Any]] = None) -> JSONResponse:
    """Map a terminal pipeline error to an HTTP response."""
    if isinstance(error, NFTrekBaseException):
        status_code = _STATUS_CODES.get(type(error), 500)
        user_message = error.user_message
    elif isinstance(error, httpx.HTTPError):
        status_code = 502
        user_message = TRANSPORT_USER_MESSAGE
    else:
        status_code = 500
        user_message = NFTrekBaseException.user_message

    if isinstance(error, LocationError):
        details = {**(details or {}), "location_error": error.kind.value}

    body = ErrorResponse(
        error_type=type(error).__name__,
        message=str(error),
        user_message=user_message,
        details=details,
        timestamp=datetime.now().isoformat(),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post("", response_model=MintResponse, responses={
    400: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
})
async def mint_nft(body: MintRequestBody, registry: OrchestratorRegistry = Depends(get_registry)):
    """Run one mint attempt for the caller's session."""
    session_id = body.resolve_session_id()
    orchestrator = registry.get_or_create(session_id)

    try:
        result = await orchestrator.run(body.image, body.owner, body.to_position_source())
    except (NFTrekBaseException, httpx.HTTPError) as e:
        logger.warning(f"Mint attempt for session {session_id} failed: {type(e).__name__}: {e}")
        return error_response(e, {"session_id": session_id})

    attempt = orchestrator.last_attempt
    verification = result.verification
    return MintResponse(
        session_id=session_id,
        asset_id=result.asset_id,
        place_name=attempt.place_name,
        storage_method=attempt.storage_method.value if attempt.storage_method else None,
        verified=bool(verification and verification.verified),
        warnings=list(attempt.warnings),
        timestamp=datetime.now().isoformat(),
    )


@router.get("/sessions/{session_id}", response_model=StatusResponse)
async def get_session_status(session_id: str, registry: OrchestratorRegistry = Depends(get_registry)):
    """Current pipeline status of a session."""
    orchestrator = registry.get(session_id)
    if orchestrator is None:
        raise HTTPException(status_code=404, detail=f"Unknown session {session_id}")

    attempt = orchestrator.last_attempt
    return StatusResponse(
        status=orchestrator.status.value,
        message=str(attempt.error) if attempt.error else None,
        data={
            "in_flight": orchestrator.in_flight,
            "asset_id": attempt.result.asset_id if attempt.result else None,
            "place_name": attempt.place_name,
            "warnings": list(attempt.warnings),
        },
        timestamp=datetime.now().isoformat(),
    )


@router.delete("/sessions/{session_id}", response_model=StatusResponse)
async def dispose_session(session_id: str, registry: OrchestratorRegistry = Depends(get_registry)):
    """End a session and release its orchestrator."""
    orchestrator = registry.get(session_id)
    if orchestrator is None:
        raise HTTPException(status_code=404, detail=f"Unknown session {session_id}")
    if not registry.dispose(session_id):
        raise HTTPException(status_code=409, detail=f"Session {session_id} has a mint in flight")

    return StatusResponse(
        status="success",
        message=f"Session {session_id} disposed",
        timestamp=datetime.now().isoformat(),
    )
