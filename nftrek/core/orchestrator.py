"""
Mint Orchestrator

Drives one mint attempt through its stages:

    IDLE -> LOCATING -> RESOLVING_PLACE -> PERSISTING_IMAGE
         -> BUILDING_REQUEST -> MINTING -> VERIFYING -> COMPLETE

Any stage that can fail moves the attempt to ERROR, which is terminal for the
attempt. Geocoding and storage never fail (their cascades fall back), and a
failed verification only adds a warning because the mint already happened.

One orchestrator serves one UI session. It runs at most one attempt at a
time; a run() issued while another is in flight is rejected.
"""

import asyncio
import inspect
import logging
import time
from dataclasses import replace
from typing import Awaitable, Callable, List, Optional, Union

from ..config import AppConfig
from ..exceptions import (
    OrchestratorDisposedError,
    PipelineBusyError,
    PreconditionError,
)
from ..integrations.das_rpc_client import MintClient, VerificationClient
from ..integrations.geocoding import GeocodeResolver
from ..integrations.image_storage_manager import ImageStorageManager
from ..utils.logging_config import metrics_logger
from .location import LocationResolver, PositionSource
from .mint_request import MintRequestBuilder
from .models import (
    STAGE_ORDER,
    STATUS_MESSAGES,
    AttemptRecord,
    MintResult,
    PipelineStatus,
    StatusUpdate,
    VerificationResult,
)

logger = logging.getLogger(__name__)

StatusListener = Callable[[StatusUpdate], Union[None, Awaitable[None]]]


class MintOrchestrator:
    """State machine for a single session's mint attempts."""

    def __init__(
        self,
        location_resolver: LocationResolver,
        geocode_resolver: GeocodeResolver,
        storage_manager: ImageStorageManager,
        request_builder: MintRequestBuilder,
        mint_client: MintClient,
        verification_client: VerificationClient,
        session_id: Optional[str] = None,
    ):
        self.location_resolver = location_resolver
        self.geocode_resolver = geocode_resolver
        self.storage_manager = storage_manager
        self.request_builder = request_builder
        self.mint_client = mint_client
        self.verification_client = verification_client
        self.session_id = session_id

        self.status = PipelineStatus.IDLE
        self.last_attempt = AttemptRecord()
        self._listeners: List[StatusListener] = []
        self._in_flight = False
        self._disposed = False
        self._stage_started = time.monotonic()

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        position_source: Optional[PositionSource] = None,
        session_id: Optional[str] = None,
    ) -> "MintOrchestrator":
        """Wire an orchestrator with the production providers."""
        return cls(
            location_resolver=LocationResolver(position_source, config.location),
            geocode_resolver=GeocodeResolver.from_config(config.geocode),
            storage_manager=ImageStorageManager.from_config(config.storage),
            request_builder=MintRequestBuilder(config.mint),
            mint_client=MintClient.from_config(config.mint),
            verification_client=VerificationClient.from_config(config.mint),
            session_id=session_id,
        )

    # === LIFECYCLE ===

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def disposed(self) -> bool:
        return self._disposed

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """
        Register a status listener; returns a callable that unsubscribes it.

        Listeners are called after every transition, in stage order, and may
        be plain functions or coroutine functions.
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispose(self) -> None:
        """End the session. Listeners are dropped and further runs are refused."""
        self._disposed = True
        self._listeners.clear()
        logger.debug(f"MintOrchestrator[{self.session_id}]: disposed")

    # === STATE MACHINE ===

    async def _transition(self, status: PipelineStatus) -> None:
        if status is not PipelineStatus.ERROR and status is not PipelineStatus.IDLE:
            current = STAGE_ORDER.index(self.status) if self.status in STAGE_ORDER else -1
            if STAGE_ORDER.index(status) != current + 1:
                raise RuntimeError(f"Illegal pipeline transition {self.status.value} -> {status.value}")

        now = time.monotonic()
        if self.status is not PipelineStatus.IDLE:
            outcome = "error" if status is PipelineStatus.ERROR else "ok"
            metrics_logger.log_stage(self.status.value, (now - self._stage_started) * 1000, outcome, self.session_id)
        self._stage_started = now

        self.status = status
        logger.debug(f"MintOrchestrator[{self.session_id}]: -> {status.value}")
        await self._notify(StatusUpdate(status, STATUS_MESSAGES[status], self.session_id))

    async def _notify(self, update: StatusUpdate) -> None:
        for listener in list(self._listeners):
            try:
                outcome = listener(update)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                logger.error(f"MintOrchestrator[{self.session_id}]: status listener failed: {e}")

    async def run(
        self,
        image: Optional[str],
        owner: Optional[str],
        position_source: Optional[PositionSource] = None,
    ) -> MintResult:
        """
        Run one mint attempt.

        Args:
            image: Captured photo as a data URL
            owner: Wallet address that will own the asset
            position_source: Location source for this attempt (defaults to the resolver's)

        Returns:
            MintResult with the asset id and the verification outcome

        Raises:
            PipelineBusyError: another attempt is in flight on this orchestrator
            OrchestratorDisposedError: the orchestrator was disposed
            PreconditionError, LocationError, ConfigurationError, MintRpcError,
            MintEmptyResultError, httpx.HTTPError: the attempt ended in ERROR
            asyncio.CancelledError: the task was cancelled; the attempt ended in ERROR
        """
        if self._disposed:
            raise OrchestratorDisposedError(f"Session {self.session_id} has been disposed")
        if self._in_flight:
            raise PipelineBusyError(f"Session {self.session_id} already has a mint in flight")

        # Set before the first await so a concurrent run() sees it
        self._in_flight = True
        try:
            return await self._run_attempt(image, owner, position_source)
        except asyncio.CancelledError as e:
            if not self.status.is_terminal:
                logger.warning(f"MintOrchestrator[{self.session_id}]: attempt cancelled during {self.status.value}")
                self.last_attempt.error = e
                self.last_attempt.status = PipelineStatus.ERROR
                await self._transition(PipelineStatus.ERROR)
            raise
        finally:
            self._in_flight = False

    async def _run_attempt(
        self,
        image: Optional[str],
        owner: Optional[str],
        position_source: Optional[PositionSource],
    ) -> MintResult:
        attempt = AttemptRecord()
        self.last_attempt = attempt
        self.status = PipelineStatus.IDLE
        await self._transition(PipelineStatus.IDLE)

        try:
            missing = [name for name, value in (("owner", owner), ("image", image)) if not value]
            if missing:
                raise PreconditionError(missing)

            await self._transition(PipelineStatus.LOCATING)
            coordinates = await self.location_resolver.resolve(position_source)

            await self._transition(PipelineStatus.RESOLVING_PLACE)
            place_name = await self.geocode_resolver.resolve(coordinates)
            attempt.place_name = place_name

            await self._transition(PipelineStatus.PERSISTING_IMAGE)
            stored_image = await self.storage_manager.persist(image)
            attempt.storage_method = stored_image.method
            attempt.content_digest = stored_image.content_digest

            await self._transition(PipelineStatus.BUILDING_REQUEST)
            request = self.request_builder.build(owner, place_name, coordinates, stored_image)

            await self._transition(PipelineStatus.MINTING)
            result = await self.mint_client.mint(request)
        except Exception as e:
            attempt.error = e
            attempt.status = PipelineStatus.ERROR
            logger.error(f"MintOrchestrator[{self.session_id}]: attempt failed during {self.status.value}: {e}")
            await self._transition(PipelineStatus.ERROR)
            raise

        # The asset exists from here on; nothing below may fail the attempt
        await self._transition(PipelineStatus.VERIFYING)
        try:
            verification = await self.verification_client.verify(result.asset_id)
        except Exception as e:
            logger.warning(f"MintOrchestrator[{self.session_id}]: verification of {result.asset_id} failed: {e}")
            verification = VerificationResult(
                asset_id=result.asset_id, verified=False, warning=f"Verification failed: {e}"
            )
        result.verification = verification
        if not verification.verified and verification.warning:
            attempt.warnings.append(verification.warning)

        # The asset metadata echoes an embedded data URL back; keep only the outcome
        attempt.result = replace(result, verification=replace(verification, asset=None))
        attempt.status = PipelineStatus.COMPLETE
        await self._transition(PipelineStatus.COMPLETE)
        logger.info(f"MintOrchestrator[{self.session_id}]: minted {result.asset_id} at {place_name}")
        return result
