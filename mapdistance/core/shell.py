"""Interaction shell: form state around the result adapter.

Architectural role:
    Owns the UI-facing state (`origin`, `destination`, `loading`, `result`,
    `error`, cached device coordinate) shared by the terminal and HTTP
    adapters. Rendering is left to those adapters.

Request lifecycle (`submit`):
    1. Store the entered field values and take a sequence number.
    2. Reject empty/whitespace fields locally (`ValidationError`); any
       request still in flight is now stale.
    3. Set `loading`, clear previous `result`/`error`.
    4. Call the adapter exactly once with the cached coordinate.
    5. If the submission is still the latest one, store exactly one of
       `result`/`error` and clear `loading`; otherwise drop the outcome.

Error handling strategy:
    Classified adapter errors are stored as-is. Anything else is logged and
    stored as a generic unexpected-error message. Nothing is raised to callers.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from mapdistance.core.errors import (
    DistanceError,
    LocationUnavailableError,
    ValidationError,
)
from mapdistance.core.types import CalculationResult, DeviceCoordinate, LocationQuery


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShellState:
    """Read-only view of shell state for rendering."""

    origin: str
    destination: str
    loading: bool
    result: CalculationResult | None
    error: DistanceError | None
    coordinate: DeviceCoordinate
    location_error: str | None

    @property
    def error_message(self) -> str | None:
        return self.error.message if self.error is not None else None


class DistanceShell:
    """Form state holder that validates input and drives the adapter.

    Args:
        adapter: Object exposing `async compute_distance(query, coordinate)`.
        locate: Blocking callable returning a `DeviceCoordinate`; run once by
            `start()`. `None` skips the lookup.
        coordinate: Initial coordinate (for example supplied by an HTTP client).
    """

    def __init__(
        self,
        adapter,
        locate: Callable[[], DeviceCoordinate] | None = None,
        coordinate: DeviceCoordinate | None = None,
    ) -> None:
        self.adapter = adapter
        self.locate = locate

        self.origin = ""
        self.destination = ""
        self.loading = False
        self.result: CalculationResult | None = None
        self.error: DistanceError | None = None

        self.coordinate = coordinate or DeviceCoordinate()
        self.location_error: str | None = None

        self._started = False
        self._sequence = 0

    # =====================================================
    # STARTUP
    # =====================================================

    async def start(self) -> DeviceCoordinate:
        """Run the one-time best-effort device-location lookup.

        Returns:
            The cached coordinate (both fields `None` when unavailable).

        Edge cases:
            - Repeated calls return the cached coordinate without a new lookup.
            - Lookup failures are recorded in `location_error`, never raised.
        """
        if self._started:
            return self.coordinate
        self._started = True

        if self.locate is None:
            return self.coordinate

        try:
            self.coordinate = await asyncio.to_thread(self.locate)
        except LocationUnavailableError as err:
            self.location_error = err.message
            logger.warning("Device location unavailable; continuing without bias")
        except Exception:
            self.location_error = LocationUnavailableError().message
            logger.exception("Device location lookup failed")

        return self.coordinate

    # =====================================================
    # SUBMISSION
    # =====================================================

    async def submit(self, origin: str, destination: str) -> ShellState:
        """Validate the form values and request one distance estimate.

        Args:
            origin: Origin field value as entered.
            destination: Destination field value as entered.

        Returns:
            State snapshot after the submission settled (or was superseded).
        """
        self.origin = origin or ""
        self.destination = destination or ""

        # A rejected submission still supersedes any request in flight.
        self._sequence += 1
        ticket = self._sequence

        query = LocationQuery(origin=self.origin, destination=self.destination)
        if not query.is_complete():
            self.error = ValidationError()
            self.loading = False
            return self.snapshot()

        self.loading = True
        self.result = None
        self.error = None

        result = None
        error = None
        try:
            result = await self.adapter.compute_distance(query, self.coordinate)
        except DistanceError as err:
            error = err
        except Exception:
            logger.exception("Unexpected adapter failure")
            error = DistanceError()

        if ticket != self._sequence:
            logger.debug("Discarding stale response for submission #%d", ticket)
            return self.snapshot()

        self.result = result
        self.error = error
        self.loading = False
        return self.snapshot()

    def snapshot(self) -> ShellState:
        return ShellState(
            origin=self.origin,
            destination=self.destination,
            loading=self.loading,
            result=self.result,
            error=self.error,
            coordinate=self.coordinate,
            location_error=self.location_error,
        )
