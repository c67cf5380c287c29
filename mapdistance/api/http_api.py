"""
HTTP API adapter for MapDistance.

Architectural role:
- Expose a small JSON interface over the interaction shell.
- Map shell state to HTTP status codes and response bodies.
- Keep per-request state isolated (one shell per request).

Endpoint responsibilities:
- `GET /v1/formats`: list available result formats.
- `POST /v1/distance`: validate input, call the adapter once, return the
  text and grounding sources.

API request lifecycle (`POST /v1/distance`):
1. Parse the JSON body into `DistanceRequest`.
2. Resolve the result format (unknown -> HTTP 400).
3. Use the request coordinate, else the one captured at startup.
4. Submit through a fresh `DistanceShell`.
5. Validation failure -> HTTP 400; adapter failure -> HTTP 502; else 200.

Error handling strategy:
- Error bodies carry only the fixed user-facing message and the error kind.
- Upstream exception details are logged by the adapter, never returned.

Side effects:
- Loads settings (and `.env`) when `create_app()` runs.
- Performs one best-effort device-location lookup at startup.
- Emits request debug logs only when `DEBUG == "true"`.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from mapdistance.core.adapter import DistanceAdapter
from mapdistance.core.errors import ValidationError
from mapdistance.core.shell import DistanceShell
from mapdistance.core.types import DeviceCoordinate, PROFILES
from mapdistance.llm.provider_config import load_settings
from mapdistance.location.geolocation import lookup_device_coordinate


logger = logging.getLogger(__name__)


# ============================================================
# Request Schema
# ============================================================

class DistanceRequest(BaseModel):
    """Body of `POST /v1/distance`."""

    origin: str = ""
    destination: str = ""
    lat: float | None = None
    lng: float | None = None
    format: str | None = None


# ============================================================
# Application Factory
# ============================================================

def create_app(settings=None, adapter=None, locate=None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: `Settings` snapshot; loaded from the environment when omitted.
        adapter: Prebuilt `DistanceAdapter`; built from settings when omitted.
        locate: Startup coordinate lookup; defaults to the settings-driven
            geolocation lookup.

    Returns:
        Configured FastAPI app. The startup coordinate lives on `app.state`.
    """
    settings = settings or load_settings()
    adapter = adapter or DistanceAdapter.from_settings(settings)
    if locate is None:
        def locate_from_settings():
            return lookup_device_coordinate(settings)
        locate = locate_from_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        startup_shell = DistanceShell(adapter, locate=locate)
        app.state.coordinate = await startup_shell.start()
        app.state.location_error = startup_shell.location_error
        yield

    app = FastAPI(title="MapDistance AI", lifespan=lifespan)
    app.state.coordinate = DeviceCoordinate()
    app.state.location_error = None

    # ============================================================
    # Format Listing
    # ============================================================

    @app.get("/v1/formats")
    def list_formats():
        """Return available formats and the configured default."""
        return {
            "default": adapter.result_format.value,
            "data": [
                {
                    "id": profile.result_format.value,
                    "tools": list(profile.tools),
                    "temperature": profile.temperature,
                }
                for profile in PROFILES.values()
            ],
        }

    # ============================================================
    # Distance Endpoint
    # ============================================================

    @app.post("/v1/distance")
    async def distance(body: DistanceRequest):
        """Compute one grounded distance estimate.

        Input validation behavior:
        - Empty/whitespace origin or destination -> HTTP 400, adapter not called.
        - Unknown `format` -> HTTP 400.

        Response formatting:
        - Success: `{"text": ..., "sources": [{"title": ..., "uri": ...}]}`.
        - Failure: `{"error": <message>, "kind": <kind>}`.
        """
        if settings.debug:
            logger.info("Distance request: %r", body.model_dump())

        request_adapter = adapter
        if body.format:
            try:
                request_adapter = adapter.with_format(body.format)
            except ValueError:
                return JSONResponse(
                    status_code=400,
                    content={"error": f"Unknown format: {body.format}", "kind": "validation"},
                )

        if body.lat is not None and body.lng is not None:
            coordinate = DeviceCoordinate(lat=body.lat, lng=body.lng)
        else:
            coordinate = app.state.coordinate

        shell = DistanceShell(request_adapter, coordinate=coordinate)
        state = await shell.submit(body.origin, body.destination)

        if state.error is not None:
            status_code = 400 if isinstance(state.error, ValidationError) else 502
            return JSONResponse(
                status_code=status_code,
                content={"error": state.error.message, "kind": state.error.kind},
            )

        if settings.debug:
            logger.info("Distance result: %r", state.result)

        return state.result.to_dict()

    return app
