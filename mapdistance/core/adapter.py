"""Result adapter: one grounded Gemini call per distance query.

Architectural role:
    Translates a `LocationQuery` (plus an optional `DeviceCoordinate`) into a
    single `generateContent` request and normalizes the reply into a
    `CalculationResult`. This is the only component with failure semantics;
    shells above it only read the classified error message.

Control-flow model:
    1. Build the instruction text for the active `FormatProfile`.
    2. Build the payload (tools, optional lat/lng bias, temperature).
    3. Invoke the transport exactly once in a worker thread.
    4. Extract text (primary field, then candidate-part fallback).
    5. Terse profile: reduce the text to the `Total KM: N` token.
    6. Collect grounding sources in service order.

Error handling strategy:
    Every exception raised by transport or parsing is logged with traceback and
    re-raised as `NotFoundError` (prose profile, 404/"not found") or
    `RequestError`. No retry is attempted.

Determinism:
    Payload construction and parsing are deterministic. Model output is not;
    repeated identical calls may return different phrasing.
"""

import asyncio
import logging
import re
from typing import Any, Callable

from mapdistance.core.errors import DistanceError, NotFoundError, RequestError
from mapdistance.core.types import (
    CalculationResult,
    DeviceCoordinate,
    FormatProfile,
    GroundingSource,
    LocationQuery,
    ResultFormat,
    get_profile,
)
from mapdistance.llm.client import send_generate_request
from mapdistance.llm.provider_config import DEFAULT_MODEL_NAME


logger = logging.getLogger(__name__)

EMPTY_TEXT_FALLBACK = (
    "Não foi possível gerar um resumo textual, mas verifique as fontes abaixo "
    "para mais detalhes no mapa."
)
MAPS_SOURCE_LABEL = "Localização no Google Maps"
WEB_SOURCE_LABEL = "Fonte Web"

TOTAL_KM_PATTERN = re.compile(r"Total KM:\s*\d+(?:[.,]\d+)?")

Transport = Callable[..., dict]


# =========================================================
# PAYLOAD
# =========================================================

def build_payload(prompt: str, profile: FormatProfile, coordinate: DeviceCoordinate | None) -> dict:
    """Assemble the Gemini request body for one prompt.

    The `toolConfig.retrievalConfig.latLng` bias is only attached when both
    latitude and longitude are known.
    """
    payload = {
        "contents": [
            {"role": "user", "parts": [{"text": prompt}]},
        ],
        "tools": [{tool: {}} for tool in profile.tools],
        "generationConfig": {"temperature": profile.temperature},
    }

    if coordinate is not None and coordinate.is_available:
        payload["toolConfig"] = {
            "retrievalConfig": {
                "latLng": {
                    "latitude": coordinate.lat,
                    "longitude": coordinate.lng,
                }
            }
        }

    return payload


# =========================================================
# RESPONSE PARSING
# =========================================================

def _first_candidate(response: dict) -> dict:
    candidates = response.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return {}
    return candidates[0]


def extract_text(response: dict, profile: FormatProfile) -> str:
    """Return the primary text or the joined candidate text parts.

    Args:
        response: Decoded `generateContent` response.
        profile: Active profile (selects join separator and stripping).

    Returns:
        Possibly empty text. Empty-text substitution happens in `parse_response`.

    Edge cases:
        - Primary text is the top-level `text` field when the key is present
          (SDK-style responses), else the first candidate's text parts
          concatenated with no separator, as `response.text` does.
        - Only an empty primary text falls back to the profile join rule.
        - Parts without text are skipped; order is preserved.
    """
    content = _first_candidate(response).get("content") or {}
    fragments = [
        part.get("text")
        for part in content.get("parts") or []
        if isinstance(part, dict) and part.get("text")
    ]

    if "text" in response:
        text = response.get("text")
    else:
        text = "".join(fragments)
    if isinstance(text, str) and text:
        return text

    joined = profile.part_separator.join(fragments)
    return joined.strip() if profile.strip_parts else joined


def extract_total_km(text: str) -> str:
    """Return only the `Total KM: N` token when present, else the stripped text."""
    match = TOTAL_KM_PATTERN.search(text)
    if match:
        return match.group(0)
    return text.strip()


def extract_sources(response: dict, profile: FormatProfile) -> list[GroundingSource]:
    """Collect grounding sources from the first candidate in service order.

    Maps chunks are checked before web chunks. Web chunks are skipped when the
    profile does not request web grounding. Chunks without a URI are skipped.
    No deduplication is performed.
    """
    metadata = _first_candidate(response).get("groundingMetadata") or {}
    sources = []

    for chunk in metadata.get("groundingChunks") or []:
        if not isinstance(chunk, dict):
            continue

        maps = chunk.get("maps")
        web = chunk.get("web")

        if maps:
            if maps.get("uri"):
                sources.append(GroundingSource(
                    title=maps.get("title") or MAPS_SOURCE_LABEL,
                    uri=maps["uri"],
                ))
        elif web and profile.include_web_sources:
            if web.get("uri"):
                sources.append(GroundingSource(
                    title=web.get("title") or WEB_SOURCE_LABEL,
                    uri=web["uri"],
                ))

    return sources


def parse_response(response: dict, profile: FormatProfile) -> CalculationResult:
    """Normalize a decoded response into a `CalculationResult`."""
    if not isinstance(response, dict):
        raise TypeError(f"Unexpected response type: {type(response).__name__}")

    text = extract_text(response, profile)

    if profile.extract_total_km and text:
        text = extract_total_km(text)

    if not text:
        text = EMPTY_TEXT_FALLBACK

    return CalculationResult(text=text, sources=tuple(extract_sources(response, profile)))


# =========================================================
# ERROR CLASSIFICATION
# =========================================================

def _is_not_found(err: BaseException) -> bool:
    response = getattr(err, "response", None)
    if getattr(response, "status_code", None) == 404:
        return True

    message = str(err).lower()
    return "404" in message or "not found" in message


def classify_error(err: Exception, profile: FormatProfile) -> DistanceError:
    """Map an upstream failure to the user-facing error for `profile`."""
    if profile.classify_not_found and _is_not_found(err):
        return NotFoundError()
    return RequestError()


# =========================================================
# ADAPTER
# =========================================================

class DistanceAdapter:
    """Grounded distance lookups against one configured Gemini model.

    Args:
        api_key: Gemini API key. Never read from the environment here.
        model: Gemini model name.
        result_format: `ResultFormat`, its string value or a `FormatProfile`.
        transport: Callable with the `send_generate_request` signature.
        timeout: Request timeout in seconds forwarded to the transport.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_MODEL_NAME,
        result_format: Any = ResultFormat.PROSE,
        transport: Transport = send_generate_request,
        timeout: float = 60.0,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.profile = get_profile(result_format)
        self.transport = transport
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings, result_format=None, transport: Transport = send_generate_request):
        """Build an adapter from a `provider_config.Settings` snapshot."""
        return cls(
            api_key=settings.api_key,
            model=settings.model_name,
            result_format=result_format or settings.result_format,
            transport=transport,
            timeout=settings.request_timeout,
        )

    @property
    def result_format(self) -> ResultFormat:
        return self.profile.result_format

    def with_format(self, result_format) -> "DistanceAdapter":
        """Return a copy of this adapter using another format profile."""
        return DistanceAdapter(
            api_key=self.api_key,
            model=self.model,
            result_format=result_format,
            transport=self.transport,
            timeout=self.timeout,
        )

    def _call(self, query: LocationQuery, coordinate: DeviceCoordinate | None) -> CalculationResult:
        prompt = self.profile.build_prompt(query.origin, query.destination)
        payload = build_payload(prompt, self.profile, coordinate)
        response = self.transport(
            payload,
            api_key=self.api_key,
            model=self.model,
            timeout=self.timeout,
        )
        return parse_response(response, self.profile)

    async def compute_distance(
        self,
        query: LocationQuery,
        coordinate: DeviceCoordinate | None = None,
    ) -> CalculationResult:
        """Request a distance estimate for `query`.

        Args:
            query: Origin/destination. Not validated here; shells validate.
            coordinate: Optional location bias for grounding.

        Returns:
            `CalculationResult` with text and ordered sources.

        Raises:
            NotFoundError: Prose profile, upstream reported 404/"not found".
            RequestError: Any other failure.

        Side effects:
            Exactly one outbound network call; failures are logged.
        """
        try:
            return await asyncio.to_thread(self._call, query, coordinate)
        except Exception as err:
            logger.exception(
                "Gemini API request failed (format=%s, model=%s)",
                self.profile.result_format.value,
                self.model,
            )
            raise classify_error(err, self.profile) from err
