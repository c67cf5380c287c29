"""Data contracts shared by the adapter, shell and API layers.

Control-flow interaction:
    API adapters build a `LocationQuery` from user input, the shell pairs it
    with the cached `DeviceCoordinate`, and the adapter answers with a
    `CalculationResult`. `FormatProfile` selects how a request is phrased and
    how its reply is parsed.

Determinism:
    All classes are purely structural and immutable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from mapdistance.prompting.prompt_builder import build_prose_prompt, build_terse_prompt


@dataclass(frozen=True)
class LocationQuery:
    """Origin and destination place names for one request."""

    origin: str
    destination: str

    def is_complete(self) -> bool:
        """Return True when both fields are non-empty after stripping."""
        return bool(self.origin and self.origin.strip()) and bool(
            self.destination and self.destination.strip()
        )


@dataclass(frozen=True)
class DeviceCoordinate:
    """Best-effort device latitude/longitude used only to bias grounding."""

    lat: float | None = None
    lng: float | None = None

    @property
    def is_available(self) -> bool:
        return self.lat is not None and self.lng is not None


@dataclass(frozen=True)
class GroundingSource:
    """One citation returned by the maps or web grounding tool."""

    uri: str
    title: str | None = None

    def to_dict(self) -> dict:
        return {"title": self.title, "uri": self.uri}


@dataclass(frozen=True)
class CalculationResult:
    """Answer text plus grounding sources in service order."""

    text: str
    sources: tuple[GroundingSource, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "sources": [source.to_dict() for source in self.sources],
        }


class ResultFormat(str, Enum):
    """Output convention requested from the model."""

    PROSE = "prose"
    TERSE = "terse"


@dataclass(frozen=True)
class FormatProfile:
    """Request and parsing strategy for one `ResultFormat`.

    Attributes:
        result_format: Profile identifier.
        build_prompt: Instruction builder taking `(origin, destination)`.
        tools: Gemini tool declarations requested for grounding.
        temperature: Sampling temperature sent in `generationConfig`.
        part_separator: Join string for the candidate text-part fallback.
        strip_parts: Strip the joined fallback text.
        include_web_sources: Keep `web` grounding chunks as sources.
        extract_total_km: Reduce the text to the `Total KM: N` token.
        classify_not_found: Report 404/"not found" failures distinctly.
    """

    result_format: ResultFormat
    build_prompt: Callable[[str, str], str]
    tools: tuple[str, ...]
    temperature: float
    part_separator: str
    strip_parts: bool = False
    include_web_sources: bool = True
    extract_total_km: bool = False
    classify_not_found: bool = True


PROSE_PROFILE = FormatProfile(
    result_format=ResultFormat.PROSE,
    build_prompt=build_prose_prompt,
    tools=("googleMaps", "googleSearch"),
    temperature=0.7,
    part_separator="\n",
)

TERSE_PROFILE = FormatProfile(
    result_format=ResultFormat.TERSE,
    build_prompt=build_terse_prompt,
    tools=("googleMaps",),
    temperature=0.0,
    part_separator="",
    strip_parts=True,
    include_web_sources=False,
    extract_total_km=True,
    classify_not_found=False,
)

PROFILES = {
    ResultFormat.PROSE: PROSE_PROFILE,
    ResultFormat.TERSE: TERSE_PROFILE,
}


def get_profile(result_format) -> FormatProfile:
    """Resolve a profile from a `ResultFormat` or its string value.

    Raises:
        ValueError: For unknown format names.
    """
    if isinstance(result_format, FormatProfile):
        return result_format
    if isinstance(result_format, ResultFormat):
        return PROFILES[result_format]
    return PROFILES[ResultFormat(str(result_format).strip().lower())]
