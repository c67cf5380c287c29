"""Provider/runtime configuration for the Gemini layer.

Architectural role:
    Centralizes model selection, endpoint resolution and credential lookup for
    `mapdistance.llm.client`, `mapdistance.core.adapter` and the API adapters.

Configuration flow:
    - Environment (plus an optional `.env` file) is read when `load_settings()`
      is called, not when the adapter runs.
    - API adapters build one `Settings` object at startup and inject the API
      key into `DistanceAdapter` explicitly.

Determinism:
    Deterministic for a fixed process environment and key files.

Failure behavior:
    Missing key material is represented as `None`. The adapter turns it into a
    generic request failure on first use.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


DEFAULT_MODEL_NAME = "gemini-2.5-flash"

GEMINI_URL_TEMPLATE = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "{model}:generateContent"
)

# Free IP-based lookup used when no explicit device coordinate is configured.
DEFAULT_GEOLOCATION_URL = "http://ip-api.com/json/"

GEMINI_KEY_FILE = "config/gemini.key"


def load_key(path):
    """Load API key from environment override or key file.

    Resolution order:
        1. Environment variable inferred from file stem (for example
           `config/gemini.key` -> `GEMINI_API_KEY`).
        2. Plain `API_KEY` environment variable.
        3. Raw file contents at `path`.

    Args:
        path: Configured key file path or `None`.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - `None` path still honors `API_KEY`.
        - Missing or empty file returns `None`.
    """
    if path:
        key_name = os.path.splitext(os.path.basename(path))[0].upper() + "_API_KEY"
        env_value = os.getenv(key_name)
        if env_value:
            return env_value.strip()

    env_value = os.getenv("API_KEY")
    if env_value:
        return env_value.strip()

    if not path or not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        return f.read().strip() or None


def _optional_float(name):
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw.replace(",", "."))
    except ValueError:
        return None


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment.

    Relevant environment variables:
        - `GEMINI_API_KEY` / `API_KEY` (or `config/gemini.key`)
        - `MODEL_NAME`
        - `RESULT_FORMAT` (`prose` or `terse`)
        - `REQUEST_TIMEOUT_SECONDS`
        - `DEVICE_LAT`, `DEVICE_LNG`
        - `GEOLOCATION_URL` (empty disables IP lookup)
        - `DEBUG`, `LOG_LEVEL`
    """

    api_key: str | None = None
    model_name: str = DEFAULT_MODEL_NAME
    result_format: str = "prose"
    request_timeout: float = 60.0
    device_lat: float | None = None
    device_lng: float | None = None
    geolocation_url: str = DEFAULT_GEOLOCATION_URL
    debug: bool = False
    log_level: str = "INFO"


def load_settings(key_file=GEMINI_KEY_FILE) -> Settings:
    """Build a `Settings` snapshot from the current process environment."""
    try:
        timeout = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "60"))
    except ValueError:
        timeout = 60.0

    return Settings(
        api_key=load_key(key_file),
        model_name=os.getenv("MODEL_NAME", DEFAULT_MODEL_NAME).strip() or DEFAULT_MODEL_NAME,
        result_format=os.getenv("RESULT_FORMAT", "prose").strip().lower() or "prose",
        request_timeout=timeout,
        device_lat=_optional_float("DEVICE_LAT"),
        device_lng=_optional_float("DEVICE_LNG"),
        geolocation_url=os.getenv("GEOLOCATION_URL", DEFAULT_GEOLOCATION_URL).strip(),
        debug=os.getenv("DEBUG") == "true",
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
