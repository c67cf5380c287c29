"""Gemini transport client for grounded distance requests.

Architectural role:
    Executes one HTTP request against the Gemini `generateContent` REST endpoint
    and returns the decoded JSON body unchanged.

Model invocation flow:
    `core.adapter.DistanceAdapter` -> `send_generate_request(payload, ...)`
    -> `requests.post` -> parsed JSON dict.

Retry behavior:
    No retry loop is implemented. Each call is attempted exactly once.

Failure handling model:
    Unlike the adapter, this module does not sanitize anything. Missing keys,
    HTTP status failures and transport errors are raised so the adapter can
    classify them (for example 404 -> model not found).
"""

import requests

from mapdistance.llm.provider_config import DEFAULT_MODEL_NAME, GEMINI_URL_TEMPLATE


class MissingApiKeyError(RuntimeError):
    """Raised when a request is attempted without configured credentials."""


def build_url(model: str) -> str:
    """Return the `generateContent` endpoint for `model`."""
    return GEMINI_URL_TEMPLATE.format(model=model or DEFAULT_MODEL_NAME)


def send_generate_request(
    payload: dict,
    api_key: str | None,
    model: str = DEFAULT_MODEL_NAME,
    timeout: float = 60.0,
) -> dict:
    """Send one `generateContent` request and return the decoded response.

    Args:
        payload: Gemini request body (`contents`, `tools`, `toolConfig`,
            `generationConfig`).
        api_key: Gemini API key injected by the caller.
        model: Model name interpolated into the endpoint path.
        timeout: Request timeout in seconds.

    Returns:
        Decoded JSON response dict.

    Raises:
        MissingApiKeyError: When `api_key` is empty.
        requests.HTTPError: For non-2xx responses (status kept on `.response`).
        requests.RequestException: For transport failures.
        ValueError: When the body is not valid JSON.
    """
    if not api_key:
        raise MissingApiKeyError("GEMINI API KEY NOT CONFIGURED")

    headers = {
        "x-goog-api-key": api_key,
        "Content-Type": "application/json",
    }

    response = requests.post(
        build_url(model),
        headers=headers,
        json=payload,
        timeout=timeout,
    )

    response.raise_for_status()
    return response.json()
