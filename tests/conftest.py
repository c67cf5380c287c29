import pytest

from mapdistance.core.adapter import DistanceAdapter
from mapdistance.llm.provider_config import Settings


class RecordingTransport:
    """Stub for `send_generate_request` that records calls."""

    def __init__(self, response=None, error=None):
        self.response = response if response is not None else {}
        self.error = error
        self.calls = []

    def __call__(self, payload, api_key=None, model=None, timeout=None):
        self.calls.append({
            "payload": payload,
            "api_key": api_key,
            "model": model,
            "timeout": timeout,
        })
        if self.error is not None:
            raise self.error
        return self.response


def make_response(text_parts=(), chunks=(), text=None):
    candidate = {"content": {"role": "model", "parts": [{"text": part} for part in text_parts]}}
    if chunks:
        candidate["groundingMetadata"] = {"groundingChunks": list(chunks)}
    response = {"candidates": [candidate]}
    if text is not None:
        response["text"] = text
    return response


def maps_chunk(uri, title=None):
    chunk = {"uri": uri}
    if title is not None:
        chunk["title"] = title
    return {"maps": chunk}


def web_chunk(uri, title=None):
    chunk = {"uri": uri}
    if title is not None:
        chunk["title"] = title
    return {"web": chunk}


@pytest.fixture
def settings():
    return Settings(api_key="test-key", geolocation_url="")


@pytest.fixture
def make_adapter():
    def factory(response=None, error=None, result_format="prose"):
        transport = RecordingTransport(response=response, error=error)
        adapter = DistanceAdapter(
            api_key="test-key",
            model="gemini-test",
            result_format=result_format,
            transport=transport,
        )
        return adapter, transport

    return factory
