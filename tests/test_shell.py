import asyncio

import pytest

from conftest import make_response, maps_chunk
from mapdistance.core.errors import (
    LOCATION_UNAVAILABLE_MESSAGE,
    REQUEST_MESSAGE,
    UNEXPECTED_MESSAGE,
    VALIDATION_MESSAGE,
    LocationUnavailableError,
    RequestError,
)
from mapdistance.core.shell import DistanceShell
from mapdistance.core.types import CalculationResult, DeviceCoordinate, LocationQuery


class StubAdapter:
    def __init__(self, result=None, error=None):
        self.result = result or CalculationResult(text="ok")
        self.error = error
        self.calls = []

    async def compute_distance(self, query, coordinate=None):
        self.calls.append((query, coordinate))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.mark.parametrize(
    "origin,destination",
    [("", "Florianópolis, SC"), ("Curitiba, PR", ""), ("   ", "Florianópolis, SC"), ("Curitiba", "\t\n")],
)
def test_blank_fields_never_reach_adapter(origin, destination) -> None:
    adapter = StubAdapter()
    shell = DistanceShell(adapter)

    state = asyncio.run(shell.submit(origin, destination))

    assert adapter.calls == []
    assert state.error.kind == "validation"
    assert state.error_message == VALIDATION_MESSAGE
    assert state.loading is False


def test_valid_submission_calls_adapter_once_with_values() -> None:
    adapter = StubAdapter()
    shell = DistanceShell(adapter, coordinate=DeviceCoordinate(lat=1.5, lng=2.5))

    state = asyncio.run(shell.submit("Curitiba, PR", "Florianópolis, SC"))

    assert adapter.calls == [
        (LocationQuery("Curitiba, PR", "Florianópolis, SC"), DeviceCoordinate(lat=1.5, lng=2.5))
    ]
    assert state.result.text == "ok"
    assert state.error is None
    assert state.loading is False


def test_submission_clears_previous_result_on_error() -> None:
    adapter = StubAdapter()
    shell = DistanceShell(adapter)
    asyncio.run(shell.submit("A", "B"))

    adapter.error = RequestError()
    state = asyncio.run(shell.submit("A", "C"))

    assert state.result is None
    assert state.error_message == REQUEST_MESSAGE


def test_unclassified_adapter_error_uses_generic_message() -> None:
    shell = DistanceShell(StubAdapter(error=KeyError("boom")))

    state = asyncio.run(shell.submit("A", "B"))

    assert state.error_message == UNEXPECTED_MESSAGE
    assert state.result is None


def test_loading_is_set_while_request_in_flight() -> None:
    seen = []

    class ObservingAdapter(StubAdapter):
        async def compute_distance(self, query, coordinate=None):
            seen.append((shell.loading, shell.result, shell.error))
            return await super().compute_distance(query, coordinate)

    shell = DistanceShell(ObservingAdapter())
    shell.error = RequestError()

    asyncio.run(shell.submit("A", "B"))

    assert seen == [(True, None, None)]
    assert shell.loading is False


def test_stale_response_does_not_overwrite_newer_submission() -> None:
    class SlowFirstAdapter:
        def __init__(self):
            self.release_first = None

        async def compute_distance(self, query, coordinate=None):
            if query.destination == "first":
                await self.release_first.wait()
                return CalculationResult(text="stale")
            return CalculationResult(text="fresh")

    async def scenario():
        adapter = SlowFirstAdapter()
        adapter.release_first = asyncio.Event()
        shell = DistanceShell(adapter)

        first = asyncio.create_task(shell.submit("A", "first"))
        await asyncio.sleep(0)
        second_state = await shell.submit("A", "second")
        adapter.release_first.set()
        first_state = await first
        return shell, first_state, second_state

    shell, first_state, second_state = asyncio.run(scenario())

    assert second_state.result.text == "fresh"
    assert first_state.result.text == "fresh"
    assert shell.result.text == "fresh"
    assert shell.loading is False


def test_rejected_submission_makes_in_flight_response_stale() -> None:
    class SlowAdapter:
        def __init__(self):
            self.release = None
            self.calls = []

        async def compute_distance(self, query, coordinate=None):
            self.calls.append(query)
            await self.release.wait()
            return CalculationResult(text="old answer for B")

    async def scenario():
        adapter = SlowAdapter()
        adapter.release = asyncio.Event()
        shell = DistanceShell(adapter)

        first = asyncio.create_task(shell.submit("A", "B"))
        await asyncio.sleep(0)
        rejected_state = await shell.submit("", "C")
        adapter.release.set()
        await first
        return shell, adapter, rejected_state

    shell, adapter, rejected_state = asyncio.run(scenario())

    assert len(adapter.calls) == 1
    assert rejected_state.error_message == VALIDATION_MESSAGE
    assert rejected_state.loading is False
    assert (shell.origin, shell.destination) == ("", "C")
    assert shell.result is None
    assert shell.error.message == VALIDATION_MESSAGE
    assert shell.loading is False


def test_start_caches_coordinate_and_runs_once() -> None:
    calls = []

    def locate():
        calls.append(1)
        return DeviceCoordinate(lat=-25.4, lng=-49.3)

    shell = DistanceShell(StubAdapter(), locate=locate)

    async def scenario():
        await shell.start()
        return await shell.start()

    coordinate = asyncio.run(scenario())

    assert coordinate == DeviceCoordinate(lat=-25.4, lng=-49.3)
    assert calls == [1]
    assert shell.location_error is None


def test_location_failure_is_non_fatal() -> None:
    def locate():
        raise LocationUnavailableError()

    adapter = StubAdapter()
    shell = DistanceShell(adapter, locate=locate)

    coordinate = asyncio.run(shell.start())
    asyncio.run(shell.submit("A", "B"))

    assert coordinate == DeviceCoordinate(None, None)
    assert shell.location_error == LOCATION_UNAVAILABLE_MESSAGE
    assert adapter.calls[0][1] == DeviceCoordinate(None, None)


def test_end_to_end_with_real_adapter(make_adapter) -> None:
    response = make_response(
        text_parts=["~300 km, ~4h by car via BR-101"],
        chunks=[maps_chunk("https://maps.google.com/?cid=42", "Florianópolis")],
    )
    adapter, transport = make_adapter(response)
    shell = DistanceShell(adapter)

    state = asyncio.run(shell.submit("Curitiba, PR", "Florianópolis, SC"))

    assert len(transport.calls) == 1
    assert state.result.text == "~300 km, ~4h by car via BR-101"
    assert [source.uri for source in state.result.sources] == ["https://maps.google.com/?cid=42"]
