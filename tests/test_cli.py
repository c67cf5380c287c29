import json

from conftest import make_response, maps_chunk
from mapdistance.api import cli, main as main_module
from mapdistance.core.adapter import DistanceAdapter
from mapdistance.core.errors import VALIDATION_MESSAGE
from mapdistance.core.types import CalculationResult, DeviceCoordinate, GroundingSource


def scripted_input(lines):
    iterator = iter(lines)

    def fake_input(prompt=""):
        try:
            return next(iterator)
        except StopIteration:
            raise EOFError

    return fake_input


def test_render_result_lists_sources_in_order() -> None:
    result = CalculationResult(
        text="~300 km",
        sources=(
            GroundingSource(title="Mapa", uri="https://maps.google.com/?cid=1"),
            GroundingSource(title=None, uri="https://example.com"),
        ),
    )

    rendered = cli.render_result(result)

    assert rendered.splitlines() == [
        cli.RESULT_HEADER,
        "",
        "~300 km",
        "",
        cli.SOURCES_HEADER,
        " 1. Mapa <https://maps.google.com/?cid=1>",
        " 2. https://example.com <https://example.com>",
    ]


def test_interactive_loop_submits_and_switches_format(settings, make_adapter, capsys) -> None:
    adapter, transport = make_adapter(make_response(text_parts=["x Total KM: 300 y"]))

    cli.main(
        settings=settings,
        adapter=adapter,
        locate=lambda: DeviceCoordinate(lat=1.0, lng=2.0),
        input_func=scripted_input([
            "/format terse",
            "Curitiba, PR",
            "Florianópolis, SC",
            "",
            "",
            "exit",
        ]),
    )

    out = capsys.readouterr().out
    assert "Formato alterado para: terse" in out
    assert "Total KM: 300" in out
    assert VALIDATION_MESSAGE in out
    assert len(transport.calls) == 1
    assert "toolConfig" in transport.calls[0]["payload"]


def test_format_command_help_and_unknown(make_adapter) -> None:
    adapter, _ = make_adapter()
    shell = cli.DistanceShell(adapter)

    assert "Formato atual: prose" in cli.handle_format_command(shell, "/format")
    assert "não encontrado" in cli.handle_format_command(shell, "/format haiku")
    assert shell.adapter is adapter


def test_one_shot_json_success(settings, make_adapter, capsys) -> None:
    response = make_response(
        text_parts=["~300 km, ~4h by car via BR-101"],
        chunks=[maps_chunk("https://maps.google.com/?cid=42")],
    )
    adapter, transport = make_adapter(response)

    code = main_module.main(
        ["Curitiba, PR", "Florianópolis, SC", "--json", "--lat", "-25.4", "--lng", "-49.3"],
        settings=settings,
        adapter=adapter,
    )

    body = json.loads(capsys.readouterr().out)
    assert code == 0
    assert body["text"] == "~300 km, ~4h by car via BR-101"
    assert body["sources"][0]["uri"] == "https://maps.google.com/?cid=42"
    assert transport.calls[0]["payload"]["toolConfig"]["retrievalConfig"]["latLng"]["latitude"] == -25.4


def test_one_shot_exit_codes(settings, make_adapter, capsys) -> None:
    adapter, transport = make_adapter(error=RuntimeError("boom"))

    assert main_module.main([" ", "B", "--no-locate"], settings=settings, adapter=adapter) == 2
    assert transport.calls == []
    assert main_module.main(["A", "B", "--no-locate"], settings=settings, adapter=adapter) == 1
    assert main_module.main(["A", "B", "--format", "terse"], settings=settings, adapter=adapter) == 1
    assert transport.calls[-1]["payload"]["tools"] == [{"googleMaps": {}}]


def test_interrupt_during_request_ends_loop_cleanly(settings, capsys) -> None:
    class InterruptedAdapter(DistanceAdapter):
        async def compute_distance(self, query, coordinate=None):
            raise KeyboardInterrupt

    adapter = InterruptedAdapter(api_key="test-key")

    cli.main(
        settings=settings,
        adapter=adapter,
        input_func=scripted_input(["Curitiba, PR", "Florianópolis, SC", "exit"]),
    )

    out = capsys.readouterr().out
    assert "Operation cancelled by user." in out
    assert "Shutting down." not in out
