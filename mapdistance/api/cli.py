"""
Interactive terminal adapter for MapDistance.

Architectural role:
- Exposes the form (origin + destination) as a prompt loop.
- Delegates validation and the model call to `core.shell.DistanceShell`.
- Renders answer text verbatim and numbered source links in service order.

Request lifecycle (per turn):
1. Read origin (or a local command) from stdin.
2. Handle local commands (`exit`/`quit`, `/format`).
3. Read destination and submit both through the shell.
4. Print the result or the fixed error message.

Hard trigger handling:
- `/format` lists formats; `/format <name>` switches the active profile.

Error handling strategy:
- EOF and keyboard interrupts terminate the loop without traceback output.
- Adapter failures are shown as their fixed message; details go to the log.

Side effects:
- One device-location lookup at startup.
- Writes to stdout for all operator feedback.
"""

import asyncio
import logging
import sys

from mapdistance.core.adapter import DistanceAdapter
from mapdistance.core.shell import DistanceShell
from mapdistance.core.types import PROFILES
from mapdistance.llm.provider_config import load_settings
from mapdistance.location.geolocation import lookup_device_coordinate


logger = logging.getLogger(__name__)

RESULT_HEADER = "Resultado"
SOURCES_HEADER = "Fontes de Dados Grounding"


# =========================================================
# RENDERING
# =========================================================

def render_result(result) -> str:
    """Format a `CalculationResult` for terminal output."""
    lines = [RESULT_HEADER, "", result.text]

    if result.sources:
        lines.extend(["", SOURCES_HEADER])
        for index, source in enumerate(result.sources, start=1):
            lines.append(f" {index}. {source.title or source.uri} <{source.uri}>")

    return "\n".join(lines)


def render_state(state) -> str:
    """Format a settled `ShellState` (error or result)."""
    if state.error is not None:
        return f"Erro: {state.error.message}"
    if state.result is not None:
        return render_result(state.result)
    return ""


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# =========================================================
# UTF-8 SAFE OUTPUT
# =========================================================

if hasattr(sys.stdout, "reconfigure"):
    try:
        sys.stdout.reconfigure(encoding="utf-8", errors="ignore")
    except (AttributeError, ValueError, OSError):
        pass


# =========================================================
# COMMANDS
# =========================================================

def handle_format_command(shell: DistanceShell, command: str) -> str:
    """Apply a `/format` command to the shell and return the feedback text."""
    parts = command.split()
    current = shell.adapter.result_format.value

    if len(parts) == 1 or parts[1].lower() == "help":
        names = "\n".join(f" - {name.value}" for name in PROFILES)
        return (
            f"Formatos disponíveis:\n{names}\n\n"
            "Uso:\n /format <nome>\n /format help\n\n"
            f"Formato atual: {current}"
        )

    try:
        shell.adapter = shell.adapter.with_format(parts[1])
    except ValueError:
        return f"Formato '{parts[1]}' não encontrado."

    return f"Formato alterado para: {shell.adapter.result_format.value}"


# =========================================================
# MAIN
# =========================================================

def main(settings=None, adapter=None, locate=None, input_func=input):
    """Run the interactive loop until `exit`, EOF or interrupt."""
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    adapter = adapter or DistanceAdapter.from_settings(settings)
    if locate is None:
        def locate_from_settings():
            return lookup_device_coordinate(settings)
        locate = locate_from_settings

    shell = DistanceShell(adapter, locate=locate)
    coordinate = asyncio.run(shell.start())

    print("MapDistance AI started. (Type 'exit' to quit)")
    print(f"Formato: {adapter.result_format.value}")
    if coordinate.is_available:
        print(f"Localização: {coordinate.lat:.4f}, {coordinate.lng:.4f}")
    else:
        print(f"Localização: {shell.location_error or 'não utilizada'}")
    print("-" * 60)

    while True:

        try:
            origin = input_func("Ponto de Origem: ").strip()
            if origin.lower() in ("exit", "quit"):
                print("Shutting down.")
                break

            if origin.lower().startswith("/format"):
                print(f"\n{handle_format_command(shell, origin)}\n")
                continue

            destination = input_func("Ponto de Destino: ").strip()

            print("\nConsultando Inteligência...\n")

            state = asyncio.run(shell.submit(origin, destination))

        except EOFError:
            print("\nShutting down.")
            break

        except KeyboardInterrupt:
            print("\nOperation cancelled by user.")
            break

        print(render_state(state))

        print("\n" + "-" * 60 + "\n")


if __name__ == "__main__":
    main()
