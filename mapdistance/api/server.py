"""Serve the HTTP API with uvicorn.

Environment:
    - `MAPDISTANCE_HOST` (default `127.0.0.1`)
    - `MAPDISTANCE_PORT` (default `8000`)
"""

import os

import uvicorn

from mapdistance.api.cli import configure_logging
from mapdistance.llm.provider_config import load_settings


def main() -> None:
    configure_logging(load_settings().log_level)
    host = os.getenv("MAPDISTANCE_HOST", "127.0.0.1")
    port = int(os.getenv("MAPDISTANCE_PORT", "8000"))
    uvicorn.run("mapdistance.api.http_api:create_app", factory=True, host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
