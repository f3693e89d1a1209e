"""
ASGI Entry Point for the Wild Horizons API.

This module exposes the `app` object required by ASGI servers (Uvicorn/Gunicorn).
It loads environment variables from `.env` before the application factory runs.

Usage
-----
Run via the module entry point:
    $ python -m wildhorizons.api.server

Or via uvicorn directly:
    $ uvicorn wildhorizons.api.server:app --reload
"""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from wildhorizons.api.app import create_app
from wildhorizons.core.settings import load_settings

load_dotenv(dotenv_path=Path(".env"))

app = create_app()


def main() -> None:
    """Run the API server locally for development."""
    settings = load_settings()
    uvicorn.run(
        "wildhorizons.api.server:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_dev,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
