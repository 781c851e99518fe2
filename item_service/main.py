"""Entry point for item-service.

``item-service --server`` starts the API directly; any other arguments are
handled by the click CLI.
"""

from __future__ import annotations

import sys
from typing import NoReturn


def run_fastapi_server() -> NoReturn:
    """Run the API with uvicorn using APP_ settings."""
    import uvicorn

    from item_service.core.settings import get_app_settings, get_logging_settings
    from item_service.infra.logging.config import logging_config_for_uvicorn

    settings = get_app_settings()
    uvicorn.run(
        "item_service.app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_config=logging_config_for_uvicorn(),
        log_level=get_logging_settings().level.lower(),
    )
    sys.exit(0)


def run_cli() -> NoReturn:
    from item_service.cli.main import main as cli_main

    cli_main()
    sys.exit(0)


def main() -> NoReturn:
    if "--server" in sys.argv:
        sys.argv.remove("--server")
        run_fastapi_server()
    run_cli()


if __name__ == "__main__":
    main()
