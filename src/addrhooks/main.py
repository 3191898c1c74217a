"""Application entry point for the addrhooks server."""

from __future__ import annotations

import logging
import os

import uvicorn

from addrhooks.config.settings import AppConfig

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def main() -> None:
    """Start the addrhooks server."""
    config = AppConfig()
    logging.basicConfig(level=config.log_level.upper(), format=_LOG_FORMAT)
    reload = os.getenv("ADDRHOOKS_RELOAD", "false").lower() in ("1", "true", "yes")
    uvicorn.run(
        "addrhooks.api.app:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
        reload=reload,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
