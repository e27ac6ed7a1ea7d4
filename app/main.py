"""
API main entry point.

Starts the aiohttp server and runs until interrupted.
"""

import asyncio
import sys

from loguru import logger

from app.api.server import start_api_server, stop_api_server
from app.config.logging import setup_logging
from app.config.settings import settings


async def main() -> None:
    """Run the API server."""
    setup_logging("api")

    runner = await start_api_server(settings.api_host, settings.api_port)
    try:
        await asyncio.Event().wait()
    finally:
        await stop_api_server(runner)

        from app.config.database import async_engine

        await async_engine.dispose()


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("API stopped by user (KeyboardInterrupt)")
    except Exception as e:
        logger.exception(f"API crashed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
