#!/usr/bin/env python3
"""
Interstellar Horizons service driver.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""
import asyncio
import logging
import signal
from typing import Optional

from aiohttp import web

from interstellar_horizons.config import Config
from interstellar_horizons.server import create_app

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)8s | %(name)s | %(message)s"
)
logging.getLogger("aiohttp").setLevel(logging.WARNING)

_LOG = logging.getLogger(__name__)


async def main(config_path: Optional[str] = None) -> None:
    """Main entry point."""
    _LOG.info("Starting Interstellar Horizons service")

    config = Config(config_path)
    app = create_app(config)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, config.host, config.port)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop_event.set)
        except NotImplementedError:
            _LOG.debug("Signal handlers not supported on this platform")

    try:
        await site.start()
        _LOG.info("Serving on http://%s:%d. Press Ctrl+C to stop.", config.host, config.port)
        await stop_event.wait()
        _LOG.warning("Shutdown requested. Stopping service...")
    except Exception as e:
        _LOG.error(f"Service failed: {e}", exc_info=True)
        raise
    finally:
        await runner.cleanup()
        _LOG.info("Service stopped.")


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        _LOG.info("Service stopped by user")


if __name__ == "__main__":
    run()
