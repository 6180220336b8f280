#!/usr/bin/env python3
"""YTViewer - password-protected browser for a NocoDB video catalogue."""

import argparse
import asyncio
import logging
import signal

import uvicorn

from config import load_config, Config
from nocodb.client import NocoDBClient
from web.app import create_app

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("ytviewer")


class YTViewer:
    """Main orchestrator - owns the NocoDB client and runs FastAPI."""

    def __init__(self, config: Config):
        self.config = config
        self.client = None
        self.server = None

    def setup(self) -> None:
        """Build the NocoDB client, the FastAPI app and the uvicorn server."""
        self.client = NocoDBClient(self.config.nocodb)
        app = create_app(self.config, self.client)
        server_config = uvicorn.Config(
            app,
            host=self.config.web.host,
            port=self.config.web.port,
            log_level="info",
        )
        self.server = uvicorn.Server(server_config)

    async def run(self) -> None:
        """Serve until uvicorn exits, then release the NocoDB client."""
        self.setup()
        logger.info("YTViewer starting on %s:%d (NocoDB %s)",
                    self.config.web.host, self.config.web.port, self.config.nocodb.url or "unset")
        try:
            await self.server.serve()
        except asyncio.CancelledError:
            logger.info("Server task cancelled")
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Ask uvicorn to exit and close the NocoDB client."""
        if self.server:
            self.server.should_exit = True
        if self.client:
            await self.client.close()
            self.client = None
        logger.info("YTViewer stopped")


async def main() -> None:
    parser = argparse.ArgumentParser(description="YTViewer")
    parser.add_argument("-c", "--config", help="Path to config file", default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = load_config(args.config)
    app = YTViewer(config)

    loop = asyncio.get_running_loop()

    def signal_handler():
        if app.server:
            app.server.should_exit = True

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            signal.signal(sig, lambda s, f: signal_handler())

    try:
        await app.run()
    except KeyboardInterrupt:
        await app.stop()


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
