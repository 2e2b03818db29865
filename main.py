"""
Tantalus Boxing Club - league backend entry point.

Serves the JSON API and page guards over aiohttp.
"""

import asyncio
import logging
import sys
from aiohttp import web
from adapters.web.app import create_app
from adapters.web.loader import build_container
from config.features import features
from config.settings import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler("league.log", encoding="utf-8"),
    ],
)
logger = logging.getLogger(__name__)

# Set DEBUG level only for our app loggers, not for noisy libraries
if features.DEBUG_MODE:
    for name in ['adapters', 'core', 'infrastructure', '__main__']:
        logging.getLogger(name).setLevel(logging.DEBUG)
    # Silence noisy HTTP debug logs
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('hpack').setLevel(logging.WARNING)


async def main():
    """Build the container, start the web server and serve until stopped."""

    # Log feature status
    logger.info("=== Tantalus Boxing Club Starting ===")
    logger.info(f"Environment: {settings.env}")
    logger.info("Feature Flags:")
    for key, value in features.to_dict().items():
        logger.info(f"  {key}: {value}")

    try:
        container = build_container(settings)
    except RuntimeError as e:
        logger.error(f"Startup failed: {e}")
        sys.exit(1)

    app = create_app(container)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, settings.host, settings.port)
    await site.start()
    logger.info(f"League API running on {settings.host}:{settings.port}")

    try:
        await asyncio.Event().wait()
    finally:
        # on_cleanup flushes the audit log and closes the counter store
        await runner.cleanup()
        logger.info("Server stopped.")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Server stopped by user (Ctrl+C)")
    except SystemExit as e:
        sys.exit(e.code)
