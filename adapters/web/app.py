"""
aiohttp application factory.
"""

import logging

from aiohttp import web

from adapters.web.loader import CONTAINER, Container
from adapters.web.middleware import (
    page_guard_middleware,
    rate_limit_middleware,
    security_headers_middleware,
)
from adapters.web.routes import setup_routes
from core.domain.constants import MAX_UPLOAD_BYTES

logger = logging.getLogger(__name__)

# Multipart overhead on top of the largest accepted file
REQUEST_SIZE_MARGIN = 1024 * 1024


def create_app(container: Container) -> web.Application:
    """Create the app with the container injected; middlewares run outermost first."""
    app = web.Application(
        middlewares=[
            security_headers_middleware,
            rate_limit_middleware,
            page_guard_middleware,
        ],
        client_max_size=MAX_UPLOAD_BYTES + REQUEST_SIZE_MARGIN,
    )
    app[CONTAINER] = container
    setup_routes(app)

    async def on_cleanup(app: web.Application) -> None:
        await app[CONTAINER].close()
        logger.info("Container closed")

    app.on_cleanup.append(on_cleanup)
    return app
