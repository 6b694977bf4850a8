import logging
from typing import Any

import uvicorn

from strata.conf import get_settings
from strata.logging import get_logging_config
from strata.types.asgi import ASGIApp

logger = logging.getLogger("strata.server")


def get_asgi_app(app: Any) -> ASGIApp:
    callback = getattr(app, "callback", None)
    if callable(callback):
        return callback()
    if callable(app):
        return app
    raise TypeError(f"{app!r} is neither an Application nor an ASGI app")


def run(
    app: Any,
    host: str | None = None,
    port: int | None = None,
    **kwargs: Any,
) -> None:
    settings = get_settings()
    host = host or settings.server.host
    port = port or settings.server.port
    asgi_app = get_asgi_app(app)

    config = uvicorn.Config(
        asgi_app,
        host=host,
        port=port,
        lifespan="on",
        log_config=get_logging_config(settings),
        **kwargs,
    )
    server = uvicorn.Server(config)
    logger.info(f"listening on http://{host}:{port}")
    server.run()
