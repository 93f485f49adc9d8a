from __future__ import annotations

import asyncio
import logging
import sys

import uvicorn

from .app import create_app
from .config import GatewaySettings
from .logging.context import TraceIdFilter
from .permit.client import PermitClient
from .provision import provision

logger = logging.getLogger("authzen_gateway.cli")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(trace_id)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # Filter on the handlers so records from every logger get a trace_id.
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, TraceIdFilter) for f in handler.filters):
            handler.addFilter(TraceIdFilter())


def serve() -> int:
    """Run the gateway until interrupted. Configuration comes from the environment."""
    settings = GatewaySettings.from_env()
    configure_logging(settings.log_level)
    app = create_app(settings)
    logger.info("starting gateway on %s:%s", settings.host, settings.port)
    # uvicorn exits the process with status 1 if it cannot bind.
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    return 0


async def _provision(settings: GatewaySettings) -> None:
    async with PermitClient(settings.primary()) as client:
        await provision(client)


def provision_main() -> int:
    settings = GatewaySettings.from_env()
    configure_logging(settings.log_level)
    try:
        asyncio.run(_provision(settings))
    except Exception as e:
        logger.exception("provisioning failed", exc_info=e)
        return 1
    logger.info("provisioning complete")
    return 0


def main() -> None:  # pragma: no cover
    sys.exit(serve())


def main_provision() -> None:  # pragma: no cover
    sys.exit(provision_main())


__all__ = ["configure_logging", "main", "main_provision", "provision_main", "serve"]
