from __future__ import annotations

import logging
import time
from typing import Any

from .asgi_logging import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("authzen_gateway.adapters.asgi.access")


class AccessLogMiddleware:
    """Log one ``access METHOD PATH STATUS DURATIONms`` line per HTTP request."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        status: Any = None
        started = time.perf_counter()

        async def _send(message: Message) -> None:
            nonlocal status
            if message.get("type") == "http.response.start":
                status = message.get("status")
            await send(message)

        try:
            await self.app(scope, receive, _send)
        except Exception:
            status = status or 500
            raise
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000.0
            logger.info(
                "access %s %s %s %.1fms",
                scope.get("method", "-"),
                scope.get("path", "-"),
                status if status is not None else "-",
                elapsed_ms,
            )
