from __future__ import annotations

from typing import Any, Awaitable, Callable, MutableMapping

from ..logging.context import clear_current_trace_id, gen_trace_id, set_current_trace_id

Scope = MutableMapping[str, Any]
Message = MutableMapping[str, Any]
Receive = Callable[[], Awaitable[Message]]
Send = Callable[[Message], Awaitable[None]]
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]


class TraceIdMiddleware:
    """Pure ASGI middleware binding a trace id to each HTTP request.

    The id comes from the request header ``header_name`` when present and
    non-empty, else from the first ``traceparent`` header, else it is
    generated. It is echoed back under ``header_name`` and cleared from the
    logging context when the request ends.
    """

    def __init__(self, app: ASGIApp, header_name: bytes | str = b"x-request-id") -> None:
        self.app = app
        if isinstance(header_name, str):
            header_name = header_name.encode("latin1")
        self.header_name = header_name.lower()

    def _incoming_id(self, scope: Scope) -> str:
        rid = ""
        traceparent = ""
        for name, value in scope.get("headers") or []:
            name = bytes(name).lower()
            if name == self.header_name and value and not rid:
                rid = bytes(value).decode("latin1")
            elif name == b"traceparent" and value and not traceparent:
                traceparent = bytes(value).decode("latin1")
        return rid or traceparent or gen_trace_id()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        rid = self._incoming_id(scope)
        token = set_current_trace_id(rid)

        async def _send(message: Message) -> None:
            if message.get("type") == "http.response.start":
                headers = [
                    (k, v) for k, v in message.get("headers", []) if bytes(k).lower() != self.header_name
                ]
                headers.append((self.header_name, rid.encode("latin1")))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, _send)
        finally:
            clear_current_trace_id(token)
