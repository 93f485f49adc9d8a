from .asgi_accesslog import AccessLogMiddleware
from .asgi_logging import TraceIdMiddleware

__all__ = ["AccessLogMiddleware", "TraceIdMiddleware"]
