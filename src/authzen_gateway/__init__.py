from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .config import GatewaySettings
from .core.gateway import Gateway
from .core.model import CheckRequest, ResourceRef, SearchOutcome, SearchRequest, UserRecord
from .permit.client import PermitAPIError, PermitClient, PermitConfig, PermitError
from .permit.scope import Scope, ScopeCache


def _detect_version() -> str:
    try:
        return version("authzen-gateway")
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _detect_version()

__all__ = [
    "CheckRequest",
    "Gateway",
    "GatewaySettings",
    "PermitAPIError",
    "PermitClient",
    "PermitConfig",
    "PermitError",
    "ResourceRef",
    "Scope",
    "ScopeCache",
    "SearchOutcome",
    "SearchRequest",
    "UserRecord",
    "__version__",
]
