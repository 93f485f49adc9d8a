from __future__ import annotations

from .client import DEFAULT_API_URL, PermitAPIError, PermitClient, PermitConfig, PermitError
from .scope import Scope, ScopeCache

__all__ = [
    "DEFAULT_API_URL",
    "PermitAPIError",
    "PermitClient",
    "PermitConfig",
    "PermitError",
    "Scope",
    "ScopeCache",
]
