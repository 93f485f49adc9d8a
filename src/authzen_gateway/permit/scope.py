from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional

logger = logging.getLogger("authzen_gateway.permit.scope")


@dataclass(frozen=True)
class Scope:
    """Project/environment partition an API key is bound to."""

    project_id: str
    environment_id: str
    organization_id: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Scope":
        return cls(
            project_id=str(data["project_id"]),
            environment_id=str(data["environment_id"]),
            organization_id=data.get("organization_id"),
        )


class ScopeCache:
    """Memoizes the scope of one fixed API key for the life of the process.

    There is no expiry and no invalidation. Two callers racing before the
    first lookup lands may both hit the network; both store the same value.
    """

    def __init__(self) -> None:
        self._scope: Optional[Scope] = None

    @property
    def value(self) -> Optional[Scope]:
        return self._scope

    async def get(self, loader: Callable[[], Awaitable[Scope]]) -> Scope:
        if self._scope is not None:
            return self._scope
        scope = await loader()
        self._scope = scope
        logger.debug(
            "scope cached: project=%s environment=%s", scope.project_id, scope.environment_id
        )
        return scope


__all__ = ["Scope", "ScopeCache"]
