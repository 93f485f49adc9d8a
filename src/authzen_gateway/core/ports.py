from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Sequence

from .model import CheckRequest, UserRecord


class UserDirectory(ABC):
    @abstractmethod
    async def get_user(self, user_key: str) -> UserRecord: ...


class DecisionPoint(ABC):
    """Something that answers access checks; the decision value is opaque."""

    @abstractmethod
    async def check(self, request: CheckRequest) -> Any: ...

    @abstractmethod
    async def bulk_check(self, requests: Sequence[CheckRequest]) -> List[Any]: ...


class PermissionLister(ABC):
    @abstractmethod
    async def user_permissions(
        self,
        user: UserRecord,
        *,
        resource_types: Sequence[str],
        action: str,
        tenants: Sequence[str],
    ) -> Mapping[str, Dict[str, Any]]:
        """Return ``{resource_id: {"permissions": ["type:action", ...], ...}}``."""


class MetricsSink(ABC):
    @abstractmethod
    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None: ...

    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        """Optional histogram hook; sinks without histograms ignore it."""
        return None


__all__ = ["DecisionPoint", "MetricsSink", "PermissionLister", "UserDirectory"]
