from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

# Single-tenant deployment; any tenant sent by a client is ignored.
DEFAULT_TENANT = "default"


@dataclass(frozen=True)
class UserRecord:
    """A user as returned by the Permit user directory."""

    key: str
    email: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "UserRecord":
        return cls(
            key=str(data["key"]),
            email=data.get("email"),
            attributes=dict(data.get("attributes") or {}),
        )

    def decision_subject(self) -> Dict[str, Any]:
        """Subject shape sent with evaluation checks (email mirrored as attribute)."""
        return {"key": self.key, "email": self.email, "attributes": {"email": self.email}}

    def listing_subject(self) -> Dict[str, Any]:
        """Subject shape sent to the user-permissions listing endpoint."""
        return {"key": self.key, "email": self.email, "attributes": dict(self.attributes)}


@dataclass(frozen=True)
class ResourceRef:
    type: str
    id: str

    def as_dict(self) -> Dict[str, str]:
        return {"type": self.type, "id": self.id}


@dataclass(frozen=True)
class ResourceSpec:
    """A resource named in an evaluation request."""

    type: str
    id: str
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CheckRequest:
    """One decision request for the PDP."""

    user: UserRecord
    action: str
    resource_type: str
    resource_id: str
    properties: Dict[str, Any] = field(default_factory=dict)
    tenant: str = DEFAULT_TENANT

    def to_payload(self) -> Dict[str, Any]:
        return {
            "user": self.user.decision_subject(),
            "action": self.action,
            "resource": {
                "type": self.resource_type,
                "key": self.resource_id,
                "tenant": self.tenant,
                "attributes": dict(self.properties),
            },
            "context": {},
        }


@dataclass(frozen=True)
class SearchRequest:
    subject_id: str
    action: str
    resource_type: str

    @property
    def permission_key(self) -> str:
        # Permit reports granted permissions as "<resource type>:<action>".
        return f"{self.resource_type}:{self.action}"


@dataclass(frozen=True)
class SearchOutcome:
    """Result of a resource search.

    ``error`` is set when the query failed; ``results`` is then empty. The two
    cases only become indistinguishable when rendered on the wire.
    """

    results: Tuple[ResourceRef, ...] = ()
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, results: Tuple[ResourceRef, ...]) -> "SearchOutcome":
        return cls(results=tuple(results))

    @classmethod
    def failure(cls, error: BaseException) -> "SearchOutcome":
        return cls(results=(), error=error)


__all__ = [
    "DEFAULT_TENANT",
    "CheckRequest",
    "ResourceRef",
    "ResourceSpec",
    "SearchOutcome",
    "SearchRequest",
    "UserRecord",
]
