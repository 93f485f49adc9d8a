"""AuthZEN wire schemas for the gateway routes.

Only the fields the gateway reads are declared; anything else a client sends
(a ``tenant``, a ``context`` block) is ignored.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .core.model import ResourceRef, ResourceSpec


class SubjectIn(BaseModel):
    id: str


class ActionIn(BaseModel):
    name: str


class ResourceIn(BaseModel):
    type: str
    id: str
    properties: Optional[Dict[str, Any]] = Field(default_factory=dict)

    def to_spec(self) -> ResourceSpec:
        return ResourceSpec(type=self.type, id=self.id, properties=dict(self.properties or {}))


class ResourceTypeIn(BaseModel):
    type: str


class EvaluationRequest(BaseModel):
    subject: SubjectIn
    action: ActionIn
    resource: ResourceIn


class EvaluationItem(BaseModel):
    resource: ResourceIn


class EvaluationsRequest(BaseModel):
    subject: SubjectIn
    action: ActionIn
    evaluations: List[EvaluationItem]


class ResourceSearchRequest(BaseModel):
    subject: SubjectIn
    action: ActionIn
    resource: ResourceTypeIn


class DecisionOut(BaseModel):
    # Passed through from the PDP as-is; normally a bool.
    decision: Any


class EvaluationsResponse(BaseModel):
    evaluations: List[DecisionOut]


class ResourceOut(BaseModel):
    type: str
    id: str

    @classmethod
    def from_ref(cls, ref: ResourceRef) -> "ResourceOut":
        return cls(type=ref.type, id=ref.id)


class ResourceSearchResponse(BaseModel):
    results: List[ResourceOut]


__all__ = [
    "ActionIn",
    "DecisionOut",
    "EvaluationItem",
    "EvaluationRequest",
    "EvaluationsRequest",
    "EvaluationsResponse",
    "ResourceIn",
    "ResourceOut",
    "ResourceSearchRequest",
    "ResourceSearchResponse",
    "ResourceTypeIn",
    "SubjectIn",
]
