from __future__ import annotations

from .gateway import Gateway
from .model import CheckRequest, ResourceRef, SearchOutcome, SearchRequest, UserRecord

__all__ = ["CheckRequest", "Gateway", "ResourceRef", "SearchOutcome", "SearchRequest", "UserRecord"]
