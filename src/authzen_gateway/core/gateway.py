from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .model import (
    DEFAULT_TENANT,
    CheckRequest,
    ResourceRef,
    ResourceSpec,
    SearchOutcome,
    SearchRequest,
)
from .ports import DecisionPoint, MetricsSink, PermissionLister, UserDirectory

logger = logging.getLogger("authzen_gateway.core.gateway")


def match_resources(
    listing: Mapping[str, Any], resource_type: str, permission_key: str
) -> Tuple[ResourceRef, ...]:
    """Pick the resource ids whose granted permissions include *permission_key*.

    *listing* maps resource id to ``{"permissions": [...]}``; entries that do
    not have that shape are skipped. Iteration order of *listing* is kept.
    """
    out: List[ResourceRef] = []
    for resource_id, record in listing.items():
        if not isinstance(record, Mapping):
            continue
        granted = record.get("permissions") or ()
        if permission_key in granted:
            out.append(ResourceRef(type=resource_type, id=str(resource_id)))
    return tuple(out)


def _decision_label(decision: Any) -> str:
    if isinstance(decision, bool):
        return "true" if decision else "false"
    # any non-bool PDP value shares one label
    return "other"


class Gateway:
    """AuthZEN evaluation and search on top of Permit.

    Evaluation calls let every collaborator error propagate. Search never
    raises: failures come back as ``SearchOutcome.failure``.
    """

    def __init__(
        self,
        directory: UserDirectory,
        pdp: DecisionPoint,
        *,
        search_directory: UserDirectory,
        permissions: PermissionLister,
        metrics: Optional[MetricsSink] = None,
    ) -> None:
        self.directory = directory
        self.pdp = pdp
        self.search_directory = search_directory
        self.permissions = permissions
        self.metrics = metrics

    # ------------- metrics helpers -------------

    def _inc(self, name: str, labels: Dict[str, str]) -> None:
        if self.metrics is not None:
            self.metrics.inc(name, labels)

    def _observe(self, call: str, started: float) -> None:
        if self.metrics is not None:
            self.metrics.observe("authzen_pdp_seconds", time.perf_counter() - started, {"call": call})

    # ------------- evaluation -------------

    async def evaluate(self, subject_id: str, action: str, resource: ResourceSpec) -> Any:
        user = await self.directory.get_user(subject_id)
        check = CheckRequest(
            user=user,
            action=action,
            resource_type=resource.type,
            resource_id=resource.id,
            properties=dict(resource.properties),
            tenant=DEFAULT_TENANT,
        )
        logger.info(
            "checking access: user=%s email=%s action=%s resource=%s:%s properties=%s",
            user.key,
            user.email,
            action,
            resource.type,
            resource.id,
            resource.properties,
        )
        started = time.perf_counter()
        decision = await self.pdp.check(check)
        self._observe("check", started)
        logger.info("decision: %r", decision)
        self._inc("authzen_decisions_total", {"route": "evaluation", "decision": _decision_label(decision)})
        return decision

    async def evaluate_many(
        self, subject_id: str, action: str, resources: Sequence[ResourceSpec]
    ) -> List[Any]:
        user = await self.directory.get_user(subject_id)
        checks = [
            CheckRequest(
                user=user,
                action=action,
                resource_type=r.type,
                resource_id=r.id,
                properties=dict(r.properties),
                tenant=DEFAULT_TENANT,
            )
            for r in resources
        ]
        logger.info(
            "checking access in bulk: user=%s action=%s resources=%s",
            user.key,
            action,
            [f"{c.resource_type}:{c.resource_id}" for c in checks],
        )
        started = time.perf_counter()
        decisions = await self.pdp.bulk_check(checks)
        self._observe("bulk_check", started)
        logger.info("decisions: %r", decisions)
        for d in decisions:
            self._inc("authzen_decisions_total", {"route": "evaluations", "decision": _decision_label(d)})
        return list(decisions)

    # ------------- search -------------

    async def search_resources(self, request: SearchRequest) -> SearchOutcome:
        logger.info(
            "searching resources: user=%s action=%s type=%s",
            request.subject_id,
            request.action,
            request.resource_type,
        )
        try:
            user = await self.search_directory.get_user(request.subject_id)
            started = time.perf_counter()
            listing = await self.permissions.user_permissions(
                user,
                resource_types=[request.resource_type],
                action=request.action,
                tenants=[DEFAULT_TENANT],
            )
            self._observe("user_permissions", started)
            results = match_resources(listing or {}, request.resource_type, request.permission_key)
        except Exception as e:
            logger.exception("resource search failed for user=%s", request.subject_id, exc_info=e)
            self._inc("authzen_searches_total", {"outcome": "error"})
            return SearchOutcome.failure(e)

        logger.info("search results: %s", [r.as_dict() for r in results])
        self._inc("authzen_searches_total", {"outcome": "ok"})
        return SearchOutcome.success(results)


__all__ = ["Gateway", "match_resources"]
