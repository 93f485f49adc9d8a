from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence
from urllib.parse import quote

import httpx

from ..core.model import CheckRequest, UserRecord
from ..core.ports import DecisionPoint, PermissionLister, UserDirectory
from .scope import Scope, ScopeCache

logger = logging.getLogger("authzen_gateway.permit.client")

DEFAULT_API_URL = "https://api.permit.io"


class PermitError(Exception):
    """Base error for everything raised by :class:`PermitClient`."""


class PermitAPIError(PermitError):
    """Permit answered with a non-success HTTP status."""

    def __init__(self, method: str, url: str, status_code: int, reason: str, body: str) -> None:
        self.method = method
        self.url = url
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"{method} {url} failed: {status_code} {reason} - {body}")


@dataclass(frozen=True)
class PermitConfig:
    """Connection settings for one Permit environment."""

    pdp_url: str  # e.g. "http://localhost:7766" or "https://cloudpdp.api.permit.io"
    api_key: str  # Bearer <key>; also decides the project/environment scope
    api_url: str = DEFAULT_API_URL
    timeout_seconds: float = 5.0


class PermitClient(UserDirectory, DecisionPoint, PermissionLister):
    """Async client for the Permit PDP and management API.

    - PDP: ``/allowed``, ``/allowed/bulk`` and ``/user-permissions``.
    - API: scope lookup, user directory, and the schema/facts endpoints the
      provisioning script needs.
    - The API key's scope is looked up once and cached for the client's life.
    """

    def __init__(
        self,
        config: PermitConfig,
        *,
        client: httpx.AsyncClient | None = None,
        scope_cache: ScopeCache | None = None,
    ) -> None:
        self.cfg = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.cfg.timeout_seconds)
        self.scope_cache = scope_cache or ScopeCache()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "PermitClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    # ------------- helpers -------------

    def _headers(self) -> dict[str, str]:
        return {
            "content-type": "application/json",
            "authorization": f"Bearer {self.cfg.api_key}",
        }

    def _pdp(self, suffix: str) -> str:
        return f"{self.cfg.pdp_url.rstrip('/')}/{suffix.lstrip('/')}"

    def _api(self, suffix: str) -> str:
        return f"{self.cfg.api_url.rstrip('/')}/v2/{suffix.lstrip('/')}"

    async def _scoped(self, area: str, suffix: str) -> str:
        scope = await self.scope()
        return self._api(f"{area}/{scope.project_id}/{scope.environment_id}/{suffix.lstrip('/')}")

    async def _request(self, method: str, url: str, body: Any = None) -> Any:
        resp = await self._client.request(method, url, json=body, headers=self._headers())
        if resp.is_error:
            raise PermitAPIError(method, url, resp.status_code, resp.reason_phrase, resp.text)
        if not resp.content:
            return None
        return resp.json()

    # ------------- scope -------------

    async def fetch_scope(self) -> Scope:
        data = await self._request("GET", self._api("api-key/scope"))
        return Scope.from_payload(data or {})

    async def scope(self) -> Scope:
        return await self.scope_cache.get(self.fetch_scope)

    # ------------- UserDirectory -------------

    async def get_user(self, user_key: str) -> UserRecord:
        url = await self._scoped("facts", f"users/{quote(user_key, safe='')}")
        data = await self._request("GET", url)
        return UserRecord.from_payload(data)

    # ------------- DecisionPoint -------------

    async def check(self, request: CheckRequest) -> Any:
        data = await self._request("POST", self._pdp("allowed"), request.to_payload())
        return (data or {}).get("allow")

    async def bulk_check(self, requests: Sequence[CheckRequest]) -> List[Any]:
        body = [r.to_payload() for r in requests]
        data = await self._request("POST", self._pdp("allowed/bulk"), body)
        # Response shape: {"allow": [{"allow": ...}, ...]} in request order
        items = (data or {}).get("allow") or []
        if len(items) != len(requests):
            raise PermitError(
                f"bulk check returned {len(items)} decisions for {len(requests)} checks"
            )
        return [item.get("allow") for item in items]

    # ------------- PermissionLister -------------

    async def user_permissions(
        self,
        user: UserRecord,
        *,
        resource_types: Sequence[str],
        action: str,
        tenants: Sequence[str],
    ) -> Mapping[str, Dict[str, Any]]:
        scope = await self.scope()
        body = {
            "user": user.listing_subject(),
            "tenants": list(tenants),
            "resource_types": list(resource_types),
            "action": action,
            "context": {
                "enable_abac_user_permissions": True,
                "project_id": scope.project_id,
                "environment_id": scope.environment_id,
            },
        }
        data = await self._request("POST", self._pdp("user-permissions"), body)
        if data is None:
            return {}
        if not isinstance(data, Mapping):
            raise PermitError(f"unexpected user-permissions payload: {type(data).__name__}")
        return data

    # ------------- management API (provisioning) -------------

    async def create_resource(self, resource: Mapping[str, Any]) -> Any:
        return await self._request("POST", await self._scoped("schema", "resources"), resource)

    async def create_role(self, role: Mapping[str, Any]) -> Any:
        return await self._request("POST", await self._scoped("schema", "roles"), role)

    async def create_condition_set(self, condition_set: Mapping[str, Any]) -> Any:
        url = await self._scoped("schema", "condition_sets")
        return await self._request("POST", url, condition_set)

    async def create_condition_set_rule(self, rule: Mapping[str, Any]) -> Any:
        return await self._request("POST", await self._scoped("facts", "set_rules"), rule)

    async def create_user(self, user: Mapping[str, Any]) -> Any:
        return await self._request("POST", await self._scoped("facts", "users"), user)

    async def assign_role(self, user_key: str, role: str, tenant: str) -> Any:
        url = await self._scoped("facts", f"users/{quote(user_key, safe='')}/roles")
        return await self._request("POST", url, {"role": role, "tenant": tenant})


__all__ = ["DEFAULT_API_URL", "PermitAPIError", "PermitClient", "PermitConfig", "PermitError"]
