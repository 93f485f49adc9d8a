from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .permit.client import DEFAULT_API_URL, PermitConfig

DEFAULT_PDP_URL = "http://localhost:7766"


@dataclass(frozen=True)
class GatewaySettings:
    """Process configuration, read once from the environment at startup.

    Two Permit instances are configured: the primary one answers the
    evaluation routes, the IDP one answers resource search.
    """

    pdp_url: str = DEFAULT_PDP_URL
    api_key: str = ""
    idp_pdp_url: str = DEFAULT_PDP_URL
    idp_api_key: str = ""
    api_url: str = DEFAULT_API_URL
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    timeout_seconds: float = 5.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GatewaySettings":
        env = os.environ if environ is None else environ
        return cls(
            pdp_url=env.get("PERMIT_PDP_URL") or DEFAULT_PDP_URL,
            api_key=env.get("PERMIT_API_KEY", ""),
            idp_pdp_url=env.get("PERMIT_IDP_PDP_URL") or DEFAULT_PDP_URL,
            idp_api_key=env.get("PERMIT_IDP_API_KEY", ""),
            api_url=env.get("PERMIT_API_URL") or DEFAULT_API_URL,
            host=env.get("HOST") or "0.0.0.0",
            port=int(env.get("PORT") or 3000),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )

    def primary(self) -> PermitConfig:
        return PermitConfig(
            pdp_url=self.pdp_url,
            api_key=self.api_key,
            api_url=self.api_url,
            timeout_seconds=self.timeout_seconds,
        )

    def idp(self) -> PermitConfig:
        return PermitConfig(
            pdp_url=self.idp_pdp_url,
            api_key=self.idp_api_key,
            api_url=self.api_url,
            timeout_seconds=self.timeout_seconds,
        )


__all__ = ["DEFAULT_PDP_URL", "GatewaySettings"]
