from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST

from .adapters.asgi_accesslog import AccessLogMiddleware
from .adapters.asgi_logging import TraceIdMiddleware
from .config import GatewaySettings
from .core.gateway import Gateway
from .core.model import SearchRequest
from .metrics.prometheus import PrometheusMetrics
from .permit.client import PermitClient
from .schemas import (
    DecisionOut,
    EvaluationRequest,
    EvaluationsRequest,
    EvaluationsResponse,
    ResourceOut,
    ResourceSearchRequest,
    ResourceSearchResponse,
)

logger = logging.getLogger("authzen_gateway.app")

router = APIRouter()


def get_gateway(request: Request) -> Gateway:
    return request.app.state.gateway


def get_metrics(request: Request) -> PrometheusMetrics:
    return request.app.state.metrics


@router.get("/")
async def health() -> dict:
    return {"status": "ok"}


@router.post("/access/v1/evaluation", response_model=DecisionOut)
async def evaluation(body: EvaluationRequest, gateway: Gateway = Depends(get_gateway)) -> DecisionOut:
    decision = await gateway.evaluate(body.subject.id, body.action.name, body.resource.to_spec())
    return DecisionOut(decision=decision)


@router.post("/access/v1/evaluations", response_model=EvaluationsResponse)
async def evaluations(
    body: EvaluationsRequest, gateway: Gateway = Depends(get_gateway)
) -> EvaluationsResponse:
    decisions = await gateway.evaluate_many(
        body.subject.id,
        body.action.name,
        [item.resource.to_spec() for item in body.evaluations],
    )
    return EvaluationsResponse(evaluations=[DecisionOut(decision=d) for d in decisions])


@router.post("/access/v1/search/resource", response_model=ResourceSearchResponse)
async def search_resource(
    body: ResourceSearchRequest, gateway: Gateway = Depends(get_gateway)
) -> ResourceSearchResponse:
    outcome = await gateway.search_resources(
        SearchRequest(
            subject_id=body.subject.id,
            action=body.action.name,
            resource_type=body.resource.type,
        )
    )
    # A failed search renders exactly like an empty one.
    return ResourceSearchResponse(results=[ResourceOut.from_ref(r) for r in outcome.results])


@router.get("/metrics")
async def metrics_endpoint(metrics: PrometheusMetrics = Depends(get_metrics)) -> Response:
    return Response(content=metrics.render(), media_type=CONTENT_TYPE_LATEST)


def build_gateway(
    settings: GatewaySettings, metrics: Optional[PrometheusMetrics] = None
) -> tuple[Gateway, List[PermitClient]]:
    primary = PermitClient(settings.primary())
    idp = PermitClient(settings.idp())
    gateway = Gateway(
        primary,
        primary,
        search_directory=idp,
        permissions=idp,
        metrics=metrics,
    )
    return gateway, [primary, idp]


def create_app(
    settings: Optional[GatewaySettings] = None,
    *,
    gateway: Optional[Gateway] = None,
    metrics: Optional[PrometheusMetrics] = None,
) -> FastAPI:
    """Build the gateway application.

    Pass ``gateway`` to run the routes against other collaborators (tests);
    otherwise two Permit clients are built from ``settings`` (or the
    environment) and closed on shutdown.
    """
    owned: List[Any] = []
    if gateway is None:
        metrics = metrics or PrometheusMetrics()
        gateway, owned = build_gateway(settings or GatewaySettings.from_env(), metrics)
    elif metrics is None:
        # An injected gateway keeps its own sink; /metrics serves it when it is Prometheus.
        sink = gateway.metrics
        metrics = sink if isinstance(sink, PrometheusMetrics) else PrometheusMetrics()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            for client in owned:
                await client.aclose()
            if owned:
                logger.debug("closed %d Permit clients", len(owned))

    app = FastAPI(title="authzen-gateway", lifespan=lifespan)
    app.state.gateway = gateway
    app.state.metrics = metrics
    app.include_router(router)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(TraceIdMiddleware)
    return app


__all__ = ["build_gateway", "create_app", "router"]
