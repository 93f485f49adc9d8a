from __future__ import annotations

from typing import Any, Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from ..core.ports import MetricsSink

DECISIONS_TOTAL = "authzen_decisions_total"
SEARCHES_TOTAL = "authzen_searches_total"
PDP_SECONDS = "authzen_pdp_seconds"


class PrometheusMetrics(MetricsSink):
    """Prometheus-based MetricsSink.

    Exposes:
      - authzen_decisions_total{route="evaluation|evaluations", decision="true|false|..."}
      - authzen_searches_total{outcome="ok|error"}
      - authzen_pdp_seconds{call="check|bulk_check|user_permissions"} (Histogram)

    Instruments live in a private registry unless one is passed, so several
    apps can coexist in one process.
    """

    _counters: Dict[str, Any]
    _hist: Optional[Any]

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        self._counters = {
            DECISIONS_TOTAL: Counter(
                DECISIONS_TOTAL,
                "Decisions returned by the PDP, by route.",
                labelnames=("route", "decision"),
                registry=self.registry,
            ),
            SEARCHES_TOTAL: Counter(
                SEARCHES_TOTAL,
                "Resource searches by outcome.",
                labelnames=("outcome",),
                registry=self.registry,
            ),
        }
        self._hist = Histogram(
            PDP_SECONDS,
            "Duration of calls to the external PDP in seconds.",
            labelnames=("call",),
            registry=self.registry,
        )

    # -- MetricsSink ------------------------------------------------------------

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None:
        counter = self._counters.get(name)
        if counter is None:
            return
        try:
            if labels:
                counter.labels(**labels).inc()
            else:
                counter.inc()
        except Exception:  # pragma: no cover
            # never raise from metrics path
            pass

    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        if name != PDP_SECONDS or self._hist is None:
            return
        try:
            self._hist.labels(**(labels or {"call": "unknown"})).observe(float(value))
        except Exception:  # pragma: no cover
            pass

    def render(self) -> bytes:
        return generate_latest(self.registry)


__all__ = ["DECISIONS_TOTAL", "PDP_SECONDS", "SEARCHES_TOTAL", "PrometheusMetrics"]
