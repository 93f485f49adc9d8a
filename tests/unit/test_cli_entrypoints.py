import logging

from authzen_gateway import cli
from authzen_gateway.logging.context import TraceIdFilter


def test_configure_logging_attaches_trace_filter_once():
    cli.configure_logging("INFO")
    cli.configure_logging("INFO")
    for handler in logging.getLogger().handlers:
        assert sum(isinstance(f, TraceIdFilter) for f in handler.filters) <= 1


def test_provision_main_returns_nonzero_on_failure(monkeypatch):
    async def failing(settings):
        raise RuntimeError("permit unreachable")

    monkeypatch.setattr(cli, "_provision", failing)
    assert cli.provision_main() == 1


def test_provision_main_returns_zero_on_success(monkeypatch):
    seen = []

    async def ok(settings):
        seen.append(settings)

    monkeypatch.setenv("PERMIT_API_KEY", "k")
    monkeypatch.setattr(cli, "_provision", ok)
    assert cli.provision_main() == 0
    assert seen[0].api_key == "k"


def test_serve_runs_uvicorn_with_configured_address(monkeypatch):
    calls = {}

    def fake_run(app, host, port, log_config):
        calls.update(app=app, host=host, port=port)

    monkeypatch.setenv("PORT", "8123")
    monkeypatch.setattr(cli.uvicorn, "run", fake_run)
    assert cli.serve() == 0
    assert (calls["host"], calls["port"]) == ("0.0.0.0", 8123)
    assert calls["app"].title == "authzen-gateway"


def test_importing_main_module_does_not_start_server(monkeypatch):
    import importlib
    import sys

    def boom():
        raise AssertionError("main() called on import")

    monkeypatch.setattr(cli, "main", boom)
    monkeypatch.delitem(sys.modules, "authzen_gateway.__main__", raising=False)
    module = importlib.import_module("authzen_gateway.__main__")
    assert module.main is boom
