import importlib


def test_public_api_imports():
    names = [
        "Gateway",
        "GatewaySettings",
        "CheckRequest",
        "ResourceRef",
        "SearchOutcome",
        "SearchRequest",
        "UserRecord",
        "PermitClient",
        "PermitConfig",
        "PermitError",
        "PermitAPIError",
        "Scope",
        "ScopeCache",
        "__version__",
    ]
    mod = importlib.import_module("authzen_gateway")
    for n in names:
        assert hasattr(mod, n), f"Missing public import: authzen_gateway.{n}"
