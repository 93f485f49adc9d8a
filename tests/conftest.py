import json

import httpx
import pytest

from authzen_gateway.permit.client import PermitClient, PermitConfig

SCOPE = {"organization_id": "org1", "project_id": "proj1", "environment_id": "env1"}

RICK_KEY = "CiRmZDA2MTRkMy1jMzlhLTQ3ODEtYjdiZC04Yjk2ZjVhNTEwMGQSBWxvY2Fs"
RICK = {"key": RICK_KEY, "email": "rick@the-citadel.com", "attributes": {"team": "citadel"}}


class FakePermit:
    """In-memory stand-in for the Permit API and PDP behind httpx.MockTransport."""

    rick_key = RICK_KEY

    def __init__(self):
        self.users = {RICK_KEY: dict(RICK)}
        self.listing = {}
        self.decide = lambda check: True
        self.failures = {}  # path -> status code
        self.calls = []  # (method, path, json body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        path = request.url.path
        self.calls.append((request.method, path, body))

        if path in self.failures:
            return httpx.Response(self.failures[path], text="boom")
        if path == "/v2/api-key/scope":
            return httpx.Response(200, json=SCOPE)
        if path.startswith("/v2/facts/proj1/env1/users/") and request.method == "GET":
            key = path.rsplit("/", 1)[1]
            if key not in self.users:
                return httpx.Response(404, json={"detail": "not found"})
            return httpx.Response(200, json=self.users[key])
        if path == "/allowed":
            return httpx.Response(200, json={"allow": self.decide(body)})
        if path == "/allowed/bulk":
            return httpx.Response(200, json={"allow": [{"allow": self.decide(c)} for c in body]})
        if path == "/user-permissions":
            return httpx.Response(200, json=self.listing)
        if request.method == "POST":
            return httpx.Response(200, json=body)
        return httpx.Response(404)

    def paths(self, method=None):
        return [p for m, p, _ in self.calls if method is None or m == method]

    def count(self, path):
        return sum(1 for _, p, _ in self.calls if p == path)

    def client(self, pdp_url="http://pdp.local") -> PermitClient:
        cfg = PermitConfig(pdp_url=pdp_url, api_key="permit_key_test", api_url="http://api.local")
        return PermitClient(cfg, client=httpx.AsyncClient(transport=httpx.MockTransport(self.handler)))


@pytest.fixture
def fake_permit():
    return FakePermit()


@pytest.fixture
def fake_idp():
    return FakePermit()
