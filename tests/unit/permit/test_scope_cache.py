import asyncio

import pytest

from authzen_gateway.permit.scope import Scope, ScopeCache


def test_scope_from_payload():
    s = Scope.from_payload({"organization_id": "o", "project_id": "p", "environment_id": "e"})
    assert s == Scope(project_id="p", environment_id="e", organization_id="o")


@pytest.mark.asyncio
async def test_loader_runs_once_and_value_is_reused():
    calls = []

    async def loader():
        calls.append(1)
        return Scope("p", "e")

    cache = ScopeCache()
    assert cache.value is None
    first = await cache.get(loader)
    second = await cache.get(loader)
    assert first == second == Scope("p", "e")
    assert cache.value == first
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_failed_load_is_not_cached():
    attempts = []

    async def loader():
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("scope lookup failed")
        return Scope("p", "e")

    cache = ScopeCache()
    with pytest.raises(RuntimeError):
        await cache.get(loader)
    assert cache.value is None
    assert await cache.get(loader) == Scope("p", "e")


@pytest.mark.asyncio
async def test_racing_first_callers_store_the_same_value():
    async def loader():
        await asyncio.sleep(0)
        return Scope("p", "e")

    cache = ScopeCache()
    a, b = await asyncio.gather(cache.get(loader), cache.get(loader))
    assert a == b == cache.value
