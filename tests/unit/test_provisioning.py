import pytest

from authzen_gateway import provision as prov


@pytest.mark.asyncio
async def test_provision_issues_calls_in_fixed_order(fake_permit):
    await prov.provision(fake_permit.client())
    posts = fake_permit.paths("POST")
    schema = "/v2/schema/proj1/env1"
    facts = "/v2/facts/proj1/env1"

    assert posts[:2] == [f"{schema}/resources"] * 2
    assert posts[2:6] == [f"{schema}/roles"] * 4
    assert posts[6] == f"{schema}/condition_sets"
    assert posts[7:11] == [f"{facts}/set_rules"] * 4

    # each user: create, then one assignment per role
    expected = []
    for key, seed in prov.USERS.items():
        expected.append(f"{facts}/users")
        expected.extend([f"{facts}/users/{key}/roles"] * len(seed["roles"]))
    assert posts[11:] == expected
    assert fake_permit.count("/v2/api-key/scope") == 1


@pytest.mark.asyncio
async def test_provision_payloads(fake_permit):
    await prov.provision(fake_permit.client())
    bodies = [b for m, _, b in fake_permit.calls if m == "POST"]
    assert [b["key"] for b in bodies[:2]] == ["user", "todo"]
    assert set(bodies[1]["actions"]) == {
        "can_read_todos",
        "can_update_todo",
        "can_delete_todo",
        "can_create_todo",
    }
    assert [b["key"] for b in bodies[2:6]] == ["admin", "viewer", "editor", "evil_genius"]
    assert bodies[6]["conditions"]["allOf"][0]["allOf"][0] == {
        "resource.ownerID": {"equals": {"ref": "user.email"}}
    }
    assert [(b["user_set"], b["permission"]) for b in bodies[7:11]] == prov.OWNED_TASK_RULES
    assert all(b["resource_set"] == "owned_tasks" and b["is_role"] is True for b in bodies[7:11])
    assert bodies[11] == {
        "key": "CiRmZDA2MTRkMy1jMzlhLTQ3ODEtYjdiZC04Yjk2ZjVhNTEwMGQSBWxvY2Fs",
        "email": "rick@the-citadel.com",
        "first_name": "Rick",
        "last_name": "Sanchez",
    }
    assert bodies[12] == {"role": "admin", "tenant": "default"}
    assert bodies[13] == {"role": "evil_genius", "tenant": "default"}


@pytest.mark.asyncio
async def test_failure_aborts_without_rollback(fake_permit):
    fake_permit.failures["/v2/schema/proj1/env1/condition_sets"] = 409
    with pytest.raises(Exception):
        await prov.provision(fake_permit.client())
    posts = fake_permit.paths("POST")
    assert posts[-1] == "/v2/schema/proj1/env1/condition_sets"
    assert len(posts) == 7  # 2 resources, 4 roles, the failed condition set
    assert fake_permit.paths("DELETE") == []


def test_user_payload_splits_name():
    seed = {"id": "jerry@the-smiths.com", "name": "Jerry Smith"}
    assert prov.user_payload("k", seed) == {
        "key": "k",
        "email": "jerry@the-smiths.com",
        "first_name": "Jerry",
        "last_name": "Smith",
    }
