"""Seed the Permit environment the gateway evaluates against.

Creates, in this order: resource types, roles, the ``owned_tasks`` condition
set with its rules, and the interop users with their role assignments. Each
call is attempted once; the first failure aborts the run and nothing created
before it is rolled back. Run it against an empty (or compatible) policy store.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Tuple

from .core.model import DEFAULT_TENANT
from .permit.client import PermitClient

logger = logging.getLogger("authzen_gateway.provision")

RESOURCES: List[Dict[str, Any]] = [
    {
        "key": "user",
        "name": "User",
        "attributes": {"userID": {"type": "string"}},
        "actions": {"can_read_user": {"name": "can_read_user"}},
    },
    {
        "key": "todo",
        "name": "Task",
        "attributes": {"ownerID": {"type": "string"}},
        "actions": {
            "can_read_todos": {"name": "can_read_todos"},
            "can_update_todo": {"name": "can_update_todo"},
            "can_delete_todo": {"name": "can_delete_todo"},
            "can_create_todo": {"name": "can_create_todo"},
        },
    },
]

ROLES: List[Dict[str, Any]] = [
    {
        "key": "admin",
        "name": "Admin",
        "permissions": [
            "todo:can_read_todos",
            "todo:can_delete_todo",
            "todo:can_create_todo",
            "user:can_read_user",
        ],
    },
    {
        "key": "viewer",
        "name": "Viewer",
        "permissions": ["todo:can_read_todos", "user:can_read_user"],
    },
    {
        "key": "editor",
        "name": "Editor",
        "permissions": ["todo:can_read_todos", "todo:can_create_todo", "user:can_read_user"],
    },
    {
        "key": "evil_genius",
        "name": "Evil Genius",
        "permissions": [
            "todo:can_read_todos",
            "todo:can_update_todo",
            "todo:can_create_todo",
            "user:can_read_user",
        ],
    },
]

CONDITION_SETS: List[Dict[str, Any]] = [
    {
        "key": "owned_tasks",
        "name": "Owned Tasks",
        "type": "resourceset",
        "resource_id": "todo",
        "conditions": {
            "allOf": [{"allOf": [{"resource.ownerID": {"equals": {"ref": "user.email"}}}]}],
        },
    },
]

# (role, permission) pairs granted on resources in the owned_tasks set
OWNED_TASK_RULES: List[Tuple[str, str]] = [
    ("editor", "todo:can_update_todo"),
    ("editor", "todo:can_delete_todo"),
    ("evil_genius", "todo:can_delete_todo"),
    ("admin", "todo:can_update_todo"),
]

_PICTURES = "https://www.topaz.sh/assets/templates/citadel/img"

USERS: Dict[str, Dict[str, Any]] = {
    "CiRmZDA2MTRkMy1jMzlhLTQ3ODEtYjdiZC04Yjk2ZjVhNTEwMGQSBWxvY2Fs": {
        "id": "rick@the-citadel.com",
        "name": "Rick Sanchez",
        "email": "rick@the-citadel.com",
        "roles": ["admin", "evil_genius"],
        "picture": f"{_PICTURES}/Rick%20Sanchez.jpg",
    },
    "CiRmZDM2MTRkMy1jMzlhLTQ3ODEtYjdiZC04Yjk2ZjVhNTEwMGQSBWxvY2Fs": {
        "id": "beth@the-smiths.com",
        "name": "Beth Smith",
        "email": "beth@the-smiths.com",
        "roles": ["viewer"],
        "picture": f"{_PICTURES}/Beth%20Smith.jpg",
    },
    "CiRmZDE2MTRkMy1jMzlhLTQ3ODEtYjdiZC04Yjk2ZjVhNTEwMGQSBWxvY2Fs": {
        "id": "morty@the-citadel.com",
        "name": "Morty Smith",
        "email": "morty@the-citadel.com",
        "roles": ["editor"],
        "picture": f"{_PICTURES}/Morty%20Smith.jpg",
    },
    "CiRmZDI2MTRkMy1jMzlhLTQ3ODEtYjdiZC04Yjk2ZjVhNTEwMGQSBWxvY2Fs": {
        "id": "summer@the-smiths.com",
        "name": "Summer Smith",
        "email": "summer@the-smiths.com",
        "roles": ["editor"],
        "picture": f"{_PICTURES}/Summer%20Smith.jpg",
    },
    "CiRmZDQ2MTRkMy1jMzlhLTQ3ODEtYjdiZC04Yjk2ZjVhNTEwMGQSBWxvY2Fs": {
        "id": "jerry@the-smiths.com",
        "name": "Jerry Smith",
        "email": "jerry@the-smiths.com",
        "roles": ["viewer"],
        "picture": f"{_PICTURES}/Jerry%20Smith.jpg",
    },
}


def user_payload(key: str, seed: Mapping[str, Any]) -> Dict[str, Any]:
    # The interop id doubles as the email; names split on the first space.
    first, _, last = str(seed["name"]).partition(" ")
    return {"key": key, "email": seed["id"], "first_name": first, "last_name": last}


async def create_resources(client: PermitClient) -> None:
    for resource in RESOURCES:
        await client.create_resource(resource)
        logger.info("created resource %s", resource["key"])


async def create_roles(client: PermitClient) -> None:
    for role in ROLES:
        await client.create_role(role)
        logger.info("created role %s", role["key"])


async def create_abac(client: PermitClient) -> None:
    for condition_set in CONDITION_SETS:
        await client.create_condition_set(condition_set)
        logger.info("created condition set %s", condition_set["key"])
    for role, permission in OWNED_TASK_RULES:
        await client.create_condition_set_rule(
            {
                "resource_set": "owned_tasks",
                "permission": permission,
                "is_role": True,
                "user_set": role,
            }
        )
        logger.info("granted %s to %s on owned_tasks", permission, role)


async def create_users(client: PermitClient) -> None:
    for key, seed in USERS.items():
        await client.create_user(user_payload(key, seed))
        logger.info("created user %s (%s)", key, seed["id"])
        for role in seed["roles"]:
            await client.assign_role(key, role, DEFAULT_TENANT)
            logger.info("assigned role %s to %s", role, seed["id"])


async def provision(client: PermitClient) -> None:
    await create_resources(client)
    await create_roles(client)
    await create_abac(client)
    await create_users(client)


__all__ = [
    "CONDITION_SETS",
    "OWNED_TASK_RULES",
    "RESOURCES",
    "ROLES",
    "USERS",
    "create_abac",
    "create_resources",
    "create_roles",
    "create_users",
    "provision",
    "user_payload",
]
