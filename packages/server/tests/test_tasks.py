"""
Integration tests for Task endpoints.

Tests cover:
- Defaults (status always starts as todo), title / description limits, due date on create
- Project must belong to the caller's org
- Assignee must be an org member
- Filters, update, delete, role gates
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest


@pytest.fixture
async def setup(api):
    owner = await api.signup("owner@example.com")
    org_id = await api.create_org(owner)
    project = await api.create_project(owner, org_id, "Apollo")
    return owner, org_id, project["id"]


def _tasks_url(org_id, project_id, task_id=None):
    base = f"/api/v1/orgs/{org_id}/projects/{project_id}/tasks"
    return f"{base}/{task_id}" if task_id else base


def _in(days: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


async def test_create_task_defaults(client, setup):
    owner, org_id, project_id = setup
    resp = await client.post(
        _tasks_url(org_id, project_id), json={"title": "  Launch  "}, headers=owner.headers
    )
    assert resp.status_code == 201
    task = resp.json()
    assert task["title"] == "Launch"
    assert task["status"] == "todo"
    assert task["priority"] == "medium"
    assert task["assignee_user_id"] is None
    assert task["project_id"] == project_id
    assert task["org_id"] == org_id


@pytest.mark.parametrize(
    "payload",
    [
        {"title": ""},
        {"title": "   "},
        {"title": "t" * 201},
        {"title": "Launch", "description": "d" * 4001},
        {"title": "Launch", "priority": "critical"},
    ],
)
async def test_create_task_validation(client, setup, payload):
    owner, org_id, project_id = setup
    resp = await client.post(_tasks_url(org_id, project_id), json=payload, headers=owner.headers)
    assert resp.status_code == 400


async def test_create_ignores_requested_status(client, setup):
    owner, org_id, project_id = setup
    resp = await client.post(
        _tasks_url(org_id, project_id),
        json={"title": "Launch", "status": "done"},
        headers=owner.headers,
    )
    assert resp.status_code == 201
    assert resp.json()["status"] == "todo"


async def test_description_limit_is_inclusive(client, setup):
    owner, org_id, project_id = setup
    resp = await client.post(
        _tasks_url(org_id, project_id),
        json={"title": "Launch", "description": "d" * 4000},
        headers=owner.headers,
    )
    assert resp.status_code == 201


async def test_due_date_must_be_in_future_on_create(client, setup):
    owner, org_id, project_id = setup
    resp = await client.post(
        _tasks_url(org_id, project_id),
        json={"title": "Launch", "due_date": _in(-1)},
        headers=owner.headers,
    )
    assert resp.status_code == 400
    assert "future" in resp.json()["detail"]

    resp = await client.post(
        _tasks_url(org_id, project_id),
        json={"title": "Launch", "due_date": _in(7)},
        headers=owner.headers,
    )
    assert resp.status_code == 201
    task = resp.json()

    # Updates may keep or set a past date
    resp = await client.put(
        _tasks_url(org_id, project_id, task["id"]),
        json={"title": "Launch", "due_date": _in(-3)},
        headers=owner.headers,
    )
    assert resp.status_code == 200


async def test_project_in_other_org_is_not_found(api, client, setup):
    owner, org_id, _ = setup
    other = await api.signup("other@example.com")
    other_org = await api.create_org(other, "Other")
    foreign = await api.create_project(other, other_org, "Secret")

    resp = await client.post(
        _tasks_url(org_id, foreign["id"]), json={"title": "Sneaky"}, headers=owner.headers
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Project not found."

    resp = await client.get(_tasks_url(org_id, foreign["id"]), headers=owner.headers)
    assert resp.status_code == 404

    resp = await client.post(_tasks_url(org_id, uuid.uuid4()), json={"title": "x"}, headers=owner.headers)
    assert resp.status_code == 404


async def test_task_under_wrong_project_is_not_found(api, client, setup):
    owner, org_id, project_id = setup
    gemini = await api.create_project(owner, org_id, "Gemini")
    resp = await client.post(
        _tasks_url(org_id, project_id), json={"title": "Launch"}, headers=owner.headers
    )
    task_id = resp.json()["id"]

    resp = await client.get(_tasks_url(org_id, gemini["id"], task_id), headers=owner.headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Task not found."


async def test_assignee_must_be_member(api, client, setup):
    owner, org_id, project_id = setup
    member = await api.signup("member@example.com")
    outsider = await api.signup("outsider@example.com")
    await api.add_member(owner, org_id, member)

    resp = await client.post(
        _tasks_url(org_id, project_id),
        json={"title": "Launch", "assignee_user_id": outsider.user_id},
        headers=owner.headers,
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Assignee must be a member of this organization."

    resp = await client.post(
        _tasks_url(org_id, project_id),
        json={"title": "Launch", "assignee_user_id": member.user_id},
        headers=owner.headers,
    )
    assert resp.status_code == 201
    assert resp.json()["assignee_user_id"] == member.user_id


async def test_update_task(client, setup):
    owner, org_id, project_id = setup
    resp = await client.post(
        _tasks_url(org_id, project_id), json={"title": "Launch"}, headers=owner.headers
    )
    task = resp.json()

    resp = await client.put(
        _tasks_url(org_id, project_id, task["id"]),
        json={
            "title": "Launch rocket",
            "description": "  T-minus 10  ",
            "status": "in_progress",
            "priority": "urgent",
        },
        headers=owner.headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Launch rocket"
    assert body["description"] == "T-minus 10"
    assert body["status"] == "in_progress"
    assert body["priority"] == "urgent"


async def test_update_rejects_unknown_status(client, setup):
    owner, org_id, project_id = setup
    resp = await client.post(
        _tasks_url(org_id, project_id), json={"title": "Launch"}, headers=owner.headers
    )
    resp = await client.put(
        _tasks_url(org_id, project_id, resp.json()["id"]),
        json={"title": "Launch", "status": "blocked"},
        headers=owner.headers,
    )
    assert resp.status_code == 400


async def test_list_filters(api, client, setup):
    owner, org_id, project_id = setup
    member = await api.signup("member@example.com")
    await api.add_member(owner, org_id, member)
    for title, status, assignee in [
        ("A", "todo", None),
        ("B", "done", member.user_id),
        ("C", "todo", member.user_id),
    ]:
        resp = await client.post(
            _tasks_url(org_id, project_id),
            json={"title": title, "assignee_user_id": assignee},
            headers=owner.headers,
        )
        assert resp.status_code == 201
        if status != "todo":
            resp = await client.put(
                _tasks_url(org_id, project_id, resp.json()["id"]),
                json={"title": title, "status": status, "assignee_user_id": assignee},
                headers=owner.headers,
            )
            assert resp.status_code == 200

    resp = await client.get(_tasks_url(org_id, project_id), headers=member.headers)
    assert resp.json()["total_count"] == 3

    resp = await client.get(
        _tasks_url(org_id, project_id), params={"status": "todo"}, headers=member.headers
    )
    assert sorted(t["title"] for t in resp.json()["items"]) == ["A", "C"]

    resp = await client.get(
        _tasks_url(org_id, project_id),
        params={"assignee_id": member.user_id},
        headers=member.headers,
    )
    assert sorted(t["title"] for t in resp.json()["items"]) == ["B", "C"]

    resp = await client.get(
        _tasks_url(org_id, project_id),
        params={"status": "todo", "assignee_id": member.user_id},
        headers=member.headers,
    )
    assert [t["title"] for t in resp.json()["items"]] == ["C"]


async def test_member_cannot_write_tasks(api, client, setup):
    owner, org_id, project_id = setup
    member = await api.signup("member@example.com")
    await api.add_member(owner, org_id, member)
    resp = await client.post(
        _tasks_url(org_id, project_id), json={"title": "Launch"}, headers=owner.headers
    )
    task_id = resp.json()["id"]

    resp = await client.post(
        _tasks_url(org_id, project_id), json={"title": "Mine"}, headers=member.headers
    )
    assert resp.status_code == 403
    resp = await client.delete(_tasks_url(org_id, project_id, task_id), headers=member.headers)
    assert resp.status_code == 403
    resp = await client.get(_tasks_url(org_id, project_id, task_id), headers=member.headers)
    assert resp.status_code == 200


async def test_delete_task(client, setup):
    owner, org_id, project_id = setup
    resp = await client.post(
        _tasks_url(org_id, project_id), json={"title": "Launch"}, headers=owner.headers
    )
    task_id = resp.json()["id"]

    resp = await client.delete(_tasks_url(org_id, project_id, task_id), headers=owner.headers)
    assert resp.status_code == 204
    resp = await client.get(_tasks_url(org_id, project_id, task_id), headers=owner.headers)
    assert resp.status_code == 404
