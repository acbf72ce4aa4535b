# backend/tests/test_tasks.py

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from httpx import AsyncClient


def _titles(page: dict) -> list[str]:
    return [t["title"] for t in page["items"]]


async def test_list_returns_all_tasks(client: AsyncClient, seeded) -> None:
    resp = await client.get("/tasks/")
    assert resp.status_code == 200
    page = resp.json()
    assert page["total_items"] == 5
    assert page["page_number"] == 1
    assert page["page_size"] == 10
    assert page["total_pages"] == 1
    assert _titles(page) == ["Test1", "Test2", "Test3", "Test4", "Test5"]


async def test_list_filters_by_user(client: AsyncClient, seeded) -> None:
    page = (await client.get("/tasks/", params={"user_id": 1})).json()
    assert _titles(page) == ["Test1", "Test2", "Test3"]


async def test_list_filters_by_user_and_category(client: AsyncClient, seeded) -> None:
    page = (await client.get("/tasks/", params={"user_id": 1, "category": "Work"})).json()
    assert _titles(page) == ["Test1", "Test3"]
    assert page["total_items"] == 2

    page = (await client.get("/tasks/", params={"category": "Urgent"})).json()
    assert _titles(page) == ["Test4", "Test5"]

    page = (await client.get("/tasks/", params={"category": "Nope"})).json()
    assert page["items"] == []
    assert page["total_items"] == 0


@pytest.mark.parametrize(
    ("sort_by", "sort_order", "expected"),
    [
        ("title", "asc", ["Test1", "Test2", "Test3"]),
        ("title", "desc", ["Test3", "Test2", "Test1"]),
        ("priority", "asc", ["Test1", "Test3", "Test2"]),
        ("priority", "desc", ["Test2", "Test3", "Test1"]),
        ("duedate", "asc", ["Test2", "Test3", "Test1"]),
        ("DueDate", "desc", ["Test1", "Test3", "Test2"]),
        ("due_date", "asc", ["Test2", "Test3", "Test1"]),
    ],
)
async def test_list_sorting(client: AsyncClient, seeded, sort_by: str, sort_order: str, expected: list[str]) -> None:
    params = {"user_id": 1, "sort_by": sort_by, "sort_order": sort_order}
    page = (await client.get("/tasks/", params=params)).json()
    assert _titles(page) == expected


async def test_list_ignores_unknown_sort_field(client: AsyncClient, seeded) -> None:
    page = (await client.get("/tasks/", params={"sort_by": "color", "sort_order": "desc"})).json()
    assert _titles(page) == ["Test1", "Test2", "Test3", "Test4", "Test5"]


@pytest.mark.parametrize(
    ("page_number", "page_size", "expected"),
    [
        (1, 2, ["Test1", "Test2"]),
        (2, 2, ["Test3", "Test4"]),
        (3, 2, ["Test5"]),
        (4, 2, []),
    ],
)
async def test_list_pagination(client: AsyncClient, seeded, page_number: int, page_size: int, expected: list[str]) -> None:
    params = {"page_number": page_number, "page_size": page_size}
    page = (await client.get("/tasks/", params=params)).json()
    assert _titles(page) == expected
    assert page["total_items"] == 5
    assert page["total_pages"] == 3


async def test_list_rejects_bad_paging(client: AsyncClient) -> None:
    assert (await client.get("/tasks/", params={"page_number": 0})).status_code == 422
    assert (await client.get("/tasks/", params={"page_size": 0})).status_code == 422
    assert (await client.get("/tasks/", params={"page_size": 1000})).status_code == 422


async def test_get_task(client: AsyncClient, seeded) -> None:
    resp = await client.get("/tasks/2")
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Test2"
    assert body["is_completed"] is True
    assert body["priority"] == "high"
    assert body["user"]["id"] == 1
    assert [c["name"] for c in body["categories"]] == ["Personal"]

    assert (await client.get("/tasks/150")).status_code == 404


async def test_create_task_with_categories(client: AsyncClient, seeded) -> None:
    payload = {
        "title": "New task",
        "description": "details",
        "priority": "high",
        "due_date": "2031-05-01T12:00:00",
        "user_id": 2,
        "category_ids": [1, 3, 3],
    }
    resp = await client.post("/tasks/", json=payload)
    assert resp.status_code == 201
    body = resp.json()
    assert body["title"] == "New task"
    assert body["is_completed"] is False
    assert body["user"]["username"] == "TestUser2"
    assert sorted(c["name"] for c in body["categories"]) == ["Urgent", "Work"]
    assert resp.headers["location"] == f"/tasks/{body['id']}"

    page = (await client.get("/tasks/", params={"category": "Work"})).json()
    assert "New task" in _titles(page)


async def test_create_task_rejects_missing_user(client: AsyncClient, seeded) -> None:
    resp = await client.post("/tasks/", json={"title": "t", "user_id": 150})
    assert resp.status_code == 400
    assert "150" in resp.json()["detail"]


async def test_create_task_rejects_missing_category(client: AsyncClient, seeded) -> None:
    resp = await client.post("/tasks/", json={"title": "t", "user_id": 1, "category_ids": [1, 150]})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "One or more provided category IDs do not exist."

    page = (await client.get("/tasks/")).json()
    assert page["total_items"] == 5


async def test_create_task_validation(client: AsyncClient, seeded) -> None:
    resp = await client.post("/tasks/", json={"title": "", "user_id": 1})
    assert resp.status_code == 422


async def test_update_task_is_partial(client: AsyncClient, seeded) -> None:
    resp = await client.put("/tasks/1", json={"is_completed": True, "priority": "high"})
    assert resp.status_code == 204

    body = (await client.get("/tasks/1")).json()
    assert body["title"] == "Test1"
    assert body["is_completed"] is True
    assert body["priority"] == "high"
    assert [c["name"] for c in body["categories"]] == ["Work"]


async def test_update_task_reassigns_user(client: AsyncClient, seeded) -> None:
    resp = await client.put("/tasks/1", json={"user_id": 2})
    assert resp.status_code == 204

    body = (await client.get("/tasks/1")).json()
    assert body["user"]["id"] == 2

    resp = await client.put("/tasks/1", json={"user_id": 150})
    assert resp.status_code == 400


async def test_update_task_replaces_categories(client: AsyncClient, seeded) -> None:
    resp = await client.put("/tasks/1", json={"category_ids": [2, 3]})
    assert resp.status_code == 204
    body = (await client.get("/tasks/1")).json()
    assert sorted(c["name"] for c in body["categories"]) == ["Personal", "Urgent"]

    resp = await client.put("/tasks/1", json={"category_ids": [3]})
    assert resp.status_code == 204
    body = (await client.get("/tasks/1")).json()
    assert [c["name"] for c in body["categories"]] == ["Urgent"]

    resp = await client.put("/tasks/1", json={"category_ids": [150]})
    assert resp.status_code == 400

    resp = await client.put("/tasks/1", json={"category_ids": []})
    assert resp.status_code == 204
    body = (await client.get("/tasks/1")).json()
    assert body["categories"] == []


async def test_update_missing_task(client: AsyncClient, seeded) -> None:
    resp = await client.put("/tasks/150", json={"title": "x"})
    assert resp.status_code == 404


async def test_delete_task(client: AsyncClient, seeded) -> None:
    resp = await client.delete("/tasks/1")
    assert resp.status_code == 204
    assert (await client.get("/tasks/1")).status_code == 404

    # link rows went with the task
    tasks = (await client.get("/api/categories/1/tasks")).json()
    assert [t["title"] for t in tasks] == ["Test3"]

    assert (await client.delete("/tasks/1")).status_code == 404


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


async def test_due_date_offset_keeps_the_same_moment(client: AsyncClient, seeded) -> None:
    resp = await client.post(
        "/tasks/",
        json={"title": "Offset", "user_id": 1, "due_date": "2031-05-01T12:00:00+02:00"},
    )
    assert resp.status_code == 201
    expected = datetime(2031, 5, 1, 10, 0, tzinfo=timezone.utc)
    assert _parse(resp.json()["due_date"]) == expected

    body = (await client.get(f"/tasks/{resp.json()['id']}")).json()
    assert _parse(body["due_date"]) == expected

    resp = await client.put(f"/tasks/{body['id']}", json={"due_date": "2031-06-01T08:30:00-04:00"})
    assert resp.status_code == 204
    body = (await client.get(f"/tasks/{body['id']}")).json()
    assert _parse(body["due_date"]) == datetime(2031, 6, 1, 12, 30, tzinfo=timezone.utc)


async def test_sort_by_due_date_across_offsets(client: AsyncClient) -> None:
    user = (await client.post("/users/", json={"username": "zoned", "email": "zoned@example.com"})).json()
    # 10:00 UTC and 11:00 UTC; wall-clock order would put "Later" first
    await client.post("/tasks/", json={"title": "Earlier", "user_id": user["id"], "due_date": "2031-05-01T12:00:00+02:00"})
    await client.post("/tasks/", json={"title": "Later", "user_id": user["id"], "due_date": "2031-05-01T11:00:00+00:00"})

    page = (await client.get("/tasks/", params={"sort_by": "duedate", "sort_order": "asc"})).json()
    assert _titles(page) == ["Earlier", "Later"]

    page = (await client.get("/tasks/", params={"sort_by": "duedate", "sort_order": "desc"})).json()
    assert _titles(page) == ["Later", "Earlier"]


async def test_sort_order_is_case_sensitive(client: AsyncClient, seeded) -> None:
    params = {"user_id": 1, "sort_by": "title", "sort_order": "DESC"}
    page = (await client.get("/tasks/", params=params)).json()
    assert _titles(page) == ["Test1", "Test2", "Test3"]
