# backend/tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from todo_api.core.database import Base, build_engine, build_sessionmaker, get_db
from todo_api.main import app
from todo_api.models.category import Category
from todo_api.models.task import TaskItem
from todo_api.models.task_category import TaskCategory
from todo_api.models.user import User


@pytest.fixture()
async def session_factory(tmp_path: Path):
    """
    Fresh SQLite database per test.

    A file database (not :memory:) so every pooled connection sees the
    same tables.
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'todo.sqlite3'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield build_sessionmaker(engine)

    await engine.dispose()


@pytest.fixture()
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
async def seeded(session_factory):
    """
    Two users, three categories and five tasks:

        id title  user priority due         category
        1  Test1  1    low      2030-01-03  Work
        2  Test2  1    high     2030-01-01  Personal   (completed)
        3  Test3  1    medium   2030-01-02  Work
        4  Test4  2    high     2030-01-05  Urgent
        5  Test5  2    low      2030-01-04  Urgent     (completed)
    """
    async with session_factory() as session:
        session.add_all(
            [
                User(id=1, username="TestUser1", email="user1@email.com"),
                User(id=2, username="TestUser2", email="user2@email.com"),
            ]
        )
        await session.flush()

        session.add_all(
            [
                Category(id=1, name="Work", user_id=1),
                Category(id=2, name="Personal", user_id=1),
                Category(id=3, name="Urgent", user_id=2),
            ]
        )
        session.add_all(
            [
                TaskItem(id=1, title="Test1", priority="low", due_date=datetime(2030, 1, 3), user_id=1),
                TaskItem(id=2, title="Test2", priority="high", due_date=datetime(2030, 1, 1), user_id=1, is_completed=True),
                TaskItem(id=3, title="Test3", priority="medium", due_date=datetime(2030, 1, 2), user_id=1),
                TaskItem(id=4, title="Test4", priority="high", due_date=datetime(2030, 1, 5), user_id=2),
                TaskItem(id=5, title="Test5", priority="low", due_date=datetime(2030, 1, 4), user_id=2, is_completed=True),
            ]
        )
        await session.flush()

        session.add_all(
            [
                TaskCategory(task_id=1, category_id=1),
                TaskCategory(task_id=2, category_id=2),
                TaskCategory(task_id=3, category_id=1),
                TaskCategory(task_id=4, category_id=3),
                TaskCategory(task_id=5, category_id=3),
            ]
        )
        await session.commit()
