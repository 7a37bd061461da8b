from __future__ import annotations

from pathlib import Path

import pytest

from todo_app.domain.entities import TaskEntity
from todo_app.infra.db import create_db_engine, create_session_factory, init_db
from todo_app.infra.kv_store import KeyValueStore
from todo_app.infra.storage import TaskStorage
from todo_app.services.task_service import TaskService


class FakeStorage:
    """Keeps tasks in memory and records every save."""

    def __init__(self, tasks: list[TaskEntity] | None = None) -> None:
        self.tasks: list[TaskEntity] = list(tasks or [])
        self.saves: list[list[TaskEntity]] = []

    def load(self) -> list[TaskEntity]:
        return list(self.tasks)

    def save(self, tasks: list[TaskEntity]) -> None:
        self.tasks = list(tasks)
        self.saves.append(list(tasks))


class FakeClock:
    def __init__(self, now: int = 1_717_200_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1_000) -> None:
        self.now += ms


@pytest.fixture()
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def service(storage: FakeStorage, clock: FakeClock) -> TaskService:
    return TaskService(storage, clock=clock)


@pytest.fixture()
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{(tmp_path / 'todo.sqlite3').as_posix()}"


@pytest.fixture()
def kv_store(database_url: str):
    engine = create_db_engine(database_url)
    init_db(engine)
    yield KeyValueStore(create_session_factory(engine))
    engine.dispose()


@pytest.fixture()
def task_storage(kv_store: KeyValueStore) -> TaskStorage:
    return TaskStorage(kv_store)
