from __future__ import annotations

import json
import logging

import pytest
from sqlalchemy.exc import SQLAlchemyError

from todo_app.domain.entities import TaskEntity
from todo_app.domain.enums import Repeat, Tag
from todo_app.infra.db import create_db_engine, create_session_factory, init_db
from todo_app.infra.kv_store import KeyValueStore
from todo_app.infra.storage import FORMAT_VERSION, STORAGE_KEY, StorageError, TaskStorage


def _sample_tasks() -> list[TaskEntity]:
    return [
        TaskEntity(
            id="k3j9x",
            title="Pay rent",
            done=False,
            due="2024-07-01",
            tag=Tag.PERSONAL,
            repeat=Repeat.MONTHLY,
            description="transfer before noon",
            created_at=1_717_000_000_000,
            updated_at=1_717_000_500_000,
        ),
        TaskEntity(
            id="a81qz",
            title="Run 5k",
            done=True,
            tag=Tag.HEALTH,
            created_at=1_716_000_000_000,
            updated_at=1_716_500_000_000,
        ),
        TaskEntity(id="zz", title="Inbox zero", created_at=1, updated_at=1),
    ]


def _record(**fields) -> dict:
    record = {
        "id": "r1",
        "title": "Stored",
        "done": False,
        "due": None,
        "tag": "none",
        "repeat": "none",
        "createdAt": 100,
        "updatedAt": 200,
    }
    record.update(fields)
    return record


def _put_json(kv_store: KeyValueStore, payload) -> None:
    kv_store.put(STORAGE_KEY, json.dumps(payload).encode("utf-8"))


def test_load_without_stored_blob_is_empty(task_storage) -> None:
    assert task_storage.load() == []


def test_save_then_load_round_trips(task_storage) -> None:
    tasks = _sample_tasks()

    task_storage.save(tasks)

    assert task_storage.load() == tasks


def test_round_trip_keeps_surrounding_whitespace(task_storage) -> None:
    tasks = [
        TaskEntity(
            id="pad",
            title=" Pay rent ",
            description=" note ",
            created_at=10,
            updated_at=20,
        )
    ]

    task_storage.save(tasks)

    assert task_storage.load() == tasks


def test_tasks_survive_restart(database_url) -> None:
    tasks = _sample_tasks()

    engine = create_db_engine(database_url)
    init_db(engine)
    TaskStorage(KeyValueStore(create_session_factory(engine))).save(tasks)
    engine.dispose()

    engine = create_db_engine(database_url)
    init_db(engine)
    try:
        assert TaskStorage(KeyValueStore(create_session_factory(engine))).load() == tasks
    finally:
        engine.dispose()


def test_save_writes_versioned_document(task_storage, kv_store) -> None:
    task_storage.save(_sample_tasks())

    document = json.loads(kv_store.get(STORAGE_KEY))

    assert document["version"] == FORMAT_VERSION
    first, second, _ = document["tasks"]
    assert first == {
        "id": "k3j9x",
        "title": "Pay rent",
        "done": False,
        "due": "2024-07-01",
        "tag": "personal",
        "repeat": "monthly",
        "description": "transfer before noon",
        "createdAt": 1_717_000_000_000,
        "updatedAt": 1_717_000_500_000,
    }
    assert "description" not in second
    assert "due" not in second


def test_save_overwrites_previous_blob(task_storage) -> None:
    task_storage.save(_sample_tasks())
    task_storage.save([])

    assert task_storage.load() == []


@pytest.mark.parametrize(
    "raw",
    [
        b"not json at all",
        b"\xff\xfe\x00garbage",
        b"{\"tasks\": 3}",
        b"{\"version\": \"one\", \"tasks\": []}",
        b"42",
        b"\"a string\"",
        b"null",
        b"[" * 200_000 + b"]" * 200_000,
    ],
)
def test_load_corrupted_blob_is_empty(task_storage, kv_store, raw, caplog) -> None:
    kv_store.put(STORAGE_KEY, raw)

    with caplog.at_level(logging.WARNING, logger="todo_app.infra.storage"):
        assert task_storage.load() == []

    assert caplog.records


def test_load_legacy_bare_array(task_storage, kv_store) -> None:
    _put_json(
        kv_store,
        [
            {
                "id": "legacy1",
                "title": "Old format",
                "done": False,
                "due": None,
                "repeat": "daily",
                "tag": "",
                "createdAt": 10,
                "updatedAt": 20,
            },
            {"id": "legacy2", "title": "Tagged", "done": True, "tag": "work", "createdAt": 5, "updatedAt": 5},
        ],
    )

    tasks = task_storage.load()

    assert [task.id for task in tasks] == ["legacy1", "legacy2"]
    assert tasks[0].tag == Tag.NONE
    assert tasks[0].repeat == Repeat.DAILY
    assert tasks[1].tag == Tag.WORK
    assert tasks[1].repeat == Repeat.NONE

    task_storage.save(tasks)
    assert json.loads(kv_store.get(STORAGE_KEY))["version"] == FORMAT_VERSION


def test_load_drops_malformed_records(task_storage, kv_store, caplog) -> None:
    _put_json(
        kv_store,
        {
            "version": 1,
            "tasks": [
                _record(id="good"),
                _record(id="bad-title", title=5),
                _record(id="blank-title", title="   "),
                _record(id="bad-due", due="someday"),
                _record(id="bad-tag", tag="errands"),
                _record(id="bad-ts", createdAt="yesterday"),
                _record(id="bad-done", done="yes"),
                "not a record",
                _record(id=""),
                _record(id="also-good", due="2024-02-29", description="  "),
            ],
        },
    )

    with caplog.at_level(logging.WARNING, logger="todo_app.infra.storage"):
        tasks = task_storage.load()

    assert [task.id for task in tasks] == ["good", "also-good"]
    assert tasks[1].due == "2024-02-29"
    assert tasks[1].description is None
    assert len(caplog.records) == 8


def test_load_keeps_first_of_duplicate_ids(task_storage, kv_store) -> None:
    _put_json(
        kv_store,
        {"version": 1, "tasks": [_record(id="dup", title="first"), _record(id="dup", title="second")]},
    )

    tasks = task_storage.load()

    assert [task.title for task in tasks] == ["first"]


def test_load_repairs_timestamps(task_storage, kv_store) -> None:
    _put_json(
        kv_store,
        {
            "version": 1,
            "tasks": [
                _record(id="backwards", createdAt=500, updatedAt=100),
                {"id": "missing", "title": "No updatedAt", "createdAt": 42},
            ],
        },
    )

    backwards, missing = task_storage.load()

    assert backwards.updated_at == backwards.created_at == 500
    assert missing.updated_at == 42
    assert missing.done is False
    assert missing.tag == Tag.NONE


def test_load_newer_version_reads_known_fields(task_storage, kv_store) -> None:
    _put_json(
        kv_store,
        {"version": FORMAT_VERSION + 1, "tasks": [_record(id="future", priority="high")]},
    )

    tasks = task_storage.load()

    assert [task.id for task in tasks] == ["future"]


class _FailingStore:
    def get(self, key: str) -> bytes | None:
        raise SQLAlchemyError("database is locked")

    def put(self, key: str, value: bytes) -> None:
        raise SQLAlchemyError("database is locked")


def test_read_failure_falls_back_to_empty() -> None:
    assert TaskStorage(_FailingStore()).load() == []


def test_write_failure_raises_storage_error() -> None:
    with pytest.raises(StorageError) as excinfo:
        TaskStorage(_FailingStore()).save(_sample_tasks())

    assert isinstance(excinfo.value.__cause__, SQLAlchemyError)


def test_custom_key_keeps_stores_apart(kv_store) -> None:
    work = TaskStorage(kv_store, key="work_tasks")
    home = TaskStorage(kv_store, key="home_tasks")

    work.save(_sample_tasks()[:1])

    assert home.load() == []
    assert [task.id for task in work.load()] == ["k3j9x"]


def test_kv_store_put_get_delete(kv_store) -> None:
    assert kv_store.get("k") is None

    kv_store.put("k", b"one")
    kv_store.put("k", b"two")
    assert kv_store.get("k") == b"two"

    kv_store.delete("k")
    kv_store.delete("k")
    assert kv_store.get("k") is None
