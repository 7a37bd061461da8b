"""Load and save the whole task collection as one JSON document.

The document lives under a single key of a key-value byte store::

    {"version": 1, "tasks": [{"id": ..., "title": ..., "createdAt": ...}, ...]}

Version 0 is the older bare JSON array of tasks, where a missing tag was
written as an empty string. Older documents are upgraded step by step on
read; they are rewritten in the current format on the next save.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterable

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from todo_app.domain.entities import TaskEntity

from .kv_store import KeyValueStore
from .schema import TaskBlob, TaskRecord

logger = logging.getLogger(__name__)

STORAGE_KEY = "todo_tasks"
FORMAT_VERSION = 1


class StorageError(RuntimeError):
    pass


def _upgrade_v0(records: list[Any]) -> list[Any]:
    upgraded = []
    for record in records:
        if isinstance(record, dict) and record.get("tag") == "":
            record = {**record, "tag": "none"}
        upgraded.append(record)
    return upgraded


_UPGRADES: dict[int, Callable[[list[Any]], list[Any]]] = {
    0: _upgrade_v0,
}


def _read_envelope(payload: Any) -> tuple[int, list[Any]] | None:
    if isinstance(payload, list):
        return 0, payload
    if not isinstance(payload, dict):
        return None
    try:
        blob = TaskBlob.model_validate(payload)
    except ValidationError:
        return None
    return blob.version, blob.tasks


def _upgrade(version: int, records: list[Any]) -> list[Any]:
    if version > FORMAT_VERSION:
        logger.warning(
            "Stored tasks use format version %s (newer than %s); reading known fields only",
            version,
            FORMAT_VERSION,
        )
    while version < FORMAT_VERSION:
        records = _UPGRADES[version](records)
        version += 1
    return records


def _decode_records(records: list[Any]) -> list[TaskEntity]:
    tasks: list[TaskEntity] = []
    seen: set[str] = set()
    for index, raw in enumerate(records):
        try:
            record = TaskRecord.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Dropping malformed stored task #%d: %s", index, exc)
            continue
        if record.id in seen:
            logger.warning("Dropping stored task #%d: duplicate id %s", index, record.id)
            continue
        seen.add(record.id)
        tasks.append(record.to_entity())
    return tasks


class TaskStorage:
    def __init__(self, kv_store: KeyValueStore, key: str = STORAGE_KEY) -> None:
        self._kv_store = kv_store
        self._key = key

    def load(self) -> list[TaskEntity]:
        try:
            raw = self._kv_store.get(self._key)
        except SQLAlchemyError as exc:
            logger.warning("Could not read stored tasks, starting empty: %s", exc)
            return []
        if raw is None:
            return []

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
            logger.warning("Stored tasks are not valid JSON, starting empty: %s", exc)
            return []

        envelope = _read_envelope(payload)
        if envelope is None:
            logger.warning("Stored tasks are not a task list, starting empty")
            return []

        version, records = envelope
        tasks = _decode_records(_upgrade(version, records))
        logger.debug("Loaded %d tasks", len(tasks))
        return tasks

    def save(self, tasks: Iterable[TaskEntity]) -> None:
        records = [TaskRecord.from_entity(task).dump() for task in tasks]
        blob = json.dumps(
            {"version": FORMAT_VERSION, "tasks": records},
            ensure_ascii=False,
            separators=(",", ":"),
        ).encode("utf-8")
        try:
            self._kv_store.put(self._key, blob)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to save {len(records)} tasks") from exc
        logger.debug("Saved %d tasks", len(records))
