from __future__ import annotations

import logging
import secrets
import time
from dataclasses import replace
from datetime import date
from typing import Callable

from todo_app.domain.entities import TaskEntity
from todo_app.domain.enums import Repeat, Tag
from todo_app.domain.filters import TaskFilters
from todo_app.domain.projection import is_overdue, project, today_iso
from todo_app.infra.storage import TaskStorage

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def random_id() -> str:
    value = secrets.randbits(64)
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits)) or "0"


class TaskService:
    """Owns the task list and applies every change to it.

    Tasks are kept newest-created first. Each change that alters the list is
    written through ``storage`` before the call returns.
    """

    def __init__(
        self,
        storage: TaskStorage,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[], str] = random_id,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._id_factory = id_factory
        self._tasks: list[TaskEntity] = list(storage.load())

    @property
    def tasks(self) -> tuple[TaskEntity, ...]:
        return tuple(self._tasks)

    def get_task(self, task_id: str) -> TaskEntity | None:
        return next((task for task in self._tasks if task.id == task_id), None)

    def list_tasks(self, filters: TaskFilters) -> list[TaskEntity]:
        return project(self._tasks, filters.filter_key, filters.search)

    def get_stats(self, today: str | None = None) -> dict[str, int]:
        today = today or today_iso()
        done = sum(1 for task in self._tasks if task.done)
        return {
            "total": len(self._tasks),
            "active": len(self._tasks) - done,
            "done": done,
            "overdue": sum(1 for task in self._tasks if is_overdue(task, today)),
        }

    def create(
        self,
        title: str,
        due: date | str | None = None,
        tag: Tag | str | None = Tag.NONE,
        repeat: Repeat | str | None = Repeat.NONE,
        description: str | None = None,
    ) -> TaskEntity | None:
        title = (title or "").strip()
        if not title:
            return None

        now = self._clock()
        task = TaskEntity(
            id=self._new_id(),
            title=title,
            done=False,
            due=_normalize_due(due),
            tag=Tag(tag or Tag.NONE),
            repeat=Repeat(repeat or Repeat.NONE),
            description=(description or "").strip() or None,
            created_at=now,
            updated_at=now,
        )
        self._tasks.insert(0, task)
        logger.debug("Created task %s", task.id)
        self._save()
        return task

    def toggle_done(self, task_id: str) -> None:
        task = self.get_task(task_id)
        if not task:
            return
        self._replace(replace(task, done=not task.done, updated_at=self._touch(task)))
        logger.debug("Toggled task %s", task_id)
        self._save()

    def edit_title(self, task_id: str, new_title: str) -> bool:
        title = (new_title or "").strip()
        task = self.get_task(task_id)
        if not title or not task:
            return False
        self._replace(replace(task, title=title, updated_at=self._touch(task)))
        logger.debug("Renamed task %s", task_id)
        self._save()
        return True

    def delete(self, task_id: str) -> None:
        remaining = [task for task in self._tasks if task.id != task_id]
        if len(remaining) == len(self._tasks):
            return
        self._tasks = remaining
        logger.debug("Deleted task %s", task_id)
        self._save()

    def clear_completed(self) -> None:
        remaining = [task for task in self._tasks if not task.done]
        removed = len(self._tasks) - len(remaining)
        if not removed:
            return
        self._tasks = remaining
        logger.debug("Cleared %d completed tasks", removed)
        self._save()

    def _new_id(self) -> str:
        taken = {task.id for task in self._tasks}
        task_id = self._id_factory()
        while task_id in taken:
            task_id = self._id_factory()
        return task_id

    def _touch(self, task: TaskEntity) -> int:
        return max(self._clock(), task.created_at)

    def _replace(self, updated: TaskEntity) -> None:
        self._tasks = [updated if task.id == updated.id else task for task in self._tasks]

    def _save(self) -> None:
        self._storage.save(list(self._tasks))


def _normalize_due(value: date | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    value = value.strip()
    if not value:
        return None
    return date.fromisoformat(value).isoformat()
