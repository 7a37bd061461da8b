"""Read-only view over the task set: filter, search and ordering.

Everything here is a pure function of its arguments. The store hands in a
snapshot and gets back a new list; nothing is cached between calls.
"""
from __future__ import annotations

from datetime import date
from typing import Iterable

from .entities import TaskEntity
from .enums import TaskFilter


def today_iso() -> str:
    return date.today().isoformat()


def is_overdue(task: TaskEntity, today: str | None = None) -> bool:
    """True for an open task whose due date is before ``today``.

    Both sides are ``YYYY-MM-DD`` strings, compared as strings so that no
    timezone conversion can shift a date by one day.
    """
    if task.done or not task.due:
        return False
    return task.due < (today or today_iso())


def _apply_filter(tasks: Iterable[TaskEntity], filter_key: TaskFilter) -> list[TaskEntity]:
    if filter_key == TaskFilter.ACTIVE:
        return [task for task in tasks if not task.done]
    if filter_key == TaskFilter.DONE:
        return [task for task in tasks if task.done]
    return list(tasks)


def _matches(task: TaskEntity, needle: str) -> bool:
    return needle in task.title.lower() or needle in (task.description or "").lower()


def _sort_key(task: TaskEntity) -> tuple:
    # undated tasks go after every dated one
    return (task.done, task.due is None, task.due or "", -task.created_at)


def project(
    tasks: Iterable[TaskEntity],
    filter_key: TaskFilter | str = TaskFilter.ALL,
    query: str | None = "",
) -> list[TaskEntity]:
    selected = _apply_filter(tasks, TaskFilter(filter_key))

    needle = (query or "").strip().lower()
    if needle:
        selected = [task for task in selected if _matches(task, needle)]

    return sorted(selected, key=_sort_key)
