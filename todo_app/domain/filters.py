from __future__ import annotations

from dataclasses import dataclass

from .enums import TaskFilter


@dataclass(frozen=True)
class TaskFilters:
    filter_key: TaskFilter | str = TaskFilter.ALL
    search: str | None = None
