from __future__ import annotations

from enum import StrEnum


class Tag(StrEnum):
    WORK = "work"
    PERSONAL = "personal"
    HEALTH = "health"
    NONE = "none"


class Repeat(StrEnum):
    """Recurrence hint shown next to a task. Nothing is scheduled from it."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class TaskFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    DONE = "done"
