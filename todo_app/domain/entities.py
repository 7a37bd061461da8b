from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import Repeat, Tag


@dataclass(frozen=True)
class TaskEntity:
    id: str
    title: str
    created_at: int
    updated_at: int
    done: bool = False
    due: Optional[str] = None
    tag: Tag = Tag.NONE
    repeat: Repeat = Repeat.NONE
    description: Optional[str] = None
