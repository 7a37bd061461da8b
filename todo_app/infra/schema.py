from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)

from todo_app.domain.entities import TaskEntity
from todo_app.domain.enums import Repeat, Tag


class TaskRecord(BaseModel):
    """One task as it appears in the stored JSON document."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: StrictStr = Field(min_length=1)
    title: StrictStr
    done: StrictBool = False
    due: str | None = None
    tag: Tag = Tag.NONE
    repeat: Repeat = Repeat.NONE
    description: str | None = None
    created_at: StrictInt = Field(alias="createdAt", ge=0)
    updated_at: StrictInt | None = Field(default=None, alias="updatedAt")

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title is blank")
        return value

    @field_validator("due", mode="before")
    @classmethod
    def _due_is_calendar_date(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            raise ValueError("due must be an ISO date string")
        return date.fromisoformat(value).isoformat()

    @field_validator("tag", "repeat", mode="before")
    @classmethod
    def _missing_means_none(cls, value: Any) -> Any:
        return "none" if value is None else value

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _updated_not_before_created(self) -> "TaskRecord":
        if self.updated_at is None or self.updated_at < self.created_at:
            self.updated_at = self.created_at
        return self

    @classmethod
    def from_entity(cls, task: TaskEntity) -> "TaskRecord":
        return cls(
            id=task.id,
            title=task.title,
            done=task.done,
            due=task.due,
            tag=task.tag,
            repeat=task.repeat,
            description=task.description,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )

    def to_entity(self) -> TaskEntity:
        return TaskEntity(
            id=self.id,
            title=self.title,
            done=self.done,
            due=self.due,
            tag=self.tag,
            repeat=self.repeat,
            description=self.description,
            created_at=self.created_at,
            updated_at=self.updated_at if self.updated_at is not None else self.created_at,
        )

    def dump(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class TaskBlob(BaseModel):
    version: StrictInt = Field(ge=0)
    tasks: list[Any]
