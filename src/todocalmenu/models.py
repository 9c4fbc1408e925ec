"""Core task models and constants."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
import datetime as dt
from pathlib import Path

STATUS_NEEDS_ACTION = "NEEDS-ACTION"
STATUS_COMPLETED = "COMPLETED"
VALID_STATUSES = (STATUS_NEEDS_ACTION, STATUS_COMPLETED)
MIN_PRIORITY = 0
MAX_PRIORITY = 9
TODO_EXTENSION = ".ics"


@dataclass(slots=True)
class Task:
    uid: str
    summary: str = ""
    description: str = ""
    categories: list[str] = field(default_factory=list)
    status: str = STATUS_NEEDS_ACTION
    priority: int = 0
    created: dt.datetime | None = None
    last_modified: dt.datetime | None = None
    due_date: dt.datetime | None = None
    start_date: dt.datetime | None = None
    dirty: bool = False
    deleted: bool = False
    path: Path | None = None

    @property
    def completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    @property
    def valid(self) -> bool:
        return bool(self.summary)

    def file_name(self) -> str:
        return f"{self.uid}{TODO_EXTENSION}"

    def mark_dirty(self) -> None:
        self.dirty = True

    def touch(self, when: dt.datetime) -> None:
        """Stamp a committed mutation."""
        self.last_modified = when
        self.dirty = True

    def snapshot(self) -> Task:
        return replace(self, categories=list(self.categories))

    def restore(self, snapshot: Task) -> None:
        for item in fields(self):
            value = getattr(snapshot, item.name)
            if item.name == "categories":
                value = list(value)
            setattr(self, item.name, value)


class TodoError(Exception):
    """Base error for todo operations."""


class TodoValidationError(TodoError):
    """Raised when user input or task fields are invalid."""


class StoreError(TodoError):
    """Raised when the todo directory cannot be read or written."""


class LauncherError(TodoError):
    """Raised when the launcher fails for a reason other than cancellation."""
