"""Renderers for the launcher menus."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from . import dates
from .config import Settings
from .models import Task

ACTION_ADD = "add"
ACTION_VIEW_COMPLETED = "view_completed"
ACTION_DELETE_COMPLETED = "delete_completed"
ACTION_TASK = "task"

ADD_ITEM = "Add Item"
VIEW_COMPLETED_ITEMS = "View Completed Items"
DELETE_ALL_COMPLETED = "Delete All Completed"

NO_PRIORITY_COLUMN = " " * 4
NO_CREATED_COLUMN = " " * 11


@dataclass(frozen=True, slots=True)
class MenuEntry:
    action: str
    label: str
    index: int | None = None


@dataclass(slots=True)
class Menu:
    entries: list[MenuEntry] = field(default_factory=list)

    @property
    def labels(self) -> list[str]:
        return [entry.label for entry in self.entries]

    @property
    def text(self) -> str:
        return "".join(f"{label}\n" for label in self.labels)

    def lookup(self, line: str) -> MenuEntry | None:
        found: MenuEntry | None = None
        for entry in self.entries:
            if entry.label == line:
                found = entry
        return found


def sort_key(task: Task) -> tuple:
    due = task.due_date
    created = task.created.timestamp() if task.created is not None else float("-inf")
    return (
        due is None,
        due.timestamp() if due is not None else 0.0,
        task.priority == 0,
        task.priority,
        -created,
    )


def sort_tasks(tasks: list[Task]) -> None:
    tasks.sort(key=sort_key)


def format_task_line(task: Task, *, show_created_date: bool = True) -> str:
    parts: list[str] = []
    if task.priority > 0:
        parts.append(f"({task.priority}) ")
    else:
        parts.append(NO_PRIORITY_COLUMN)
    if show_created_date:
        if task.created is not None:
            parts.append(f"{dates.format_date(task.created)} ")
        else:
            parts.append(NO_CREATED_COLUMN)
    parts.append(task.summary)
    for category in task.categories:
        parts.append(f" @{category}")
    if task.due_date is not None:
        parts.append(f" due:{dates.format_date(task.due_date)}")
    return "".join(parts)


def _visible(task: Task, *, show_completed: bool, threshold: bool) -> bool:
    if task.deleted or task.completed != show_completed:
        return False
    if threshold and not show_completed and dates.is_future(task.start_date):
        return False
    return True


def iter_task_lines(
    tasks: list[Task],
    *,
    show_completed: bool,
    settings: Settings,
) -> Iterator[tuple[int, str]]:
    for index, task in enumerate(tasks):
        if not _visible(task, show_completed=show_completed, threshold=settings.threshold):
            continue
        yield index, format_task_line(task, show_created_date=settings.show_created_date)


def build_menu(tasks: list[Task], show_completed: bool, settings: Settings) -> Menu:
    """Sort ``tasks`` in place and build the top-level or completed-items menu."""
    sort_tasks(tasks)
    if show_completed:
        entries = [MenuEntry(ACTION_DELETE_COMPLETED, DELETE_ALL_COMPLETED)]
    else:
        entries = [
            MenuEntry(ACTION_ADD, ADD_ITEM),
            MenuEntry(ACTION_VIEW_COMPLETED, VIEW_COMPLETED_ITEMS),
        ]
    for index, line in iter_task_lines(tasks, show_completed=show_completed, settings=settings):
        entries.append(MenuEntry(ACTION_TASK, line, index))
    return Menu(entries)


def render(tasks: list[Task], show_completed: bool, settings: Settings) -> tuple[str, dict[str, int]]:
    menu = build_menu(tasks, show_completed, settings)
    line_to_index = {
        entry.label: entry.index
        for entry in menu.entries
        if entry.action == ACTION_TASK and entry.index is not None
    }
    return menu.text, line_to_index
