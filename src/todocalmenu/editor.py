"""Launcher-driven add/edit loop for a single task."""

from __future__ import annotations

from typing import Callable

from . import dates
from .config import Settings
from .launcher import MenuLauncher
from .models import (
    MAX_PRIORITY,
    MIN_PRIORITY,
    STATUS_COMPLETED,
    STATUS_NEEDS_ACTION,
    Task,
    TodoValidationError,
)
from .render import Menu, MenuEntry
from .store import TaskStore

OUTCOME_SAVED = "saved"
OUTCOME_CANCELLED = "cancelled"
OUTCOME_DELETED = "deleted"

EDIT_SAVE = "save"
EDIT_COMPLETE = "complete"
EDIT_RESTORE = "restore"
EDIT_TITLE = "title"
EDIT_PRIORITY = "priority"
EDIT_CATEGORIES = "categories"
EDIT_DUE_DATE = "due_date"
EDIT_START_DATE = "start_date"
EDIT_START_TIME = "start_time"
EDIT_DESCRIPTION = "description"
EDIT_DELETE = "delete"

NEW_CATEGORY = "Enter new category..."
NEW_ITEM_PROMPT = "New item"


def _one_line(value: str) -> str:
    return " ".join(value.splitlines())


def parse_priority(text: str) -> int:
    raw = text.strip()
    if not raw:
        return 0
    try:
        priority = int(raw)
    except ValueError as exc:
        raise TodoValidationError("Priority must be a number between 0 and 9") from exc
    if not MIN_PRIORITY <= priority <= MAX_PRIORITY:
        raise TodoValidationError("Priority must be a number between 0 and 9")
    return priority


def parse_categories(text: str) -> list[str]:
    items = (item.strip() for item in text.split(","))
    return list(dict.fromkeys(item for item in items if item))


class EditController:
    """State machine behind the per-task edit menu.

    ``edit`` loops until the task is saved, deleted or the launcher is
    cancelled. Field edits mutate the task in place; a cancel restores the
    snapshot taken on entry, ``dirty`` flag included.
    """

    def __init__(self, store: TaskStore, launcher: MenuLauncher, settings: Settings) -> None:
        self.store = store
        self.launcher = launcher
        self.settings = settings
        self._handlers: dict[str, Callable[[Task], bool]] = {
            EDIT_TITLE: self._edit_title,
            EDIT_PRIORITY: self._edit_priority,
            EDIT_CATEGORIES: self._edit_categories,
            EDIT_DUE_DATE: self._edit_due_date,
            EDIT_START_DATE: self._edit_start_date,
            EDIT_START_TIME: self._edit_start_time,
            EDIT_DESCRIPTION: self._edit_description,
        }

    # ---- launcher helpers ----

    def _prompt(self, seed: str, title: str) -> str | None:
        return self.launcher.display([seed] if seed else [], title, menu=False)

    def feedback(self, message: str) -> None:
        self.launcher.display([], message, menu=False)

    def confirm(self, title: str) -> bool:
        answer = self.launcher.display([], f"{title} (y/N)", menu=False)
        if answer is None:
            return False
        return answer.strip().lower() in {"y", "yes"}

    # ---- menu ----

    def edit_menu(self, task: Task) -> Menu:
        entries = [MenuEntry(EDIT_SAVE, "Save item")]
        if task.summary:
            if task.completed:
                entries.append(MenuEntry(EDIT_RESTORE, "Restore item (uncomplete)"))
            else:
                entries.append(MenuEntry(EDIT_COMPLETE, "Complete item"))
        entries.extend(
            [
                MenuEntry(EDIT_TITLE, f"Title: {_one_line(task.summary)}"),
                MenuEntry(EDIT_PRIORITY, f"Priority: {task.priority}"),
                MenuEntry(EDIT_CATEGORIES, f"Categories: {','.join(task.categories)}"),
                MenuEntry(EDIT_DUE_DATE, f"Due date (yyyy-mm-dd): {dates.format_date(task.due_date)}"),
                MenuEntry(
                    EDIT_START_DATE,
                    f"Start date (yyyy-mm-dd): {dates.format_date(task.start_date)}",
                ),
                MenuEntry(EDIT_START_TIME, f"Start time (hh:mm): {dates.format_time(task.start_date)}"),
                MenuEntry(EDIT_DESCRIPTION, f"Description: {_one_line(task.description)}"),
                MenuEntry(EDIT_DELETE, "Delete item"),
            ]
        )
        return Menu(entries)

    def edit(self, task: Task) -> str:
        snapshot = task.snapshot()
        while True:
            menu = self.edit_menu(task)
            selected = self.launcher.display(menu.labels, _one_line(task.summary) or NEW_ITEM_PROMPT)
            if selected is None:
                task.restore(snapshot)
                return OUTCOME_CANCELLED
            entry = menu.lookup(selected)
            if entry is None:
                continue
            outcome = self._dispatch(task, entry.action)
            if outcome is not None:
                return outcome

    def add(self) -> Task | None:
        title = self.launcher.display([], "Todo Title:", menu=False)
        if title is None or not title.strip():
            return None
        now = dates.now()
        task = Task(
            uid=self.store.new_uid(),
            summary=title.strip(),
            created=now,
            last_modified=now,
            dirty=True,
        )
        if self.edit(task) != OUTCOME_SAVED:
            return None
        self.store.add(task)
        return task

    # ---- dispatch ----

    def _dispatch(self, task: Task, action: str) -> str | None:
        if action == EDIT_SAVE:
            if not task.summary:
                self.feedback("A todo needs a title before it can be saved")
                return None
            task.touch(dates.now())
            return OUTCOME_SAVED
        if action == EDIT_COMPLETE:
            task.status = STATUS_COMPLETED
            task.touch(dates.now())
            return None
        if action == EDIT_RESTORE:
            task.status = STATUS_NEEDS_ACTION
            task.touch(dates.now())
            return None
        if action == EDIT_DELETE:
            if not self.confirm("Delete item?"):
                return None
            if self.store.delete(task):
                return OUTCOME_DELETED
            self.feedback("Unable to delete item")
            return None

        handler = self._handlers[action]
        try:
            changed = handler(task)
        except TodoValidationError as exc:
            self.feedback(str(exc))
            return None
        if changed:
            task.mark_dirty()
        return None

    # ---- field editors ----

    def _edit_title(self, task: Task) -> bool:
        value = self._prompt(task.summary, "Todo Title:")
        if value is None:
            return False
        task.summary = value.strip()
        return True

    def _edit_priority(self, task: Task) -> bool:
        value = self._prompt(str(task.priority), "Priority (0-9):")
        if value is None:
            return False
        task.priority = parse_priority(value)
        return True

    def _edit_categories(self, task: Task) -> bool:
        options = [*self.store.categories(), NEW_CATEGORY]
        selected = self.launcher.display(options, "Categories:")
        if selected is None:
            return False
        if selected in options and selected != NEW_CATEGORY:
            if selected in task.categories:
                return False
            task.categories = [*task.categories, selected]
            return True
        if selected == NEW_CATEGORY:
            selected = self._prompt(",".join(task.categories), "Categories (comma separated):")
            if selected is None:
                return False
        task.categories = parse_categories(selected)
        return True

    def _edit_due_date(self, task: Task) -> bool:
        value = self._prompt(dates.format_date(task.due_date), "Due date (yyyy-mm-dd):")
        if value is None:
            return False
        if not value.strip():
            task.due_date = None
        else:
            task.due_date = dates.local_midnight(dates.parse_date(value))
        return True

    def _edit_start_date(self, task: Task) -> bool:
        value = self._prompt(dates.format_date(task.start_date), "Start date (yyyy-mm-dd):")
        if value is None:
            return False
        if not value.strip():
            task.start_date = None
        else:
            task.start_date = dates.combine_date(task.start_date, dates.parse_date(value))
        return True

    def _edit_start_time(self, task: Task) -> bool:
        value = self._prompt(dates.format_time(task.start_date), "Start time (hh:mm):")
        if value is None:
            return False
        if not value.strip():
            if task.start_date is not None:
                raise TodoValidationError(
                    "Start time can't be cleared on its own. Clear the start date instead."
                )
            return False
        task.start_date = dates.combine_time(task.start_date, dates.parse_time(value))
        return True

    def _edit_description(self, task: Task) -> bool:
        seed = _one_line(task.description)
        value = self._prompt(seed, "Description:")
        if value is None or value == seed:
            return False
        task.description = value
        return True
