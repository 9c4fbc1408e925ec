"""In-memory task collection with selective persistence."""

from __future__ import annotations

import logging
from pathlib import Path
import time

from . import storage
from .models import TODO_EXTENSION, StoreError, Task, TodoValidationError

logger = logging.getLogger(__name__)


class TaskStore:
    """Owns every Task loaded from (or destined for) one todo directory.

    Only dirty tasks are written on save, so files nobody touched keep their
    exact bytes. Deletion is two-phase: ``delete`` removes the backing file and
    marks the task, ``compact`` drops marked tasks from the collection.
    """

    def __init__(self, todo_dir: Path, tasks: list[Task] | None = None) -> None:
        self.todo_dir = todo_dir
        self.tasks: list[Task] = list(tasks or [])

    @classmethod
    def load(cls, todo_dir: Path) -> TaskStore:
        try:
            files = storage.iter_todo_files(todo_dir)
        except OSError as exc:
            raise StoreError(f"Error reading directory {todo_dir}: {exc}") from exc

        tasks: list[Task] = []
        for path in files:
            try:
                tasks.extend(storage.tasks_from_file(path))
            except Exception as exc:
                logger.warning("Error loading %s: %s", path, exc)
                continue

        if not tasks:
            logger.warning("No todos found in directory %s", todo_dir)
        logger.debug("Loaded %d todos from %s", len(tasks), todo_dir)
        return cls(todo_dir, tasks)

    def __len__(self) -> int:
        return len(self.tasks)

    def active(self) -> list[Task]:
        return [task for task in self.tasks if not task.completed and not task.deleted]

    def completed(self) -> list[Task]:
        return [task for task in self.tasks if task.completed and not task.deleted]

    def find(self, uid: str) -> Task | None:
        for task in self.tasks:
            if task.uid == uid:
                return task
        return None

    def new_uid(self) -> str:
        candidate = time.time_ns()
        taken = {task.uid for task in self.tasks}
        while str(candidate) in taken or (self.todo_dir / f"{candidate}{TODO_EXTENSION}").exists():
            candidate += 1
        return str(candidate)

    def categories(self) -> list[str]:
        return sorted({category for task in self.tasks for category in task.categories if category})

    def add(self, task: Task) -> None:
        if not task.valid:
            raise TodoValidationError("A todo needs a title")
        if self.find(task.uid) is not None:
            raise TodoValidationError(f"Duplicate todo uid: {task.uid}")
        self.tasks.append(task)

    def delete(self, task: Task) -> bool:
        """Remove the task from its backing file, then mark it for compaction."""
        try:
            path = storage.remove_task_file(task, self.todo_dir)
        except (OSError, ValueError) as exc:
            logger.error("Error deleting file for %s: %s", task.uid, exc)
            return False
        task.deleted = True
        logger.info("Todo item deleted: %s (%s)", task.summary, path.name)
        return True

    def compact(self) -> None:
        self.tasks = [task for task in self.tasks if not task.deleted]

    def delete_completed(self) -> int:
        removed = 0
        for task in self.completed():
            if self.delete(task):
                removed += 1
        self.compact()
        return removed

    def save(self) -> int:
        """Write every dirty task; return how many files were written."""
        written = 0
        for task in self.tasks:
            if not task.dirty or task.deleted:
                continue
            try:
                path = storage.write_task(task, self.todo_dir)
            except (OSError, ValueError) as exc:
                raise StoreError(f"Error saving todo {task.uid}: {exc}") from exc
            task.dirty = False
            written += 1
            logger.debug("Saved %s", path)
        return written
