"""Filesystem operations and iCalendar IO for todocalmenu."""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import Any

from icalendar import Calendar, Todo

from . import dates
from .models import STATUS_NEEDS_ACTION, TODO_EXTENSION, Task

logger = logging.getLogger(__name__)

PRODID = "-//todocalmenu//todocalmenu//EN"


def ensure_directory(todo_dir: Path) -> None:
    todo_dir.mkdir(parents=True, exist_ok=True)


def iter_todo_files(todo_dir: Path) -> list[Path]:
    return sorted(
        child
        for child in todo_dir.iterdir()
        if child.suffix == TODO_EXTENSION and child.is_file()
    )


def read_calendar(path: Path) -> Calendar:
    return Calendar.from_ical(path.read_bytes())


def new_calendar() -> Calendar:
    calendar = Calendar()
    calendar.add("prodid", PRODID)
    calendar.add("version", "2.0")
    return calendar


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _text(vtodo: Todo, name: str) -> str:
    value = _first(vtodo.get(name))
    if value is None:
        return ""
    return str(value)


def _priority(vtodo: Todo) -> int:
    raw = _text(vtodo, "PRIORITY").strip()
    if not raw:
        return 0
    try:
        priority = int(raw)
    except ValueError:
        logger.warning("Ignoring invalid priority %r", raw)
        return 0
    if not 0 <= priority <= 9:
        logger.warning("Ignoring out-of-range priority %d", priority)
        return 0
    return priority


def _categories(vtodo: Todo) -> list[str]:
    value = vtodo.get("CATEGORIES")
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    categories: list[str] = []
    for item in items:
        cats = getattr(item, "cats", None)
        tokens = [str(cat) for cat in cats] if cats is not None else str(item).split(",")
        categories.extend(token.strip() for token in tokens if token.strip())
    return categories


def _timestamp(vtodo: Todo, name: str) -> dt.datetime | None:
    prop = vtodo.get(name)
    if prop is None:
        return None
    return dates.parse_ical_datetime(dates.raw_property_value(prop))


def vtodo_uid(vtodo: Todo, path: Path | None = None) -> str:
    uid = _text(vtodo, "UID").strip()
    if not uid and path is not None:
        return path.stem
    return uid


def task_from_vtodo(vtodo: Todo, path: Path | None = None) -> Task:
    return Task(
        uid=vtodo_uid(vtodo, path),
        summary=_text(vtodo, "SUMMARY"),
        description=_text(vtodo, "DESCRIPTION"),
        categories=_categories(vtodo),
        status=_text(vtodo, "STATUS") or STATUS_NEEDS_ACTION,
        priority=_priority(vtodo),
        created=_timestamp(vtodo, "CREATED"),
        last_modified=_timestamp(vtodo, "LAST-MODIFIED"),
        due_date=_timestamp(vtodo, "DUE"),
        start_date=_timestamp(vtodo, "DTSTART"),
        path=path,
    )


def tasks_from_file(path: Path) -> list[Task]:
    calendar = read_calendar(path)
    return [task_from_vtodo(vtodo, path) for vtodo in calendar.walk("VTODO")]


def task_path(task: Task, todo_dir: Path) -> Path:
    if task.path is not None:
        return task.path
    return todo_dir / task.file_name()


def find_vtodo(calendar: Calendar, uid: str, path: Path | None = None) -> Todo | None:
    for vtodo in calendar.walk("VTODO"):
        if vtodo_uid(vtodo, path) == uid:
            return vtodo
    return None


def _replace(vtodo: Todo, name: str, value: Any) -> None:
    if name in vtodo:
        del vtodo[name]
    if value:
        vtodo.add(name, value)


def _utc_or_none(value: dt.datetime | None) -> dt.datetime | None:
    return dates.to_utc(value) if value is not None else None


def apply_task(vtodo: Todo, task: Task) -> None:
    """Overwrite the managed property set of ``vtodo`` from ``task``."""
    _replace(vtodo, "SUMMARY", task.summary)
    _replace(vtodo, "DESCRIPTION", task.description)
    _replace(vtodo, "STATUS", task.status)
    _replace(vtodo, "LAST-MODIFIED", _utc_or_none(task.last_modified))
    _replace(vtodo, "DTSTART", _utc_or_none(task.start_date))
    _replace(vtodo, "DUE", _utc_or_none(task.due_date))
    _replace(vtodo, "PRIORITY", task.priority)
    _replace(vtodo, "CATEGORIES", list(task.categories))
    if "CREATED" not in vtodo and task.created is not None:
        vtodo.add("CREATED", dates.to_utc(task.created))


def _load_or_create(path: Path) -> Calendar:
    if not path.exists():
        return new_calendar()
    try:
        return read_calendar(path)
    except Exception as exc:
        logger.warning("Unable to parse %s (%s); rewriting it from scratch", path, exc)
        return new_calendar()


def write_task(task: Task, todo_dir: Path) -> Path:
    path = task_path(task, todo_dir)
    calendar = _load_or_create(path)
    vtodo = find_vtodo(calendar, task.uid, path)
    if vtodo is None:
        vtodo = Todo()
        vtodo.add("UID", task.uid)
        vtodo.add("DTSTAMP", dates.to_utc(dates.now()))
        calendar.add_component(vtodo)
    apply_task(vtodo, task)
    path.write_bytes(calendar.to_ical())
    task.path = path
    return path


def remove_task_file(task: Task, todo_dir: Path) -> Path:
    """Drop the task's VTODO; unlink the file once no VTODO is left in it."""
    path = task_path(task, todo_dir)
    if not path.exists():
        return path
    calendar = read_calendar(path)
    vtodo = find_vtodo(calendar, task.uid, path)
    if vtodo is not None:
        calendar.subcomponents.remove(vtodo)
    if calendar.walk("VTODO"):
        path.write_bytes(calendar.to_ical())
    else:
        path.unlink()
    return path
