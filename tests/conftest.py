from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence

import pytest

from todocalmenu.config import Settings

TODO_FILES = {
    "35rU.ics": (
        "BEGIN:VCALENDAR\n"
        "VERSION:2.0\n"
        "PRODID:-//test//EN\n"
        "BEGIN:VTODO\n"
        "UID:35rU\n"
        "SUMMARY:Test 2\n"
        "STATUS:NEEDS-ACTION\n"
        "CATEGORIES:tech\n"
        "PRIORITY:1\n"
        "CREATED:20240901T120000Z\n"
        "LAST-MODIFIED:20240901T120000Z\n"
        "END:VTODO\n"
        "END:VCALENDAR\n"
    ),
    "sLNz.ics": (
        "BEGIN:VCALENDAR\n"
        "VERSION:2.0\n"
        "PRODID:-//test//EN\n"
        "BEGIN:VTODO\n"
        "UID:sLNz\n"
        "SUMMARY:Move git repos\n"
        "DESCRIPTION:Move git repos?\n"
        "STATUS:NEEDS-ACTION\n"
        "CATEGORIES:tech,git,projects\n"
        "CREATED:20240902T120000Z\n"
        "END:VTODO\n"
        "END:VCALENDAR\n"
    ),
    "test2.ics": (
        "BEGIN:VCALENDAR\n"
        "VERSION:2.0\n"
        "PRODID:-//test//EN\n"
        "BEGIN:VTODO\n"
        "UID:20240918T131500Z-test2@example.com\n"
        "SUMMARY:Test 2\n"
        "DESCRIPTION:This is a test todo starting at 1900 EDT\n"
        "DTSTART;TZID=America/New_York:20240918T190000\n"
        "STATUS:NEEDS-ACTION\n"
        "END:VTODO\n"
        "END:VCALENDAR\n"
    ),
    "657913900676334277.ics": (
        "BEGIN:VCALENDAR\n"
        "VERSION:2.0\n"
        "PRODID:-//test//EN\n"
        "BEGIN:VTODO\n"
        "UID:657913900676334277\n"
        "SUMMARY:Testing\n"
        "PRIORITY:5\n"
        "DTSTART:20240920T200000Z\n"
        "DUE:20250101T080000Z\n"
        "STATUS:NEEDS-ACTION\n"
        "END:VTODO\n"
        "END:VCALENDAR\n"
    ),
    "519633551077716419.ics": (
        "BEGIN:VCALENDAR\n"
        "VERSION:2.0\n"
        "PRODID:-//test//EN\n"
        "BEGIN:VTODO\n"
        "UID:519633551077716419\n"
        "SUMMARY:Trash/yard/recycle\n"
        "CATEGORIES:chores\n"
        "STATUS:COMPLETED\n"
        "END:VTODO\n"
        "END:VCALENDAR\n"
    ),
    "3900172495289256706.ics": (
        "BEGIN:VCALENDAR\n"
        "VERSION:2.0\n"
        "PRODID:-//test//EN\n"
        "BEGIN:VTODO\n"
        "UID:3900172495289256706\n"
        "SUMMARY:Trash/yard waste\n"
        "CATEGORIES:chores\n"
        "DUE:20241002T010001Z\n"
        "DTSTART:20241002T010000Z\n"
        "STATUS:NEEDS-ACTION\n"
        "END:VTODO\n"
        "END:VCALENDAR\n"
    ),
}


class FakeLauncher:
    """Scripted launcher: each display() call consumes one response.

    A response may be a string, None (cancel), or a callable receiving
    ``(lines, prompt)``. When the script runs out every call cancels.
    """

    def __init__(self, responses: Sequence[str | None | Callable[[list[str], str], str | None]] = ()):
        self.responses = list(responses)
        self.calls: list[tuple[list[str], str]] = []
        self.menus: list[bool] = []

    def display(self, lines: Sequence[str], prompt: str, *, menu: bool = True) -> str | None:
        self.calls.append((list(lines), prompt))
        self.menus.append(menu)
        if not self.responses:
            return None
        response = self.responses.pop(0)
        if callable(response):
            return response(list(lines), prompt)
        return response

    @property
    def prompts(self) -> list[str]:
        return [prompt for _, prompt in self.calls]


def write_todo_files(todo_dir: Path, names: Sequence[str] | None = None) -> None:
    todo_dir.mkdir(parents=True, exist_ok=True)
    for name in names or TODO_FILES:
        (todo_dir / name).write_text(TODO_FILES[name], encoding="utf-8")


@pytest.fixture()
def todo_dir(tmp_path: Path) -> Path:
    root = tmp_path / "todo"
    write_todo_files(root)
    (root / "notes.txt").write_text("not a todo\n", encoding="utf-8")
    return root


@pytest.fixture()
def settings(todo_dir: Path) -> Settings:
    return Settings(todo_dir=todo_dir)
