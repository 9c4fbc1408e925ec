from __future__ import annotations

import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from todocalmenu import cli
from todocalmenu.cli import app
from todocalmenu.config import Settings
from todocalmenu.logging_setup import _ConsoleNoiseFilter
from todocalmenu.models import LauncherError
from todocalmenu.store import TaskStore

from .conftest import TODO_FILES, FakeLauncher


runner = CliRunner()


def _line_with(text: str):
    def _choose(lines: list[str], prompt: str) -> str:
        for line in lines:
            if text in line:
                return line
        raise AssertionError(f"no line containing {text!r} in {lines}")

    return _choose


def _snapshot_files(root: Path) -> dict[str, bytes]:
    return {path.name: path.read_bytes() for path in sorted(root.iterdir())}


@pytest.fixture()
def fake_launcher(monkeypatch: pytest.MonkeyPatch) -> FakeLauncher:
    launcher = FakeLauncher()
    monkeypatch.setattr(cli, "make_launcher", lambda settings: launcher)
    monkeypatch.setattr(cli, "setup_logging", lambda verbose=False: None)
    return launcher


def _invoke(todo_dir: Path, *extra: str):
    return runner.invoke(
        app,
        ["--todo", str(todo_dir), "--config", str(todo_dir.parent / "missing.yaml"), *extra],
    )


def test_cancel_at_main_menu_leaves_files_untouched(todo_dir: Path, fake_launcher: FakeLauncher) -> None:
    before = _snapshot_files(todo_dir)
    result = _invoke(todo_dir)
    assert result.exit_code == 0
    assert _snapshot_files(todo_dir) == before
    labels, prompt = fake_launcher.calls[0]
    assert prompt == "Todo"
    assert labels[:2] == ["Add Item", "View Completed Items"]
    assert len(labels) == 2 + len(TODO_FILES) - 1


def test_add_item_writes_new_file(todo_dir: Path, fake_launcher: FakeLauncher) -> None:
    fake_launcher.responses = ["Add Item", "Buy milk", "Save item", None]
    result = _invoke(todo_dir)
    assert result.exit_code == 0

    new_files = set(_snapshot_files(todo_dir)) - set(TODO_FILES) - {"notes.txt"}
    assert len(new_files) == 1
    text = (todo_dir / new_files.pop()).read_text(encoding="utf-8")
    assert "SUMMARY:Buy milk" in text
    assert "CREATED:" in text
    assert fake_launcher.prompts[1] == "Todo Title:"


def test_edit_item_is_saved_on_exit(todo_dir: Path, fake_launcher: FakeLauncher) -> None:
    fake_launcher.responses = [
        _line_with("Move git repos"),
        _line_with("Title:"),
        "Move all git repos",
        "Save item",
        None,
    ]
    result = _invoke(todo_dir)
    assert result.exit_code == 0
    assert "SUMMARY:Move all git repos" in (todo_dir / "sLNz.ics").read_text(encoding="utf-8")
    assert "SUMMARY:Test 2" in (todo_dir / "35rU.ics").read_text(encoding="utf-8")


def test_completing_item_moves_it_to_completed_view(todo_dir: Path, fake_launcher: FakeLauncher) -> None:
    fake_launcher.responses = [
        _line_with("Testing"),
        "Complete item",
        "Save item",
        "View Completed Items",
        None,
        None,
    ]
    result = _invoke(todo_dir)
    assert result.exit_code == 0
    completed_labels, prompt = fake_launcher.calls[4]
    assert prompt == "Completed Items"
    assert completed_labels[0] == "Delete All Completed"
    assert any("Testing" in label for label in completed_labels)
    assert "STATUS:COMPLETED" in (todo_dir / "657913900676334277.ics").read_text(encoding="utf-8")


def test_delete_all_completed_removes_files(todo_dir: Path, fake_launcher: FakeLauncher) -> None:
    fake_launcher.responses = ["View Completed Items", "Delete All Completed", "y", None]
    result = _invoke(todo_dir)
    assert result.exit_code == 0
    assert fake_launcher.prompts[2] == "Delete ALL Completed Items? (y/N)"
    assert not (todo_dir / "519633551077716419.ics").exists()
    assert (todo_dir / "35rU.ics").exists()


def test_delete_all_completed_declined_keeps_files(todo_dir: Path, fake_launcher: FakeLauncher) -> None:
    fake_launcher.responses = ["View Completed Items", "Delete All Completed", "", None]
    result = _invoke(todo_dir)
    assert result.exit_code == 0
    assert (todo_dir / "519633551077716419.ics").exists()


def test_delete_single_item(todo_dir: Path, fake_launcher: FakeLauncher) -> None:
    fake_launcher.responses = [_line_with("Move git repos"), "Delete item", "y", None]
    result = _invoke(todo_dir)
    assert result.exit_code == 0
    assert not (todo_dir / "sLNz.ics").exists()
    final_labels, _ = fake_launcher.calls[-1]
    assert not any("Move git repos" in label for label in final_labels)


def test_typed_text_at_main_menu_is_ignored(todo_dir: Path, fake_launcher: FakeLauncher) -> None:
    fake_launcher.responses = ["not a menu line", None]
    result = _invoke(todo_dir)
    assert result.exit_code == 0
    assert len(fake_launcher.calls) == 2


def test_launcher_error_exits_with_message(todo_dir: Path, fake_launcher: FakeLauncher) -> None:
    def _fail(lines: list[str], prompt: str) -> str:
        raise LauncherError("cannot open display")

    fake_launcher.responses = [_fail]
    result = _invoke(todo_dir)
    assert result.exit_code == 1
    assert "Error: cannot open display" in result.output


def test_todo_directory_is_created(tmp_path: Path, fake_launcher: FakeLauncher) -> None:
    root = tmp_path / "nested" / "todo"
    result = _invoke(root)
    assert result.exit_code == 0
    assert root.is_dir()


def test_config_file_and_flags_are_merged(
    tmp_path: Path, todo_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen: list[Settings] = []

    def _make(settings: Settings) -> FakeLauncher:
        seen.append(settings)
        return FakeLauncher()

    monkeypatch.setattr(cli, "make_launcher", _make)
    monkeypatch.setattr(cli, "setup_logging", lambda verbose=False: None)
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "settings:\n  cmd: rofi\n  opts: -theme x\n  show_created_date: true\n",
        encoding="utf-8",
    )

    result = runner.invoke(
        app,
        ["--config", str(config_path), "--todo", str(todo_dir), "--cmd", "wofi", "--no-created-date", "--threshold"],
    )
    assert result.exit_code == 0
    (settings,) = seen
    assert settings.cmd == "wofi"
    assert settings.opts == "-theme x"
    assert settings.todo_dir == todo_dir
    assert settings.show_created_date is False
    assert settings.threshold is True


def test_run_menu_dispatches_to_view_completed(settings: Settings) -> None:
    store = TaskStore.load(settings.todo_dir)
    launcher = FakeLauncher(
        [
            "View Completed Items",
            _line_with("Trash/yard/recycle"),
            "Restore item (uncomplete)",
            "Save item",
            None,
            None,
        ]
    )
    cli.run_menu(store, launcher, settings)
    restored = store.find("519633551077716419")
    assert restored is not None
    assert restored.completed is False
    assert restored.dirty is True


def test_console_filter_keeps_own_records_and_library_errors() -> None:
    noise = _ConsoleNoiseFilter()

    def _record(name: str, level: int) -> logging.LogRecord:
        return logging.LogRecord(name, level, __file__, 1, "msg", None, None)

    assert noise.filter(_record("todocalmenu.store", logging.DEBUG)) is True
    assert noise.filter(_record("icalendar", logging.WARNING)) is False
    assert noise.filter(_record("icalendar", logging.ERROR)) is True
