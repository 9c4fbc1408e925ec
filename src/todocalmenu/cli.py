"""CLI entrypoint and top-level menu loop for todocalmenu."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from . import config, render, storage
from .config import Settings
from .editor import EditController
from .launcher import MenuLauncher, make_launcher
from .logging_setup import setup_logging
from .models import TodoError
from .store import TaskStore

logger = logging.getLogger(__name__)

MAIN_PROMPT = "Todo"
COMPLETED_PROMPT = "Completed Items"

CmdOption = Annotated[
    str | None,
    typer.Option("--cmd", help="Launcher command to use (dmenu, rofi, wofi, or 'inquirer')"),
]
OptsOption = Annotated[str | None, typer.Option("--opts", help="Additional launcher options")]
TodoOption = Annotated[Path | None, typer.Option("--todo", help="Path to todo directory")]
NoCreatedDateOption = Annotated[
    bool,
    typer.Option("--no-created-date", help="Hide the created date column"),
]
ThresholdOption = Annotated[
    bool,
    typer.Option("--threshold", help="Hide items before their start (threshold) date"),
]
ConfigOption = Annotated[Path | None, typer.Option("--config", help="Explicit config.yaml path")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")]


app = typer.Typer(
    help="Dmenu/Rofi launcher based management of iCalendar todo lists",
    add_completion=False,
)


def _warn_config(message: str) -> None:
    typer.echo(f"Warning: {message}", err=True)


def _run_and_handle(fn) -> None:
    try:
        fn()
    except TodoError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def view_completed(store: TaskStore, editor: EditController, launcher: MenuLauncher, settings: Settings) -> None:
    while True:
        store.compact()
        menu = render.build_menu(store.tasks, True, settings)
        selected = launcher.display(menu.labels, COMPLETED_PROMPT)
        if selected is None:
            return
        entry = menu.lookup(selected)
        if entry is None:
            continue
        if entry.action == render.ACTION_DELETE_COMPLETED:
            if editor.confirm("Delete ALL Completed Items?"):
                removed = store.delete_completed()
                logger.info("Deleted %d completed items", removed)
            return
        if entry.index is not None:
            editor.edit(store.tasks[entry.index])


def run_menu(store: TaskStore, launcher: MenuLauncher, settings: Settings) -> None:
    """Show the main menu until the launcher is cancelled."""
    editor = EditController(store, launcher, settings)
    while True:
        store.compact()
        menu = render.build_menu(store.tasks, False, settings)
        selected = launcher.display(menu.labels, MAIN_PROMPT)
        if selected is None:
            break
        entry = menu.lookup(selected)
        if entry is None:
            continue
        if entry.action == render.ACTION_ADD:
            editor.add()
        elif entry.action == render.ACTION_VIEW_COMPLETED:
            view_completed(store, editor, launcher, settings)
        elif entry.index is not None:
            editor.edit(store.tasks[entry.index])
    store.compact()


def resolve_settings(
    config_path: Path | None,
    *,
    cmd: str | None = None,
    opts: str | None = None,
    todo: Path | None = None,
    no_created_date: bool = False,
    threshold: bool = False,
) -> Settings:
    path = config_path if config_path is not None else config.default_config_path()
    settings = config.resolve_settings(path, warn=_warn_config)
    return config.apply_overrides(
        settings,
        cmd=cmd,
        opts=opts,
        todo_dir=todo.expanduser() if todo is not None else None,
        show_created_date=False if no_created_date else None,
        threshold=True if threshold else None,
    )


@app.command()
def main_cmd(
    cmd: CmdOption = None,
    opts: OptsOption = None,
    todo: TodoOption = None,
    no_created_date: NoCreatedDateOption = False,
    threshold: ThresholdOption = False,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Browse and edit the todo directory through the launcher."""
    setup_logging(verbose=verbose)

    def _inner() -> None:
        settings = resolve_settings(
            config_path,
            cmd=cmd,
            opts=opts,
            todo=todo,
            no_created_date=no_created_date,
            threshold=threshold,
        )
        try:
            storage.ensure_directory(settings.todo_dir)
        except OSError as exc:
            raise TodoError(f"Unable to create todo directory {settings.todo_dir}: {exc}") from exc
        store = TaskStore.load(settings.todo_dir)
        launcher = make_launcher(settings)
        run_menu(store, launcher, settings)
        written = store.save()
        logger.debug("Saved %d todos to %s", written, settings.todo_dir)

    _run_and_handle(_inner)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
