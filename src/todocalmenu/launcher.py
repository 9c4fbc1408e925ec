"""Launcher bridge: show a list, get back one line or a cancellation.

Two backends share one interface. ``Launcher`` pipes the menu through an
external dmenu-compatible program; ``InquirerLauncher`` draws the same menu in
the terminal with InquirerPy.
"""

from __future__ import annotations

import logging
from pathlib import Path
import shlex
import subprocess
import sys
from typing import Protocol, Sequence

from .config import Settings
from .models import LauncherError

logger = logging.getLogger(__name__)

CANCEL_EXIT_CODE = 1
INQUIRER_CMD = "inquirer"

LAUNCHER_ARGS: dict[str, list[str]] = {
    "dmenu": ["-i", "-p"],
    "rofi": ["-dmenu", "-i", "-p"],
    "wofi": ["--dmenu", "-i", "-p"],
}


class MenuLauncher(Protocol):
    def display(self, lines: Sequence[str], prompt: str, *, menu: bool = True) -> str | None:
        """Return the selected (or typed) line, or None when cancelled.

        ``menu=False`` marks a free-text prompt whose ``lines`` are at most a
        seed value rather than choices.
        """


class Launcher:
    def __init__(self, cmd: str = "dmenu", opts: str = "") -> None:
        self.cmd = cmd
        self.opts = shlex.split(opts) if opts else []

    def args(self, prompt: str) -> list[str]:
        base = LAUNCHER_ARGS.get(Path(self.cmd).name, LAUNCHER_ARGS["dmenu"])
        return [self.cmd, *base, prompt, *self.opts]

    def display(self, lines: Sequence[str], prompt: str, *, menu: bool = True) -> str | None:
        menu = "".join(f"{line}\n" for line in lines)
        argv = self.args(prompt)
        try:
            result = subprocess.run(
                argv,
                input=menu,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise LauncherError(f"Launcher not found: {self.cmd}") from exc
        except OSError as exc:
            raise LauncherError(f"Unable to run {self.cmd}: {exc}") from exc

        if result.returncode != 0:
            diagnostics = (result.stderr or "").strip()
            if diagnostics:
                raise LauncherError(diagnostics)
            if result.returncode == CANCEL_EXIT_CODE:
                logger.debug("%s cancelled at prompt %r", self.cmd, prompt)
                return None
            raise LauncherError(f"{self.cmd} exited with code {result.returncode}")
        return result.stdout.rstrip("\n")


def _ensure_tty() -> None:
    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        raise LauncherError("interactive selector requires a TTY")


def _inquirer():
    try:
        from InquirerPy import inquirer
    except Exception as exc:  # pragma: no cover - environment dependent
        raise LauncherError("InquirerPy unavailable") from exc
    return inquirer


class InquirerLauncher:
    """Terminal launcher: fuzzy select for menus, free text for prompts."""

    def display(self, lines: Sequence[str], prompt: str, *, menu: bool = True) -> str | None:
        _ensure_tty()
        inquirer = _inquirer()
        choices = [line for line in lines if line]
        try:
            if not menu:
                result = inquirer.text(
                    message=prompt,
                    default=choices[0] if choices else "",
                    raise_keyboard_interrupt=True,
                ).execute()
            else:
                result = inquirer.fuzzy(
                    message=prompt,
                    choices=choices,
                    vi_mode=False,
                    mandatory=False,
                    raise_keyboard_interrupt=True,
                ).execute()
        except KeyboardInterrupt:
            return None
        except EOFError:
            return None
        except Exception as exc:
            raise LauncherError("selector runtime failed") from exc

        if result is None:
            return None
        return str(result)


def make_launcher(settings: Settings) -> MenuLauncher:
    if settings.cmd == INQUIRER_CMD:
        return InquirerLauncher()
    return Launcher(settings.cmd, settings.opts)
