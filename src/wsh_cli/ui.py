# wsh - Line-Oriented Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
prompt_toolkit line editor for interactive wsh sessions.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from typing import TYPE_CHECKING

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.styles import Style

from .builtins import BUILTIN_NAMES

if TYPE_CHECKING:
    from .kernel import Shell  # pragma: no cover


# ----------------------------
# Config helpers (come from config.py facade via shell.config.get_path)
# ----------------------------


def _cfg_get_path(shell: Shell | None, path: str, default):
    if shell is None:
        return default
    cfg = getattr(shell, "config", None)
    if cfg is None or not hasattr(cfg, "get_path"):
        return default
    try:
        return cfg.get_path(path, default)
    except Exception:
        return default


def _cfg_bool(shell: Shell | None, path: str, default: bool) -> bool:
    return bool(_cfg_get_path(shell, path, default))


def _cfg_dict(shell: Shell | None, path: str, default: dict) -> dict:
    val = _cfg_get_path(shell, path, default)
    return val if isinstance(val, dict) else default


# ----------------------------
# Theme / Style
# ----------------------------


def _default_style_dict() -> dict[str, str]:
    return {
        "completion-menu": "bg:#111111 #d0d0d0",
        "completion-menu.completion": "bg:#111111 #d0d0d0",
        "completion-menu.completion.current": "bg:#303030 #ffffff bold",
        "completion-menu.meta.completion": "bg:#111111 #808080",
        "completion-menu.meta.completion.current": "bg:#303030 #a0a0a0",
        "bottom-toolbar": "bg:#0b0b0b #d0d0d0",
        "wsh.toolbar.ok": "bg:#0b0b0b #5fd75f",
        "wsh.toolbar.fail": "bg:#0b0b0b #d75f5f",
        "wsh.toolbar.info": "bg:#0b0b0b #a0a0a0",
    }


def _build_style(shell: Shell | None) -> Style:
    base = _default_style_dict()
    overrides = _cfg_dict(shell, "ui.theme.style", {})
    # only keep string->string
    for k, v in list(overrides.items()):
        if isinstance(k, str) and isinstance(v, str):
            base[k] = v
    return Style.from_dict(base)


# ----------------------------
# Completions
# ----------------------------


class ExecutableCompleter(Completer):
    """Completes builtin names and executables on the shell's PATH."""

    def __init__(self, shell: Shell | None = None) -> None:
        self.shell = shell
        self._cache: set[str] | None = None
        self._cache_path: str | None = None

    def _search_path(self) -> str:
        if self.shell is None:
            return os.environ.get("PATH", "")
        return self.shell.env.get("PATH") or self.shell.fallback_path

    def _load(self) -> set[str]:
        path_val = self._search_path()
        if self._cache is not None and self._cache_path == path_val:
            return self._cache

        exes: set[str] = set()
        for p in path_val.split(":"):
            if not p:
                continue
            try:
                for name in os.listdir(p):
                    full = os.path.join(p, name)
                    if os.path.isfile(full) and os.access(full, os.X_OK):
                        exes.add(name)
            except OSError:
                continue

        self._cache = exes
        self._cache_path = path_val
        return exes

    def get_completions(
        self, document, complete_event
    ) -> Iterable[Completion]:
        token = (document.text_before_cursor or "").lstrip()
        if not token or " " in token:
            return

        for name in BUILTIN_NAMES:
            if name.startswith(token):
                yield Completion(
                    name, start_position=-len(token), display_meta="builtin"
                )
        for exe in sorted(self._load() - set(BUILTIN_NAMES)):
            if exe.startswith(token):
                yield Completion(
                    exe, start_position=-len(token), display_meta="exe"
                )


class PathCompleter(Completer):
    """Filesystem path completion for argument tokens."""

    def _current_arg_token(self, text: str) -> str | None:
        stripped = text.lstrip()
        # Still on the command token
        if " " not in stripped:
            return None
        if stripped.endswith(" "):
            return ""
        return stripped.split()[-1]

    def _list_dir(self, directory: str) -> list[str]:
        try:
            return sorted(os.listdir(directory))
        except OSError:
            return []

    def get_completions(
        self, document, complete_event
    ) -> Iterable[Completion]:
        token = self._current_arg_token(document.text_before_cursor or "")
        if token is None or token.startswith("$"):
            return

        # Complete the path part of "<file", ">>file", "2>file"
        path_part = token.lstrip("0123456789&<>")
        replace_len = len(path_part)

        if path_part.endswith("/"):
            base_dir = path_part
            prefix = ""
            insert_prefix = path_part
        else:
            base_dir = os.path.dirname(path_part) or "."
            prefix = os.path.basename(path_part)
            insert_prefix = os.path.dirname(path_part)
            if insert_prefix and not insert_prefix.endswith("/"):
                insert_prefix += "/"

        for name in self._list_dir(base_dir):
            if not name.startswith(prefix):
                continue
            if name.startswith(".") and not prefix.startswith("."):
                continue
            full = os.path.join(base_dir, name)
            is_dir = os.path.isdir(full)
            ins = f"{insert_prefix}{name}" + ("/" if is_dir else "")
            yield Completion(
                ins,
                start_position=-replace_len,
                display_meta="dir" if is_dir else "file",
            )


class ShellCompleter(Completer):
    def __init__(self, shell: Shell | None) -> None:
        self._exe = ExecutableCompleter(shell)
        self._path = PathCompleter()

    def get_completions(
        self, document, complete_event
    ) -> Iterable[Completion]:
        yield from self._exe.get_completions(document, complete_event)
        yield from self._path.get_completions(document, complete_event)


# ----------------------------
# PromptSession UI
# ----------------------------


class PromptToolkitUI:
    """
    Terminal-friendly line editor for interactive mode:
      - PromptSession with builtin/executable/path completion
      - bottom toolbar with the last status, working directory and
        history fill
    Command output does not go through this class; the shell writes to
    its descriptors directly.
    """

    def __init__(self, shell: Shell | None = None) -> None:
        self.shell = shell
        self.session: PromptSession[str] | None = None
        self._style = _build_style(shell)

    # ---------- toolbar rendering ----------

    def _bottom_toolbar(self):
        if self.shell is None:
            return ""
        if not _cfg_bool(self.shell, "ui.toolbar.enabled", True):
            return ""

        status = self.shell.last_status
        status_style = (
            "class:wsh.toolbar.ok" if status == 0
            else "class:wsh.toolbar.fail"
        )
        try:
            cwd = os.getcwd()
        except OSError:
            cwd = "?"
        history = self.shell.history

        return [
            (status_style, f" [{status}] "),
            ("class:wsh.toolbar.info", f" {cwd} "),
            (
                "class:wsh.toolbar.info",
                f" history {len(history)}/{history.capacity} ",
            ),
        ]

    # ---------- session ----------

    def _ensure_session(self) -> None:
        if self.session is not None:
            return

        self.session = PromptSession(
            key_bindings=self.build_key_bindings(),
            completer=ShellCompleter(self.shell),
            complete_while_typing=False,
            style=self._style,
            bottom_toolbar=self._bottom_toolbar,
        )

    # ---------- public API ----------

    def read(self, prompt: str) -> str:
        self._ensure_session()
        assert self.session is not None
        # prompt contains ANSI from shell.prompt(), so preserve it
        return self.session.prompt(ANSI(prompt + " "))

    # ---------- keybindings ----------

    def build_key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add("c-l")
        def _(event):
            try:
                event.app.renderer.clear()
            except Exception:
                pass
            event.app.invalidate()

        return kb
