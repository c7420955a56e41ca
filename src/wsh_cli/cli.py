# wsh - Line-Oriented Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
wsh CLI entry point and REPL loop.

Design:
- CLI owns process startup and mode selection (interactive vs batch).
- Shell is the session engine (config + environment + executor injected).
- UI is a terminal-friendly PromptSession, used only on a real terminal.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterable

from . import config
from .executor import ForkExecExecutor
from .kernel import Shell, write_crash_log
from .ui import PromptToolkitUI
from .utils import STDERR_FILENO, STDOUT_FILENO, write_fd, write_line
from .variables import OSEnvironment

USAGE = "Usage: wsh [script_file]"


def _dispatch(shell: Shell, line: str) -> None:
    """Hand one line to the shell, containing unexpected failures."""
    try:
        shell.handle_line(line)
    except MemoryError:
        # Internal state can no longer be trusted
        raise
    except Exception as e:
        write_crash_log(e, raw_line=line.strip())
        write_line(
            STDERR_FILENO,
            f"[ERROR] Unhandled exception: {type(e).__name__}: {e}",
        )
        shell.last_status = 1


def run_lines(shell: Shell, lines: Iterable[str]) -> int:
    """Run lines until input ends or ``exit`` stops the shell."""
    for line in lines:
        if not shell.running:
            break
        _dispatch(shell, line)
    return shell.last_status


def run_batch(shell: Shell, script_path: str) -> int:
    """Run a script file line by line, without a prompt."""
    with open(script_path, encoding="utf-8", errors="replace") as f:
        return run_lines(shell, f)


def run_repl(
    shell: Shell,
    ui: PromptToolkitUI | None = None,
    input_fn: Callable[[str], str] = input,
    color: bool = True,
) -> int:
    """Run the interactive wsh loop.

    Returns:
        Status of the last executed command
    """
    while shell.running:
        try:
            prompt = shell.prompt(color=color)
            if ui is not None:
                line = ui.read(prompt)
            else:
                line = input_fn(prompt + " ")
        except KeyboardInterrupt:
            # Discard the partial line
            if ui is None:
                write_fd(STDOUT_FILENO, "\n")
            continue
        except EOFError:
            break

        _dispatch(shell, line or "")

    return shell.last_status


def build_shell() -> Shell:
    """Wire configuration, environment and executor into a Shell."""
    cfg = config.load_system_config()
    env = OSEnvironment()

    initial_path = cfg.get_path("execution.initial_path")
    if initial_path:
        env.set("PATH", str(initial_path))

    executor = ForkExecExecutor(file_mode=config.get_file_mode(cfg))
    return Shell(config=cfg, env=env, executor=executor)


def run(args: list[str]) -> int:
    """Start wsh with command-line arguments (program name excluded)."""
    if len(args) > 1:
        write_line(STDERR_FILENO, USAGE)
        return 1

    shell = build_shell()

    if args:
        try:
            return run_batch(shell, args[0])
        except OSError as e:
            write_line(STDERR_FILENO, f"wsh: {args[0]}: {e.strerror}")
            return 1

    # Plain input() when not on a terminal or if explicitly requested
    if os.environ.get("WSH_LEGACY_UI") == "1" or not sys.stdin.isatty():
        return run_repl(shell, color=sys.stdout.isatty())

    return run_repl(shell, ui=PromptToolkitUI(shell))


def main() -> None:
    """Main entry point for wsh CLI."""
    sys.exit(run(sys.argv[1:]))
