# wsh - Line-Oriented Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
wsh kernel.

Core implementation of wsh:
- line handling (trim, skip comments, parse, classify)
- builtin execution under descriptor redirection
- external command execution via the injected Executor
- bounded history + replay

Important boundary:
- Kernel does not load YAML; it consumes the injected ConfigModel.
- Kernel does not touch the process environment directly; it goes through the Environment.
"""

from __future__ import annotations

import os
import traceback
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from . import config as cfg_module
from .builtins import Builtin, classify
from .config import ANSI_COLORS
from .executor import DEFAULT_SEARCH_PATH, ExecutionError
from .history import DEFAULT_HISTORY_SIZE, History
from .interfaces import ConfigModel, Environment, Executor
from .parser import (
    OPERATOR_SCAN_ORDER,
    ParsedCommand,
    RedirectionSyntaxError,
    parse_line,
)
from .redirect import DEFAULT_FILE_MODE, RedirectionError, redirected
from .utils import (
    STDERR_FILENO,
    STDOUT_FILENO,
    is_skippable,
    split_assignment,
    write_line,
)
from .variables import VariableStore


def write_crash_log(error: Exception, raw_line: str = "") -> None:
    """Write an entry to the crash log.

    Logs unhandled exceptions raised while handling a line.
    Only creates the log directory when actually needed.
    Appends to crash.log (never overwrites).
    """
    try:
        data_root = cfg_module.get_data_root()
        logs_dir = data_root / "wsh" / "logs"
        logs_dir.mkdir(parents=True, exist_ok=True)

        crash_log_path = logs_dir / "crash.log"

        lines = [f"{datetime.now().isoformat()}"]
        if raw_line:
            lines.append(f"line={raw_line}")
        lines.append(f"error={type(error).__name__}: {error}")
        lines.append("traceback:")
        lines.append(traceback.format_exc())
        lines.append("----")

        with crash_log_path.open("a", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")

    except Exception:
        # If we can't write the crash log, fail silently
        # (we're already in an error state)
        pass


@dataclass
class Shell:
    """wsh session engine."""

    config: ConfigModel
    env: Environment
    executor: Executor

    variables: VariableStore = field(default_factory=VariableStore)
    history: History = field(default_factory=History)
    last_status: int = 0
    running: bool = True

    # Derived from config
    fallback_path: str = DEFAULT_SEARCH_PATH
    scan_order: tuple[str, ...] = OPERATOR_SCAN_ORDER
    file_mode: int = DEFAULT_FILE_MODE

    _handlers: dict[Builtin, Callable[[list[str]], int]] = field(
        default_factory=dict, repr=False
    )

    def __post_init__(self) -> None:
        hist_cfg = self.config.history
        self.history = History(
            int(hist_cfg.get("capacity", DEFAULT_HISTORY_SIZE))
        )

        exec_cfg = self.config.execution
        self.fallback_path = str(
            exec_cfg.get("fallback_path") or DEFAULT_SEARCH_PATH
        )
        self.file_mode = cfg_module.get_file_mode(
            self.config, DEFAULT_FILE_MODE
        )

        parser_cfg = self.config.parser
        scan_order = parser_cfg.get("operator_scan_order")
        if scan_order:
            self.scan_order = tuple(str(op) for op in scan_order)

        self._handlers = {
            Builtin.EXIT: self._handle_exit,
            Builtin.CD: self._handle_cd,
            Builtin.EXPORT: self._handle_export,
            Builtin.LOCAL: self._handle_local,
            Builtin.VARS: self._handle_vars,
            Builtin.HISTORY: self._handle_history,
            Builtin.LS: self._handle_ls,
        }

    # -----------------------
    # Session
    # -----------------------

    def prompt(self, color: bool = True) -> str:
        """Return the prompt string, optionally with ANSI colors."""
        sys_cfg = self.config.system
        text = str(sys_cfg.get("prompt", "wsh>"))
        if not color:
            return text

        color_name = sys_cfg.get("prompt_color", "reset")
        prompt_color = ANSI_COLORS.get(color_name, ANSI_COLORS["reset"])
        return f"{prompt_color}{text}{ANSI_COLORS['reset']}"

    def lookup(self, name: str) -> str:
        """Resolve a variable: environment first, then local variables."""
        value = self.env.get(name)
        if value is None:
            value = self.variables.get(name)
        return value if value is not None else ""

    # -----------------------
    # Output
    # -----------------------

    def _print(self, text: str) -> None:
        write_line(STDOUT_FILENO, text)

    def _error(self, text: str) -> None:
        write_line(STDERR_FILENO, text)

    # -----------------------
    # Command handling
    # -----------------------

    def handle_line(self, line: str, replay: bool = False) -> int:
        """Handle a single input line.

        A line made only of redirections (``>out.txt``) runs nothing and
        returns 0. Its target is not opened, so the file is neither
        created nor truncated.

        Args:
            line: Raw input line
            replay: True when re-executing a history entry; replayed
                lines are not recorded again

        Returns:
            Status of the line (also stored in ``last_status``)
        """
        stripped = line.strip()
        if is_skippable(stripped):
            return self.last_status

        try:
            command = parse_line(stripped, self.lookup, self.scan_order)
        except RedirectionSyntaxError as e:
            self._error(f"wsh: {e}")
            return self._set_status(1)

        if command.name is None:
            return self._set_status(0)

        kind = classify(command.name)
        if kind is None:
            status = self._run_external(command, stripped, replay)
        else:
            status = self._run_builtin(kind, command)
        return self._set_status(status)

    def _set_status(self, status: int) -> int:
        self.last_status = status
        return status

    def _run_external(
        self, command: ParsedCommand, raw_line: str, replay: bool
    ) -> int:
        name = command.args[0]
        search_path = self.env.get("PATH") or self.fallback_path
        path = self.executor.resolve(name, search_path)
        if path is None:
            self._error(f"wsh: command not found: {name}")
            return 1

        try:
            status = self.executor.run(
                path, command.args, command.redirection, self.env.snapshot()
            )
        except ExecutionError as e:
            self._error(f"wsh: {e.strerror}")
            return 1

        if not replay:
            self.history.add(raw_line)
        return status

    def _run_builtin(self, kind: Builtin, command: ParsedCommand) -> int:
        handler = self._handlers[kind]
        try:
            with redirected(command.redirection, self.file_mode):
                try:
                    return handler(command.args[1:])
                except OSError as e:
                    self._error(f"{kind.value}: {e.strerror}")
                    return 1
        except RedirectionError as e:
            self._error(f"wsh: {e.filename}: {e.strerror}")
            return 1

    # -----------------------
    # Builtins
    # -----------------------

    def _handle_exit(self, args: list[str]) -> int:
        if args:
            self._error("exit: too many arguments")
            return 1

        self.variables.clear()
        self.history.clear()
        self.running = False
        return self.last_status

    def _handle_cd(self, args: list[str]) -> int:
        if len(args) > 1:
            self._error("cd: too many arguments")
            return 1

        if args:
            target = args[0]
        else:
            home = self.env.get("HOME")
            if not home:
                self._error("cd: HOME not set")
                return 1
            target = home

        try:
            os.chdir(target)
        except OSError as e:
            self._error(f"cd: {target}: {e.strerror}")
            return 1
        return 0

    def _handle_export(self, args: list[str]) -> int:
        if len(args) != 1:
            self._error("export: usage: export VAR=value")
            return 1

        pair = split_assignment(args[0])
        if pair is None:
            self._error(f"export: invalid argument: {args[0]}")
            return 1

        name, value = pair
        try:
            self.env.set(name, value)
        except ValueError as e:
            self._error(f"export: {e}")
            return 1
        return 0

    def _handle_local(self, args: list[str]) -> int:
        if len(args) != 1:
            self._error("local: usage: local VAR=value")
            return 1

        pair = split_assignment(args[0])
        if pair is None:
            self._error(f"local: invalid argument: {args[0]}")
            return 1

        name, value = pair
        if value.startswith("$"):
            value = self.lookup(value[1:])
        self.variables.set(name, value)
        return 0

    def _handle_vars(self, args: list[str]) -> int:
        for var in self.variables:
            self._print(f"{var.name}={var.value}")
        return 0

    def _handle_history(self, args: list[str]) -> int:
        if len(args) > 2:
            self._error("history: too many arguments")
            return 1

        if not args:
            for idx, line in enumerate(self.history.newest_first(), start=1):
                self._print(f"{idx}) {line}")
            return 0

        if len(args) == 2:
            if args[0] != "set":
                self._error("history: usage: history [N | set N]")
                return 1
            try:
                size = int(args[1])
            except ValueError:
                size = 0
            if size <= 0:
                self._error(f"history: set: invalid size: {args[1]}")
                return 1
            self.history.resize(size)
            return 0

        try:
            line = self.history.get(int(args[0]))
        except (ValueError, IndexError):
            self._error(f"history: {args[0]}: event not found")
            return 1

        self._print(line)
        return self.handle_line(line, replay=True)

    def _handle_ls(self, args: list[str]) -> int:
        try:
            names = sorted(
                name for name in os.listdir(".") if not name.startswith(".")
            )
        except OSError as e:
            self._error(f"ls: {e.strerror}")
            return 1

        for name in names:
            self._print(name)
        return 0
