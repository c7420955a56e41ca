# wsh - Line-Oriented Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Command line tokenizer.

A trimmed line is split on whitespace. Each token is one of:
- ``$NAME``: replaced by the variable's value (empty if unset); the value is
  used literally and never re-scanned
- a redirection: ``[N]<file``, ``[N]>file``, ``[N]>>file``, ``[N]&>file``,
  ``[N]&>>file``; an operator with no attached file takes the next token
- a token with an operator anywhere else (``a>b``): dropped, and any
  earlier redirection on the line is cancelled
- anything else: a literal argument

Two separate steps look at a redirection token. The operator substring scan
(``OPERATOR_SCAN_ORDER``) locates where the target path starts. The type is
classified from the head of the token, after the optional descriptor digits,
so ``&>`` forms are typed correctly even though ``>`` is found first by the
scan.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum, auto

from .utils import STDIN_FILENO, STDOUT_FILENO

OPERATOR_SCAN_ORDER: tuple[str, ...] = (">>", ">", "&>>", "&>", "<")


class RedirectType(Enum):
    NONE = auto()
    INPUT = auto()
    OUTPUT = auto()
    OUTPUT_APPEND = auto()
    OUTPUT_ERR = auto()
    OUTPUT_ERR_APPEND = auto()


# Longest operators first; matched against the head of the token
_CLASSIFY_ORDER: tuple[tuple[str, RedirectType], ...] = (
    ("&>>", RedirectType.OUTPUT_ERR_APPEND),
    ("&>", RedirectType.OUTPUT_ERR),
    (">>", RedirectType.OUTPUT_APPEND),
    (">", RedirectType.OUTPUT),
    ("<", RedirectType.INPUT),
)


@dataclass(frozen=True)
class Redirection:
    """Parsed I/O rerouting request for one line."""

    type: RedirectType = RedirectType.NONE
    descriptor: int = STDOUT_FILENO
    target: str | None = None

    @property
    def active(self) -> bool:
        return self.type is not RedirectType.NONE and bool(self.target)

    @property
    def appends(self) -> bool:
        return self.type in (
            RedirectType.OUTPUT_APPEND, RedirectType.OUTPUT_ERR_APPEND
        )

    @property
    def includes_stderr(self) -> bool:
        return self.type in (
            RedirectType.OUTPUT_ERR, RedirectType.OUTPUT_ERR_APPEND
        )


@dataclass
class ParsedCommand:
    args: list[str] = field(default_factory=list)
    redirection: Redirection = field(default_factory=Redirection)

    @property
    def name(self) -> str | None:
        return self.args[0] if self.args else None


class RedirectionSyntaxError(ValueError):
    """Redirection operator without a target path."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"syntax error near unexpected token '{token}'")


def classify_operator(token: str) -> tuple[RedirectType, int | None]:
    """Classify a token by the operator at its head.

    A leading digit run is an explicit descriptor number.

    Returns:
        (type, descriptor) where descriptor is None if not given
    """
    digits_end = 0
    while digits_end < len(token) and token[digits_end].isdigit():
        digits_end += 1

    rest = token[digits_end:]
    for operator, kind in _CLASSIFY_ORDER:
        if rest.startswith(operator):
            descriptor = int(token[:digits_end]) if digits_end else None
            return kind, descriptor
    return RedirectType.NONE, None


def find_operator(
    token: str, scan_order: Sequence[str] = OPERATOR_SCAN_ORDER
) -> tuple[str, int] | None:
    """Find the first operator of ``scan_order`` occurring in ``token``.

    Returns:
        (operator, index) or None
    """
    for operator in scan_order:
        index = token.find(operator)
        if index >= 0:
            return operator, index
    return None


def parse_line(
    line: str,
    resolve: Callable[[str], str],
    scan_order: Sequence[str] = OPERATOR_SCAN_ORDER,
) -> ParsedCommand:
    """Tokenize a command line.

    When several redirections appear, the last one wins.

    Args:
        line: Trimmed command line
        resolve: Maps a variable name to its value ('' if unset)
        scan_order: Operator substrings in the order they are searched

    Returns:
        ParsedCommand with arguments and at most one redirection

    Raises:
        RedirectionSyntaxError: If a redirection has no target path
    """
    tokens = line.split()
    command = ParsedCommand()

    i = 0
    while i < len(tokens):
        token = tokens[i]
        i += 1

        if token.startswith("$"):
            command.args.append(resolve(token[1:]))
            continue

        found = find_operator(token, scan_order)
        if found is None:
            command.args.append(token)
            continue

        operator, index = found
        target = token[index + len(operator):]
        if not target and i < len(tokens):
            target = tokens[i]
            i += 1
        if not target:
            raise RedirectionSyntaxError(token)

        # Operator tokens never become arguments
        kind, descriptor = classify_operator(token)
        if kind is RedirectType.NONE:
            command.redirection = Redirection()
            continue

        if descriptor is None:
            descriptor = (
                STDIN_FILENO if kind is RedirectType.INPUT else STDOUT_FILENO
            )
        command.redirection = Redirection(kind, descriptor, target)

    return command
