# wsh - Line-Oriented Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Descriptor-level I/O redirection.

``apply_redirection`` opens the target, saves a duplicate of every
descriptor it is about to rewire, and ``dup2``s the target over them.
``restore_redirection`` puts the saved duplicates back and closes them.

Both the builtin path (current process) and the child side of an external
command use the same code. ``redirected()`` wraps the pair so restoration
happens on every exit path, and nested redirections (a history replay
inside a redirected ``history N``) unwind in order.
"""

from __future__ import annotations

import errno
import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from .parser import Redirection, RedirectType
from .utils import STDERR_FILENO, flush_std_streams

DEFAULT_FILE_MODE = 0o644


class RedirectionError(OSError):
    """Opening or wiring a redirection target failed."""


@dataclass
class SavedDescriptors:
    """Descriptors rewired by a redirection.

    Each entry is ``(descriptor, duplicate)``; a duplicate of None means
    the descriptor was not open before and is closed again on restore.
    """

    entries: list[tuple[int, int | None]] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.entries)


def _open_flags(redirection: Redirection) -> int:
    if redirection.type is RedirectType.INPUT:
        return os.O_RDONLY
    flags = os.O_WRONLY | os.O_CREAT
    flags |= os.O_APPEND if redirection.appends else os.O_TRUNC
    return flags


def _targets(redirection: Redirection) -> list[int]:
    targets = [redirection.descriptor]
    if redirection.includes_stderr and redirection.descriptor != STDERR_FILENO:
        targets.append(STDERR_FILENO)
    return targets


def _save(fd: int) -> int | None:
    try:
        return os.dup(fd)
    except OSError as e:
        if e.errno == errno.EBADF:
            return None
        raise


def restore_redirection(saved: SavedDescriptors) -> None:
    """Restore descriptors saved by ``apply_redirection``.

    Entries are restored in reverse order. Every entry is restored and its
    duplicate closed even if an earlier one fails; the first failure is
    raised afterwards. Safe to call on an empty or partially filled
    ``SavedDescriptors``.
    """
    flush_std_streams()
    first_error: OSError | None = None
    while saved.entries:
        fd, duplicate = saved.entries.pop()
        if duplicate is None:
            try:
                os.close(fd)
            except OSError:
                # Already closed
                pass
            continue

        try:
            os.dup2(duplicate, fd)
        except OSError as e:
            if first_error is None:
                first_error = e
        finally:
            os.close(duplicate)

    if first_error is not None:
        raise first_error


def apply_redirection(
    redirection: Redirection, file_mode: int = DEFAULT_FILE_MODE
) -> SavedDescriptors:
    """Rewire descriptors for a redirection.

    Args:
        redirection: Parsed redirection clause
        file_mode: Permission bits for files created by output redirection

    Returns:
        SavedDescriptors to hand to ``restore_redirection``

    Raises:
        RedirectionError: If the target cannot be opened or a descriptor
            cannot be duplicated; nothing stays applied
    """
    saved = SavedDescriptors()
    if not redirection.active:
        return saved

    assert redirection.target is not None
    target = redirection.target
    targets = _targets(redirection)

    flush_std_streams()
    try:
        for fd in targets:
            saved.entries.append((fd, _save(fd)))
        opened = os.open(target, _open_flags(redirection), file_mode)
    except OSError as e:
        restore_redirection(saved)
        raise RedirectionError(e.errno, e.strerror, target) from e

    try:
        for fd in targets:
            if fd != opened:
                os.dup2(opened, fd)
    except OSError as e:
        restore_redirection(saved)
        raise RedirectionError(e.errno, e.strerror, target) from e
    finally:
        # A closed target slot may have received the file itself
        if opened not in targets:
            os.close(opened)

    return saved


@contextmanager
def redirected(
    redirection: Redirection, file_mode: int = DEFAULT_FILE_MODE
) -> Iterator[SavedDescriptors]:
    """Apply a redirection for the duration of a ``with`` block."""
    saved = apply_redirection(redirection, file_mode)
    try:
        yield saved
    finally:
        restore_redirection(saved)
