# wsh - Line-Oriented Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
wsh core package.

A line-oriented command shell: variable substitution, single-clause I/O
redirection, a fixed set of builtins, external commands located on PATH,
and a bounded command history.
"""
from .kernel import Shell as Shell  # noqa: F401 (re-export)
