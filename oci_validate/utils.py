#!/usr/bin/env python3
"""
Utility functions for oci-validate.

Provides:
- Environment-driven settings
- Host filesystem probes used by the host-specific checks

Settings
========

OCI_VALIDATE_PROC_FILESYSTEMS
    File listing the filesystem types registered with the kernel.
    Defaults to /proc/filesystems.

OCI_VALIDATE_LOG_LEVEL
    Default log level of the command line tool (debug, info, warning,
    error). Defaults to warning.
"""

import os
import stat
from typing import List

# Registry of filesystem types known to the running kernel
if os.environ.get("OCI_VALIDATE_PROC_FILESYSTEMS"):
    PROC_FILESYSTEMS = os.environ["OCI_VALIDATE_PROC_FILESYSTEMS"]
else:
    PROC_FILESYSTEMS = "/proc/filesystems"

LOG_LEVELS = ("debug", "info", "warning", "error")

LOG_LEVEL = os.environ.get("OCI_VALIDATE_LOG_LEVEL", "warning").lower()
if LOG_LEVEL not in LOG_LEVELS:
    LOG_LEVEL = "warning"

# Any of user/group/other execute
EXECUTE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def read_lines(path: str) -> List[str]:
    """
    Read a text file into lines without trailing newlines.

    Raises:
        OSError: If the file cannot be opened or read
    """
    with open(path, "r") as f:
        return [line.rstrip("\n") for line in f]


def is_executable(path: str) -> bool:
    """
    Check whether a path has at least one execute permission bit.

    Raises:
        OSError: If the path cannot be stat'ed
    """
    return bool(os.stat(path).st_mode & EXECUTE_BITS)
