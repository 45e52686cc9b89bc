#!/usr/bin/env python3
"""
Filesystem checks for OCI bundles.

Mount types:
    windows  → ntfs only
    linux    → whatever the host kernel registers in /proc/filesystems,
               plus "bind"; only available with --host-specific
    other    → not checked

/proc/filesystems layout (one type per line, "nodev" marks virtual ones):
    nodev	sysfs
    nodev	proc
    	ext4

Rootfs propagation modes name the mount(2) propagation a runtime applies to
the container root; the "r" variants apply it recursively.
"""

import functools
import logging
from typing import Callable, FrozenSet, Optional

from oci_validate import utils
from oci_validate.report import CheckContext, Violation, ViolationKind

logger = logging.getLogger(__name__)

# Order is the one shown in diagnostics
ROOTFS_PROPAGATIONS = (
    "private",
    "rprivate",
    "slave",
    "rslave",
    "shared",
    "rshared",
)

WINDOWS_MOUNT_TYPES = frozenset({"ntfs"})

# Not a filesystem, but accepted as a mount type on Linux
BIND_MOUNT_TYPE = "bind"


class FilesystemError(Exception):
    """Exception raised when host filesystem types cannot be determined."""

    pass


def propagation_valid(mode: str) -> bool:
    """Empty means "runtime default"; anything else must be a known mode."""
    return mode == "" or mode in ROOTFS_PROPAGATIONS


def read_filesystem_types(path: Optional[str] = None) -> FrozenSet[str]:
    """
    Read the filesystem types registered with the host kernel.

    Args:
        path: Registry file, defaults to utils.PROC_FILESYSTEMS

    Returns:
        Set of filesystem type names

    Raises:
        FilesystemError: If the registry cannot be read
    """
    path = path or utils.PROC_FILESYSTEMS
    try:
        lines = utils.read_lines(path)
    except OSError as e:
        raise FilesystemError(f"Cannot read {path}: {e.strerror}") from e

    types = set()
    for line in lines:
        if not line:
            continue
        parts = line.split("\t")
        types.add(parts[1] if len(parts) > 1 else parts[0])

    logger.debug("Read %d filesystem types from %s", len(types), path)
    return frozenset(types)


def supported_mount_types(
    os_name: str,
    host_specific: bool,
    warn: Optional[Callable[[str], None]] = None,
) -> Optional[FrozenSet[str]]:
    """
    Determine the mount types allowed for a target OS.

    Args:
        os_name: Target OS from platform.os
        host_specific: Whether the host may be inspected
        warn: Optional callback receiving advisory messages

    Returns:
        Allowed types, or None when mount types cannot be checked

    Raises:
        FilesystemError: If the host registry cannot be read
    """
    if os_name == "windows":
        return WINDOWS_MOUNT_TYPES

    if os_name != "linux":
        if warn is not None:
            warn(f"{os_name} is not supported to check mount type")
        return None

    if not host_specific:
        if warn is not None:
            warn("Checking linux mount types without --host-specific is not supported yet")
        return None

    return read_filesystem_types() | {BIND_MOUNT_TYPE}


def check_mounts(ctx: CheckContext) -> Optional[Violation]:
    """Check every mount type is supported on the target OS."""
    warn = functools.partial(ctx.warn, logger=logger)

    try:
        supported = supported_mount_types(
            ctx.config.platform.os, ctx.host_specific, warn
        )
    except FilesystemError as e:
        return Violation(ViolationKind.MOUNT, str(e))

    if supported is None:
        return None

    for mount in ctx.config.mounts:
        if mount.type not in supported:
            return Violation(
                ViolationKind.MOUNT, f"Unsupported mount type {mount.type!r}"
            )

    return None
