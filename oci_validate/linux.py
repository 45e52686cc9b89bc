#!/usr/bin/env python3
"""
Linux-specific checks for OCI bundles.

Rules enforced on the "linux" section:
- at most 5 UID and 5 GID mappings (kernel limit for /proc/<pid>/uid_map)
- namespace types must be known
- net.* sysctls need a new network namespace
- fs.mqueue.* sysctls need new IPC and mount namespaces
- a hostname on a Linux target needs a new UTS namespace
- devices must have a known type and consistent major/minor numbers
- rootfsPropagation must be empty or a known mode
- a seccomp policy, if given, must be valid
"""

import logging
from types import MappingProxyType
from typing import Optional

from oci_validate.filesystem import ROOTFS_PROPAGATIONS, propagation_valid
from oci_validate.namespaces import (
    IPC_NAMESPACE,
    MOUNT_NAMESPACE,
    NETWORK_NAMESPACE,
    UTS_NAMESPACE,
    namespace_valid,
    new_namespaces,
)
from oci_validate.oci import OCIDevice
from oci_validate.report import CheckContext, Violation, ViolationKind
from oci_validate.seccomp import check_seccomp

logger = logging.getLogger(__name__)

# Linux kernel restriction on the number of lines in uid_map/gid_map
MAX_ID_MAPPINGS = 5

DEVICE_TYPES = MappingProxyType(
    {
        "b": "block",
        "c": "character",
        "u": "unbuffered character",
        "p": "FIFO",
    }
)


def device_valid(device: OCIDevice) -> bool:
    """
    Check a device entry.

    Unbuffered character devices need positive major and minor numbers;
    FIFOs must have both set to zero. Block and character devices carry
    no constraint beyond their type.
    """
    if device.type not in DEVICE_TYPES:
        return False
    if device.type == "u":
        return device.major > 0 and device.minor > 0
    if device.type == "p":
        return device.major == 0 and device.minor == 0
    return True


def check_linux(ctx: CheckContext) -> Optional[Violation]:
    """Check the linux section of the configuration."""
    config = ctx.config
    linux = config.linux

    if len(linux.uidMappings) > MAX_ID_MAPPINGS:
        return Violation(
            ViolationKind.LINUX,
            f"Only {MAX_ID_MAPPINGS} UID mappings are allowed (linux kernel restriction).",
        )
    if len(linux.gidMappings) > MAX_ID_MAPPINGS:
        return Violation(
            ViolationKind.LINUX,
            f"Only {MAX_ID_MAPPINGS} GID mappings are allowed (linux kernel restriction).",
        )

    for ns in linux.namespaces:
        if not namespace_valid(ns):
            return Violation(ViolationKind.LINUX, f"namespace {ns.type!r} is invalid.")

    created = new_namespaces(linux.namespaces)
    logger.debug("Namespaces to create: %s", ", ".join(sorted(created)) or "none")

    for key in linux.sysctl:
        if key.startswith("net.") and NETWORK_NAMESPACE not in created:
            return Violation(
                ViolationKind.LINUX,
                f"Sysctl {key} requires a new Network namespace to be specified as well",
            )
        if key.startswith("fs.mqueue."):
            if MOUNT_NAMESPACE not in created or IPC_NAMESPACE not in created:
                return Violation(
                    ViolationKind.LINUX,
                    f"Sysctl {key} requires a new IPC namespace and Mount "
                    "namespace to be specified as well",
                )

    if config.platform.os == "linux" and config.hostname and UTS_NAMESPACE not in created:
        return Violation(
            ViolationKind.LINUX,
            "On Linux, hostname requires a new UTS namespace to be specified as well",
        )

    for device in linux.devices:
        if not device_valid(device):
            return Violation(
                ViolationKind.LINUX,
                f"device {device.path!r} (type {device.type!r}, "
                f"{device.major}:{device.minor}) is invalid.",
            )

    if not propagation_valid(linux.rootfsPropagation):
        modes = "|".join(ROOTFS_PROPAGATIONS)
        return Violation(
            ViolationKind.LINUX,
            f'rootfsPropagation must be empty or one of "{modes}"',
        )

    if linux.seccomp is not None:
        return check_seccomp(linux.seccomp)

    return None
