#!/usr/bin/env python3
"""
Linux namespace kinds for OCI bundles.

Namespaces provide isolation for various system resources:
- pid:     Process ID isolation (container has its own PID 1)
- network: Network stack isolation
- mount:   Filesystem mount point isolation
- ipc:     Inter-process communication isolation
- uts:     Hostname and domain name isolation
- user:    User and group ID isolation
- cgroup:  Cgroup root isolation

A namespace entry without a path asks the runtime to create a fresh
namespace (unshare(2)); an entry with a path joins an existing one
(setns(2)). Several rules only hold for freshly created namespaces.
"""

from typing import FrozenSet, Iterable

from oci_validate.oci import OCINamespace

PID_NAMESPACE = "pid"
NETWORK_NAMESPACE = "network"
MOUNT_NAMESPACE = "mount"
IPC_NAMESPACE = "ipc"
UTS_NAMESPACE = "uts"
USER_NAMESPACE = "user"
CGROUP_NAMESPACE = "cgroup"

NAMESPACE_KINDS = frozenset(
    {
        PID_NAMESPACE,
        NETWORK_NAMESPACE,
        MOUNT_NAMESPACE,
        IPC_NAMESPACE,
        UTS_NAMESPACE,
        USER_NAMESPACE,
        CGROUP_NAMESPACE,
    }
)


def namespace_valid(ns: OCINamespace) -> bool:
    return ns.type in NAMESPACE_KINDS


def new_namespaces(namespaces: Iterable[OCINamespace]) -> FrozenSet[str]:
    """
    Collect the namespace kinds the runtime has to create.

    A kind counts as new if any entry of that kind has an empty path.

    Example:
        >>> new_namespaces([OCINamespace("uts"), OCINamespace("ipc", "/proc/1/ns/ipc")])
        frozenset({'uts'})
    """
    return frozenset(ns.type for ns in namespaces if not ns.path)
