#!/usr/bin/env python3
"""
Seccomp policy checks for OCI bundles.

A seccomp policy in config.json looks like:

    "seccomp": {
        "defaultAction": "SCMP_ACT_ERRNO",
        "architectures": ["SCMP_ARCH_X86_64"],
        "syscalls": [
            {
                "name": "personality",
                "action": "SCMP_ACT_ALLOW",
                "args": [{"index": 0, "value": 8, "op": "SCMP_CMP_EQ"}]
            }
        ]
    }

Actions, architectures and comparison operators use libseccomp names.
Syscall names are not checked: they differ between architectures.
"""

import logging
from typing import Optional

from oci_validate.oci import OCISeccomp, OCISyscall
from oci_validate.report import Violation, ViolationKind

logger = logging.getLogger(__name__)

SECCOMP_ACTIONS = frozenset(
    {
        "SCMP_ACT_KILL",
        "SCMP_ACT_TRAP",
        "SCMP_ACT_ERRNO",
        "SCMP_ACT_TRACE",
        "SCMP_ACT_ALLOW",
    }
)

SECCOMP_ARCHES = frozenset(
    {
        "SCMP_ARCH_X86",
        "SCMP_ARCH_X86_64",
        "SCMP_ARCH_X32",
        "SCMP_ARCH_ARM",
        "SCMP_ARCH_AARCH64",
        "SCMP_ARCH_MIPS",
        "SCMP_ARCH_MIPS64",
        "SCMP_ARCH_MIPS64N32",
        "SCMP_ARCH_MIPSEL",
        "SCMP_ARCH_MIPSEL64",
        "SCMP_ARCH_MIPSEL64N32",
        "SCMP_ARCH_PPC",
        "SCMP_ARCH_PPC64",
        "SCMP_ARCH_PPC64LE",
        "SCMP_ARCH_S390",
        "SCMP_ARCH_S390X",
    }
)

SECCOMP_OPERATORS = frozenset(
    {
        "SCMP_CMP_NE",
        "SCMP_CMP_LT",
        "SCMP_CMP_LE",
        "SCMP_CMP_EQ",
        "SCMP_CMP_GE",
        "SCMP_CMP_GT",
        "SCMP_CMP_MASKED_EQ",
    }
)


def action_valid(action: str) -> bool:
    """An empty action means "no action given" and is accepted."""
    return action == "" or action in SECCOMP_ACTIONS


def syscall_valid(syscall: OCISyscall) -> bool:
    """Check the action and every argument operator of a syscall rule."""
    if not action_valid(syscall.action):
        return False
    return all(arg.op in SECCOMP_OPERATORS for arg in syscall.args)


def check_seccomp(seccomp: OCISeccomp) -> Optional[Violation]:
    """
    Check a seccomp policy.

    Args:
        seccomp: Policy from linux.seccomp

    Returns:
        The first violation found, or None
    """
    if not action_valid(seccomp.defaultAction):
        return Violation(
            ViolationKind.SECCOMP,
            f"seccomp defaultAction {seccomp.defaultAction!r} is invalid.",
        )

    for syscall in seccomp.syscalls:
        if not syscall_valid(syscall):
            return Violation(
                ViolationKind.SECCOMP, f"syscall {syscall.name!r} is invalid."
            )

    for arch in seccomp.architectures:
        if arch not in SECCOMP_ARCHES:
            return Violation(
                ViolationKind.SECCOMP, f"seccomp architecture {arch!r} is invalid"
            )

    logger.debug(
        "Seccomp policy with %d syscall rule(s) is valid", len(seccomp.syscalls)
    )
    return None
