#!/usr/bin/env python3
"""
Process checks for OCI bundles.

Validates the "process" section of config.json:
- cwd must be an absolute container path
- env entries must be KEY=VALUE with KEY made of letters, digits and '_'
- capabilities must be known capability names
- rlimit types must be known RLIMIT_* names
- an apparmorProfile must exist under <rootfs>/etc/apparmor.d
"""

import functools
import logging
import os
import posixpath
from typing import Callable, Optional

from oci_validate.capabilities import capability_valid
from oci_validate.report import CheckContext, Violation, ViolationKind

logger = logging.getLogger(__name__)

# Resource limit types from setrlimit(2)
RLIMITS = frozenset(
    {
        "RLIMIT_CPU",
        "RLIMIT_FSIZE",
        "RLIMIT_DATA",
        "RLIMIT_STACK",
        "RLIMIT_CORE",
        "RLIMIT_RSS",
        "RLIMIT_NPROC",
        "RLIMIT_NOFILE",
        "RLIMIT_MEMLOCK",
        "RLIMIT_AS",
        "RLIMIT_LOCKS",
        "RLIMIT_SIGPENDING",
        "RLIMIT_MSGQUEUE",
        "RLIMIT_NICE",
        "RLIMIT_RTPRIO",
        "RLIMIT_RTTIME",
    }
)

# Profiles are looked up inside the container rootfs
APPARMOR_PROFILE_DIR = "etc/apparmor.d"


def env_valid(env: str, warn: Optional[Callable[[str], None]] = None) -> bool:
    """
    Check an environment entry of the form KEY=VALUE.

    KEY, with surrounding whitespace ignored, must be non-empty and consist
    solely of letters, digits and underscores. A KEY starting with a digit
    is accepted but reported through warn.

    Args:
        env: Entry to check
        warn: Optional callback receiving advisory messages

    Returns:
        True if the entry is well formed
    """
    if "=" not in env:
        return False

    key = env.split("=", 1)[0].strip()
    if not key:
        return False

    for ch in key:
        if not (ch.isalpha() or ch.isdecimal() or ch == "_"):
            return False

    if key[0].isdecimal() and warn is not None:
        warn(f"Env {env}: variable name beginning with digit is not recommended.")

    return True


def rlimit_valid(rlimit: str) -> bool:
    return rlimit in RLIMITS


def check_process(ctx: CheckContext) -> Optional[Violation]:
    """Check the process section of the configuration."""
    process = ctx.config.process
    warn = functools.partial(ctx.warn, logger=logger)

    if not posixpath.isabs(process.cwd):
        return Violation(
            ViolationKind.PROCESS, f"cwd {process.cwd!r} is not an absolute path"
        )

    for env in process.env:
        if not env_valid(env, warn):
            return Violation(
                ViolationKind.PROCESS,
                f"env {env!r} should be in the form of 'key=value'. The left hand "
                "side must consist solely of letters, digits, and underscores '_'.",
            )

    for capability in process.capabilities:
        if not capability_valid(capability):
            return Violation(
                ViolationKind.PROCESS,
                f"capability {capability!r} is not valid, man capabilities(7)",
            )

    for rlimit in process.rlimits:
        if not rlimit_valid(rlimit.type):
            return Violation(
                ViolationKind.PROCESS, f"rlimit type {rlimit.type!r} is invalid."
            )

    if process.apparmorProfile:
        profile_path = os.path.normpath(
            os.path.join(
                ctx.rootfs, APPARMOR_PROFILE_DIR, process.apparmorProfile.lstrip("/")
            )
        )
        try:
            os.stat(profile_path)
        except OSError as e:
            return Violation(
                ViolationKind.PROCESS,
                f"Cannot find apparmor profile {profile_path!r}: {e.strerror}",
            )

    return None
