#!/usr/bin/env python3
"""
Platform compatibility for OCI bundles.

Only the OS/architecture pairs listed in VALID_PLATFORMS are recognized.
Names follow Go's GOOS/GOARCH spelling, as used by config.json.
"""

from types import MappingProxyType
from typing import Optional

from oci_validate.report import CheckContext, Violation, ViolationKind

VALID_PLATFORMS = MappingProxyType(
    {
        "darwin": frozenset({"386", "amd64", "arm", "arm64"}),
        "dragonfly": frozenset({"amd64"}),
        "freebsd": frozenset({"386", "amd64", "arm"}),
        "linux": frozenset(
            {"386", "amd64", "arm", "arm64", "ppc64", "ppc64le", "mips64", "mips64le"}
        ),
        "netbsd": frozenset({"386", "amd64", "arm"}),
        "openbsd": frozenset({"386", "amd64", "arm"}),
        "plan9": frozenset({"386", "amd64"}),
        "solaris": frozenset({"amd64"}),
        "windows": frozenset({"386", "amd64"}),
    }
)


def platform_valid(os_name: str, arch: str) -> bool:
    """Check whether an OS/architecture pair is supported."""
    return arch in VALID_PLATFORMS.get(os_name, ())


def check_platform(ctx: CheckContext) -> Optional[Violation]:
    """Check platform.os and platform.arch against VALID_PLATFORMS."""
    platform = ctx.config.platform

    archs = VALID_PLATFORMS.get(platform.os)
    if archs is None:
        return Violation(
            ViolationKind.PLATFORM,
            f"Operation system {platform.os!r} of the bundle is not supported yet.",
        )

    if platform.arch not in archs:
        return Violation(
            ViolationKind.PLATFORM,
            f"Combination of {platform.os!r} and {platform.arch!r} is invalid.",
        )

    return None
