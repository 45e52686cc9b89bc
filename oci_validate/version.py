#!/usr/bin/env python3
"""
OCI version handling.

ociVersion must be a Semantic Versioning 2.0.0 string and must name the
exact version this validator understands; there is no range matching.
"""

import re
from typing import Optional, Tuple

from oci_validate.report import CheckContext, Violation, ViolationKind

# Runtime configuration version handled by the checks
OCI_VERSION = "1.0.0"

SEMVER_RE = re.compile(
    r"\A(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)"
    r"(?:-((?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?\Z"
)


def parse_semver(value: str) -> Optional[Tuple[int, int, int, str, str]]:
    """
    Parse a SemVer string.

    Returns:
        (major, minor, patch, prerelease, build) or None if invalid

    Examples:
        >>> parse_semver("1.0.0-rc1+build.5")
        (1, 0, 0, 'rc1', 'build.5')
        >>> parse_semver("1.0") is None
        True
    """
    match = SEMVER_RE.match(value)
    if not match:
        return None
    major, minor, patch, prerelease, build = match.groups()
    return int(major), int(minor), int(patch), prerelease or "", build or ""


def check_version(ctx: CheckContext) -> Optional[Violation]:
    """Check ociVersion is valid SemVer and equal to OCI_VERSION."""
    version = ctx.config.ociVersion

    if parse_semver(version) is None:
        return Violation(
            ViolationKind.VERSION, f"{version!r} is not valid SemVer"
        )

    if version != OCI_VERSION:
        return Violation(
            ViolationKind.VERSION,
            f"validate currently only handles version {OCI_VERSION}, "
            f"but the supplied configuration targets {version}",
        )

    return None
