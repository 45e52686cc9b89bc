#!/usr/bin/env python3
"""
Validation results for oci-validate.

Presence problems are aggregated into one report; semantic problems are
returned by the checks as a single Violation, and the first one ends the
run. Advisories never fail a run; they are logged and kept on the report.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from oci_validate.oci import OCIConfig


class ViolationKind(Enum):
    """Which rule family a violation belongs to."""

    MISSING_FIELD = "missing-field"
    VERSION = "version"
    PLATFORM = "platform"
    PROCESS = "process"
    MOUNT = "mount"
    LINUX = "linux"
    SECCOMP = "seccomp"
    HOOK = "hook"


@dataclass(frozen=True)
class Violation:
    """A failed validation rule."""

    kind: ViolationKind
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class CheckContext:
    """
    Inputs shared by the semantic checks of one validation run.

    Example:
        ctx = CheckContext(config, "/bundle/rootfs", host_specific=True)
        violation = check_process(ctx)
    """

    config: OCIConfig
    rootfs: str
    host_specific: bool = False
    warnings: List[str] = field(default_factory=list)

    def warn(self, message: str, logger: Optional[logging.Logger] = None) -> None:
        """Record a non-fatal advisory."""
        (logger or logging.getLogger(__name__)).warning(message)
        self.warnings.append(message)


@dataclass
class ValidationReport:
    """Verdict of a validation run."""

    valid: bool
    messages: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    violation: Optional[Violation] = None

    @property
    def error(self) -> Optional[str]:
        """Diagnostic text for a failed run, None on success."""
        if self.valid or self.violation is None:
            return None
        return self.violation.message
