#!/usr/bin/env python3
"""
Bundle validation driver.

A run has two phases:

1. Presence: every mandatory field of config.json must be filled in. All
   missing fields are collected and reported together; if any is missing
   the run fails and the semantic phase is skipped.
2. Semantics: the checks in SEMANTIC_CHECKS run in order and the first
   violation ends the run.

Validation never writes anything and never mutates the configuration, so
running it twice on the same bundle gives the same report.
"""

import logging
from typing import Callable, Optional, Tuple

from oci_validate.filesystem import check_mounts
from oci_validate.hooks import check_hooks
from oci_validate.linux import check_linux
from oci_validate.oci import OCIConfig, load_bundle
from oci_validate.platforms import check_platform
from oci_validate.presence import check_mandatory_fields
from oci_validate.process import check_process
from oci_validate.report import (
    CheckContext,
    ValidationReport,
    Violation,
    ViolationKind,
)
from oci_validate.version import check_version

logger = logging.getLogger(__name__)

Check = Callable[[CheckContext], Optional[Violation]]

SEMANTIC_CHECKS: Tuple[Check, ...] = (
    check_version,
    check_platform,
    check_process,
    check_mounts,
    check_linux,
    check_hooks,
)


def bundle_validate(
    config: OCIConfig, rootfs: str, host_specific: bool = False
) -> ValidationReport:
    """
    Validate a parsed configuration.

    Args:
        config: Parsed config.json
        rootfs: Path of the bundle's root filesystem
        host_specific: Allow checks that inspect the host

    Returns:
        ValidationReport
    """
    msgs, valid = check_mandatory_fields(config)
    if not valid:
        return ValidationReport(
            valid=False,
            messages=msgs,
            violation=Violation(
                ViolationKind.MISSING_FIELD,
                "Mandatory information missing: " + " ".join(msgs),
            ),
        )

    ctx = CheckContext(config=config, rootfs=rootfs, host_specific=host_specific)
    for check in SEMANTIC_CHECKS:
        violation = check(ctx)
        if violation is not None:
            logger.debug("%s failed: %s", check.__name__, violation)
            return ValidationReport(
                valid=False,
                messages=[violation.message],
                warnings=ctx.warnings,
                violation=violation,
            )

    return ValidationReport(valid=True, warnings=ctx.warnings)


def validate_bundle(bundle_path: str = ".", host_specific: bool = False) -> ValidationReport:
    """
    Load and validate an OCI bundle.

    Args:
        bundle_path: Path to OCI bundle
        host_specific: Allow checks that inspect the host

    Returns:
        ValidationReport

    Raises:
        OCIError: If the bundle cannot be loaded
    """
    bundle = load_bundle(bundle_path)
    logger.debug("Validating bundle %s (rootfs %s)", bundle.path, bundle.rootfs)
    return bundle_validate(bundle.config, bundle.rootfs, host_specific)


class BundleValidator:
    """
    OCI bundle validator.

    Example:
        validator = BundleValidator(host_specific=True)
        report = validator.validate("/path/to/bundle")
        if not report.valid:
            print(report.error)
    """

    def __init__(self, host_specific: bool = False):
        self.host_specific = host_specific

    def validate(self, bundle_path: str = ".") -> ValidationReport:
        """Load and validate a bundle."""
        return validate_bundle(bundle_path, self.host_specific)

    def validate_config(self, config: OCIConfig, rootfs: str) -> ValidationReport:
        """Validate an already parsed configuration."""
        return bundle_validate(config, rootfs, self.host_specific)
