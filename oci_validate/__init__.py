"""
oci-validate: pre-flight validation of OCI runtime bundles.

This validator implements:
- Mandatory field checks over the whole config.json
- OCI version and platform compatibility checks
- Process checks (cwd, env, capabilities, rlimits, AppArmor profile)
- Mount type checks, optionally against the host kernel
- Linux checks (ID mappings, namespaces, sysctls, devices, propagation)
- Seccomp policy checks
- Lifecycle hook checks, optionally against the host filesystem

License: MIT
"""

__version__ = "1.0.0"
__all__ = [
    "BundleValidator",
    "OCIConfig",
    "OCIError",
    "ValidationReport",
    "Violation",
    "ViolationKind",
    "bundle_validate",
    "load_bundle",
    "validate_bundle",
]

from oci_validate.oci import OCIConfig, OCIError, load_bundle  # noqa: E402
from oci_validate.report import ValidationReport, Violation, ViolationKind  # noqa: E402
from oci_validate.validate import BundleValidator, bundle_validate, validate_bundle  # noqa: E402
