#!/usr/bin/env python3
"""
Lifecycle hook checks for OCI bundles.

Hooks run on the host, so their paths are host paths. Each hook path must
be absolute; with --host-specific it must also exist and be executable.
Hook env entries follow the same KEY=VALUE rules as process.env.
"""

import functools
import logging
import os
from typing import List, Optional

from oci_validate.oci import OCIHook
from oci_validate.process import env_valid
from oci_validate.report import CheckContext, Violation, ViolationKind
from oci_validate.utils import is_executable

logger = logging.getLogger(__name__)

# (label, attribute) in the order hooks run
HOOK_PHASES = (
    ("pre-start", "prestart"),
    ("post-start", "poststart"),
    ("post-stop", "poststop"),
)


def check_event_hooks(
    hook_type: str, hooks: List[OCIHook], ctx: CheckContext
) -> Optional[Violation]:
    """Check the hooks of a single lifecycle phase."""
    warn = functools.partial(ctx.warn, logger=logger)

    for hook in hooks:
        if not os.path.isabs(hook.path):
            return Violation(
                ViolationKind.HOOK,
                f"The {hook_type} hook {hook.path}: is not absolute path",
            )

        if ctx.host_specific:
            try:
                executable = is_executable(hook.path)
            except OSError:
                return Violation(
                    ViolationKind.HOOK, f"Cannot find {hook_type} hook: {hook.path}"
                )
            if not executable:
                return Violation(
                    ViolationKind.HOOK,
                    f"The {hook_type} hook {hook.path}: is not executable",
                )

        for env in hook.env:
            if not env_valid(env, warn):
                return Violation(
                    ViolationKind.HOOK,
                    f"Env {env!r} for hook {hook.path} is in the invalid form.",
                )

    return None


def check_hooks(ctx: CheckContext) -> Optional[Violation]:
    """Check pre-start, post-start and post-stop hooks in that order."""
    for hook_type, attr in HOOK_PHASES:
        violation = check_event_hooks(hook_type, getattr(ctx.config.hooks, attr), ctx)
        if violation is not None:
            return violation
    return None
