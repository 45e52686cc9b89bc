#!/usr/bin/env python3
"""
Command Line Interface for oci-validate.

Commands:
    oci-validate validate [--path PATH] [--host-specific]  - Validate a bundle
    oci-validate version                                    - Version information
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from oci_validate import __version__, utils
from oci_validate.oci import OCIError
from oci_validate.validate import validate_bundle
from oci_validate.version import OCI_VERSION


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with all commands and options."""
    parser = argparse.ArgumentParser(
        prog="oci-validate",
        description="oci-validate: check an OCI bundle before running it",
    )

    # Global options
    parser.add_argument(
        "--version", "-v", action="version", version=f"oci-validate {__version__}"
    )
    parser.add_argument(
        "--log-level",
        choices=utils.LOG_LEVELS,
        default=utils.LOG_LEVEL,
        help="Log level (default: %(default)s)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # =========================================================================
    # validate command
    # =========================================================================
    validate_parser = subparsers.add_parser("validate", help="Validate an OCI bundle")
    validate_parser.add_argument(
        "--path", default=".", help="Path to a bundle (default: %(default)s)"
    )
    validate_parser.add_argument(
        "--host-specific",
        action="store_true",
        help="Check host specific configs",
    )

    # =========================================================================
    # version command
    # =========================================================================
    version_parser = subparsers.add_parser("version", help="Show version information")
    version_parser.add_argument(
        "--format", "-f", choices=["text", "json"], default="text", help="Output format"
    )

    return parser


def setup_logging(args: argparse.Namespace) -> None:
    """Configure the root logger from the global options."""
    if args.debug:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = getattr(logging, args.log_level.upper())

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(level)


# =============================================================================
# Command Handlers
# =============================================================================


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    try:
        report = validate_bundle(args.path, host_specific=args.host_specific)
    except OCIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not report.valid:
        print(f"Error: {report.error}", file=sys.stderr)
        return 1

    if not args.quiet:
        print("Bundle validation succeeded.")
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Handle version command."""
    import platform

    version_info = {
        "oci-validate": __version__,
        "OCI": OCI_VERSION,
        "Python": platform.python_version(),
    }

    if args.format == "json":
        print(json.dumps(version_info, indent=2))
    else:
        print(f"oci-validate version {__version__}")
        print(f"OCI runtime configuration version {OCI_VERSION}")
        print(f"Python version {platform.python_version()}")

    return 0


# =============================================================================
# Main Entry Point
# =============================================================================


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(args)

    # Dispatch to command handler
    handlers = {
        "validate": cmd_validate,
        "version": cmd_version,
    }

    handler = handlers.get(args.command)
    if handler:
        try:
            return handler(args)
        except KeyboardInterrupt:
            print("\nInterrupted")
            return 130
        except Exception as e:
            if getattr(args, "debug", False):
                raise
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
