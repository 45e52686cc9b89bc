"""
oci-validate Test Suite
=======================

This package contains unit tests for the oci-validate bundle validator.

Test Categories:
    - test_basic.py: Import tests and whitelist tables
    - test_oci.py: config.json decoding and bundle loading
    - test_presence.py: Mandatory field checks
    - test_version.py: Version and platform checks
    - test_process.py, test_filesystem.py, test_linux.py,
      test_seccomp.py, test_hooks.py: Semantic checks
    - test_validate.py: Validation driver
    - test_cli.py: Command line interface

Running Tests:
    pytest tests/ -v

Note:
    Host-specific checks read /proc/filesystems by default. Tests point
    them at a temporary file instead, so no root privileges are needed.
"""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
