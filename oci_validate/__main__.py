#!/usr/bin/env python3
"""
oci-validate entry point.
Allows running as: python3 -m oci_validate <command>
"""

import sys

from oci_validate.cli import main

if __name__ == "__main__":
    sys.exit(main())
