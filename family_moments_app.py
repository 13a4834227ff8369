#!/usr/bin/env python3
"""Executable entry point for the family moments journal."""

import sys

from family_moments.cli.cli import main

if __name__ == "__main__":
    sys.exit(main())
