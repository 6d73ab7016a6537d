#!/usr/bin/env python3
"""
Face Library - Main Entry Point

Run this file to train identities or recognize faces from the command line.
"""

import sys

from facelibrary.main import main

if __name__ == '__main__':
    sys.exit(main())
