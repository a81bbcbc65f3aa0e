#!/usr/bin/env python3
"""
Main entry point for notescore.

Allows the command line to be run with 'python -m notescore'.
"""

import sys

from notescore.cli.main import main

if __name__ == '__main__':
    sys.exit(main())
