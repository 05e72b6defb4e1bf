#!/usr/bin/env python3
"""
Entry point for running mime_text as a module.
This allows: python -m mime_text <message_file>
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
