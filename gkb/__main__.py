"""
Entry point for running gkb as a module.

Usage:
    python -m gkb [options]
"""

import sys
from gkb.cli import main

if __name__ == "__main__":
    sys.exit(main())
