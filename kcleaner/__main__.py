"""
Entry point for running kcleaner as a module.

Usage:
    python -m kcleaner [options]
"""

import sys
from kcleaner.cli import main

if __name__ == "__main__":
    sys.exit(main())
