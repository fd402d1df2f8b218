"""
Jokester - main entry point.

Usage:
    python main.py generate --context "..."
    python main.py serve --port 8000

Same commands as the installed `jokester` console script.
"""

import sys

from jokester.cli import main

if __name__ == "__main__":
    sys.exit(main())
