"""Tavern Admin: launcher. Runs the CLI from a source checkout."""

import sys

from tavern_admin.cli import main

if __name__ == "__main__":
    sys.exit(main())
