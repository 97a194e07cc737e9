#!/usr/bin/env python3
"""Print the configured chains, tokens, routes and operations without a signing key."""

from pathlib import Path
import sys

SCRIPT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from bridger.cli.main import main


if __name__ == "__main__":
    main(["--check-config", *sys.argv[1:]])
