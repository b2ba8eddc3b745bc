#!/usr/bin/env python3
"""Direct launcher for the weekly YNAB report.

Runs the command-line entry point from a source checkout without installing
the package.  Arguments are passed through, e.g. ``--config config.json``.
"""

import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.resolve()
sys.path.insert(0, str(project_root))

from ynab_report.cli import main

if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
