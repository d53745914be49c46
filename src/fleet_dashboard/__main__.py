"""
Entry point for running fleet_dashboard as a module.

This file enables:
- `python -m fleet_dashboard`
- `uv run python -m fleet_dashboard`
"""

from __future__ import annotations

import sys

from fleet_dashboard import main

if __name__ == "__main__":
    sys.exit(main())
