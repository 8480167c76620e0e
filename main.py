#!/usr/bin/env python3
"""
State Tax Rate Updater - Entry Point

Validates scripts/rates.json, copies it to data/rates.json and refreshes
the fallback table embedded in index.html.

Usage:
    python main.py
    python main.py update --dry-run
    python main.py check
    python main.py show --state CA
"""

import sys

from rate_updater.cli import main

if __name__ == "__main__":
    sys.exit(main())
