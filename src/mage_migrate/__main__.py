"""
Entry point for module execution (``python -m mage_migrate``).

This module delegates execution to the CLI handler in ``mage_migrate.cli.__main__``.
"""

import sys

from mage_migrate.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
