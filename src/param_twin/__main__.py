"""
Entry point for module execution (``python -m param_twin``).

This module delegates execution to the CLI handler in ``param_twin.cli.__main__``.
"""

import sys
from param_twin.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
