"""
Entry point for module execution (``python -m workflow_lint``).

This module delegates execution to the CLI handler in ``workflow_lint.cli.__main__``.
"""

import sys
from workflow_lint.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
