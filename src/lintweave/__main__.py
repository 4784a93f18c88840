"""Allow running as ``python -m lintweave``."""

import sys

from lintweave.cli import main

if __name__ == "__main__":
    sys.exit(main())
