"""
Allow running notifierctl as a module: python -m catalog_notifier.cli
"""

import sys
from .notifierctl import main

if __name__ == "__main__":
    sys.exit(main())
