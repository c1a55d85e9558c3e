#!/usr/bin/env python3
"""URM Command Line Interface.

Run URM programs without installing the package.

Usage:
    python main.py programs/add.urm 3 4
    python main.py --inline "T(2, 0)" 0 7
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from urm.cli import main


if __name__ == "__main__":
    sys.exit(main())
