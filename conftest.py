"""
Root conftest.py for pytest configuration
"""

import sys
from pathlib import Path

# Get absolute paths
PROJECT_ROOT = Path(__file__).parent.absolute()
SRC_PATH = PROJECT_ROOT / "src"
TESTS_PATH = PROJECT_ROOT / "tests"

# Add src directory to path so the package imports without installation,
# and the tests directory so the sample classes import as ``peephole_samples``
sys.path.insert(0, str(SRC_PATH))
sys.path.insert(0, str(TESTS_PATH))
