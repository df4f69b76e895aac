"""Pytest configuration for goreduce test suite."""

import sys
from pathlib import Path

# Add repository root to path so goreduce imports without installing
sys.path.insert(0, str(Path(__file__).parent.parent))
