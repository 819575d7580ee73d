"""
Make the repository root importable so tests can use ``src.chaindnn`` paths.
"""

import sys
from pathlib import Path

ROOT = Path(__file__).parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
