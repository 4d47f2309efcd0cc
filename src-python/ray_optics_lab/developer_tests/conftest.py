"""
Shared pytest configuration for the developer tests.

Makes the package importable from a source checkout and routes the
library's log records to the console.
"""

import logging
import sys
from pathlib import Path

src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


def pytest_configure(config):
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
