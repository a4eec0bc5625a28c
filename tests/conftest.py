import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'oddments' and tests/ importable as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from oddments.core.config import clear_config_cache


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Run every test against bundled defaults with fresh caches.

    A developer shell exporting ODDMENTS_* would otherwise leak into
    expectations about include patterns and nesting limits.
    """
    for key in list(os.environ):
        if key.startswith("ODDMENTS_"):
            monkeypatch.delenv(key, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()
