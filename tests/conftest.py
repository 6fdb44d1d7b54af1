"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and that no SNIPSCAN__ environment variable leaks into config tests.
"""

import os
import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local snipscan package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of snipscan modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("snipscan"):
        del sys.modules[module_name]


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    for key in list(os.environ):
        if key.upper().startswith("SNIPSCAN__"):
            monkeypatch.delenv(key)
    yield
