import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if SRC_DIR.exists():
    sys.path.insert(0, str(SRC_DIR))

from phc_hasher.config import Argon2idConfiguration  # noqa: E402


@pytest.fixture
def fast_config() -> Argon2idConfiguration:
    """Cheap cost parameters so tests do not allocate the preset's 64 MiB."""
    return Argon2idConfiguration(memory=64, iterations=1, lanes=1)
