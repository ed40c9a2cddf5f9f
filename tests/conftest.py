# Shared pytest setup for the deskfs suite
import os
import sys
from pathlib import Path

import pytest

# make `import deskfs` work when running `pytest` from the repo root
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from deskfs.env import ENV_PREFIX  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """
    Clear DESKFS_* variables (from the shell or a local .env) so every test
    starts from the built-in defaults.
    """
    for name in list(os.environ):
        if name.startswith(ENV_PREFIX):
            monkeypatch.delenv(name, raising=False)
