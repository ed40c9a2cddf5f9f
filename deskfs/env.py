"""
Environment handling: the project .env file and DESKFS_* overrides.
"""
from functools import lru_cache
import os
from pathlib import Path
from typing import Dict, Mapping, Tuple

from dotenv import load_dotenv

ENV_PREFIX = "DESKFS_"


@lru_cache(maxsize=1)
def load_env() -> Path:
    """
    Load DESKFS_* settings from the repository-level .env file once.
    Returns the path to the .env that was attempted.
    """
    root = Path(__file__).resolve().parents[1]
    dotenv_path = root / ".env"
    # values already exported in the shell win over the .env file
    load_dotenv(dotenv_path=dotenv_path, override=False)
    return dotenv_path


def env_overrides(mapping: Mapping[str, Tuple[str, str]]) -> Dict[str, Dict[str, str]]:
    """
    Collect the non-empty variables named in `mapping` into config sections,
    e.g. {"DESKFS_LOG_LEVEL": ("logging", "level")} -> {"logging": {"level": ...}}.
    """
    load_env()
    sections: Dict[str, Dict[str, str]] = {}
    for env_name, (section, key) in mapping.items():
        value = os.getenv(env_name)
        if value:
            sections.setdefault(section, {})[key] = value
    return sections
