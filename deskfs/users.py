# python
"""
deskfs/users.py
Current-user providers. Authentication lives elsewhere; the engine only needs a name.
"""
import os
import re
from typing import Optional, Protocol

from .env import load_env

GUEST_USERNAME = "guest"
_INVALID_USERNAME_CHARS = re.compile(r"[^a-z0-9_-]")


class UserProvider(Protocol):
    def current_username(self) -> str: ...


def sanitize_username(value: Optional[str]) -> str:
    """
    Lower-case and strip everything but [a-z0-9_-]; empty results become "guest".
    """
    normalized = _INVALID_USERNAME_CHARS.sub("", (value or "").strip().lower())
    return normalized or GUEST_USERNAME


def home_path(username: str) -> str:
    return f"/home/{sanitize_username(username)}"


class StaticUserProvider:
    def __init__(self, username: Optional[str] = None):
        self.username = sanitize_username(username)

    def current_username(self) -> str:
        return self.username

    def set_username(self, username: str) -> None:
        self.username = sanitize_username(username)


class EnvUserProvider:
    """
    Resolve the username from DESKFS_USERNAME (loaded from .env), else a fallback.
    """

    def __init__(self, fallback: str = GUEST_USERNAME, variable: str = "DESKFS_USERNAME"):
        self.fallback = fallback
        self.variable = variable

    def current_username(self) -> str:
        load_env()
        return sanitize_username(os.getenv(self.variable) or self.fallback)
