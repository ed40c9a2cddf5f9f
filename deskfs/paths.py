# python
"""
deskfs/paths.py
Canonical absolute path handling shared by every filesystem component.
"""
from typing import List

ROOT_PATH = "/"


def normalize(path: str) -> str:
    """
    Canonicalize a path string.

    Empty or relative input is treated as rooted at "/". Repeated separators
    collapse, "." is dropped and ".." pops the last resolved segment (never
    above the root). The result is "/" or "/a/b/c" without a trailing slash.
    """
    parts: List[str] = []
    for entry in (path or "").split("/"):
        if not entry or entry == ".":
            continue
        if entry == "..":
            if parts:
                parts.pop()
            continue
        parts.append(entry)
    return "/" + "/".join(parts)


def parent_path(path: str) -> str:
    normalized = normalize(path)
    if normalized == ROOT_PATH:
        return ROOT_PATH
    head = normalized.rsplit("/", 1)[0]
    return head or ROOT_PATH


def node_name(path: str) -> str:
    normalized = normalize(path)
    if normalized == ROOT_PATH:
        return ROOT_PATH
    return normalized.rsplit("/", 1)[1]


def join(parent: str, name: str) -> str:
    return normalize(f"{parent}/{name}")


def is_descendant(path: str, ancestor: str) -> bool:
    """
    True if `path` lies strictly below `ancestor`.

    Matching includes the trailing separator so /home/al is not treated as
    an ancestor of /home/alice.
    """
    path = normalize(path)
    ancestor = normalize(ancestor)
    if ancestor == ROOT_PATH:
        return path != ROOT_PATH
    return path.startswith(ancestor + "/")


def rebase(path: str, old_prefix: str, new_prefix: str) -> str:
    """
    Rewrite `path` (equal to or below `old_prefix`) so it sits under `new_prefix`.
    """
    if path == old_prefix:
        return new_prefix
    return new_prefix + path[len(old_prefix):]
