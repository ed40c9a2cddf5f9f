# python
"""
deskfs/policy.py
Derived read-only and hidden status for nodes and paths.

Neither flag is trusted from storage: both are recomputed from the node's name
or path, and the reconciler corrects any stored drift on load.
"""
from typing import Iterable

from .nodes import FileSystemNode, NodeType
from .paths import ROOT_PATH, is_descendant, normalize

PROTECTED_ROOT = "/applications"


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def is_read_only_path(path: str) -> bool:
    normalized = normalize(path)
    return normalized == PROTECTED_ROOT or normalized.startswith(PROTECTED_ROOT + "/")


def has_read_only_descendant(nodes: Iterable[FileSystemNode], path: str) -> bool:
    """
    True if any stored node below `path` is inside the protected root.

    Used to refuse deleting or moving an ancestor of a protected node, e.g. "/".
    """
    target = normalize(path)
    for node in nodes:
        candidate = normalize(node.path)
        if is_descendant(candidate, target) and is_read_only_path(candidate):
            return True
    return False


def can_write_to_directory(nodes: Iterable[FileSystemNode], path: str) -> bool:
    target = normalize(path)
    if is_read_only_path(target):
        return False
    if target == ROOT_PATH:
        return True
    for node in nodes:
        if node.path == target:
            return node.type == NodeType.DIRECTORY
    return False
