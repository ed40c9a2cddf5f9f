# python
"""
deskfs/reconcile.py
Load-time healing of a stored snapshot against the current default tree.

The merge is additive: nodes already present in the stored snapshot always
win over the default generator, with one narrow exception for the legacy
readme template (see _upgrade_legacy_readme).
"""
from dataclasses import dataclass, field
import logging
from typing import Iterable, List, Optional, Set

from .defaults import (
    DEFAULT_DESKTOP_SHORTCUTS,
    DOCUMENT_SUFFIX,
    README_NAME,
    build_default_file_system,
    build_readme_contents,
)
from .nodes import FileSystemNode, NodeType, byte_size, next_timestamp, now_ms
from .paths import ROOT_PATH, node_name, normalize, parent_path
from .policy import PROTECTED_ROOT, is_hidden, is_read_only_path
from .users import home_path, sanitize_username

logger = logging.getLogger(__name__)

LEGACY_README_MARKERS = (
    "Welcome to the file system!",
    "This is a simulated Linux file system.",
)


@dataclass
class ReconcileResult:
    nodes: List[FileSystemNode]
    changed: bool
    added: List[str] = field(default_factory=list)


def _missing(candidates: Iterable[FileSystemNode], present: Set[str]) -> List[FileSystemNode]:
    found = []
    for node in candidates:
        path = normalize(node.path)
        if path not in present:
            present.add(path)
            found.append(node)
    return found


def _fix_paths(nodes: List[FileSystemNode]) -> bool:
    """
    Rewrite stored paths to their normalized form and drop records that then
    collide with an earlier one (first record wins) or name the virtual root.
    """
    changed = False
    seen: Set[str] = set()
    fixed: List[FileSystemNode] = []
    for node in nodes:
        path = normalize(node.path)
        if path == ROOT_PATH or path in seen:
            logger.warning("Dropping node record at %s: root or duplicate path", path)
            changed = True
            continue
        seen.add(path)
        if path != node.path or node.parent_path != parent_path(path):
            node = node.copy(path=path, parent_path=parent_path(path), name=node_name(path))
            changed = True
        fixed.append(node)
    nodes[:] = fixed
    return changed


def _fix_hidden(nodes: List[FileSystemNode]) -> bool:
    changed = False
    for index, node in enumerate(nodes):
        expected = is_hidden(node.name)
        if node.is_hidden != expected:
            nodes[index] = node.copy(is_hidden=expected)
            changed = True
    return changed


def _fix_read_only(nodes: List[FileSystemNode]) -> bool:
    changed = False
    for index, node in enumerate(nodes):
        expected = is_read_only_path(node.path)
        if node.read_only != expected:
            nodes[index] = node.copy(read_only=expected)
            changed = True
    return changed


def is_legacy_readme(contents: Optional[str]) -> bool:
    return any(marker in (contents or "") for marker in LEGACY_README_MARKERS)


def _upgrade_legacy_readme(nodes: List[FileSystemNode], username: str, now: int) -> bool:
    """
    One-shot migration: regenerate the well-known readme if it still holds the
    old template. Other documents are never rewritten.
    """
    readme_path = f"{home_path(username)}/Documents/{README_NAME}"
    for index, node in enumerate(nodes):
        if normalize(node.path) != readme_path or node.type != NodeType.FILE:
            continue
        if not is_legacy_readme(node.contents):
            return False
        contents = build_readme_contents(username)
        nodes[index] = node.copy(
            contents=contents,
            size=byte_size(contents),
            modified_at=next_timestamp(lambda: now, node.modified_at),
        )
        logger.info("Upgraded legacy readme at %s", readme_path)
        return True
    return False


def reconcile(stored: List[FileSystemNode], username: str, now: Optional[int] = None) -> ReconcileResult:
    """
    Heal `stored` against the default tree for `username`.

    Returns the input list itself (unchanged) when nothing needed healing so
    callers can skip persisting.
    """
    username = sanitize_username(username)
    stamp = now_ms() if now is None else now
    defaults = build_default_file_system(username, stamp)
    home = home_path(username)
    desktop = f"{home}/Desktop"
    documents = f"{home}/Documents"

    nodes = list(stored)
    paths_fixed = _fix_paths(nodes)
    present = {node.path for node in nodes}
    added: List[FileSystemNode] = []

    added += _missing(
        (
            node for node in defaults
            if node.parent_path == PROTECTED_ROOT
            and node.type == NodeType.FILE
            and node.name.endswith(".app")
        ),
        present,
    )
    added += _missing(
        (
            node for node in defaults
            if node.parent_path == documents
            and node.type == NodeType.FILE
            and node.name.endswith(DOCUMENT_SUFFIX)
        ),
        present,
    )
    added += _missing(
        (
            node for node in defaults
            if node.parent_path == desktop and node.name in DEFAULT_DESKTOP_SHORTCUTS
        ),
        present,
    )
    nodes.extend(added)

    changed = bool(added) or paths_fixed
    changed = _fix_hidden(nodes) or changed
    changed = _fix_read_only(nodes) or changed
    changed = _upgrade_legacy_readme(nodes, username, stamp) or changed

    required = ("/home", home, desktop, documents, PROTECTED_ROOT)
    required_dirs = _missing(
        (node for node in defaults if node.path in required and node.type == NodeType.DIRECTORY),
        present,
    )
    if required_dirs:
        nodes.extend(required_dirs)
        added += required_dirs
        changed = True

    if not changed:
        return ReconcileResult(nodes=stored, changed=False)
    added_paths = [node.path for node in added]
    logger.info("Reconciled snapshot for %s: %d node(s) added", username, len(added_paths))
    return ReconcileResult(nodes=nodes, changed=True, added=added_paths)
