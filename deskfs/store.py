# python
"""
deskfs/store.py
NodeStore: the persisted flat collection of filesystem nodes and its read-side queries.

The whole collection is one snapshot under one storage key. Writers must
follow "read full list, mutate, save full list" inside a single call; two
writers interleaving across calls will lose the earlier write.
"""
import logging
from typing import Any, Dict, List, Optional

from .defaults import build_default_file_system
from .events import EventChannel
from .nodes import Clock, FileSystemNode, NodeType, now_ms, virtual_root
from .paths import ROOT_PATH, is_descendant, normalize
from .reconcile import reconcile
from .storage import KeyValueStorage, decode_snapshot, encode_snapshot
from .users import StaticUserProvider, UserProvider, home_path

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "filesystem_v3"


def _child_sort_key(node: FileSystemNode):
    return (node.type != NodeType.DIRECTORY, node.name.casefold(), node.name)


class NodeStore:
    def __init__(
        self,
        storage: KeyValueStorage,
        user_provider: Optional[UserProvider] = None,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Clock = now_ms,
    ):
        self.storage = storage
        self.user_provider = user_provider or StaticUserProvider()
        self.key = key
        self.clock = clock
        self.changed = EventChannel("filesystem.changed")
        # the reconciler runs once per store instance and user, not on every read
        self._reconciled_for: Optional[str] = None

    @property
    def username(self) -> str:
        return self.user_provider.current_username()

    @property
    def home(self) -> str:
        return home_path(self.username)

    @property
    def backup_key(self) -> str:
        return f"{self.key}.corrupt"

    def _keep_backup(self, raw: str, reason: str) -> None:
        logger.warning("Keeping a copy of the %s snapshot under %s", reason, self.backup_key)
        self.storage.set_item(self.backup_key, raw)

    def load(self) -> List[FileSystemNode]:
        """
        Return the full node list, creating or healing the snapshot as needed.

        A stored value that cannot be used as-is is copied to `backup_key`
        before anything overwrites it.
        """
        username = self.username
        raw = self.storage.get_item(self.key)
        rejected: List[Any] = []
        nodes = decode_snapshot(raw, rejected)
        if nodes is None:
            if raw and raw.strip():
                self._keep_backup(raw, "unreadable")
            nodes = build_default_file_system(username, self.clock())
            logger.info("Created default filesystem for %s (%d nodes)", username, len(nodes))
            self.save(nodes)
            self._reconciled_for = username
            return nodes
        if rejected:
            self._keep_backup(raw, "partially invalid")
        if self._reconciled_for != username or rejected:
            result = reconcile(nodes, username, self.clock())
            self._reconciled_for = username
            if result.changed or rejected:
                self.save(result.nodes)
            return result.nodes
        return nodes

    def save(self, nodes: List[FileSystemNode]) -> None:
        """
        Replace the stored snapshot with `nodes` and notify observers.
        """
        try:
            self.storage.set_item(self.key, encode_snapshot(nodes))
        except OSError:
            logger.exception("Failed to save filesystem snapshot under %s", self.key)
            raise
        self.changed.emit()

    def reset(self) -> None:
        """
        Drop the stored snapshot; the next load builds a fresh default tree.
        """
        self.storage.remove_item(self.key)
        self._reconciled_for = None
        self.changed.emit()

    def subscribe(self, listener):
        return self.changed.subscribe(listener)

    def get_node(self, path: str) -> Optional[FileSystemNode]:
        normalized = normalize(path)
        if normalized == ROOT_PATH:
            return virtual_root(self.clock())
        for node in self.load():
            if node.path == normalized:
                return node
        return None

    def exists(self, path: str) -> bool:
        normalized = normalize(path)
        if normalized == ROOT_PATH:
            return True
        return any(node.path == normalized for node in self.load())

    def is_directory(self, path: str) -> bool:
        node = self.get_node(path)
        return node is not None and node.type == NodeType.DIRECTORY

    def get_children(self, path: str, include_hidden: bool = False) -> List[FileSystemNode]:
        normalized = normalize(path)
        children = [
            node for node in self.load()
            if node.parent_path == normalized and (include_hidden or not node.is_hidden)
        ]
        return sorted(children, key=_child_sort_key)

    def get_all_directories(self) -> List[FileSystemNode]:
        return [node for node in self.load() if node.type == NodeType.DIRECTORY]

    def get_file_contents(self, path: str) -> Optional[str]:
        node = self.get_node(path)
        if node is None or node.type != NodeType.FILE:
            return None
        return node.contents or ""

    def get_directory_tree(self, path: str = ROOT_PATH) -> Optional[Dict[str, Any]]:
        """
        Nested records rooted at `path`; directories carry a "children" list
        that includes hidden entries.
        """
        node = self.get_node(path)
        if node is None:
            return None
        nodes = self.load()
        by_parent: Dict[str, List[FileSystemNode]] = {}
        for entry in nodes:
            by_parent.setdefault(entry.parent_path, []).append(entry)

        def build(current: FileSystemNode) -> Dict[str, Any]:
            record = current.to_record()
            if current.type == NodeType.DIRECTORY:
                # the virtual root lists itself as its own parent; skip that self-reference
                children = [c for c in by_parent.get(current.path, []) if c.path != current.path]
                record["children"] = [build(child) for child in sorted(children, key=_child_sort_key)]
            return record

        return build(node)

    def search_files(self, query: str, start_path: str = ROOT_PATH) -> List[FileSystemNode]:
        start = normalize(start_path)
        needle = (query or "").lower()
        return [
            node for node in self.load()
            if (node.path == start or is_descendant(node.path, start))
            and needle in node.name.lower()
        ]

    def get_stats(self, path: str) -> Optional[Dict[str, int]]:
        normalized = normalize(path)
        if not self.exists(normalized):
            return None
        subtree = [
            node for node in self.load()
            if node.path == normalized or is_descendant(node.path, normalized)
        ]
        return {
            "files": sum(1 for node in subtree if node.type == NodeType.FILE),
            "directories": sum(1 for node in subtree if node.type == NodeType.DIRECTORY),
            "total_size": sum(node.size for node in subtree),
        }
