# python
"""
deskfs/filesystem.py
FileSystem: validated create/update/rename/delete/move/copy over the NodeStore.

Every mutation normalizes its path arguments, reads the full node list once,
validates, transforms a copy of the list and saves it once. A rejected
mutation returns False, records the reason in `last_failure` and saves nothing.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from .errors import FailureReason
from .journal import EventJournal
from .nodes import (
    FileSystemNode,
    NodeType,
    byte_size,
    make_directory,
    make_file,
    next_timestamp,
)
from .paths import ROOT_PATH, is_descendant, join, node_name, normalize, parent_path, rebase
from .policy import can_write_to_directory, has_read_only_descendant, is_hidden, is_read_only_path
from .store import NodeStore

logger = logging.getLogger(__name__)


def _find(nodes: List[FileSystemNode], path: str) -> Tuple[int, Optional[FileSystemNode]]:
    for index, node in enumerate(nodes):
        if node.path == path:
            return index, node
    return -1, None


def _is_valid_name(name: str) -> bool:
    return bool(name) and "/" not in name and name not in (".", "..")


def copy_name(name: str, attempt: int) -> str:
    """
    Insert `_copy<attempt>` before the last extension ("a.tar.gz" -> "a.tar_copy1.gz").
    A leading dot marks a hidden name, not an extension.
    """
    stem, dot, ext = name.rpartition(".")
    if dot and stem:
        return f"{stem}_copy{attempt}.{ext}"
    return f"{name}_copy{attempt}"


class FileSystem:
    def __init__(self, store: NodeStore, journal: Optional[EventJournal] = None):
        self.store = store
        self.journal = journal
        self.last_failure: Optional[FailureReason] = None

    # read side, delegated so UI code holds a single object

    def load(self) -> List[FileSystemNode]:
        return self.store.load()

    def get_node(self, path: str) -> Optional[FileSystemNode]:
        return self.store.get_node(path)

    def get_children(self, path: str, include_hidden: bool = False) -> List[FileSystemNode]:
        return self.store.get_children(path, include_hidden)

    def exists(self, path: str) -> bool:
        return self.store.exists(path)

    def is_directory(self, path: str) -> bool:
        return self.store.is_directory(path)

    def get_all_directories(self) -> List[FileSystemNode]:
        return self.store.get_all_directories()

    def get_file_contents(self, path: str) -> Optional[str]:
        return self.store.get_file_contents(path)

    def get_directory_tree(self, path: str = ROOT_PATH) -> Optional[Dict[str, Any]]:
        return self.store.get_directory_tree(path)

    def search_files(self, query: str, start_path: str = ROOT_PATH) -> List[FileSystemNode]:
        return self.store.search_files(query, start_path)

    def get_stats(self, path: str) -> Optional[Dict[str, int]]:
        return self.store.get_stats(path)

    def subscribe(self, listener):
        return self.store.subscribe(listener)

    normalize_path = staticmethod(normalize)
    get_parent_path = staticmethod(parent_path)
    get_node_name = staticmethod(node_name)

    # helpers

    def _fail(self, reason: FailureReason, operation: str, path: str) -> bool:
        self.last_failure = reason
        logger.debug("%s rejected for %s: %s", operation, path, reason.value)
        return False

    def _commit(self, nodes: List[FileSystemNode], event: str, **fields: Any) -> bool:
        self.store.save(nodes)
        self.last_failure = None
        if self.journal:
            try:
                self.journal.log(event, "filesystem", user=self.store.username, **fields)
            except OSError:
                logger.exception("Failed to write journal entry for %s", event)
        return True

    def _directory_failure(self, nodes: List[FileSystemNode], path: str) -> Optional[FailureReason]:
        """
        Reason `path` cannot receive new entries, or None if it can.
        """
        if can_write_to_directory(nodes, path):
            return None
        if is_read_only_path(path):
            return FailureReason.PERMISSION_DENIED
        if _find(nodes, path)[1] is None:
            return FailureReason.NOT_FOUND
        return FailureReason.INVALID_OPERATION

    def _now(self) -> int:
        return self.store.clock()

    # mutations

    def _create(self, parent: str, name: str, node_type: NodeType, contents: str) -> bool:
        operation = f"create_{node_type.value}"
        parent = normalize(parent)
        if not _is_valid_name(name):
            return self._fail(FailureReason.INVALID_OPERATION, operation, f"{parent}/{name}")
        full_path = join(parent, name)
        nodes = self.store.load()
        if full_path == ROOT_PATH or _find(nodes, full_path)[1] is not None:
            return self._fail(FailureReason.ALREADY_EXISTS, operation, full_path)
        reason = self._directory_failure(nodes, parent)
        if reason:
            return self._fail(reason, operation, full_path)

        owner = self.store.username
        now = self._now()
        if node_type == NodeType.DIRECTORY:
            node = make_directory(full_path, parent, name, owner, now)
        else:
            node = make_file(full_path, parent, name, contents, owner, now)
        return self._commit(nodes + [node], f"fs.{operation}", path=full_path)

    def create_directory(self, parent: str, name: str) -> bool:
        return self._create(parent, name, NodeType.DIRECTORY, "")

    def create_file(self, parent: str, name: str, contents: str = "") -> bool:
        return self._create(parent, name, NodeType.FILE, contents)

    def update_file(self, path: str, contents: str) -> bool:
        normalized = normalize(path)
        if is_read_only_path(normalized):
            return self._fail(FailureReason.PERMISSION_DENIED, "update_file", normalized)
        nodes = self.store.load()
        index, node = _find(nodes, normalized)
        if node is None:
            return self._fail(FailureReason.NOT_FOUND, "update_file", normalized)
        if node.type != NodeType.FILE:
            return self._fail(FailureReason.INVALID_OPERATION, "update_file", normalized)

        updated = list(nodes)
        updated[index] = node.copy(
            contents=contents,
            size=byte_size(contents),
            modified_at=next_timestamp(self.store.clock, max(node.modified_at, node.created_at)),
        )
        return self._commit(updated, "fs.update_file", path=normalized, size=updated[index].size)

    def _relocate(
        self,
        nodes: List[FileSystemNode],
        index: int,
        node: FileSystemNode,
        new_path: str,
        new_parent: str,
    ) -> List[FileSystemNode]:
        """
        Rewrite `node` to `new_path` and, for directories, every descendant by
        prefix substitution. Node order in the snapshot is preserved.
        """
        old_path = node.path
        new_name = node_name(new_path)
        updated = list(nodes)
        updated[index] = node.copy(
            name=new_name,
            path=new_path,
            parent_path=new_parent,
            is_hidden=is_hidden(new_name),
            read_only=is_read_only_path(new_path),
            modified_at=next_timestamp(self.store.clock, max(node.modified_at, node.created_at)),
        )
        if node.type == NodeType.DIRECTORY:
            for i, child in enumerate(updated):
                if is_descendant(child.path, old_path):
                    child_path = rebase(child.path, old_path, new_path)
                    updated[i] = child.copy(
                        path=child_path,
                        parent_path=rebase(child.parent_path, old_path, new_path),
                        read_only=is_read_only_path(child_path),
                    )
        return updated

    def rename(self, path: str, new_name: str) -> bool:
        normalized = normalize(path)
        if normalized == ROOT_PATH:
            return self._fail(FailureReason.INVALID_OPERATION, "rename", normalized)
        if is_read_only_path(normalized):
            return self._fail(FailureReason.PERMISSION_DENIED, "rename", normalized)
        if not _is_valid_name(new_name):
            return self._fail(FailureReason.INVALID_OPERATION, "rename", normalized)
        nodes = self.store.load()
        index, node = _find(nodes, normalized)
        if node is None:
            return self._fail(FailureReason.NOT_FOUND, "rename", normalized)
        if has_read_only_descendant(nodes, normalized):
            return self._fail(FailureReason.PERMISSION_DENIED, "rename", normalized)
        new_path = join(node.parent_path, new_name)
        if _find(nodes, new_path)[1] is not None:
            return self._fail(FailureReason.ALREADY_EXISTS, "rename", new_path)
        reason = self._directory_failure(nodes, node.parent_path)
        if reason:
            return self._fail(reason, "rename", normalized)

        updated = self._relocate(nodes, index, node, new_path, node.parent_path)
        return self._commit(updated, "fs.rename", path=normalized, new_path=new_path)

    def delete_node(self, path: str) -> bool:
        normalized = normalize(path)
        if normalized == ROOT_PATH:
            return self._fail(FailureReason.INVALID_OPERATION, "delete_node", normalized)
        if is_read_only_path(normalized):
            return self._fail(FailureReason.PERMISSION_DENIED, "delete_node", normalized)
        nodes = self.store.load()
        _, node = _find(nodes, normalized)
        if node is None:
            return self._fail(FailureReason.NOT_FOUND, "delete_node", normalized)
        if has_read_only_descendant(nodes, normalized):
            return self._fail(FailureReason.PERMISSION_DENIED, "delete_node", normalized)

        if node.type == NodeType.DIRECTORY:
            remaining = [n for n in nodes if n.path != normalized and not is_descendant(n.path, normalized)]
        else:
            remaining = [n for n in nodes if n.path != normalized]
        return self._commit(remaining, "fs.delete_node", path=normalized, removed=len(nodes) - len(remaining))

    def move(self, source_path: str, dest_path: str) -> bool:
        source = normalize(source_path)
        dest = normalize(dest_path)
        if source == ROOT_PATH:
            return self._fail(FailureReason.INVALID_OPERATION, "move", source)
        if is_read_only_path(source):
            return self._fail(FailureReason.PERMISSION_DENIED, "move", source)
        nodes = self.store.load()
        index, node = _find(nodes, source)
        if node is None:
            return self._fail(FailureReason.NOT_FOUND, "move", source)
        if has_read_only_descendant(nodes, source):
            return self._fail(FailureReason.PERMISSION_DENIED, "move", source)
        reason = self._directory_failure(nodes, dest)
        if reason:
            return self._fail(reason, "move", dest)
        if node.type == NodeType.DIRECTORY and (dest == source or is_descendant(dest, source)):
            return self._fail(FailureReason.INVALID_OPERATION, "move", dest)
        new_path = join(dest, node.name)
        if _find(nodes, new_path)[1] is not None:
            return self._fail(FailureReason.ALREADY_EXISTS, "move", new_path)

        updated = self._relocate(nodes, index, node, new_path, dest)
        return self._commit(updated, "fs.move", path=source, new_path=new_path)

    def copy(self, source_path: str, dest_path: str) -> bool:
        source = normalize(source_path)
        dest = normalize(dest_path)
        nodes = self.store.load()
        reason = self._directory_failure(nodes, dest)
        if reason:
            return self._fail(reason, "copy", dest)
        _, node = _find(nodes, source)
        if node is None:
            return self._fail(FailureReason.NOT_FOUND, "copy", source)

        taken = {n.path for n in nodes}
        new_name = node.name
        new_path = join(dest, new_name)
        attempt = 1
        while new_path in taken:
            new_name = copy_name(node.name, attempt)
            new_path = join(dest, new_name)
            attempt += 1

        now = self._now()
        copies = [
            node.copy(
                name=new_name,
                path=new_path,
                parent_path=dest,
                is_hidden=is_hidden(new_name),
                read_only=is_read_only_path(new_path),
                created_at=now,
                modified_at=now,
            )
        ]
        if node.type == NodeType.DIRECTORY:
            for child in nodes:
                if is_descendant(child.path, source):
                    child_path = rebase(child.path, source, new_path)
                    copies.append(
                        child.copy(
                            path=child_path,
                            parent_path=rebase(child.parent_path, source, new_path),
                            read_only=is_read_only_path(child_path),
                            created_at=now,
                            modified_at=now,
                        )
                    )
        return self._commit(nodes + copies, "fs.copy", path=source, new_path=new_path, count=len(copies))
