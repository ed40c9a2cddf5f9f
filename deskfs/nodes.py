# python
"""
deskfs/nodes.py
FileSystemNode dataclass and conversion to/from persisted snapshot records.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
import time
from typing import Any, Callable, Dict, Optional

from .paths import ROOT_PATH

DIRECTORY_SIZE = 4096
DEFAULT_DIR_PERMS = "rwxr-xr-x"
DEFAULT_FILE_PERMS = "rw-r--r--"
READ_ONLY_DIR_PERMS = "r-xr-xr-x"
EXECUTABLE_PERMS = "r-xr-xr-x"

Clock = Callable[[], int]


class NodeType(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


def now_ms() -> int:
    """
    Current wall-clock time as integer epoch milliseconds.
    """
    return int(time.time() * 1000)


def byte_size(contents: Optional[str]) -> int:
    return len((contents or "").encode("utf-8"))


def next_timestamp(clock: Clock, previous: int) -> int:
    """
    Return a timestamp from `clock` that is strictly after `previous`.
    """
    return max(clock(), previous + 1)


@dataclass
class FileSystemNode:
    name: str
    type: NodeType
    path: str
    parent_path: str
    permissions: str
    owner: str
    group: str
    size: int
    created_at: int
    modified_at: int
    contents: Optional[str] = field(default=None, repr=False)
    is_hidden: bool = False
    read_only: bool = False
    executable: bool = False

    @property
    def is_directory(self) -> bool:
        return self.type == NodeType.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.type == NodeType.FILE

    def copy(self, **changes: Any) -> "FileSystemNode":
        return replace(self, **changes)

    def to_record(self) -> Dict[str, Any]:
        """
        Serialize to the camelCase record stored in a snapshot.
        """
        record: Dict[str, Any] = {
            "name": self.name,
            "type": self.type.value,
            "path": self.path,
            "parentPath": self.parent_path,
            "permissions": self.permissions,
            "owner": self.owner,
            "group": self.group,
            "size": self.size,
            "createdAt": self.created_at,
            "modifiedAt": self.modified_at,
            "isHidden": self.is_hidden,
            "readOnly": self.read_only,
            "executable": self.executable,
        }
        if self.type == NodeType.FILE:
            record["contents"] = self.contents or ""
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "FileSystemNode":
        node_type = NodeType(record["type"])
        contents = record.get("contents")
        if node_type == NodeType.FILE and contents is None:
            contents = ""
        if node_type == NodeType.DIRECTORY:
            contents = None
        return cls(
            name=record["name"],
            type=node_type,
            path=record["path"],
            parent_path=record["parentPath"],
            permissions=record.get("permissions", DEFAULT_FILE_PERMS),
            owner=record.get("owner", "root"),
            group=record.get("group", "root"),
            size=int(record.get("size", 0)),
            created_at=int(record.get("createdAt", 0)),
            modified_at=int(record.get("modifiedAt", 0)),
            contents=contents,
            is_hidden=bool(record.get("isHidden", False)),
            read_only=bool(record.get("readOnly", False)),
            executable=bool(record.get("executable", False)),
        )


def make_directory(
    path: str,
    parent: str,
    name: str,
    owner: str,
    now: int,
    permissions: str = DEFAULT_DIR_PERMS,
    **flags: Any,
) -> FileSystemNode:
    return FileSystemNode(
        name=name,
        type=NodeType.DIRECTORY,
        path=path,
        parent_path=parent,
        permissions=permissions,
        owner=owner,
        group=owner,
        size=DIRECTORY_SIZE,
        created_at=now,
        modified_at=now,
        is_hidden=name.startswith("."),
        **flags,
    )


def make_file(
    path: str,
    parent: str,
    name: str,
    contents: str,
    owner: str,
    now: int,
    permissions: str = DEFAULT_FILE_PERMS,
    **flags: Any,
) -> FileSystemNode:
    return FileSystemNode(
        name=name,
        type=NodeType.FILE,
        path=path,
        parent_path=parent,
        permissions=permissions,
        owner=owner,
        group=owner,
        size=byte_size(contents),
        created_at=now,
        modified_at=now,
        contents=contents,
        is_hidden=name.startswith("."),
        **flags,
    )


def virtual_root(now: Optional[int] = None) -> FileSystemNode:
    """
    The root directory is never persisted; it is synthesized on every lookup.
    """
    stamp = now_ms() if now is None else now
    return FileSystemNode(
        name=ROOT_PATH,
        type=NodeType.DIRECTORY,
        path=ROOT_PATH,
        parent_path=ROOT_PATH,
        permissions=DEFAULT_DIR_PERMS,
        owner="root",
        group="root",
        size=DIRECTORY_SIZE,
        created_at=stamp,
        modified_at=stamp,
    )
