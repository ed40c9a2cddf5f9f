# python
"""
deskfs/storage.py
Key-value storage backends and the snapshot codec used by the node store.

A snapshot is a JSON array of node records kept under a single key and
replaced wholesale on every write. Callers must read the full list, mutate it
and write the full list back within one call.
"""
from typing import Any, Dict, List, Optional, Protocol
from pathlib import Path
import json
import logging

import jsonschema
from jsonschema.exceptions import best_match

from .nodes import FileSystemNode

logger = logging.getLogger(__name__)

NODE_RECORD_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "type": {"type": "string", "enum": ["file", "directory"]},
        "path": {"type": "string", "pattern": "^/"},
        "parentPath": {"type": "string", "pattern": "^/"},
        "contents": {"type": ["string", "null"]},
        "permissions": {"type": "string"},
        "owner": {"type": "string"},
        "group": {"type": "string"},
        "size": {"type": "integer", "minimum": 0},
        "createdAt": {"type": "integer"},
        "modifiedAt": {"type": "integer"},
        "isHidden": {"type": "boolean"},
        "readOnly": {"type": "boolean"},
        "executable": {"type": "boolean"},
    },
    "required": ["name", "type", "path", "parentPath"],
}

SNAPSHOT_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "$id": "deskfs-snapshot.schema.json",
    "type": "array",
    "items": {"type": "object"},
}


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """
    Process-local storage, mainly for tests and throwaway sessions.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})
        self.writes = 0

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.writes += 1
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """
    Durable storage: every key lives in one JSON object on disk.

    Writes go to a sibling temp file first and are then renamed over the
    target so a crash never leaves a half-written store behind.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(self.path.name + ".corrupt")

    def _read_all(self) -> Dict[str, str]:
        """
        Read every key. A missing file is an empty store; other read errors
        propagate so a later write cannot clobber keys we failed to see.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(text)
        except ValueError as exc:
            logger.warning("Storage file %s is not valid JSON, keeping a copy at %s: %s", self.path, self.backup_path, exc)
            self.backup_path.write_text(text, encoding="utf-8")
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file %s does not hold a JSON object, keeping a copy at %s", self.path, self.backup_path)
            self.backup_path.write_text(text, encoding="utf-8")
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _write_all(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(items, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if key in items:
            del items[key]
            self._write_all(items)


def encode_snapshot(nodes: List[FileSystemNode]) -> str:
    return json.dumps([node.to_record() for node in nodes], ensure_ascii=False)


_record_validator = jsonschema.Draft7Validator(NODE_RECORD_SCHEMA)


def decode_snapshot(
    text: Optional[str],
    rejected: Optional[List[Any]] = None,
) -> Optional[List[FileSystemNode]]:
    """
    Parse and validate a stored snapshot. Returns None when the value is
    missing, not JSON, or not an array.

    Records that do not match NODE_RECORD_SCHEMA are dropped one by one and
    appended to `rejected` when given; the remaining records are kept.
    """
    if not text or not text.strip():
        return None
    try:
        data = json.loads(text)
    except ValueError as e:
        logger.warning("Stored snapshot is not valid JSON: %s", e)
        return None
    try:
        jsonschema.validate(instance=data, schema=SNAPSHOT_SCHEMA)
    except jsonschema.ValidationError as e:
        logger.warning("Stored snapshot failed schema validation: %s", e.message)
        return None
    nodes = []
    for record in data:
        error = best_match(_record_validator.iter_errors(record))
        if error is not None:
            logger.warning("Dropping invalid node record %r: %s", record.get("path"), error.message)
            if rejected is not None:
                rejected.append(record)
            continue
        nodes.append(FileSystemNode.from_record(record))
    return nodes
