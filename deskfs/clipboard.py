# python
"""
deskfs/clipboard.py
Persisted copy/cut clipboard for filesystem paths and the paste operation over it.
"""
from dataclasses import dataclass, field
import json
import logging
from typing import Callable, List, Optional, Sequence

from .events import EventChannel
from .nodes import Clock, now_ms
from .paths import normalize
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

DEFAULT_CLIPBOARD_KEY = "file_clipboard_v1"
CLIPBOARD_MODES = ("copy", "cut")


@dataclass
class ClipboardPayload:
    paths: List[str]
    mode: str
    updated_at: int


@dataclass
class PasteResult:
    pasted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class FileClipboard:
    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_CLIPBOARD_KEY, clock: Clock = now_ms):
        self.storage = storage
        self.key = key
        self.clock = clock
        self.changed = EventChannel("clipboard.changed")

    def get(self) -> Optional[ClipboardPayload]:
        raw = self.storage.get_item(self.key)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unreadable clipboard payload")
            return None
        if not isinstance(data, dict) or not isinstance(data.get("paths"), list):
            return None
        mode = data.get("mode")
        if mode not in CLIPBOARD_MODES:
            return None
        updated_at = data.get("updatedAt")
        return ClipboardPayload(
            paths=[p for p in data["paths"] if isinstance(p, str)],
            mode=mode,
            updated_at=updated_at if isinstance(updated_at, int) else self.clock(),
        )

    def set(self, paths: Sequence[str], mode: str) -> Optional[ClipboardPayload]:
        if mode not in CLIPBOARD_MODES:
            raise ValueError(f"unknown clipboard mode: {mode}")
        if not paths:
            self.clear()
            return None
        payload = ClipboardPayload(paths=[normalize(p) for p in paths], mode=mode, updated_at=self.clock())
        self.storage.set_item(
            self.key,
            json.dumps({"paths": payload.paths, "mode": payload.mode, "updatedAt": payload.updated_at}),
        )
        self.changed.emit(payload)
        return payload

    def clear(self) -> None:
        self.storage.remove_item(self.key)
        self.changed.emit(None)

    def subscribe(self, listener: Callable[[Optional[ClipboardPayload]], None]) -> Callable[[], None]:
        return self.changed.subscribe(listener)

    def paste(self, fs, dest: str) -> PasteResult:
        """
        Copy or move every clipboard path into `dest`. After a cut, paths that
        moved are dropped from the clipboard; failed ones stay for a retry.
        """
        payload = self.get()
        result = PasteResult()
        if payload is None:
            return result
        for path in payload.paths:
            if payload.mode == "cut":
                done = fs.move(path, dest)
            else:
                done = fs.copy(path, dest)
            (result.pasted if done else result.failed).append(path)
        if payload.mode == "cut":
            self.set(result.failed, "cut")
        return result
