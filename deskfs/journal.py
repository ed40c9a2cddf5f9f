# python
"""
deskfs/journal.py
JSONL event journal recording successful filesystem mutations.
"""
import datetime
import json
import pathlib
import threading
from typing import Any

_JOURNAL_LOCK = threading.Lock()


def iso_ts():
    """
    Return a timezone-aware UTC ISO timestamp (Z suffix) for logging.
    """
    dt = datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)
    return dt.isoformat().replace("+00:00", "Z")


class EventJournal:
    def __init__(self, path: pathlib.Path, version: str = "0.1"):
        self.path = pathlib.Path(path)
        self.version = version

    def log(self, event: str, phase: str, **fields: Any) -> None:
        rec = {
            "ts": iso_ts(),
            "event": event,
            "phase": phase,
            "version": self.version,
            "payload": fields or {},
        }
        with _JOURNAL_LOCK:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(rec, ensure_ascii=False) + "\n")
