# python
"""
tests/helpers.py
Shared factories for building an in-memory filesystem in tests.
"""
from deskfs.filesystem import FileSystem
from deskfs.storage import MemoryStorage
from deskfs.store import NodeStore
from deskfs.users import StaticUserProvider


class FakeClock:
    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1) -> None:
        self.now += ms


def make_store(username: str = "alice", storage: MemoryStorage = None, clock=None) -> NodeStore:
    return NodeStore(
        storage if storage is not None else MemoryStorage(),
        StaticUserProvider(username),
        clock=clock or FakeClock(),
    )


def make_fs(username: str = "alice", storage: MemoryStorage = None, clock=None) -> FileSystem:
    fs = FileSystem(make_store(username, storage, clock))
    # materialize the default tree so later snapshots compare like for like
    fs.load()
    return fs
