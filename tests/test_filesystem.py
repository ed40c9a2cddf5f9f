# python
"""
tests/test_filesystem.py
Unit tests for the create/update/rename/delete/move/copy mutations.
"""
import pytest

from deskfs.errors import FailureReason
from deskfs.filesystem import copy_name
from deskfs.defaults import build_default_file_system
from deskfs.nodes import NodeType, make_file
from deskfs.storage import MemoryStorage, encode_snapshot
from deskfs.store import DEFAULT_STORAGE_KEY

from helpers import FakeClock, make_fs

DOCS = "/home/alice/Documents"


def _snapshot(fs) -> str:
    return fs.store.storage.get_item(DEFAULT_STORAGE_KEY)


def _build_project(fs) -> None:
    assert fs.create_directory(DOCS, "project")
    assert fs.create_directory(f"{DOCS}/project", "src")
    assert fs.create_file(f"{DOCS}/project", "README.md", "# project")
    assert fs.create_file(f"{DOCS}/project/src", "main.py", "print('hi')")
    assert fs.create_file(f"{DOCS}/project/src", ".env", "SECRET=1")


def test_create_file_and_directory() -> None:
    fs = make_fs()
    assert fs.create_file(DOCS, "note.txt", "hi")
    node = fs.get_node(f"{DOCS}/note.txt")
    assert node.type == NodeType.FILE
    assert node.parent_path == DOCS
    assert node.contents == "hi"
    assert node.size == 2
    assert node.owner == "alice"
    assert not node.is_hidden
    assert not node.read_only

    assert fs.create_directory(DOCS, ".cache")
    hidden = fs.get_node(f"{DOCS}/.cache")
    assert hidden.is_hidden
    assert hidden.size == 4096
    assert hidden.contents is None


def test_size_counts_utf8_bytes() -> None:
    fs = make_fs()
    assert fs.create_file(DOCS, "accent.txt", "é")
    assert fs.get_node(f"{DOCS}/accent.txt").size == 2


def test_create_in_root_is_allowed() -> None:
    fs = make_fs()
    assert fs.create_directory("/", "tmp")
    assert fs.get_node("/tmp").parent_path == "/"


def test_create_rejections() -> None:
    fs = make_fs()
    fs.create_file(DOCS, "note.txt")
    before = _snapshot(fs)

    assert not fs.create_file(DOCS, "note.txt")
    assert fs.last_failure == FailureReason.ALREADY_EXISTS
    assert not fs.create_file("/home/alice/missing", "a.txt")
    assert fs.last_failure == FailureReason.NOT_FOUND
    assert not fs.create_file(f"{DOCS}/note.txt", "inside-a-file.txt")
    assert fs.last_failure == FailureReason.INVALID_OPERATION
    assert not fs.create_directory("/applications", "evil")
    assert fs.last_failure == FailureReason.PERMISSION_DENIED
    assert not fs.create_file(DOCS, "")
    assert not fs.create_file(DOCS, "a/b")
    assert not fs.create_directory(DOCS, "..")
    assert _snapshot(fs) == before


def test_update_file_bumps_modified_at() -> None:
    clock = FakeClock()
    fs = make_fs(clock=clock)
    assert fs.create_file(DOCS, "note.txt", "hi")
    # same millisecond on purpose: modified_at must still move forward
    assert fs.update_file(f"{DOCS}/note.txt", "hi there")
    node = fs.get_node(f"{DOCS}/note.txt")
    assert node.contents == "hi there"
    assert node.size == 8
    assert node.modified_at > node.created_at


def test_update_file_rejections() -> None:
    fs = make_fs()
    before = _snapshot(fs)
    assert not fs.update_file("/applications/terminal.app", "type=application\nappId=evil")
    assert fs.last_failure == FailureReason.PERMISSION_DENIED
    assert not fs.update_file(f"{DOCS}/missing.txt", "x")
    assert fs.last_failure == FailureReason.NOT_FOUND
    assert not fs.update_file(DOCS, "x")
    assert fs.last_failure == FailureReason.INVALID_OPERATION
    assert _snapshot(fs) == before


def test_rename_file_updates_hidden_flag() -> None:
    fs = make_fs()
    fs.create_file(DOCS, "note.txt", "hi")
    assert fs.rename(f"{DOCS}/note.txt", ".note.txt")
    assert not fs.exists(f"{DOCS}/note.txt")
    node = fs.get_node(f"{DOCS}/.note.txt")
    assert node.is_hidden
    assert node.contents == "hi"


def test_rename_directory_rewrites_descendants() -> None:
    fs = make_fs()
    fs.create_file(DOCS, "note.txt", "hi")
    assert fs.rename(DOCS, "Docs")
    moved = fs.get_node("/home/alice/Docs/note.txt")
    assert moved is not None
    assert moved.parent_path == "/home/alice/Docs"
    assert not fs.exists(f"{DOCS}/note.txt")


def test_rename_preserves_subtree_structure() -> None:
    fs = make_fs()
    _build_project(fs)
    old = f"{DOCS}/project"

    def subtree(root):
        return {
            node.path[len(root):]: (node.name, node.type, node.contents)
            for node in fs.load()
            if node.path.startswith(root + "/")
        }

    before = subtree(old)
    assert fs.rename(old, "renamed")
    after = subtree(f"{DOCS}/renamed")
    assert before == after
    assert len(after) == 4
    assert fs.get_node(f"{DOCS}/renamed/src/main.py").parent_path == f"{DOCS}/renamed/src"


def test_rename_does_not_touch_prefix_siblings() -> None:
    fs = make_fs()
    fs.create_directory(DOCS, "al")
    fs.create_directory(DOCS, "alice")
    fs.create_file(f"{DOCS}/alice", "keep.txt")
    assert fs.rename(f"{DOCS}/al", "bob")
    assert fs.exists(f"{DOCS}/alice/keep.txt")


def test_rename_rejections() -> None:
    fs = make_fs()
    fs.create_file(DOCS, "a.txt")
    fs.create_file(DOCS, "b.txt")
    before = _snapshot(fs)
    assert not fs.rename(f"{DOCS}/a.txt", "b.txt")
    assert fs.last_failure == FailureReason.ALREADY_EXISTS
    assert not fs.rename(f"{DOCS}/zzz.txt", "c.txt")
    assert fs.last_failure == FailureReason.NOT_FOUND
    assert not fs.rename("/applications/terminal.app", "term.app")
    assert fs.last_failure == FailureReason.PERMISSION_DENIED
    assert not fs.rename("/applications", "apps")
    assert not fs.rename("/", "root")
    assert not fs.rename(f"{DOCS}/a.txt", "x/y")
    assert _snapshot(fs) == before


def test_delete_directory_removes_subtree() -> None:
    fs = make_fs()
    _build_project(fs)
    removed = [node.path for node in fs.load() if node.path.startswith(f"{DOCS}/project")]
    assert fs.delete_node(f"{DOCS}/project")
    assert fs.get_children(f"{DOCS}/project", include_hidden=True) == []
    for path in removed:
        assert not fs.exists(path)
    assert fs.exists(f"{DOCS}/readme.txt")


def test_delete_rejections() -> None:
    fs = make_fs()
    before = _snapshot(fs)
    assert not fs.delete_node("/")
    assert fs.last_failure == FailureReason.INVALID_OPERATION
    assert not fs.delete_node("/applications")
    assert fs.last_failure == FailureReason.PERMISSION_DENIED
    assert not fs.delete_node("/applications/terminal.app")
    assert not fs.delete_node("/home/alice/nothing")
    assert fs.last_failure == FailureReason.NOT_FOUND
    assert _snapshot(fs) == before


def test_move_file_and_directory() -> None:
    fs = make_fs()
    _build_project(fs)
    assert fs.move(f"{DOCS}/project/README.md", "/home/alice/Desktop")
    assert fs.get_node("/home/alice/Desktop/README.md").parent_path == "/home/alice/Desktop"

    assert fs.move(f"{DOCS}/project", "/home/alice")
    assert fs.exists("/home/alice/project/src/main.py")
    assert fs.get_node("/home/alice/project/src/.env").parent_path == "/home/alice/project/src"
    assert not fs.exists(f"{DOCS}/project")


@pytest.mark.parametrize("dest", [f"{DOCS}/project", f"{DOCS}/project/src", f"{DOCS}/project/src/"])
def test_move_into_itself_is_rejected(dest: str) -> None:
    fs = make_fs()
    _build_project(fs)
    before = _snapshot(fs)
    assert not fs.move(f"{DOCS}/project", dest)
    assert fs.last_failure == FailureReason.INVALID_OPERATION
    assert _snapshot(fs) == before


def test_move_rejections() -> None:
    fs = make_fs()
    fs.create_file(DOCS, "a.txt")
    fs.create_file("/home/alice/Desktop", "a.txt")
    before = _snapshot(fs)
    assert not fs.move(f"{DOCS}/a.txt", "/home/alice/Desktop")
    assert fs.last_failure == FailureReason.ALREADY_EXISTS
    assert not fs.move(f"{DOCS}/a.txt", "/applications")
    assert fs.last_failure == FailureReason.PERMISSION_DENIED
    assert not fs.move("/applications/calculator.app", DOCS)
    assert fs.last_failure == FailureReason.PERMISSION_DENIED
    assert not fs.move(f"{DOCS}/a.txt", "/home/alice/nowhere")
    assert fs.last_failure == FailureReason.NOT_FOUND
    assert not fs.move(f"{DOCS}/a.txt", f"{DOCS}/readme.txt")
    assert not fs.move(f"{DOCS}/a.txt", DOCS)
    assert _snapshot(fs) == before


def test_copy_names_increment() -> None:
    fs = make_fs()
    fs.create_file(DOCS, "note.txt", "hi")
    assert fs.copy(f"{DOCS}/note.txt", DOCS)
    assert fs.copy(f"{DOCS}/note.txt", DOCS)
    names = {node.name for node in fs.get_children(DOCS)}
    assert {"note.txt", "note_copy1.txt", "note_copy2.txt"} <= names
    assert fs.get_node(f"{DOCS}/note_copy2.txt").contents == "hi"


def test_copy_keeps_name_when_free() -> None:
    fs = make_fs()
    fs.create_file(DOCS, "note.txt", "hi")
    assert fs.copy(f"{DOCS}/note.txt", "/home/alice/Desktop")
    assert fs.exists("/home/alice/Desktop/note.txt")


def test_copy_directory_recursively_with_fresh_timestamps() -> None:
    clock = FakeClock()
    fs = make_fs(clock=clock)
    _build_project(fs)
    clock.advance(5000)
    assert fs.copy(f"{DOCS}/project", DOCS)
    copied = [node for node in fs.load() if node.path.startswith(f"{DOCS}/project_copy1")]
    assert {node.path for node in copied} == {
        f"{DOCS}/project_copy1",
        f"{DOCS}/project_copy1/README.md",
        f"{DOCS}/project_copy1/src",
        f"{DOCS}/project_copy1/src/main.py",
        f"{DOCS}/project_copy1/src/.env",
    }
    assert all(node.created_at == clock.now == node.modified_at for node in copied)
    assert fs.get_node(f"{DOCS}/project_copy1/src/.env").is_hidden
    # the source is untouched
    assert fs.exists(f"{DOCS}/project/src/main.py")


def test_copy_out_of_protected_root_is_writable() -> None:
    fs = make_fs()
    assert fs.copy("/applications/terminal.app", "/home/alice/Desktop")
    node = fs.get_node("/home/alice/Desktop/terminal.app")
    assert node.executable
    assert not node.read_only
    assert fs.update_file(node.path, "changed")


def test_copy_rejections() -> None:
    fs = make_fs()
    before = _snapshot(fs)
    assert not fs.copy(f"{DOCS}/readme.txt", "/applications")
    assert fs.last_failure == FailureReason.PERMISSION_DENIED
    assert not fs.copy(f"{DOCS}/missing.txt", DOCS)
    assert fs.last_failure == FailureReason.NOT_FOUND
    assert not fs.copy(f"{DOCS}/readme.txt", f"{DOCS}/readme.txt")
    assert _snapshot(fs) == before


@pytest.mark.parametrize(
    "name, attempt, expected",
    [
        ("note.txt", 1, "note_copy1.txt"),
        ("archive.tar.gz", 2, "archive.tar_copy2.gz"),
        ("Makefile", 3, "Makefile_copy3"),
        (".bashrc", 1, ".bashrc_copy1"),
    ],
)
def test_copy_name(name: str, attempt: int, expected: str) -> None:
    assert copy_name(name, attempt) == expected


def test_protected_mutations_leave_snapshot_unchanged() -> None:
    fs = make_fs()
    before = _snapshot(fs)
    results = [
        fs.create_file("/applications", "x.app"),
        fs.update_file("/applications/calculator.app", ""),
        fs.rename("/applications/calculator.app", "calc.app"),
        fs.delete_node("/applications/calculator.app"),
        fs.move("/applications/calculator.app", "/home/alice"),
        fs.copy("/home/alice/Documents/readme.txt", "/applications"),
    ]
    assert results == [False] * len(results)
    assert _snapshot(fs) == before


def test_journal_records_mutations(tmp_path) -> None:
    from deskfs.journal import EventJournal
    import json

    fs = make_fs()
    fs.journal = EventJournal(tmp_path / "events.jsonl")
    fs.create_file(DOCS, "note.txt")
    fs.delete_node("/")
    lines = (tmp_path / "events.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["event"] == "fs.create_file"
    assert record["payload"] == {"user": "alice", "path": f"{DOCS}/note.txt"}


def test_create_sees_record_stored_at_non_canonical_path() -> None:
    stray = make_file(f"{DOCS}//x.txt", f"{DOCS}/", "x.txt", "kept", "alice", 1)
    nodes = build_default_file_system("alice", 1) + [stray]
    fs = make_fs(storage=MemoryStorage({DEFAULT_STORAGE_KEY: encode_snapshot(nodes)}))

    assert fs.exists(f"{DOCS}/x.txt")
    assert not fs.create_file(DOCS, "x.txt", "new")
    assert fs.last_failure == FailureReason.ALREADY_EXISTS
    assert fs.get_file_contents(f"{DOCS}/x.txt") == "kept"
    assert [n.path for n in fs.load()].count(f"{DOCS}/x.txt") == 1
