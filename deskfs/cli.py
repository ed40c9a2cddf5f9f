# python
"""
deskfs/cli.py
Command line access to a persisted deskfs snapshot.

Usage:
    python -m deskfs ls ~/Desktop
    python -m deskfs run ~/Desktop/terminal.shortcut
"""
import argparse
import datetime
import json
import logging
import pathlib
import sys
from typing import List, Optional

from .config import load_config
from .errors import describe
from .execution import ApplicationLauncher, execute_file_path
from .filesystem import FileSystem
from .journal import EventJournal
from .nodes import FileSystemNode, NodeType
from .paths import node_name, normalize, parent_path
from .storage import JsonFileStorage
from .store import NodeStore
from .users import EnvUserProvider, StaticUserProvider

logger = logging.getLogger(__name__)


def _format_timestamp(ms: int) -> str:
    dt = datetime.datetime.fromtimestamp(ms / 1000, tz=datetime.timezone.utc)
    return dt.strftime("%b %d %H:%M")


def format_ls_entry(node: FileSystemNode, name: Optional[str] = None) -> str:
    kind = "d" if node.type == NodeType.DIRECTORY else "-"
    links = 2 if node.type == NodeType.DIRECTORY else 1
    return (
        f"{kind}{node.permissions} {links:>3} {node.owner} {node.group} "
        f"{node.size:>8} {_format_timestamp(node.modified_at)} {name or node.name}"
    )


def log_level(config: dict, verbose: bool = False) -> str:
    if verbose:
        return "DEBUG"
    return str(config["logging"]["level"]).upper()


def resolve_path(value: str, home: str) -> str:
    if value == "~" or value.startswith("~/"):
        return normalize(home + value[1:])
    if value.startswith("/"):
        return normalize(value)
    return normalize(f"{home}/{value}")


def build_filesystem(config: dict, username: Optional[str] = None) -> FileSystem:
    storage = JsonFileStorage(pathlib.Path(config["storage"]["path"]))
    store = NodeStore(
        storage,
        StaticUserProvider(username) if username else EnvUserProvider(fallback=config["user"]["default"]),
        key=config["storage"]["filesystem_key"],
    )
    journal_path = config["journal"]["path"]
    journal = EventJournal(pathlib.Path(journal_path), config["version"]) if journal_path else None
    return FileSystem(store, journal=journal)


def _print_tree(record: dict, indent: str = "") -> None:
    for child in record.get("children", []):
        suffix = "/" if child["type"] == "directory" else ""
        print(f"{indent}{child['name']}{suffix}")
        if child["type"] == "directory":
            _print_tree(child, indent + "  ")


def _report(ok: bool, fs: FileSystem, command: str, target: str) -> int:
    if ok:
        return 0
    print(f"{command}: {target}: {describe(fs.last_failure)}", file=sys.stderr)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="deskfs", description="Inspect and modify a deskfs snapshot.")
    parser.add_argument("--storage", help="path of the JSON storage file")
    parser.add_argument("--user", help="username whose home is used for ~ and defaults")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("ls", help="list a directory")
    ls.add_argument("path", nargs="?", default="~")
    ls.add_argument("-a", "--all", action="store_true", help="include hidden entries")

    tree = sub.add_parser("tree", help="print a directory tree")
    tree.add_argument("path", nargs="?", default="/")

    for name in ("cat", "rm", "run", "stat"):
        cmd = sub.add_parser(name)
        cmd.add_argument("path")

    for name in ("mkdir", "touch"):
        cmd = sub.add_parser(name)
        cmd.add_argument("path")

    write = sub.add_parser("write", help="replace (or create) a file's contents")
    write.add_argument("path")
    write.add_argument("contents")

    for name in ("mv", "cp"):
        cmd = sub.add_parser(name)
        cmd.add_argument("source")
        cmd.add_argument("dest", help="destination directory")

    rename = sub.add_parser("rename")
    rename.add_argument("path")
    rename.add_argument("new_name")

    find = sub.add_parser("find", help="search names")
    find.add_argument("query")
    find.add_argument("--start", default="/")

    sub.add_parser("reset", help="discard the snapshot and start from the default tree")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    overrides = {"storage": {"path": args.storage}} if args.storage else None
    config = load_config(overrides)
    logging.basicConfig(level=log_level(config, args.verbose))

    fs = build_filesystem(config, args.user)
    home = fs.store.home
    cmd = args.command

    if cmd == "ls":
        target = resolve_path(args.path, home)
        node = fs.get_node(target)
        if node is None:
            print(f"ls: cannot access '{args.path}': No such file or directory", file=sys.stderr)
            return 1
        entries = fs.get_children(target, include_hidden=args.all) if node.type == NodeType.DIRECTORY else [node]
        for entry in entries:
            print(format_ls_entry(entry))
        return 0
    if cmd == "tree":
        tree = fs.get_directory_tree(resolve_path(args.path, home))
        if tree is None:
            print(f"tree: {args.path}: No such file or directory", file=sys.stderr)
            return 1
        print(tree["path"])
        _print_tree(tree, "  ")
        return 0
    if cmd == "cat":
        contents = fs.get_file_contents(resolve_path(args.path, home))
        if contents is None:
            print(f"cat: {args.path}: No such file", file=sys.stderr)
            return 1
        print(contents)
        return 0
    if cmd == "stat":
        target = resolve_path(args.path, home)
        node = fs.get_node(target)
        if node is None:
            print(f"stat: {args.path}: No such file or directory", file=sys.stderr)
            return 1
        record = node.to_record()
        record.pop("contents", None)
        record["stats"] = fs.get_stats(target)
        print(json.dumps(record, indent=2))
        return 0
    if cmd in ("mkdir", "touch"):
        target = resolve_path(args.path, home)
        if cmd == "mkdir":
            ok = fs.create_directory(parent_path(target), node_name(target))
        else:
            ok = fs.create_file(parent_path(target), node_name(target))
        return _report(ok, fs, cmd, args.path)
    if cmd == "write":
        target = resolve_path(args.path, home)
        if fs.exists(target):
            ok = fs.update_file(target, args.contents)
        else:
            ok = fs.create_file(parent_path(target), node_name(target), args.contents)
        return _report(ok, fs, cmd, args.path)
    if cmd == "rm":
        return _report(fs.delete_node(resolve_path(args.path, home)), fs, cmd, args.path)
    if cmd in ("mv", "cp"):
        source = resolve_path(args.source, home)
        dest = resolve_path(args.dest, home)
        ok = fs.move(source, dest) if cmd == "mv" else fs.copy(source, dest)
        return _report(ok, fs, cmd, args.source)
    if cmd == "rename":
        return _report(fs.rename(resolve_path(args.path, home), args.new_name), fs, cmd, args.path)
    if cmd == "find":
        for node in fs.search_files(args.query, resolve_path(args.start, home)):
            print(node.path)
        return 0
    if cmd == "run":
        launcher = ApplicationLauncher()
        launcher.subscribe(lambda request: print(f"launch {request.app_id} {' '.join(request.args)}".rstrip()))
        result = execute_file_path(fs, resolve_path(args.path, home), launcher)
        if result.url:
            print(f"open {result.url}")
        if not result.ok:
            print(result.message, file=sys.stderr)
            return 1
        return 0
    if cmd == "reset":
        fs.store.reset()
        fs.load()
        return 0
    return 2


if __name__ == "__main__":
    sys.exit(main())
