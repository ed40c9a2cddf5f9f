# python
"""
deskfs/execution.py
Turn "open this path" into an application launch request or a link redirection.

Resolution is two-level: a .shortcut names a target path, and the target
must be an app executable (a .app file or a node flagged executable) whose
descriptor names the application. Any other file is refused.
"""
from dataclasses import dataclass, field
import logging
from typing import Callable, List, Optional, Sequence

from .defaults import executable_path, find_system_app
from .events import EventChannel
from .nodes import FileSystemNode, NodeType
from .shortcut import AppShortcut, LinkShortcut, parse_app_executable, parse_shortcut

logger = logging.getLogger(__name__)

SHORTCUT_SUFFIX = ".shortcut"
APP_SUFFIX = ".app"


@dataclass(frozen=True)
class LaunchRequest:
    app_id: str
    args: List[str] = field(default_factory=list)


@dataclass
class ExecutionResult:
    ok: bool
    message: Optional[str] = None
    app_id: Optional[str] = None
    args: List[str] = field(default_factory=list)
    url: Optional[str] = None


class ApplicationLauncher:
    """
    Emits launch requests; the application shell subscribes and opens windows.
    """

    def __init__(self):
        self.requests = EventChannel("application.launch")

    def subscribe(self, listener: Callable[[LaunchRequest], None]) -> Callable[[], None]:
        return self.requests.subscribe(listener)

    def request_launch(self, app_id: str, args: Optional[Sequence[str]] = None) -> LaunchRequest:
        request = LaunchRequest(app_id=app_id, args=list(args or []))
        logger.info("Launch requested for %s %s", app_id, " ".join(request.args))
        self.requests.emit(request)
        return request


default_launcher = ApplicationLauncher()


def is_shortcut_file(node: FileSystemNode) -> bool:
    return node.type == NodeType.FILE and node.name.endswith(SHORTCUT_SUFFIX)


def is_executable_file(node: FileSystemNode) -> bool:
    return node.type == NodeType.FILE and (node.executable or node.name.endswith(APP_SUFFIX))


def _execute_application_node(
    fs,
    node: FileSystemNode,
    launcher: ApplicationLauncher,
    launch_args: Sequence[str] = (),
) -> ExecutionResult:
    parsed = parse_app_executable(fs.get_file_contents(node.path) or "")
    if parsed is None:
        return ExecutionResult(ok=False, message=f"Invalid app executable format: {node.name}")
    request = launcher.request_launch(parsed.app_id, launch_args)
    return ExecutionResult(ok=True, app_id=request.app_id, args=request.args)


def execute_file_path(fs, path: str, launcher: Optional[ApplicationLauncher] = None) -> ExecutionResult:
    """
    Execute the file at `path` through the filesystem `fs` (a FileSystem or NodeStore).

    Link shortcuts succeed without launching anything; the returned `url` is
    for the caller to navigate to.
    """
    launcher = launcher or default_launcher
    node = fs.get_node(path)
    if node is None or node.type != NodeType.FILE:
        return ExecutionResult(ok=False, message=f"File not found: {path}")

    if is_shortcut_file(node):
        shortcut = parse_shortcut(fs.get_file_contents(node.path) or "")
        if shortcut is None:
            return ExecutionResult(ok=False, message=f"Invalid shortcut format: {node.name}")
        if isinstance(shortcut, LinkShortcut):
            return ExecutionResult(ok=True, url=shortcut.url)
        if isinstance(shortcut, AppShortcut):
            target = fs.get_node(shortcut.target)
            if target is None or target.type != NodeType.FILE:
                return ExecutionResult(ok=False, message=f"Shortcut target not found: {shortcut.target}")
            if not is_executable_file(target):
                return ExecutionResult(ok=False, message=f"{target.name}: is not executable")
            return _execute_application_node(fs, target, launcher, shortcut.args)

    if is_executable_file(node):
        return _execute_application_node(fs, node, launcher)

    return ExecutionResult(ok=False, message=f"{node.name}: is not executable")


def launch_system_app(
    fs,
    app_id: str,
    args: Optional[Sequence[str]] = None,
    launcher: Optional[ApplicationLauncher] = None,
) -> ExecutionResult:
    """
    Run a bundled application by id through its executable under /applications.
    """
    app = find_system_app(app_id)
    if app is None:
        return ExecutionResult(ok=False, message=f"{app_id}: app command not found")
    launcher = launcher or default_launcher
    node = fs.get_node(executable_path(app))
    if node is None or not is_executable_file(node):
        return ExecutionResult(ok=False, message=f"File not found: {executable_path(app)}")
    return _execute_application_node(fs, node, launcher, args or ())
