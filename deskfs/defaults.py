# python
"""
deskfs/defaults.py
Generator for the default tree a fresh user starts with.

The catalog below evolves between releases; the reconciler adds any new
executables, documents and desktop shortcuts to existing snapshots.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .nodes import (
    EXECUTABLE_PERMS,
    READ_ONLY_DIR_PERMS,
    FileSystemNode,
    make_directory,
    make_file,
    now_ms,
)
from .paths import ROOT_PATH
from .policy import PROTECTED_ROOT
from .shortcut import (
    create_app_executable_contents,
    create_link_shortcut_contents,
    create_shortcut_contents,
)
from .users import home_path, sanitize_username

DOCUMENT_SUFFIX = ".txt"
README_NAME = "readme.txt"


@dataclass(frozen=True)
class SystemApp:
    id: str
    executable_name: str
    display_name: str
    icon: str
    desktop_icon_text: str
    include_desktop_shortcut: bool = True


SYSTEM_APPS: Tuple[SystemApp, ...] = (
    SystemApp("terminal", "terminal.app", "Terminal", "TerminalSquare", "Terminal"),
    SystemApp("file-explorer", "file-explorer.app", "File Explorer", "FolderClosed", "Files"),
    SystemApp("voxel-game", "voxel-game.app", "Voxel Game", "Gamepad2", "Voxel Game"),
    SystemApp("calculator", "calculator.app", "Calculator", "Calculator", "Calculator"),
    SystemApp("visual-novel", "visual-novel.app", "Visual Novel", "BookText", "Visual Novel"),
    SystemApp("text-editor", "text-editor.app", "Text Editor", "BookText", "Text Editor", False),
    SystemApp("document-viewer", "document-viewer.app", "Document Viewer", "BookOpen", "Document Viewer", False),
    SystemApp("settings", "settings.app", "Settings", "Settings", "Settings", False),
)

CV_SHORTCUT_NAME = "cv.shortcut"
SOURCE_LINK_SHORTCUT_NAME = "source-code.shortcut"
SOURCE_CODE_URL = "https://github.com/"

DEFAULT_DESKTOP_SHORTCUTS: Tuple[str, ...] = tuple(
    f"{app.id}.shortcut" for app in SYSTEM_APPS if app.include_desktop_shortcut
) + (CV_SHORTCUT_NAME, SOURCE_LINK_SHORTCUT_NAME)


def find_system_app(app_id: str) -> Optional[SystemApp]:
    for app in SYSTEM_APPS:
        if app.id == app_id:
            return app
    return None


def executable_path(app: SystemApp) -> str:
    return f"{PROTECTED_ROOT}/{app.executable_name}"


def build_readme_contents(username: str) -> str:
    home = home_path(username)
    return "\n".join(
        [
            f"Hello {sanitize_username(username)},",
            "",
            f"Your files live under {home}. Anything you place on the Desktop",
            "shows up as an icon; double-click a .shortcut to launch what it points at.",
            "",
            f"Installed applications are kept in {PROTECTED_ROOT} and cannot be",
            "modified, moved or deleted. Names starting with a dot are hidden.",
        ]
    )


def build_shortcuts_guide_contents() -> str:
    return "\n".join(
        [
            "Shortcut files are plain text, one key=value per line.",
            "",
            "type=application",
            f"target={PROTECTED_ROOT}/<name>.app",
            "args=<space separated arguments>",
            "",
            "type=link",
            "url=<address to open>",
            "",
            "Optional keys: name, icon, iconDisplayText, description.",
        ]
    )


DEFAULT_DOCUMENTS: Tuple[Tuple[str, str], ...] = (
    (README_NAME, "readme"),
    ("shortcuts-guide.txt", "shortcuts-guide"),
)


def _document_contents(kind: str, username: str) -> str:
    if kind == "readme":
        return build_readme_contents(username)
    return build_shortcuts_guide_contents()


def _build_base_nodes(username: str, now: int) -> List[FileSystemNode]:
    home = home_path(username)
    desktop = f"{home}/Desktop"
    documents = f"{home}/Documents"
    terminal_rc = "\n".join(
        [
            "# Terminal startup script",
            f"export HOME={home}",
            f"export PATH={PROTECTED_ROOT}",
            "alias edit=text-editor",
        ]
    )
    return [
        make_directory("/home", ROOT_PATH, "home", "root", now),
        make_directory(home, "/home", username, username, now),
        make_directory(desktop, home, "Desktop", username, now),
        make_directory(documents, home, "Documents", username, now),
        make_directory(PROTECTED_ROOT, ROOT_PATH, PROTECTED_ROOT.lstrip("/"), "root", now,
                       permissions=READ_ONLY_DIR_PERMS, read_only=True),
        make_file(f"{home}/.terminal_history", home, ".terminal_history", "", username, now,
                  permissions="rw-------"),
        make_file(f"{home}/.terminal_rc", home, ".terminal_rc", terminal_rc, username, now),
    ]


def _build_executables(now: int) -> List[FileSystemNode]:
    return [
        make_file(
            executable_path(app),
            PROTECTED_ROOT,
            app.executable_name,
            create_app_executable_contents(app.id, app.display_name),
            "root",
            now,
            permissions=EXECUTABLE_PERMS,
            read_only=True,
            executable=True,
        )
        for app in SYSTEM_APPS
    ]


def _build_documents(username: str, now: int) -> List[FileSystemNode]:
    documents = f"{home_path(username)}/Documents"
    return [
        make_file(f"{documents}/{name}", documents, name, _document_contents(kind, username), username, now)
        for name, kind in DEFAULT_DOCUMENTS
    ]


def _build_desktop_shortcuts(username: str, now: int) -> List[FileSystemNode]:
    desktop = f"{home_path(username)}/Desktop"
    shortcuts = []
    for app in SYSTEM_APPS:
        if not app.include_desktop_shortcut:
            continue
        contents = create_shortcut_contents(
            executable_path(app),
            name=app.desktop_icon_text,
            icon=app.icon,
            icon_display_text=app.desktop_icon_text,
        )
        shortcuts.append((f"{app.id}.shortcut", contents))
    viewer = find_system_app("document-viewer")
    shortcuts.append(
        (
            CV_SHORTCUT_NAME,
            create_shortcut_contents(
                executable_path(viewer),
                args=["CV.pdf", "CV.pdf"],
                name="CV",
                icon="BookOpen",
                icon_display_text="CV",
            ),
        )
    )
    shortcuts.append(
        (
            SOURCE_LINK_SHORTCUT_NAME,
            create_link_shortcut_contents(
                SOURCE_CODE_URL,
                name="Source Code",
                icon="Github",
                icon_display_text="Source",
                description="Open the project repository",
            ),
        )
    )
    return [
        make_file(f"{desktop}/{name}", desktop, name, contents, username, now)
        for name, contents in shortcuts
    ]


def build_default_file_system(username: str, now: Optional[int] = None) -> List[FileSystemNode]:
    """
    Return the full default node list for `username` (sanitized first).
    """
    username = sanitize_username(username)
    stamp = now_ms() if now is None else now
    return (
        _build_base_nodes(username, stamp)
        + _build_executables(stamp)
        + _build_documents(username, stamp)
        + _build_desktop_shortcuts(username, stamp)
    )
