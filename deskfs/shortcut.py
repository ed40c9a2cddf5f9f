# python
"""
deskfs/shortcut.py
Parser and builders for the key=value text formats stored in .shortcut and .app files.

Grammar: one `key=value` per line, lines split on \\n or \\r\\n and trimmed,
blank lines and lines starting with "#" ignored, the first "=" separates key
from value, lines without "=" or with an empty key are skipped, and a repeated
key keeps its last value.
"""
from dataclasses import dataclass, field
import re
from typing import Dict, List, Optional, Sequence, Union

SHORTCUT_HEADER = "# deskfs.shortcut v1"
APP_HEADER = "# deskfs.app v1"

_LINE_SPLIT = re.compile(r"\r?\n")


@dataclass(frozen=True)
class AppShortcut:
    target: str
    args: List[str] = field(default_factory=list)
    name: Optional[str] = None
    icon: Optional[str] = None
    icon_display_text: Optional[str] = None
    description: Optional[str] = None
    type: str = "application"


@dataclass(frozen=True)
class LinkShortcut:
    url: str
    name: Optional[str] = None
    icon: Optional[str] = None
    icon_display_text: Optional[str] = None
    description: Optional[str] = None
    type: str = "link"


@dataclass(frozen=True)
class AppExecutable:
    app_id: str
    name: Optional[str] = None
    type: str = "application"


Shortcut = Union[AppShortcut, LinkShortcut]


def parse_key_value_text(contents: str) -> Dict[str, str]:
    parsed: Dict[str, str] = {}
    for raw_line in _LINE_SPLIT.split(contents or ""):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key:
            continue
        parsed[key] = value.strip()
    return parsed


def _optional(parsed: Dict[str, str], key: str) -> Optional[str]:
    return parsed.get(key) or None


def parse_shortcut(contents: str) -> Optional[Shortcut]:
    """
    Parse .shortcut contents into an AppShortcut or LinkShortcut, or None if malformed.
    """
    parsed = parse_key_value_text(contents)
    kind = parsed.get("type")
    metadata = {
        "name": _optional(parsed, "name"),
        "icon": _optional(parsed, "icon"),
        "icon_display_text": _optional(parsed, "iconDisplayText"),
        "description": _optional(parsed, "description"),
    }
    if kind == "application":
        target = parsed.get("target")
        if not target:
            return None
        args = parsed.get("args", "").split()
        return AppShortcut(target=target, args=args, **metadata)
    if kind == "link":
        url = parsed.get("url")
        if not url:
            return None
        return LinkShortcut(url=url, **metadata)
    return None


def parse_app_executable(contents: str) -> Optional[AppExecutable]:
    parsed = parse_key_value_text(contents)
    if parsed.get("type") != "application":
        return None
    app_id = parsed.get("appId")
    if not app_id:
        return None
    return AppExecutable(app_id=app_id, name=_optional(parsed, "name"))


def _metadata_lines(
    name: Optional[str],
    icon: Optional[str],
    icon_display_text: Optional[str],
    description: Optional[str],
) -> List[str]:
    lines = []
    if name:
        lines.append(f"name={name}")
    if icon:
        lines.append(f"icon={icon}")
    if icon_display_text:
        lines.append(f"iconDisplayText={icon_display_text}")
    if description:
        lines.append(f"description={description}")
    return lines


def create_shortcut_contents(
    target: str,
    args: Optional[Sequence[str]] = None,
    name: Optional[str] = None,
    icon: Optional[str] = None,
    icon_display_text: Optional[str] = None,
    description: Optional[str] = None,
) -> str:
    lines = [SHORTCUT_HEADER, "type=application", f"target={target}"]
    lines.extend(_metadata_lines(name, icon, icon_display_text, description))
    lines.append("args=" + " ".join(args or []))
    return "\n".join(lines)


def create_link_shortcut_contents(
    url: str,
    name: Optional[str] = None,
    icon: Optional[str] = None,
    icon_display_text: Optional[str] = None,
    description: Optional[str] = None,
) -> str:
    lines = [SHORTCUT_HEADER, "type=link", f"url={url}"]
    lines.extend(_metadata_lines(name, icon, icon_display_text, description))
    return "\n".join(lines)


def create_app_executable_contents(app_id: str, name: str) -> str:
    return "\n".join([APP_HEADER, "type=application", f"appId={app_id}", f"name={name}"])
