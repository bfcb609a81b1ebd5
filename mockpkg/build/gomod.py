"""Minimal ``go.mod`` reader used for module-aware import resolution."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

_MODULE_LINE = re.compile(r"^module\s+(\S+)")
_REQUIRE_ENTRY = re.compile(r"^(\S+)\s+(v\S+)")
_REPLACE_ENTRY = re.compile(r"^(\S+)(?:\s+v\S+)?\s+=>\s+(\S+)(?:\s+(v\S+))?")


@dataclass(frozen=True)
class GoModule:
    """Module path, root directory and direct requirements of a module."""

    path: str
    root: Path
    requires: Dict[str, str] = field(default_factory=dict)
    replaces: Dict[str, str] = field(default_factory=dict)

    def owns(self, import_path: str) -> bool:
        return import_path == self.path or import_path.startswith(self.path + "/")


def find_module(start: Path) -> Optional[GoModule]:
    """Return the module enclosing ``start``, if any."""
    for directory in (start, *start.parents):
        candidate = directory / "go.mod"
        if candidate.is_file():
            return _load(candidate)
    return None


def _load(go_mod: Path) -> Optional[GoModule]:
    try:
        text = go_mod.read_text(encoding="utf-8")
    except OSError:
        return None

    module_path: Optional[str] = None
    requires: Dict[str, str] = {}
    replaces: Dict[str, str] = {}
    block: Optional[str] = None
    for raw in text.splitlines():
        line = raw.split("//", 1)[0].strip()
        if not line:
            continue
        if block is not None:
            if line == ")":
                block = None
                continue
            _record(block, line, requires, replaces)
            continue
        match = _MODULE_LINE.match(line)
        if match:
            module_path = match.group(1).strip('"')
            continue
        for keyword in ("require", "replace"):
            if line.startswith(keyword):
                rest = line[len(keyword) :].strip()
                if rest == "(":
                    block = keyword
                else:
                    _record(keyword, rest, requires, replaces)
                break

    if module_path is None:
        return None
    return GoModule(path=module_path, root=go_mod.parent, requires=requires, replaces=replaces)


def _record(keyword: str, line: str, requires: Dict[str, str], replaces: Dict[str, str]) -> None:
    if keyword == "require":
        match = _REQUIRE_ENTRY.match(line)
        if match:
            requires[match.group(1)] = match.group(2)
    else:
        match = _REPLACE_ENTRY.match(line)
        if match:
            target = match.group(2)
            if match.group(3):
                target = f"{target}@{match.group(3)}"
            replaces[match.group(1)] = target


def escape_module_path(path: str) -> str:
    """Escape upper-case letters the way the module cache does (``A`` -> ``!a``)."""
    return "".join(f"!{char.lower()}" if char.isupper() else char for char in path)


__all__ = ["GoModule", "escape_module_path", "find_module"]
