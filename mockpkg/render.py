"""Rendering of synthesized interfaces for downstream mock generators."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from jinja2 import Environment, FileSystemLoader

from .models import SynthesizedInterface
from .types.model import Package
from .types.typestring import signature_string

DEFAULT_PACKAGE = "mocks"


class InterfaceGenerator(Protocol):
    """Collaborator that turns a synthesized interface into source text."""

    def generate(self, iface: SynthesizedInterface, *, package: str = DEFAULT_PACKAGE) -> str:
        ...


@dataclass(frozen=True)
class ImportEntry:
    path: str
    alias: Optional[str] = None


@dataclass(frozen=True)
class MethodEntry:
    name: str
    signature: str


class ImportTracker:
    """Qualifier that records every package a rendered type refers to.

    Packages whose name collides with an earlier one get a numbered alias.
    """

    def __init__(self, current: Optional[Package] = None) -> None:
        self.current = current
        self._names: Dict[str, str] = {}
        self._taken: Dict[str, str] = {}

    def __call__(self, package: Package) -> str:
        if self.current is not None and package is self.current:
            return ""
        local = self._names.get(package.path)
        if local is not None:
            return local
        local = package.name
        suffix = 1
        while local in self._taken:
            suffix += 1
            local = f"{package.name}{suffix}"
        self._names[package.path] = local
        self._taken[local] = package.path
        return local

    def imports(self) -> List[ImportEntry]:
        entries: List[ImportEntry] = []
        for path in sorted(self._names):
            local = self._names[path]
            base = path.rstrip("/").rsplit("/", 1)[-1]
            entries.append(ImportEntry(path=path, alias=None if local == base else local))
        return entries


class InterfaceDeclarationGenerator:
    """Renders the interface as a standalone Go type declaration."""

    template_name = "interface.go.j2"

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def generate(self, iface: SynthesizedInterface, *, package: str = DEFAULT_PACKAGE) -> str:
        source = iface.package.package
        tracker = ImportTracker(current=source if source.name == package else None)
        methods = [
            MethodEntry(name=method.name, signature=signature_string(method.signature, tracker))
            for method in iface.methods
        ]
        template = self._env.get_template(self.template_name)
        return template.render(
            package=package,
            imports=tracker.imports(),
            name=iface.name,
            source=source,
            methods=methods,
        )


__all__ = [
    "DEFAULT_PACKAGE",
    "ImportEntry",
    "ImportTracker",
    "InterfaceDeclarationGenerator",
    "InterfaceGenerator",
    "MethodEntry",
]
