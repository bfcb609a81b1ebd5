"""Core data models shared across mockpkg pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .syntax.nodes import SyntaxFile
from .types.model import Func, Interface, Named, Object, Package, Scope

# Exported free-function names per file path, in source order.
DeclaredNames = Dict[str, List[str]]


@dataclass(frozen=True)
class SourceUnit:
    """Parsed files of one directory, in listing order."""

    directory: Path
    files: Tuple[SyntaxFile, ...] = ()

    @property
    def package_name(self) -> str:
        return self.files[0].package if self.files else ""


@dataclass
class ResolvedPackage:
    """Type-checked compilation unit."""

    package: Package
    directory: Path
    files: Tuple[Path, ...] = ()

    @property
    def name(self) -> str:
        return self.package.name

    @property
    def path(self) -> str:
        return self.package.path

    @property
    def scope(self) -> Scope:
        return self.package.scope

    def lookup(self, name: str) -> Optional[Object]:
        return self.package.scope.lookup(name)


@dataclass
class SynthesizedInterface:
    """Virtual interface aggregating the selected free functions."""

    name: str
    type: Interface
    named_type: Named
    package: ResolvedPackage
    functions: List[Func] = field(default_factory=list)

    @property
    def methods(self) -> Tuple[Func, ...]:
        """Interface members sorted by name."""
        return self.type.methods


__all__ = ["DeclaredNames", "ResolvedPackage", "SourceUnit", "SynthesizedInterface"]
