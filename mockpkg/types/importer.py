"""Source importer: loads imported packages through the build context."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set

from ..build.context import BuildContext
from ..errors import DirectoryReadError, TypeCheckError, UnresolvedImportError
from ..logging import get_logger
from ..scanner import list_source_files
from ..syntax.nodes import SyntaxFile
from ..syntax.parser import GoParser
from .checker import PackageChecker
from .model import Package, Scope
from .universe import UNIVERSE, UNSAFE

logger = get_logger("importer")

CGO_PATH = "C"


class SourceImporter:
    """Loads packages from source, one instance per pipeline run.

    Imported packages are declared only; their objects resolve on first use.
    """

    def __init__(self, context: BuildContext, parser: Optional[GoParser] = None) -> None:
        self.context = context
        self.parser = parser or GoParser()
        self._packages: Dict[Path, Package] = {}
        self._edges: Dict[Path, Set[Path]] = {}
        self._cgo: Optional[Package] = None

    def import_package(self, import_path: str, src_dir: Path) -> Package:
        """Return the package ``import_path`` names when imported from ``src_dir``."""
        if import_path == "unsafe":
            return UNSAFE
        if import_path == CGO_PATH:
            return self._cgo_package()

        directory = self.context.import_dir(import_path, src_dir)
        if directory is None:
            raise UnresolvedImportError(f"could not import {import_path} (cannot find package)")
        directory = directory.resolve()
        self._add_edge(src_dir.resolve(), directory, import_path)

        cached = self._packages.get(directory)
        if cached is not None:
            return cached

        try:
            paths = list_source_files(directory, self.context)
        except DirectoryReadError as exc:
            raise UnresolvedImportError(f"could not import {import_path} ({exc})") from exc
        if not paths:
            raise UnresolvedImportError(
                f"could not import {import_path} (no buildable Go source files in {directory})"
            )

        files = [self.parser.parse_file(path) for path in paths]
        name = package_name(files, directory)
        if import_path.startswith("."):
            import_path = self.context.import_path_for_dir(directory)
        package = Package(
            path=import_path,
            name=name,
            scope=Scope(parent=UNIVERSE, name=f"package {name}"),
            directory=directory,
        )
        self._packages[directory] = package
        PackageChecker(package, files, self, directory=directory, eager=False).declare()
        logger.debug("Imported %s from %s (%d files)", import_path, directory, len(files))
        return package

    def check_unit(self, directory: Path, files: Sequence[SyntaxFile]) -> Package:
        """Declare and fully check the unit rooted at ``directory``."""
        name = package_name(files, directory) if files else directory.name
        package = Package(
            path=self.context.import_path_for_dir(directory),
            name=name,
            scope=Scope(parent=UNIVERSE, name=f"package {name}"),
            directory=directory,
        )
        self._packages[directory] = package
        return PackageChecker(package, files, self, directory=directory, eager=True).check()

    def _cgo_package(self) -> Package:
        if self._cgo is None:
            self._cgo = Package(path=CGO_PATH, name=CGO_PATH, scope=Scope(name="package C"), fake=True)
        return self._cgo

    def _add_edge(self, source: Path, target: Path, import_path: str) -> None:
        if source == target or self._reaches(target, source):
            raise TypeCheckError(f"import cycle not allowed: {import_path}")
        self._edges.setdefault(source, set()).add(target)

    def _reaches(self, start: Path, goal: Path) -> bool:
        pending: List[Path] = [start]
        seen: Set[Path] = set()
        while pending:
            current = pending.pop()
            if current == goal:
                return True
            if current in seen:
                continue
            seen.add(current)
            pending.extend(self._edges.get(current, ()))
        return False


def package_name(files: Sequence[SyntaxFile], directory: Path) -> str:
    """Return the common package clause of ``files`` or raise ``TypeCheckError``."""
    first = files[0]
    for syntax in files[1:]:
        if syntax.package != first.package:
            raise TypeCheckError(
                f"found packages {first.package} ({first.path.name}) and "
                f"{syntax.package} ({syntax.path.name}) in {directory}",
                path=syntax.path,
            )
    return first.package


__all__ = ["CGO_PATH", "SourceImporter", "package_name"]
