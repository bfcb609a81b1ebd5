"""Error taxonomy for the mockpkg pipeline.

Every error defined here is terminal for a run. The only recoverable
condition, a declared name that cannot be resolved to a function during
synthesis, is logged by the synthesizer and never raised.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class MockpkgError(RuntimeError):
    """Base class for failures surfaced by the pipeline."""


class ConfigError(MockpkgError):
    """Raised when the configuration file cannot be parsed."""


class LocationError(MockpkgError):
    """Raised when a location string cannot be resolved to a directory."""

    def __init__(self, location: str, reason: str) -> None:
        super().__init__(f"cannot locate {location!r}: {reason}")
        self.location = location
        self.reason = reason


class DirectoryReadError(MockpkgError):
    """Raised when a source directory cannot be listed."""

    def __init__(self, directory: Path, reason: str) -> None:
        super().__init__(f"cannot read directory {directory}: {reason}")
        self.directory = directory


class FilterError(MockpkgError):
    """Raised when a file's build constraints cannot be evaluated."""

    def __init__(self, path: Path, reason: str, line: Optional[int] = None) -> None:
        where = f"{path}:{line}" if line is not None else str(path)
        super().__init__(f"{where}: {reason}")
        self.path = path
        self.line = line
        self.reason = reason


class ParseError(MockpkgError):
    """Raised when a source file has a syntax error.

    ``line`` and ``column`` are 1-based.
    """

    def __init__(self, path: Path, line: int, column: int, reason: str = "syntax error") -> None:
        super().__init__(f"{path}:{line}:{column}: {reason}")
        self.path = path
        self.line = line
        self.column = column
        self.reason = reason


class TypeCheckError(MockpkgError):
    """Raised when semantic analysis of a compilation unit fails."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[Path] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        prefix = ""
        if path is not None:
            prefix = str(path)
            if line is not None:
                prefix += f":{line}"
                if column is not None:
                    prefix += f":{column}"
            prefix += ": "
        super().__init__(prefix + message)
        self.message = message
        self.path = path
        self.line = line
        self.column = column


class UnresolvedImportError(TypeCheckError):
    """An import path could not be resolved to a package."""


class AmbiguousSymbolError(TypeCheckError):
    """A package-level name is declared more than once."""


class AmbiguousUnitError(MockpkgError):
    """More than one compilation unit reached synthesis."""


class EmptyInterfaceError(MockpkgError):
    """No functions survived filtering and resolution."""


__all__ = [
    "AmbiguousSymbolError",
    "AmbiguousUnitError",
    "ConfigError",
    "DirectoryReadError",
    "EmptyInterfaceError",
    "FilterError",
    "LocationError",
    "MockpkgError",
    "ParseError",
    "TypeCheckError",
    "UnresolvedImportError",
]
