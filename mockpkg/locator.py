"""Resolve a location string to a source directory."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .build.context import BuildContext
from .errors import LocationError
from .logging import get_logger

logger = get_logger("locator")


def locate(location: str, context: BuildContext, cwd: Optional[Path] = None) -> Path:
    """Return the absolute, symlink-resolved directory named by ``location``.

    ``location`` is either a filesystem path or an import path resolved
    through ``context`` as seen from ``cwd``.
    """
    if not location:
        raise LocationError(location, "empty location")

    base = (cwd or Path.cwd()).expanduser()
    candidate = Path(location).expanduser()
    if not candidate.is_absolute():
        candidate = base / candidate

    if not candidate.is_dir():
        imported = context.import_dir(location, base)
        if imported is None:
            raise LocationError(location, "no such directory or import path")
        logger.debug("Resolved import path %s to %s", location, imported)
        candidate = imported

    try:
        directory = candidate.resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise LocationError(location, str(exc)) from exc
    if not directory.is_dir():
        raise LocationError(location, "not a directory")
    return directory


__all__ = ["locate"]
