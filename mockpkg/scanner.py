"""Directory listing with Go build-constraint filtering."""

from __future__ import annotations

from pathlib import Path
from typing import List

from .build.context import BuildContext
from .errors import DirectoryReadError
from .logging import get_logger

_SOURCE_SUFFIX = ".go"
_TEST_SUFFIX = "_test.go"

logger = get_logger("scanner")


def _is_candidate(path: Path) -> bool:
    name = path.name
    if not name.endswith(_SOURCE_SUFFIX) or name.endswith(_TEST_SUFFIX):
        return False
    return path.is_file()


def list_source_files(directory: Path, context: BuildContext) -> List[Path]:
    """Return the non-test ``.go`` files of ``directory`` that ``context`` builds.

    Files are returned sorted by name. Raises ``DirectoryReadError`` when the
    directory cannot be listed and ``FilterError`` for malformed directives.
    """
    try:
        entries = sorted(directory.iterdir(), key=lambda item: item.name)
    except OSError as exc:
        raise DirectoryReadError(directory, exc.strerror or str(exc)) from exc

    included: List[Path] = []
    for path in entries:
        if not _is_candidate(path):
            continue
        if context.match_file(directory, path.name):
            included.append(path)
        else:
            logger.debug("Excluded %s by build constraints", path)
    logger.debug("Included %d source files from %s", len(included), directory)
    return included


class SourceScanner:
    """Lists the buildable Go files of a directory under a fixed context."""

    def __init__(self, context: BuildContext) -> None:
        self.context = context

    def scan(self, directory: Path) -> List[Path]:
        return list_source_files(directory, self.context)


__all__ = ["SourceScanner", "list_source_files"]
