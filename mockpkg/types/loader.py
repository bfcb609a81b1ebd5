"""Turn parsed compilation units into resolved packages."""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..build.context import BuildContext
from ..logging import get_logger
from ..models import ResolvedPackage, SourceUnit
from ..syntax.parser import GoParser
from .importer import SourceImporter

logger = get_logger("loader")


class Loader:
    """Type-checks source units under one build context."""

    def __init__(self, context: BuildContext, parser: Optional[GoParser] = None) -> None:
        self.context = context
        self.parser = parser

    def load(self, units: Iterable[SourceUnit]) -> List[ResolvedPackage]:
        importer = SourceImporter(self.context, self.parser)
        resolved: List[ResolvedPackage] = []
        for unit in units:
            package = importer.check_unit(unit.directory, unit.files)
            resolved.append(
                ResolvedPackage(
                    package=package,
                    directory=unit.directory,
                    files=tuple(syntax.path for syntax in unit.files),
                )
            )
            logger.debug("Resolved package %s at %s", package.path, unit.directory)
        return resolved


__all__ = ["Loader"]
