"""Pipeline orchestration: locate, filter, parse, check and synthesize."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .build.context import BuildContext
from .locator import locate
from .logging import get_logger
from .models import DeclaredNames, ResolvedPackage, SourceUnit, SynthesizedInterface
from .scanner import list_source_files
from .synthesizer import InterfaceSynthesizer
from .syntax.parser import GoParser
from .types.loader import Loader
from .visitor import declared_funcs


class Pipeline:
    """Runs one analysis of a Go source directory.

    The build context is fixed at construction; every stage sees the same
    value. ``run`` performs the whole flow, the individual stage methods are
    public so callers can stop early.
    """

    def __init__(
        self,
        location: str,
        desired: Iterable[str] = (),
        context: BuildContext | None = None,
        *,
        cwd: Path | None = None,
        parser: GoParser | None = None,
    ) -> None:
        self.location = location
        self.desired = tuple(sorted(desired))
        self.context = context or BuildContext.default()
        self.cwd = cwd
        self.parser = parser or GoParser()
        self.logger = get_logger("pipeline")

    def locate(self) -> Path:
        directory = locate(self.location, self.context, self.cwd)
        self.logger.debug("Located %s at %s", self.location, directory)
        return directory

    def parse(self, directory: Path) -> Dict[Path, SourceUnit]:
        """Filter and parse ``directory`` into source units keyed by directory."""
        paths = list_source_files(directory, self.context)
        files = tuple(self.parser.parse_file(path) for path in paths)
        return {directory: SourceUnit(directory=directory, files=files)}

    def load(self, units: Sequence[SourceUnit]) -> tuple[DeclaredNames, List[ResolvedPackage]]:
        """Collect declared names on a worker thread while type-checking here."""
        declared: DeclaredNames = {}
        failures: List[BaseException] = []

        def _worker() -> None:
            try:
                for unit in units:
                    declared.update(declared_funcs(unit.files))
            except BaseException as exc:  # re-raised after join
                failures.append(exc)

        thread = threading.Thread(target=_worker, name="mockpkg-visitor", daemon=True)
        thread.start()
        try:
            packages = Loader(self.context, self.parser).load(units)
        finally:
            thread.join()
        if failures:
            raise failures[0]
        self.logger.debug("Declared %d functions", sum(len(names) for names in declared.values()))
        return declared, packages

    def interface(
        self, declared: DeclaredNames, packages: Sequence[ResolvedPackage]
    ) -> SynthesizedInterface:
        return InterfaceSynthesizer(self.desired).synthesize(declared, packages)

    def run(self) -> SynthesizedInterface:
        directory = self.locate()
        units = self.parse(directory)
        declared, packages = self.load(list(units.values()))
        iface = self.interface(declared, packages)
        self.logger.info(
            "Interface %s: %d of %d declared functions",
            iface.name,
            len(iface.functions),
            sum(len(names) for names in declared.values()),
        )
        return iface


def run_pipeline(
    location: str,
    desired: Iterable[str] = (),
    *,
    context: Optional[BuildContext] = None,
    tags: Sequence[str] = (),
    cwd: Path | None = None,
) -> SynthesizedInterface:
    """Convenience wrapper: apply extra ``tags`` to ``context`` and run the pipeline."""
    base = context or BuildContext.default()
    return Pipeline(location, desired, base.with_tags(*tags), cwd=cwd).run()


__all__ = ["Pipeline", "run_pipeline"]
