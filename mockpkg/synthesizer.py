"""Assemble the virtual interface from declared and resolved functions."""

from __future__ import annotations

from bisect import bisect_left
from typing import Iterable, List, Mapping, Sequence

from .errors import AmbiguousUnitError, EmptyInterfaceError
from .logging import get_logger
from .models import ResolvedPackage, SynthesizedInterface
from .types.model import Func, Interface, Named, TypeName

logger = get_logger("synthesizer")


def interface_name(directory_name: str) -> str:
    """Directory base name with its first character upper-cased."""
    if not directory_name:
        return directory_name
    return directory_name[0].upper() + directory_name[1:]


class InterfaceSynthesizer:
    """Selects the desired free functions and wraps them in an interface type.

    An empty ``desired`` sequence selects every declared function.
    """

    def __init__(self, desired: Iterable[str] = ()) -> None:
        self.desired: List[str] = sorted(desired)

    def wants(self, name: str) -> bool:
        if not self.desired:
            return True
        index = bisect_left(self.desired, name)
        return index < len(self.desired) and self.desired[index] == name

    def synthesize(
        self,
        declared: Mapping[str, Sequence[str]],
        packages: Sequence[ResolvedPackage],
    ) -> SynthesizedInterface:
        if len(packages) != 1:
            raise AmbiguousUnitError("too many packages")
        resolved = packages[0]

        functions: List[Func] = []
        for path, names in declared.items():
            for name in names:
                if not self.wants(name):
                    continue
                obj = resolved.lookup(name)
                if obj is None:
                    logger.warning("%s: function %s not found in package scope", path, name)
                    continue
                if not isinstance(obj, Func):
                    logger.warning("%s: %s is not a function", path, name)
                    continue
                if obj.is_generic:
                    logger.warning("%s: skipping generic function %s", path, name)
                    continue
                functions.append(obj)

        if not functions:
            raise EmptyInterfaceError("no functions for interface")

        name = interface_name(resolved.directory.name)
        iface = Interface(functions).complete()
        type_name = TypeName(name, resolved.package)
        named = Named(type_name, iface)
        type_name.set_type(named)
        logger.debug("Synthesized interface %s with %d functions", name, len(functions))
        return SynthesizedInterface(
            name=name,
            type=iface,
            named_type=named,
            package=resolved,
            functions=functions,
        )


def synthesize(
    declared: Mapping[str, Sequence[str]],
    packages: Sequence[ResolvedPackage],
    desired: Iterable[str] = (),
) -> SynthesizedInterface:
    return InterfaceSynthesizer(desired).synthesize(declared, packages)


__all__ = ["InterfaceSynthesizer", "interface_name", "synthesize"]
