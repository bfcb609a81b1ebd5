"""Render types and objects in Go syntax."""

from __future__ import annotations

from typing import Callable, List, Optional

from ..syntax.nodes import ChanDir
from .model import (
    Array,
    Basic,
    Chan,
    Func,
    Interface,
    Map,
    Named,
    Package,
    Pointer,
    Signature,
    Slice,
    Struct,
    Tuple,
    Type,
    TypeParam,
    Union,
)
from .universe import ANY

Qualifier = Callable[[Package], str]


def path_qualifier(package: Package) -> str:
    return package.path


def relative_to(current: Optional[Package]) -> Qualifier:
    """Qualify by package name, omitting the qualifier for ``current``."""

    def _qualifier(package: Package) -> str:
        if current is not None and package is current:
            return ""
        return package.name

    return _qualifier


def type_string(typ: Type, qualifier: Qualifier | None = None) -> str:
    return _Writer(qualifier or path_qualifier).type(typ)


def signature_string(sig: Signature, qualifier: Qualifier | None = None) -> str:
    """Parameters and results without the leading ``func``."""
    return _Writer(qualifier or path_qualifier).signature(sig)


def object_string(func: Func, qualifier: Qualifier | None = None) -> str:
    writer = _Writer(qualifier or path_qualifier)
    prefix = ""
    if func.pkg is not None:
        qualified = writer.qualify(func.pkg)
        if qualified:
            prefix = qualified + "."
    return f"func {prefix}{func.name}{writer.type_params(func.signature)}{writer.signature(func.signature)}"


class _Writer:
    def __init__(self, qualifier: Qualifier) -> None:
        self._qualifier = qualifier
        self._seen: List[Type] = []

    def qualify(self, package: Package) -> str:
        return self._qualifier(package)

    def type(self, typ: Type) -> str:
        if typ is ANY:
            return "any"
        if isinstance(typ, Basic):
            return typ.name
        if isinstance(typ, Named):
            return self.named(typ)
        if isinstance(typ, TypeParam):
            return typ.name
        if isinstance(typ, Pointer):
            return "*" + self.type(typ.elem)
        if isinstance(typ, Slice):
            return "[]" + self.type(typ.elem)
        if isinstance(typ, Array):
            return f"[{typ.length}]" + self.type(typ.elem)
        if isinstance(typ, Map):
            return f"map[{self.type(typ.key)}]{self.type(typ.value)}"
        if isinstance(typ, Chan):
            return self.chan(typ)
        if isinstance(typ, Signature):
            return "func" + self.signature(typ)
        if isinstance(typ, Tuple):
            return self.tuple(typ, variadic=False)
        if isinstance(typ, Struct):
            return self.struct(typ)
        if isinstance(typ, Interface):
            return self.interface(typ)
        if isinstance(typ, Union):
            return " | ".join(("~" if term.tilde else "") + self.type(term.type) for term in typ.terms)
        return repr(typ)

    def named(self, typ: Named) -> str:
        text = typ.obj.name
        if typ.obj.pkg is not None:
            qualified = self.qualify(typ.obj.pkg)
            if qualified:
                text = f"{qualified}.{text}"
        if typ.type_args:
            text += "[" + ", ".join(self.type(arg) for arg in typ.type_args) + "]"
        return text

    def chan(self, typ: Chan) -> str:
        elem = self.type(typ.elem)
        if typ.dir is ChanDir.SEND:
            return f"chan<- {elem}"
        if typ.dir is ChanDir.RECV:
            return f"<-chan {elem}"
        if isinstance(typ.elem, Chan) and typ.elem.dir is ChanDir.RECV:
            return f"chan ({elem})"
        return f"chan {elem}"

    def tuple(self, tup: Tuple, *, variadic: bool) -> str:
        parts: List[str] = []
        for index, var in enumerate(tup.vars):
            if variadic and index == len(tup.vars) - 1 and isinstance(var.type, Slice):
                type_text = "..." + self.type(var.type.elem)
            else:
                type_text = self.type(var.type)
            parts.append(f"{var.name} {type_text}" if var.name else type_text)
        return "(" + ", ".join(parts) + ")"

    def type_params(self, sig: Signature) -> str:
        if not sig.type_params:
            return ""
        parts = []
        for param in sig.type_params:
            constraint = self.type(param.constraint) if param.constraint is not None else "any"
            parts.append(f"{param.name} {constraint}")
        return "[" + ", ".join(parts) + "]"

    def signature(self, sig: Signature) -> str:
        text = self.tuple(sig.params, variadic=sig.variadic)
        results = sig.results
        if len(results) == 0:
            return text
        if len(results) == 1 and not results.at(0).name:
            return f"{text} {self.type(results.at(0).type)}"
        return f"{text} {self.tuple(results, variadic=False)}"

    def struct(self, typ: Struct) -> str:
        parts: List[str] = []
        for field, tag in zip(typ.fields, typ.tags):
            text = self.type(field.type) if field.embedded else f"{field.name} {self.type(field.type)}"
            if tag:
                text += " " + _quote(tag)
            parts.append(text)
        return "struct{" + "; ".join(parts) + "}"

    def interface(self, typ: Interface) -> str:
        if typ.implicit and len(typ.embeddeds) == 1 and not typ.explicit_methods:
            return self.type(typ.embeddeds[0])
        if typ in self._seen:
            return "interface{...}"
        self._seen.append(typ)
        try:
            parts: List[str] = []
            for method in typ.explicit_methods:
                parts.append(method.name + self.signature(method.signature))
            for embedded in typ.embeddeds:
                parts.append(self.type(embedded))
            if typ.comparable:
                parts.append("comparable")
            return "interface{" + "; ".join(parts) + "}"
        finally:
            self._seen.pop()


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


__all__ = [
    "Qualifier",
    "object_string",
    "path_qualifier",
    "relative_to",
    "signature_string",
    "type_string",
]
