"""Predeclared Go identifiers and the built-in ``unsafe`` package."""

from __future__ import annotations

from typing import Dict

from .model import (
    Basic,
    BasicKind,
    Builtin,
    Const,
    Func,
    Interface,
    Named,
    Nil,
    Package,
    Scope,
    Signature,
    Tuple,
    TypeName,
    Var,
)

TYPES: Dict[BasicKind, Basic] = {kind: Basic(kind) for kind in BasicKind}

INVALID = TYPES[BasicKind.INVALID]
BYTE = Basic(BasicKind.UINT8, "byte")
RUNE = Basic(BasicKind.INT32, "rune")

# The empty interface spelled ``any``; rendered by name.
ANY = Interface()

UNIVERSE = Scope(name="universe")

_BASIC_NAMES = (
    BasicKind.BOOL,
    BasicKind.INT,
    BasicKind.INT8,
    BasicKind.INT16,
    BasicKind.INT32,
    BasicKind.INT64,
    BasicKind.UINT,
    BasicKind.UINT8,
    BasicKind.UINT16,
    BasicKind.UINT32,
    BasicKind.UINT64,
    BasicKind.UINTPTR,
    BasicKind.FLOAT32,
    BasicKind.FLOAT64,
    BasicKind.COMPLEX64,
    BasicKind.COMPLEX128,
    BasicKind.STRING,
)

_BUILTIN_FUNCS = (
    "append",
    "cap",
    "clear",
    "close",
    "complex",
    "copy",
    "delete",
    "imag",
    "len",
    "make",
    "max",
    "min",
    "new",
    "panic",
    "print",
    "println",
    "real",
    "recover",
)


def _build_error_type() -> Named:
    obj = TypeName("error", None)
    result = Var("", None, TYPES[BasicKind.STRING])
    method = Func("Error", None, Signature(Tuple(), Tuple([result])))
    named = Named(obj, Interface([method]))
    obj.set_type(named)
    # The receiver is attached after construction so it can refer to the type.
    method.signature.recv = Var("", None, named)
    return named


def _build_comparable_type() -> Named:
    obj = TypeName("comparable", None)
    named = Named(obj, Interface(comparable=True))
    obj.set_type(named)
    return named


ERROR = _build_error_type()
COMPARABLE = _build_comparable_type()


def _populate() -> None:
    for kind in _BASIC_NAMES:
        UNIVERSE.insert(TypeName(kind.value, None, TYPES[kind]))
    UNIVERSE.insert(TypeName("byte", None, BYTE))
    UNIVERSE.insert(TypeName("rune", None, RUNE))
    UNIVERSE.insert(TypeName("any", None, ANY))
    UNIVERSE.insert(ERROR.obj)
    UNIVERSE.insert(COMPARABLE.obj)
    UNIVERSE.insert(Const("true", None, TYPES[BasicKind.UNTYPED_BOOL], True))
    UNIVERSE.insert(Const("false", None, TYPES[BasicKind.UNTYPED_BOOL], False))
    UNIVERSE.insert(Const("iota", None, TYPES[BasicKind.UNTYPED_INT], 0))
    UNIVERSE.insert(Nil("nil", None, TYPES[BasicKind.UNTYPED_NIL]))
    for name in _BUILTIN_FUNCS:
        UNIVERSE.insert(Builtin(name, None, INVALID))


_populate()


def _build_unsafe() -> Package:
    scope = Scope(parent=UNIVERSE, name="package unsafe")
    package = Package(path="unsafe", name="unsafe", scope=scope)
    scope.insert(TypeName("Pointer", package, TYPES[BasicKind.UNSAFE_POINTER]))
    for name in ("Sizeof", "Alignof", "Offsetof", "Add", "Slice", "SliceData", "String", "StringData"):
        scope.insert(Builtin(name, package, INVALID))
    return package


UNSAFE = _build_unsafe()


def default_type(typ: Basic) -> Basic:
    """Default type of an untyped constant kind."""
    kind = typ.kind
    if kind is BasicKind.UNTYPED_BOOL:
        return TYPES[BasicKind.BOOL]
    if kind is BasicKind.UNTYPED_INT:
        return TYPES[BasicKind.INT]
    if kind is BasicKind.UNTYPED_RUNE:
        return RUNE
    if kind is BasicKind.UNTYPED_FLOAT:
        return TYPES[BasicKind.FLOAT64]
    if kind is BasicKind.UNTYPED_COMPLEX:
        return TYPES[BasicKind.COMPLEX128]
    if kind is BasicKind.UNTYPED_STRING:
        return TYPES[BasicKind.STRING]
    return typ


__all__ = [
    "ANY",
    "BYTE",
    "COMPARABLE",
    "ERROR",
    "INVALID",
    "RUNE",
    "TYPES",
    "UNIVERSE",
    "UNSAFE",
    "default_type",
]
