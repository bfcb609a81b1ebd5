"""Semantic model of Go types, objects and scopes.

Objects of imported packages resolve lazily: an object created with a
resolver computes its type the first time ``obj.type`` is read, and a
``Named`` type computes its underlying type and method set on first use.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from ..errors import TypeCheckError
from ..syntax.nodes import ChanDir, Position


class BasicKind(str, Enum):
    INVALID = "invalid"
    BOOL = "bool"
    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    UINTPTR = "uintptr"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    COMPLEX64 = "complex64"
    COMPLEX128 = "complex128"
    STRING = "string"
    UNSAFE_POINTER = "unsafe.Pointer"
    UNTYPED_BOOL = "untyped bool"
    UNTYPED_INT = "untyped int"
    UNTYPED_RUNE = "untyped rune"
    UNTYPED_FLOAT = "untyped float"
    UNTYPED_COMPLEX = "untyped complex"
    UNTYPED_STRING = "untyped string"
    UNTYPED_NIL = "untyped nil"


INTEGER_KINDS = frozenset(
    {
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
        BasicKind.UNTYPED_INT,
        BasicKind.UNTYPED_RUNE,
    }
)
FLOAT_KINDS = frozenset({BasicKind.FLOAT32, BasicKind.FLOAT64, BasicKind.UNTYPED_FLOAT})
COMPLEX_KINDS = frozenset({BasicKind.COMPLEX64, BasicKind.COMPLEX128, BasicKind.UNTYPED_COMPLEX})
UNTYPED_KINDS = frozenset(
    {
        BasicKind.UNTYPED_BOOL,
        BasicKind.UNTYPED_INT,
        BasicKind.UNTYPED_RUNE,
        BasicKind.UNTYPED_FLOAT,
        BasicKind.UNTYPED_COMPLEX,
        BasicKind.UNTYPED_STRING,
        BasicKind.UNTYPED_NIL,
    }
)


class Type:
    """Base class of all types."""

    @property
    def underlying(self) -> "Type":
        return self

    def __str__(self) -> str:
        from .typestring import type_string

        return type_string(self)


class Basic(Type):
    def __init__(self, kind: BasicKind, name: Optional[str] = None) -> None:
        self.kind = kind
        self.name = name or kind.value

    @property
    def is_untyped(self) -> bool:
        return self.kind in UNTYPED_KINDS

    @property
    def is_integer(self) -> bool:
        return self.kind in INTEGER_KINDS

    @property
    def is_numeric(self) -> bool:
        return self.kind in INTEGER_KINDS or self.kind in FLOAT_KINDS or self.kind in COMPLEX_KINDS

    def __repr__(self) -> str:
        return f"Basic({self.name})"


class Pointer(Type):
    def __init__(self, elem: Type) -> None:
        self.elem = elem


class Slice(Type):
    def __init__(self, elem: Type) -> None:
        self.elem = elem


class Array(Type):
    def __init__(self, length: int, elem: Type) -> None:
        self.length = length
        self.elem = elem


class Map(Type):
    def __init__(self, key: Type, value: Type) -> None:
        self.key = key
        self.value = value


class Chan(Type):
    def __init__(self, direction: ChanDir, elem: Type) -> None:
        self.dir = direction
        self.elem = elem


class Tuple(Type):
    """Ordered list of variables (parameters or results)."""

    def __init__(self, variables: Sequence["Var"] = ()) -> None:
        self.vars: tuple["Var", ...] = tuple(variables)

    def __len__(self) -> int:
        return len(self.vars)

    def __iter__(self) -> Iterator["Var"]:
        return iter(self.vars)

    def at(self, index: int) -> "Var":
        return self.vars[index]


class Signature(Type):
    def __init__(
        self,
        params: Tuple,
        results: Tuple,
        variadic: bool = False,
        recv: Optional["Var"] = None,
        type_params: Sequence["TypeParam"] = (),
    ) -> None:
        self.params = params
        self.results = results
        self.variadic = variadic
        self.recv = recv
        self.type_params: tuple["TypeParam", ...] = tuple(type_params)


class Struct(Type):
    def __init__(self, fields: Sequence["Var"] = (), tags: Sequence[Optional[str]] = ()) -> None:
        self.fields: tuple["Var", ...] = tuple(fields)
        self.tags: tuple[Optional[str], ...] = tuple(tags) or tuple(None for _ in self.fields)


class Term:
    def __init__(self, tilde: bool, type_: Type) -> None:
        self.tilde = tilde
        self.type = type_


class Union(Type):
    def __init__(self, terms: Sequence[Term]) -> None:
        self.terms: tuple[Term, ...] = tuple(terms)


class Interface(Type):
    """Interface with explicit methods and embedded types.

    ``methods`` returns the complete method set (explicit plus embedded),
    sorted by name, the way a completed go/types interface orders them.
    """

    def __init__(
        self,
        methods: Sequence["Func"] = (),
        embeddeds: Sequence[Type] = (),
        *,
        comparable: bool = False,
        implicit: bool = False,
    ) -> None:
        self.explicit_methods: tuple["Func", ...] = tuple(methods)
        self.embeddeds: tuple[Type, ...] = tuple(embeddeds)
        self.comparable = comparable
        self.implicit = implicit
        self._all_methods: Optional[tuple["Func", ...]] = None

    def complete(self) -> "Interface":
        if self._all_methods is not None:
            return self
        seen: Dict[str, "Func"] = {}
        for method in self.explicit_methods:
            seen.setdefault(method.name, method)
        for embedded in self.embeddeds:
            under = embedded.underlying
            if isinstance(under, Interface):
                for method in under.methods:
                    seen.setdefault(method.name, method)
        self._all_methods = tuple(seen[name] for name in sorted(seen))
        return self

    @property
    def methods(self) -> tuple["Func", ...]:
        self.complete()
        assert self._all_methods is not None
        return self._all_methods

    @property
    def is_method_set(self) -> bool:
        """True unless the interface carries a type set (constraint only)."""
        if self.comparable:
            return False
        for embedded in self.embeddeds:
            under = embedded.underlying
            if not isinstance(under, Interface) or not under.is_method_set:
                return False
        return True

    def num_methods(self) -> int:
        return len(self.methods)


class TypeParam(Type):
    def __init__(self, obj: "TypeName", index: int, constraint: Optional[Type] = None) -> None:
        self.obj = obj
        self.index = index
        self.constraint = constraint

    @property
    def name(self) -> str:
        return self.obj.name


class Named(Type):
    """A defined type; the underlying type and methods may resolve lazily."""

    def __init__(
        self,
        obj: "TypeName",
        underlying: Optional[Type] = None,
        methods: Sequence["Func"] = (),
        *,
        type_params: Sequence[TypeParam] = (),
        origin: Optional["Named"] = None,
        type_args: Sequence[Type] = (),
    ) -> None:
        self.obj = obj
        self._underlying = underlying
        self._methods: List["Func"] = list(methods)
        self.type_params: tuple[TypeParam, ...] = tuple(type_params)
        self.origin = origin
        self.type_args: tuple[Type, ...] = tuple(type_args)
        self._underlying_resolver: Optional[Callable[[], Type]] = None
        self._resolving = False

    def set_underlying_resolver(self, resolver: Callable[[], Type]) -> None:
        self._underlying_resolver = resolver

    def set_underlying(self, underlying: Type) -> None:
        self._underlying = underlying

    @property
    def underlying(self) -> Type:
        if self._underlying is None:
            resolver = self._underlying_resolver
            if resolver is None:
                raise TypeCheckError(f"type {self.obj.name} has no underlying type")
            if self._resolving:
                raise TypeCheckError(
                    f"invalid recursive type {self.obj.name}",
                    path=self.obj.file,
                    line=self.obj.pos.line if self.obj.pos else None,
                    column=self.obj.pos.column if self.obj.pos else None,
                )
            self._resolving = True
            try:
                self._underlying = resolver()
            finally:
                self._resolving = False
            self._underlying_resolver = None
        return self._underlying

    @property
    def methods(self) -> tuple["Func", ...]:
        return tuple(self._methods)

    def add_method(self, method: "Func") -> None:
        self._methods.append(method)

    @property
    def name(self) -> str:
        return self.obj.name

    def __repr__(self) -> str:
        return f"Named({self.obj.name})"


# -- objects ----------------------------------------------------------------


class Object:
    """A named language entity: type name, function, variable, constant or package name."""

    def __init__(
        self,
        name: str,
        pkg: Optional["Package"],
        type_: Optional[Type] = None,
        *,
        pos: Optional[Position] = None,
        file: Optional[Path] = None,
        resolver: Optional[Callable[["Object"], None]] = None,
    ) -> None:
        self.name = name
        self.pkg = pkg
        self._type = type_
        self.pos = pos
        self.file = file
        self._resolver = resolver

    @property
    def type(self) -> Type:
        if self._type is None and self._resolver is not None:
            resolver, self._resolver = self._resolver, None
            resolver(self)
        if self._type is None:
            raise TypeCheckError(
                f"invalid recursive reference to {self.name}",
                path=self.file,
                line=self.pos.line if self.pos else None,
                column=self.pos.column if self.pos else None,
            )
        return self._type

    def set_type(self, type_: Type) -> None:
        self._type = type_

    @property
    def resolved(self) -> bool:
        return self._type is not None

    @property
    def exported(self) -> bool:
        return bool(self.name) and self.name[0].isupper()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class TypeName(Object):
    @property
    def is_alias(self) -> bool:
        typ = self._type
        if isinstance(typ, Named):
            return typ.obj is not self
        if isinstance(typ, TypeParam):
            return typ.obj is not self
        return typ is not None


class Func(Object):
    @property
    def signature(self) -> Signature:
        sig = self.type
        assert isinstance(sig, Signature)
        return sig

    @property
    def is_generic(self) -> bool:
        return bool(self.signature.type_params)

    @property
    def full_name(self) -> str:
        if self.pkg is None:
            return self.name
        return f"{self.pkg.path}.{self.name}"


class Var(Object):
    def __init__(
        self,
        name: str,
        pkg: Optional["Package"],
        type_: Optional[Type] = None,
        *,
        embedded: bool = False,
        is_field: bool = False,
        pos: Optional[Position] = None,
        file: Optional[Path] = None,
        resolver: Optional[Callable[["Object"], None]] = None,
    ) -> None:
        super().__init__(name, pkg, type_, pos=pos, file=file, resolver=resolver)
        self.embedded = embedded
        self.is_field = is_field


class Const(Object):
    def __init__(
        self,
        name: str,
        pkg: Optional["Package"],
        type_: Optional[Type] = None,
        value: object = None,
        *,
        pos: Optional[Position] = None,
        file: Optional[Path] = None,
        resolver: Optional[Callable[["Object"], None]] = None,
    ) -> None:
        super().__init__(name, pkg, type_, pos=pos, file=file, resolver=resolver)
        self._value = value

    @property
    def value(self) -> object:
        self.type  # resolves the value together with the type
        return self._value

    def set_value(self, type_: Type, value: object) -> None:
        self._type = type_
        self._value = value


class PkgName(Object):
    def __init__(
        self,
        name: str,
        pkg: Optional["Package"],
        imported: "Package",
        *,
        pos: Optional[Position] = None,
        file: Optional[Path] = None,
    ) -> None:
        super().__init__(name, pkg, Basic(BasicKind.INVALID), pos=pos, file=file)
        self.imported = imported


class Nil(Object):
    pass


class Builtin(Object):
    pass


# -- scopes and packages ----------------------------------------------------


class Scope:
    def __init__(self, parent: Optional["Scope"] = None, name: str = "") -> None:
        self.parent = parent
        self.name = name
        self._elems: Dict[str, Object] = {}

    def insert(self, obj: Object) -> Optional[Object]:
        """Insert ``obj``; return the existing object instead if the name is taken."""
        existing = self._elems.get(obj.name)
        if existing is not None:
            return existing
        self._elems[obj.name] = obj
        return None

    def lookup(self, name: str) -> Optional[Object]:
        return self._elems.get(name)

    def lookup_parent(self, name: str) -> Optional[Object]:
        scope: Optional[Scope] = self
        while scope is not None:
            obj = scope._elems.get(name)
            if obj is not None:
                return obj
            scope = scope.parent
        return None

    def names(self) -> List[str]:
        return sorted(self._elems)

    def __len__(self) -> int:
        return len(self._elems)

    def __contains__(self, name: object) -> bool:
        return name in self._elems


@dataclass(eq=False)
class Package:
    """Type-checked package identity and its package scope."""

    path: str
    name: str
    scope: Scope
    directory: Optional[Path] = None
    fake: bool = False

    def __repr__(self) -> str:
        return f"Package({self.path!r})"


__all__ = [
    "Array",
    "Basic",
    "BasicKind",
    "Builtin",
    "Chan",
    "Const",
    "Func",
    "Interface",
    "Map",
    "Named",
    "Nil",
    "Object",
    "Package",
    "PkgName",
    "Pointer",
    "Scope",
    "Signature",
    "Slice",
    "Struct",
    "Term",
    "Tuple",
    "Type",
    "TypeName",
    "TypeParam",
    "Union",
    "Var",
]
