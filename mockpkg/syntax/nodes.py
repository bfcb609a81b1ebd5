"""Declaration-level syntax tree for Go source files.

Every node carries a ``kind`` discriminant so consumers dispatch with a
single comparison instead of ``isinstance`` chains.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import ClassVar, Optional, Tuple, Union


class DeclKind(str, Enum):
    IMPORT = "import"
    CONST = "const"
    VAR = "var"
    TYPE = "type"
    FUNC = "func"


class TypeExprKind(str, Enum):
    IDENT = "ident"
    QUALIFIED = "qualified"
    POINTER = "pointer"
    SLICE = "slice"
    ARRAY = "array"
    MAP = "map"
    CHAN = "chan"
    FUNC = "func"
    STRUCT = "struct"
    INTERFACE = "interface"
    GENERIC = "generic"
    NEGATED = "negated"
    UNION = "union"


class ExprKind(str, Enum):
    IDENT = "ident"
    SELECTOR = "selector"
    INT = "int"
    FLOAT = "float"
    IMAG = "imag"
    RUNE = "rune"
    STRING = "string"
    BINARY = "binary"
    UNARY = "unary"
    CALL = "call"
    CONVERSION = "conversion"
    COMPOSITE = "composite"
    FUNC_LIT = "func_lit"
    TYPE = "type"
    OTHER = "other"


class ChanDir(str, Enum):
    BOTH = "both"
    SEND = "send"
    RECV = "recv"


@dataclass(frozen=True)
class Position:
    """1-based line and column of a node in its file."""

    line: int
    column: int


# -- type expressions -------------------------------------------------------


@dataclass(frozen=True)
class IdentType:
    kind: ClassVar[TypeExprKind] = TypeExprKind.IDENT
    name: str
    pos: Position


@dataclass(frozen=True)
class QualifiedType:
    kind: ClassVar[TypeExprKind] = TypeExprKind.QUALIFIED
    package: str
    name: str
    pos: Position


@dataclass(frozen=True)
class PointerType:
    kind: ClassVar[TypeExprKind] = TypeExprKind.POINTER
    elem: "TypeExpr"
    pos: Position


@dataclass(frozen=True)
class SliceType:
    kind: ClassVar[TypeExprKind] = TypeExprKind.SLICE
    elem: "TypeExpr"
    pos: Position


@dataclass(frozen=True)
class ArrayType:
    kind: ClassVar[TypeExprKind] = TypeExprKind.ARRAY
    length: Optional["Expr"]
    elem: "TypeExpr"
    pos: Position


@dataclass(frozen=True)
class MapType:
    kind: ClassVar[TypeExprKind] = TypeExprKind.MAP
    key: "TypeExpr"
    value: "TypeExpr"
    pos: Position


@dataclass(frozen=True)
class ChanType:
    kind: ClassVar[TypeExprKind] = TypeExprKind.CHAN
    dir: ChanDir
    elem: "TypeExpr"
    pos: Position


@dataclass(frozen=True)
class Param:
    """One parameter or result; ``name`` is None for unnamed entries."""

    name: Optional[str]
    type: "TypeExpr"
    variadic: bool = False


@dataclass(frozen=True)
class FuncType:
    kind: ClassVar[TypeExprKind] = TypeExprKind.FUNC
    params: Tuple[Param, ...]
    results: Tuple[Param, ...]
    pos: Position

    @property
    def variadic(self) -> bool:
        return bool(self.params) and self.params[-1].variadic


@dataclass(frozen=True)
class FieldDecl:
    names: Tuple[str, ...]
    type: "TypeExpr"
    embedded: bool
    tag: Optional[str]


@dataclass(frozen=True)
class StructType:
    kind: ClassVar[TypeExprKind] = TypeExprKind.STRUCT
    fields: Tuple[FieldDecl, ...]
    pos: Position


@dataclass(frozen=True)
class MethodSpec:
    name: str
    type: FuncType


@dataclass(frozen=True)
class InterfaceType:
    kind: ClassVar[TypeExprKind] = TypeExprKind.INTERFACE
    methods: Tuple[MethodSpec, ...]
    embeds: Tuple["TypeExpr", ...]
    pos: Position


@dataclass(frozen=True)
class GenericType:
    kind: ClassVar[TypeExprKind] = TypeExprKind.GENERIC
    base: "TypeExpr"
    args: Tuple["TypeExpr", ...]
    pos: Position


@dataclass(frozen=True)
class NegatedType:
    kind: ClassVar[TypeExprKind] = TypeExprKind.NEGATED
    elem: "TypeExpr"
    pos: Position


@dataclass(frozen=True)
class UnionType:
    kind: ClassVar[TypeExprKind] = TypeExprKind.UNION
    terms: Tuple["TypeExpr", ...]
    pos: Position


TypeExpr = Union[
    IdentType,
    QualifiedType,
    PointerType,
    SliceType,
    ArrayType,
    MapType,
    ChanType,
    FuncType,
    StructType,
    InterfaceType,
    GenericType,
    NegatedType,
    UnionType,
]


# -- expressions ------------------------------------------------------------


@dataclass(frozen=True)
class Ident:
    kind: ClassVar[ExprKind] = ExprKind.IDENT
    name: str
    pos: Position


@dataclass(frozen=True)
class Selector:
    kind: ClassVar[ExprKind] = ExprKind.SELECTOR
    operand: "Expr"
    field: str
    pos: Position


@dataclass(frozen=True)
class BasicLit:
    """Literal token; ``kind`` is one of INT, FLOAT, IMAG, RUNE, STRING."""

    kind: ExprKind
    value: str
    pos: Position


@dataclass(frozen=True)
class Binary:
    kind: ClassVar[ExprKind] = ExprKind.BINARY
    op: str
    left: "Expr"
    right: "Expr"
    pos: Position


@dataclass(frozen=True)
class Unary:
    kind: ClassVar[ExprKind] = ExprKind.UNARY
    op: str
    operand: "Expr"
    pos: Position


@dataclass(frozen=True)
class Call:
    kind: ClassVar[ExprKind] = ExprKind.CALL
    func: "Expr"
    args: Tuple["Expr", ...]
    pos: Position


@dataclass(frozen=True)
class Conversion:
    kind: ClassVar[ExprKind] = ExprKind.CONVERSION
    type: TypeExpr
    operand: "Expr"
    pos: Position


@dataclass(frozen=True)
class CompositeLit:
    kind: ClassVar[ExprKind] = ExprKind.COMPOSITE
    type: Optional[TypeExpr]
    pos: Position


@dataclass(frozen=True)
class FuncLit:
    kind: ClassVar[ExprKind] = ExprKind.FUNC_LIT
    type: FuncType
    pos: Position


@dataclass(frozen=True)
class TypeOperand:
    """A type used where an expression is expected, e.g. ``[]byte`` in ``[]byte(s)``."""

    kind: ClassVar[ExprKind] = ExprKind.TYPE
    type: TypeExpr
    pos: Position


@dataclass(frozen=True)
class OtherExpr:
    kind: ClassVar[ExprKind] = ExprKind.OTHER
    text: str
    pos: Position


Expr = Union[
    Ident,
    Selector,
    BasicLit,
    Binary,
    Unary,
    Call,
    Conversion,
    CompositeLit,
    FuncLit,
    TypeOperand,
    OtherExpr,
]


# -- declarations -----------------------------------------------------------


@dataclass(frozen=True)
class ImportSpec:
    kind: ClassVar[DeclKind] = DeclKind.IMPORT
    name: Optional[str]
    path: str
    pos: Position


@dataclass(frozen=True)
class TypeParam:
    name: str
    constraint: TypeExpr


@dataclass(frozen=True)
class Receiver:
    name: Optional[str]
    type: TypeExpr
    pos: Position


@dataclass(frozen=True)
class FuncDecl:
    kind: ClassVar[DeclKind] = DeclKind.FUNC
    name: str
    receiver: Optional[Receiver]
    type_params: Tuple[TypeParam, ...]
    type: FuncType
    has_body: bool
    pos: Position


@dataclass(frozen=True)
class TypeSpec:
    kind: ClassVar[DeclKind] = DeclKind.TYPE
    name: str
    type_params: Tuple[TypeParam, ...]
    type: TypeExpr
    alias: bool
    pos: Position


@dataclass(frozen=True)
class ValueSpec:
    """One line of a ``const`` or ``var`` declaration.

    For constants, ``iota`` is the line index within its group and an omitted
    type and value list has already been copied from the previous line.
    """

    kind: DeclKind
    names: Tuple[str, ...]
    type: Optional[TypeExpr]
    values: Tuple[Expr, ...]
    iota: int
    pos: Position


Decl = Union[ImportSpec, FuncDecl, TypeSpec, ValueSpec]


@dataclass(frozen=True)
class SyntaxFile:
    """One parsed source file."""

    path: Path
    package: str
    imports: Tuple[ImportSpec, ...]
    decls: Tuple[Decl, ...]


def is_exported(name: str) -> bool:
    """Go visibility rule: the first character is an upper-case letter."""
    return bool(name) and name[0].isupper()


__all__ = [
    "ArrayType",
    "BasicLit",
    "Binary",
    "Call",
    "ChanDir",
    "ChanType",
    "CompositeLit",
    "Conversion",
    "Decl",
    "DeclKind",
    "Expr",
    "ExprKind",
    "FieldDecl",
    "FuncDecl",
    "FuncLit",
    "FuncType",
    "GenericType",
    "Ident",
    "IdentType",
    "ImportSpec",
    "InterfaceType",
    "MapType",
    "MethodSpec",
    "NegatedType",
    "OtherExpr",
    "Param",
    "PointerType",
    "Position",
    "QualifiedType",
    "Receiver",
    "Selector",
    "SliceType",
    "StructType",
    "SyntaxFile",
    "TypeExpr",
    "TypeExprKind",
    "TypeOperand",
    "TypeParam",
    "TypeSpec",
    "Unary",
    "UnionType",
    "ValueSpec",
    "is_exported",
]
