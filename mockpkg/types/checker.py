"""Package-level type checking of Go compilation units.

The checker declares every top-level object of a package, then resolves
types on demand. For the unit under analysis (``eager=True``) it resolves
every import and every package-level object so that any semantic error is
reported before synthesis. Imported packages are only declared; their
objects resolve the first time something references them.

Function bodies are never checked.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, NoReturn, Optional, Sequence, Set, Tuple as TupleT, Type as ClassT

from ..errors import AmbiguousSymbolError, TypeCheckError, UnresolvedImportError
from ..logging import get_logger
from ..syntax.nodes import (
    DeclKind,
    Expr,
    ExprKind,
    FuncDecl,
    FuncType,
    ImportSpec,
    InterfaceType,
    Position,
    StructType,
    SyntaxFile,
    TypeExpr,
    TypeExprKind,
    TypeParam as TypeParamDecl,
    TypeSpec,
    ValueSpec,
)
from ..syntax.parser import unquote
from . import constant
from .constant import ConstantError, Value
from .model import (
    Array,
    Basic,
    BasicKind,
    Builtin,
    Chan,
    Const,
    Func,
    INTEGER_KINDS,
    Interface,
    Map,
    Named,
    Nil,
    Object,
    Package,
    Pointer,
    Scope,
    Signature,
    Slice,
    Struct,
    Term,
    Tuple,
    Type,
    TypeName,
    TypeParam,
    Union,
    Var,
)
from .subst import instantiate
from .universe import ANY, INVALID, TYPES, UNIVERSE, default_type

if TYPE_CHECKING:
    from .importer import SourceImporter

logger = get_logger("types")

_COMPARISONS = frozenset({"==", "!=", "<", "<=", ">", ">="})
_UNTYPED_RANK = {
    BasicKind.UNTYPED_INT: 0,
    BasicKind.UNTYPED_RUNE: 1,
    BasicKind.UNTYPED_FLOAT: 2,
    BasicKind.UNTYPED_COMPLEX: 3,
}


@dataclass
class _FileInfo:
    syntax: SyntaxFile
    aliased: Dict[str, ImportSpec] = field(default_factory=dict)
    unaliased: List[ImportSpec] = field(default_factory=list)
    dot: List[ImportSpec] = field(default_factory=list)
    blank: List[ImportSpec] = field(default_factory=list)
    loaded: Dict[ImportSpec, Package] = field(default_factory=dict)

    @property
    def path(self) -> Path:
        return self.syntax.path


@dataclass(frozen=True)
class _Env:
    file: _FileInfo
    scope: Optional[Scope] = None
    iota: Optional[int] = None


def guess_package_name(import_path: str) -> str:
    """Conventional package name for an import path (``gopkg.in/yaml.v3`` -> ``yaml``)."""
    last = import_path.rstrip("/").rsplit("/", 1)[-1]
    if last.startswith("v") and last[1:].isdigit() and "/" in import_path:
        last = import_path.rstrip("/").rsplit("/", 2)[-2]
    last = last.split(".", 1)[0]
    for prefix in ("go-",):
        if last.startswith(prefix):
            last = last[len(prefix) :]
    return last.replace("-", "_")


class PackageChecker:
    """Declares and resolves the package-level objects of one package."""

    def __init__(
        self,
        package: Package,
        files: Sequence[SyntaxFile],
        importer: "SourceImporter",
        *,
        directory: Path,
        eager: bool = True,
    ) -> None:
        self.package = package
        self.files = [_FileInfo(syntax) for syntax in files]
        self.importer = importer
        self.directory = directory
        self.eager = eager
        self._methods: Dict[str, List[Func]] = {}
        self._method_decls: Dict[int, FuncDecl] = {}
        self._anonymous: List[Object] = []

    # -- entry points -------------------------------------------------------

    def check(self) -> Package:
        """Declare and fully resolve the package."""
        self.declare()
        self._resolve_imports()
        self._check_receivers()
        self._resolve_all()
        logger.debug(
            "Checked package %s (%s): %d objects",
            self.package.name,
            self.package.path,
            len(self.package.scope),
        )
        return self.package

    def declare(self) -> None:
        """Insert every top-level object into the package scope."""
        for info in self.files:
            for decl in info.syntax.decls:
                kind = decl.kind
                if kind is DeclKind.IMPORT:
                    self._declare_import(info, decl)
                elif kind is DeclKind.TYPE:
                    self._declare_type(info, decl)
                elif kind is DeclKind.FUNC:
                    self._declare_func(info, decl)
                elif kind is DeclKind.CONST or kind is DeclKind.VAR:
                    self._declare_values(info, decl)

    # -- declaration --------------------------------------------------------

    def _declare_import(self, info: _FileInfo, spec: ImportSpec) -> None:
        if spec.name == "_":
            info.blank.append(spec)
        elif spec.name == ".":
            info.dot.append(spec)
        elif spec.name:
            if spec.name in info.aliased:
                self._fail(info, spec.pos, f"{spec.name} redeclared in this block", AmbiguousSymbolError)
            info.aliased[spec.name] = spec
        else:
            info.unaliased.append(spec)

    def _declare_type(self, info: _FileInfo, spec: TypeSpec) -> None:
        obj = TypeName(
            spec.name,
            self.package,
            pos=spec.pos,
            file=info.path,
            resolver=partial(self._resolve_type_decl, spec, info),
        )
        self._insert(obj)

    def _declare_func(self, info: _FileInfo, decl: FuncDecl) -> None:
        if decl.receiver is not None:
            base = _receiver_base_name(decl.receiver.type)
            method = Func(
                decl.name,
                self.package,
                pos=decl.pos,
                file=info.path,
                resolver=partial(self._resolve_method, decl, info),
            )
            if base is None:
                if self.eager:
                    self._fail(info, decl.receiver.pos, "invalid receiver type")
                return
            existing = self._methods.setdefault(base, [])
            if decl.name != "_" and any(other.name == decl.name for other in existing):
                self._fail(info, decl.pos, f"method {base}.{decl.name} already declared", AmbiguousSymbolError)
            existing.append(method)
            self._method_decls[id(method)] = decl
            return

        obj = Func(
            decl.name,
            self.package,
            pos=decl.pos,
            file=info.path,
            resolver=partial(self._resolve_func, decl, info),
        )
        if decl.name in {"init", "_"}:
            if decl.name == "init" and (decl.type.params or decl.type.results or decl.type_params):
                self._fail(info, decl.pos, "func init must have no arguments and no return values")
            self._anonymous.append(obj)
            return
        if decl.name == "main" and self.package.name == "main" and (decl.type.params or decl.type.results):
            self._fail(info, decl.pos, "func main must have no arguments and no return values")
        self._insert(obj)

    def _declare_values(self, info: _FileInfo, spec: ValueSpec) -> None:
        if len(spec.values) > len(spec.names):
            self._fail(info, spec.pos, "extra init expr")
        for index, name in enumerate(spec.names):
            if spec.kind is DeclKind.CONST:
                obj: Object = Const(
                    name,
                    self.package,
                    pos=spec.pos,
                    file=info.path,
                    resolver=partial(self._resolve_const, spec, index, info),
                )
            else:
                obj = Var(
                    name,
                    self.package,
                    pos=spec.pos,
                    file=info.path,
                    resolver=partial(self._resolve_var, spec, index, info),
                )
            if name == "_":
                self._anonymous.append(obj)
            else:
                self._insert(obj)

    def _insert(self, obj: Object) -> None:
        existing = self.package.scope.insert(obj)
        if existing is None:
            return
        message = f"{obj.name} redeclared in this block"
        if existing.file is not None and existing.pos is not None:
            message += f"\n\tother declaration of {obj.name} at {existing.file}:{existing.pos.line}:{existing.pos.column}"
        raise AmbiguousSymbolError(
            message,
            path=obj.file,
            line=obj.pos.line if obj.pos else None,
            column=obj.pos.column if obj.pos else None,
        )

    # -- eager passes -------------------------------------------------------

    def _resolve_imports(self) -> None:
        for info in self.files:
            local_names: Dict[str, ImportSpec] = {}
            for spec in info.syntax.imports:
                imported = self._import(info, spec)
                if spec.name in {"_", "."}:
                    continue
                local = spec.name or imported.name
                if local in local_names:
                    self._fail(info, spec.pos, f"{local} redeclared in this block", AmbiguousSymbolError)
                local_names[local] = spec
                if local in self.package.scope:
                    self._fail(
                        info,
                        spec.pos,
                        f"{local} already declared through import of package {imported.name} ({spec.path!r})",
                        AmbiguousSymbolError,
                    )

    def _check_receivers(self) -> None:
        for base, methods in self._methods.items():
            obj = self.package.scope.lookup(base)
            if obj is None or not isinstance(obj, TypeName):
                decl = self._method_decls[id(methods[0])]
                info = self._info_for(methods[0])
                if obj is None:
                    self._fail(info, decl.receiver.pos if decl.receiver else decl.pos, f"undefined: {base}")
                self._fail(info, decl.pos, f"{base} is not a type")

    def _resolve_all(self) -> None:
        for name in self.package.scope.names():
            obj = self.package.scope.lookup(name)
            assert obj is not None
            typ = obj.type
            if isinstance(obj, TypeName) and isinstance(typ, Named) and typ.obj is obj:
                under = typ.underlying
                for method in typ.methods:
                    method.type
                if typ.methods and isinstance(under, (Pointer, Interface)):
                    method = typ.methods[0]
                    info = self._info_for(method)
                    kind = "pointer" if isinstance(under, Pointer) else "interface"
                    self._fail(info, method.pos or Position(1, 1), f"invalid receiver type {name} ({kind} type)")
            if isinstance(obj, Const):
                obj.value
        for obj in self._anonymous:
            obj.type

    # -- lookup -------------------------------------------------------------

    def _info_for(self, obj: Object) -> _FileInfo:
        for info in self.files:
            if info.path == obj.file:
                return info
        return self.files[0]

    def _import(self, info: _FileInfo, spec: ImportSpec) -> Package:
        cached = info.loaded.get(spec)
        if cached is not None:
            return cached
        try:
            imported = self.importer.import_package(spec.path, self.directory)
        except UnresolvedImportError as exc:
            if exc.path is not None:
                raise
            raise UnresolvedImportError(
                exc.message, path=info.path, line=spec.pos.line, column=spec.pos.column
            ) from exc
        info.loaded[spec] = imported
        return imported

    def _lookup_package(self, info: _FileInfo, name: str) -> Optional[Package]:
        spec = info.aliased.get(name)
        if spec is not None:
            return self._import(info, spec)
        candidates = sorted(info.unaliased, key=lambda item: guess_package_name(item.path) != name)
        for candidate in candidates:
            imported = self._import(info, candidate)
            if imported.name == name:
                return imported
        return None

    def lookup(self, name: str, env: _Env) -> Optional[Object]:
        if env.scope is not None:
            obj = env.scope.lookup(name)
            if obj is not None:
                return obj
        obj = self.package.scope.lookup(name)
        if obj is not None:
            return obj
        for spec in env.file.dot:
            imported = self._import(env.file, spec)
            candidate = imported.scope.lookup(name)
            if candidate is not None and candidate.exported:
                return candidate
        return UNIVERSE.lookup(name)

    def _qualified(self, package_name: str, name: str, env: _Env, pos: Position) -> Object:
        imported = self._lookup_package(env.file, package_name)
        if imported is None:
            self._fail(env.file, pos, f"undefined: {package_name}")
        if imported.fake:
            return self._cgo_object(imported, name)
        obj = imported.scope.lookup(name)
        if obj is None:
            self._fail(env.file, pos, f"undefined: {package_name}.{name}")
        if not obj.exported:
            self._fail(env.file, pos, f"name {name} not exported by package {imported.name}")
        return obj

    @staticmethod
    def _cgo_object(package: Package, name: str) -> Object:
        obj = package.scope.lookup(name)
        if obj is None:
            obj = TypeName(name, package)
            obj.set_type(Named(obj, INVALID))
            package.scope.insert(obj)
        return obj

    def _fail(
        self,
        info: _FileInfo,
        pos: Position,
        message: str,
        error: ClassT[TypeCheckError] = TypeCheckError,
    ) -> NoReturn:
        raise error(message, path=info.path, line=pos.line, column=pos.column)

    # -- object resolution --------------------------------------------------

    def _resolve_type_decl(self, spec: TypeSpec, info: _FileInfo, obj: Object) -> None:
        env = _Env(info)
        if spec.alias:
            if spec.type_params:
                self._fail(info, spec.pos, "generic type alias not supported")
            obj.set_type(self.type_expr(spec.type, env))
            return

        assert isinstance(obj, TypeName)
        named = Named(obj)
        obj.set_type(named)
        if spec.type_params:
            scope, params = self._declare_type_params(spec.type_params, env, spec.pos)
            named.type_params = tuple(params)
            env = replace(env, scope=scope)

        def _underlying() -> Type:
            rhs = self.type_expr(spec.type, env)
            if isinstance(rhs, TypeParam):
                self._fail(info, spec.pos, "cannot use a type parameter as RHS in type declaration")
            return rhs.underlying

        named.set_underlying_resolver(_underlying)
        for method in self._methods.get(spec.name, ()):
            named.add_method(method)

    def _declare_type_params(
        self, params: Sequence[TypeParamDecl], env: _Env, pos: Position
    ) -> TupleT[Scope, List[TypeParam]]:
        scope = Scope(parent=env.scope, name="type parameters")
        result: List[TypeParam] = []
        for index, param in enumerate(params):
            obj = TypeName(param.name, self.package, pos=pos, file=env.file.path)
            type_param = TypeParam(obj, index)
            obj.set_type(type_param)
            if param.name != "_" and scope.insert(obj) is not None:
                self._fail(env.file, pos, f"{param.name} redeclared", AmbiguousSymbolError)
            result.append(type_param)
        inner = replace(env, scope=scope)
        for type_param, param in zip(result, params):
            type_param.constraint = self._constraint(param.constraint, inner)
        return scope, result

    def _constraint(self, expr: TypeExpr, env: _Env) -> Type:
        typ = self.type_expr(expr, env)
        if isinstance(typ, Union) or not isinstance(typ.underlying, Interface):
            return Interface(embeddeds=[typ], implicit=True)
        return typ

    def _resolve_func(self, decl: FuncDecl, info: _FileInfo, obj: Object) -> None:
        env = _Env(info)
        type_params: List[TypeParam] = []
        if decl.type_params:
            scope, type_params = self._declare_type_params(decl.type_params, env, decl.pos)
            env = replace(env, scope=scope)
        obj.set_type(self.signature(decl.type, env, type_params=type_params))

    def _resolve_method(self, decl: FuncDecl, info: _FileInfo, obj: Object) -> None:
        assert decl.receiver is not None
        receiver = decl.receiver
        env = _Env(info)
        expr = receiver.type
        pointer = False
        if expr.kind is TypeExprKind.POINTER:
            pointer = True
            expr = expr.elem
        args: Sequence[TypeExpr] = ()
        if expr.kind is TypeExprKind.GENERIC:
            args = expr.args
            expr = expr.base
        if expr.kind is not TypeExprKind.IDENT:
            self._fail(info, receiver.pos, "invalid receiver type")

        base_obj = self.package.scope.lookup(expr.name)
        if base_obj is None:
            self._fail(info, receiver.pos, f"undefined: {expr.name}")
        if not isinstance(base_obj, TypeName):
            self._fail(info, receiver.pos, f"{expr.name} is not a type")
        base = base_obj.type
        if not isinstance(base, Named) or base.obj.pkg is not self.package:
            self._fail(info, receiver.pos, f"cannot define new methods on non-local type {expr.name}")

        recv_type: Type = base
        if args:
            if len(args) != len(base.type_params):
                self._fail(
                    info,
                    receiver.pos,
                    f"receiver declares {len(args)} type parameters, but receiver base type declares {len(base.type_params)}",
                )
            scope = Scope(name="receiver type parameters")
            fresh: List[Type] = []
            for index, (arg, original) in enumerate(zip(args, base.type_params)):
                if arg.kind is not TypeExprKind.IDENT:
                    self._fail(info, receiver.pos, "receiver type parameter must be an identifier")
                tp_obj = TypeName(arg.name, self.package, pos=receiver.pos, file=info.path)
                type_param = TypeParam(tp_obj, index, original.constraint)
                tp_obj.set_type(type_param)
                if arg.name != "_":
                    scope.insert(tp_obj)
                fresh.append(type_param)
            recv_type = instantiate(base, fresh)
            env = replace(env, scope=scope)
        elif base.type_params:
            self._fail(info, receiver.pos, f"cannot use generic type {expr.name} without instantiation")

        if pointer:
            recv_type = Pointer(recv_type)
        sig = self.signature(decl.type, env)
        sig.recv = Var(receiver.name or "", self.package, recv_type, pos=receiver.pos, file=info.path)
        obj.set_type(sig)

    def _resolve_const(self, spec: ValueSpec, index: int, info: _FileInfo, obj: Object) -> None:
        assert isinstance(obj, Const)
        env = _Env(info, iota=spec.iota)
        if index >= len(spec.values):
            self._fail(info, spec.pos, "missing init expr for const declaration")
        typ, value = self.constant_expr(spec.values[index], env)
        if spec.type is not None:
            target = self.type_expr(spec.type, env)
            typ, value = self._convert_const(value, target, env, spec.pos)
        obj.set_value(typ, value)

    def _resolve_var(self, spec: ValueSpec, index: int, info: _FileInfo, obj: Object) -> None:
        env = _Env(info)
        if spec.type is not None:
            obj.set_type(self.type_expr(spec.type, env))
            return

        typ: Optional[Type] = None
        if len(spec.values) == len(spec.names):
            typ = self.infer(spec.values[index], env)
        elif len(spec.values) == 1:
            results = self.infer_results(spec.values[0], env)
            if results is not None:
                if len(results) != len(spec.names):
                    self._fail(
                        info,
                        spec.pos,
                        f"assignment mismatch: {len(spec.names)} variables but {len(results)} values",
                    )
                typ = results.at(index).type
        else:
            self._fail(
                info,
                spec.pos,
                f"assignment mismatch: {len(spec.names)} variables but {len(spec.values)} values",
            )

        if typ is None:
            logger.debug("Cannot infer type of %s in %s", obj.name, info.path)
            typ = INVALID
        elif isinstance(typ, Basic) and typ.kind is BasicKind.UNTYPED_NIL:
            self._fail(info, spec.pos, "use of untyped nil in variable declaration")
        elif isinstance(typ, Basic) and typ.is_untyped:
            typ = default_type(typ)
        obj.set_type(typ)

    # -- type expressions ---------------------------------------------------

    def type_expr(self, expr: TypeExpr, env: _Env) -> Type:
        kind = expr.kind
        if kind is TypeExprKind.IDENT or kind is TypeExprKind.QUALIFIED:
            typ = self._type_name(expr, env)
            if isinstance(typ, Named) and typ.type_params and not typ.type_args:
                self._fail(env.file, expr.pos, f"cannot use generic type {typ.obj.name} without instantiation")
            return typ
        if kind is TypeExprKind.POINTER:
            return Pointer(self.type_expr(expr.elem, env))
        if kind is TypeExprKind.SLICE:
            return Slice(self.type_expr(expr.elem, env))
        if kind is TypeExprKind.ARRAY:
            if expr.length is None:
                self._fail(env.file, expr.pos, "invalid use of [...] array (outside a composite literal)")
            _, value = self.constant_expr(expr.length, env)
            if not constant.is_integral(value) or constant.to_int(value) < 0:
                self._fail(env.file, expr.pos, "invalid array length")
            return Array(constant.to_int(value), self.type_expr(expr.elem, env))
        if kind is TypeExprKind.MAP:
            return Map(self.type_expr(expr.key, env), self.type_expr(expr.value, env))
        if kind is TypeExprKind.CHAN:
            return Chan(expr.dir, self.type_expr(expr.elem, env))
        if kind is TypeExprKind.FUNC:
            return self.signature(expr, env)
        if kind is TypeExprKind.STRUCT:
            return self._struct(expr, env)
        if kind is TypeExprKind.INTERFACE:
            return self._interface(expr, env)
        if kind is TypeExprKind.GENERIC:
            base = self._type_name(expr.base, env)
            if not isinstance(base, Named) or not base.type_params:
                self._fail(env.file, expr.pos, f"{type_name_text(expr.base)} is not a generic type")
            args = [self.type_expr(arg, env) for arg in expr.args]
            if len(args) != len(base.type_params):
                self._fail(
                    env.file,
                    expr.pos,
                    f"got {len(args)} type arguments but {base.obj.name} has {len(base.type_params)} type parameters",
                )
            return instantiate(base, args)
        if kind is TypeExprKind.NEGATED:
            return Union([Term(True, self.type_expr(expr.elem, env))])
        if kind is TypeExprKind.UNION:
            terms: List[Term] = []
            for term in expr.terms:
                if term.kind is TypeExprKind.NEGATED:
                    terms.append(Term(True, self.type_expr(term.elem, env)))
                else:
                    terms.append(Term(False, self.type_expr(term, env)))
            return Union(terms)
        self._fail(env.file, expr.pos, f"unexpected type expression {kind.value}")

    def _type_name(self, expr: TypeExpr, env: _Env) -> Type:
        if expr.kind is TypeExprKind.IDENT:
            obj = self.lookup(expr.name, env)
            if obj is None:
                self._fail(env.file, expr.pos, f"undefined: {expr.name}")
        elif expr.kind is TypeExprKind.QUALIFIED:
            obj = self._qualified(expr.package, expr.name, env, expr.pos)
        else:
            self._fail(env.file, expr.pos, "expected type name")
        if not isinstance(obj, TypeName):
            self._fail(env.file, expr.pos, f"{type_name_text(expr)} is not a type")
        return obj.type

    def signature(
        self,
        expr: FuncType,
        env: _Env,
        *,
        type_params: Sequence[TypeParam] = (),
    ) -> Signature:
        seen: Set[str] = set()
        params: List[Var] = []
        for param in expr.params:
            typ = self.type_expr(param.type, env)
            if param.variadic:
                typ = Slice(typ)
            params.append(self._param(param.name, typ, seen, env, expr.pos))
        results = [
            self._param(result.name, self.type_expr(result.type, env), seen, env, expr.pos)
            for result in expr.results
        ]
        return Signature(Tuple(params), Tuple(results), variadic=expr.variadic, type_params=type_params)

    def _param(self, name: Optional[str], typ: Type, seen: Set[str], env: _Env, pos: Position) -> Var:
        if name and name != "_":
            if name in seen:
                self._fail(env.file, pos, f"duplicate argument {name}", AmbiguousSymbolError)
            seen.add(name)
        return Var(name or "", self.package, typ, pos=pos, file=env.file.path)

    def _struct(self, expr: StructType, env: _Env) -> Struct:
        fields: List[Var] = []
        tags: List[Optional[str]] = []
        seen: Set[str] = set()
        for decl in expr.fields:
            typ = self.type_expr(decl.type, env)
            names = decl.names if not decl.embedded else (_embedded_name(decl.type),)
            for name in names:
                if name != "_":
                    if name in seen:
                        self._fail(env.file, expr.pos, f"{name} redeclared", AmbiguousSymbolError)
                    seen.add(name)
                fields.append(
                    Var(name, self.package, typ, embedded=decl.embedded, is_field=True, file=env.file.path)
                )
                tags.append(decl.tag)
        return Struct(fields, tags)

    def _interface(self, expr: InterfaceType, env: _Env) -> Interface:
        methods: List[Func] = []
        seen: Set[str] = set()
        for spec in expr.methods:
            if spec.name in seen:
                self._fail(env.file, spec.type.pos, f"duplicate method {spec.name}", AmbiguousSymbolError)
            seen.add(spec.name)
            methods.append(
                Func(spec.name, self.package, self.signature(spec.type, env), pos=spec.type.pos, file=env.file.path)
            )
        embeddeds = [self.type_expr(embedded, env) for embedded in expr.embeds]
        iface = Interface(methods, embeddeds)
        for method in methods:
            method.signature.recv = Var("", self.package, iface)
        return iface

    # -- constants ----------------------------------------------------------

    def constant_expr(self, expr: Expr, env: _Env) -> TupleT[Type, Value]:
        kind = expr.kind
        try:
            if kind is ExprKind.IDENT:
                return self._constant_ident(expr, env)
            if kind is ExprKind.SELECTOR:
                obj = self._selector_object(expr, env)
                if isinstance(obj, Const):
                    return obj.type, obj.value
                self._fail(env.file, expr.pos, f"{expr.field} is not constant")
            if kind is ExprKind.INT:
                return TYPES[BasicKind.UNTYPED_INT], constant.parse_int(expr.value)
            if kind is ExprKind.FLOAT:
                return TYPES[BasicKind.UNTYPED_FLOAT], constant.parse_float(expr.value)
            if kind is ExprKind.IMAG:
                return TYPES[BasicKind.UNTYPED_COMPLEX], constant.parse_imag(expr.value)
            if kind is ExprKind.RUNE:
                text = unquote(expr.value)
                if len(text) != 1:
                    self._fail(env.file, expr.pos, f"invalid rune literal {expr.value}")
                return TYPES[BasicKind.UNTYPED_RUNE], ord(text)
            if kind is ExprKind.STRING:
                return TYPES[BasicKind.UNTYPED_STRING], expr.value
            if kind is ExprKind.UNARY:
                typ, value = self.constant_expr(expr.operand, env)
                basic = self._basic(typ, env, expr.pos)
                result = constant.unary_op(expr.op, value, basic.kind)
                return typ, self._represent(result, typ, basic, env, expr.pos)
            if kind is ExprKind.BINARY:
                return self._constant_binary(expr, env)
            if kind is ExprKind.CALL:
                return self._constant_call(expr, env)
            if kind is ExprKind.CONVERSION:
                target = self.type_expr(expr.type, env)
                _, value = self.constant_expr(expr.operand, env)
                return self._convert_const(value, target, env, expr.pos)
        except ConstantError as exc:
            self._fail(env.file, expr.pos, str(exc))
        self._fail(env.file, expr.pos, f"{_describe(expr)} is not constant")

    def _constant_ident(self, expr: Expr, env: _Env) -> TupleT[Type, Value]:
        obj = self.lookup(expr.name, env)
        if obj is None:
            self._fail(env.file, expr.pos, f"undefined: {expr.name}")
        if expr.name == "iota" and obj is UNIVERSE.lookup("iota"):
            if env.iota is None:
                self._fail(env.file, expr.pos, "cannot use iota outside constant declaration")
            return TYPES[BasicKind.UNTYPED_INT], env.iota
        if isinstance(obj, Const):
            return obj.type, obj.value
        self._fail(env.file, expr.pos, f"{expr.name} is not constant")

    def _constant_binary(self, expr: Expr, env: _Env) -> TupleT[Type, Value]:
        op = expr.op
        left_type, left = self.constant_expr(expr.left, env)
        right_type, right = self.constant_expr(expr.right, env)
        if op in {"<<", ">>"}:
            basic = self._basic(left_type, env, expr.pos)
            if basic.is_untyped and basic.kind is not BasicKind.UNTYPED_RUNE:
                left_type = TYPES[BasicKind.UNTYPED_INT]
                basic = TYPES[BasicKind.UNTYPED_INT]
            result = constant.shift(op, left, right)
            return left_type, self._represent(result, left_type, basic, env, expr.pos)

        typ = self._match_const_types(left_type, right_type, env, expr.pos)
        if op in _COMPARISONS:
            return TYPES[BasicKind.UNTYPED_BOOL], constant.compare(op, left, right)
        basic = self._basic(typ, env, expr.pos)
        integer = basic.kind in INTEGER_KINDS
        result = constant.binary_op(op, left, right, integer=integer)
        return typ, self._represent(result, typ, basic, env, expr.pos)

    def _constant_call(self, expr: Expr, env: _Env) -> TupleT[Type, Value]:
        func = expr.func
        target: Optional[Type] = None
        if func.kind is ExprKind.TYPE:
            target = self.type_expr(func.type, env)
        else:
            obj = self._callee(func, env)
            if isinstance(obj, TypeName):
                target = obj.type
            elif isinstance(obj, Builtin) and obj.name == "len" and len(expr.args) == 1:
                _, value = self.constant_expr(expr.args[0], env)
                if not isinstance(value, str):
                    self._fail(env.file, expr.pos, "invalid argument for len")
                return TYPES[BasicKind.INT], len(value.encode("utf-8"))
            elif isinstance(obj, Builtin) and obj.name in {"real", "imag"} and len(expr.args) == 1:
                typ, value = self.constant_expr(expr.args[0], env)
                number = complex(value)  # type: ignore[arg-type]
                part = number.real if obj.name == "real" else number.imag
                return TYPES[BasicKind.UNTYPED_FLOAT], constant.parse_float(repr(part))
        if target is None:
            self._fail(env.file, expr.pos, f"{_describe(expr)} is not constant")
        if len(expr.args) != 1:
            self._fail(env.file, expr.pos, "conversion requires exactly one argument")
        _, value = self.constant_expr(expr.args[0], env)
        return self._convert_const(value, target, env, expr.pos)

    def _callee(self, expr: Expr, env: _Env) -> Optional[Object]:
        if expr.kind is ExprKind.IDENT:
            return self.lookup(expr.name, env)
        if expr.kind is ExprKind.SELECTOR:
            return self._selector_object(expr, env)
        return None

    def _selector_object(self, expr: Expr, env: _Env) -> Optional[Object]:
        operand = expr.operand
        if operand.kind is not ExprKind.IDENT:
            return None
        if operand.name in self.package.scope or (env.scope is not None and env.scope.lookup(operand.name)):
            return None
        if self._lookup_package(env.file, operand.name) is None:
            return None
        return self._qualified(operand.name, expr.field, env, expr.pos)

    def _basic(self, typ: Type, env: _Env, pos: Position) -> Basic:
        under = typ.underlying
        if not isinstance(under, Basic):
            self._fail(env.file, pos, f"invalid constant type {typ}")
        return under

    def _represent(self, value: Value, typ: Type, basic: Basic, env: _Env, pos: Position) -> Value:
        if basic.is_untyped:
            return value
        try:
            return constant.represent(value, basic.kind)
        except ConstantError as exc:
            self._fail(env.file, pos, str(exc))

    def _match_const_types(self, left: Type, right: Type, env: _Env, pos: Position) -> Type:
        left_basic = self._basic(left, env, pos)
        right_basic = self._basic(right, env, pos)
        if left_basic.is_untyped and right_basic.is_untyped:
            left_rank = _UNTYPED_RANK.get(left_basic.kind)
            right_rank = _UNTYPED_RANK.get(right_basic.kind)
            if left_rank is None or right_rank is None:
                if left_basic.kind is not right_basic.kind:
                    self._fail(env.file, pos, f"mismatched types {left} and {right}")
                return left
            return left if left_rank >= right_rank else right
        if left_basic.is_untyped:
            return right
        if right_basic.is_untyped:
            return left
        if not identical(left, right):
            self._fail(env.file, pos, f"invalid operation: mismatched types {left} and {right}")
        return left

    def _convert_const(self, value: Value, target: Type, env: _Env, pos: Position) -> TupleT[Type, Value]:
        under = target.underlying
        if not isinstance(under, Basic) or under.kind is BasicKind.UNSAFE_POINTER:
            self._fail(env.file, pos, f"invalid constant type {target}")
        kind = under.kind
        if kind is BasicKind.STRING and isinstance(value, int) and not isinstance(value, bool):
            return target, chr(value) if 0 <= value <= 0x10FFFF else "\ufffd"
        try:
            return target, constant.represent(value, kind)
        except ConstantError as exc:
            self._fail(env.file, pos, f"cannot use constant as {target}: {exc}")

    # -- variable initializers ----------------------------------------------

    def infer(self, expr: Expr, env: _Env) -> Optional[Type]:
        """Best-effort type of a package-level variable initializer."""
        kind = expr.kind
        if kind in {ExprKind.INT, ExprKind.FLOAT, ExprKind.IMAG, ExprKind.RUNE, ExprKind.STRING}:
            return self.constant_expr(expr, env)[0]
        if kind is ExprKind.IDENT:
            obj = self.lookup(expr.name, env)
            if obj is None:
                self._fail(env.file, expr.pos, f"undefined: {expr.name}")
            if isinstance(obj, Nil):
                return obj.type
            if isinstance(obj, (Const, Var, Func)):
                return obj.type
            return None
        if kind is ExprKind.SELECTOR:
            obj = self._selector_object(expr, env)
            if isinstance(obj, (Const, Var, Func)):
                return obj.type
            return None
        if kind is ExprKind.CONVERSION:
            return self.type_expr(expr.type, env)
        if kind is ExprKind.COMPOSITE:
            return self.type_expr(expr.type, env) if expr.type is not None else None
        if kind is ExprKind.FUNC_LIT:
            return self.signature(expr.type, env)
        if kind is ExprKind.UNARY:
            if expr.op == "&":
                inner = self.infer(expr.operand, env)
                return Pointer(inner) if inner is not None else None
            if expr.op == "!":
                return TYPES[BasicKind.BOOL]
            if expr.op == "<-":
                inner = self.infer(expr.operand, env)
                return inner.underlying.elem if inner is not None and isinstance(inner.underlying, Chan) else None
            return self.infer(expr.operand, env)
        if kind is ExprKind.BINARY:
            if expr.op in _COMPARISONS or expr.op in {"&&", "||"}:
                return TYPES[BasicKind.UNTYPED_BOOL]
            left = self.infer(expr.left, env)
            if left is not None and not (isinstance(left, Basic) and left.is_untyped):
                return left
            right = self.infer(expr.right, env)
            return right if right is not None else left
        if kind is ExprKind.CALL:
            results = self.infer_results(expr, env)
            if results is not None and len(results) == 1:
                return results.at(0).type
            return None
        return None

    def infer_results(self, expr: Expr, env: _Env) -> Optional[Tuple]:
        """Result tuple of a call expression, or the conversion target as a 1-tuple."""
        if expr.kind is not ExprKind.CALL:
            single = self.infer(expr, env)
            return Tuple([Var("", self.package, single)]) if single is not None else None
        func = expr.func
        if func.kind is ExprKind.TYPE:
            return Tuple([Var("", self.package, self.type_expr(func.type, env))])
        obj = self._callee(func, env)
        if isinstance(obj, TypeName):
            return Tuple([Var("", self.package, obj.type)])
        if isinstance(obj, Func):
            sig = obj.signature
            if sig.type_params:
                return None
            return sig.results
        if isinstance(obj, Builtin):
            return self._builtin_results(obj.name, expr, env)
        if isinstance(obj, Var):
            under = obj.type.underlying
            if isinstance(under, Signature):
                return under.results
        return None

    def _builtin_results(self, name: str, expr: Expr, env: _Env) -> Optional[Tuple]:
        typ: Optional[Type] = None
        if name in {"len", "cap", "copy"}:
            typ = TYPES[BasicKind.INT]
        elif name == "new" and len(expr.args) == 1:
            arg = expr.args[0]
            inner = self._type_from_expr(arg, env)
            typ = Pointer(inner) if inner is not None else None
        elif name == "make" and expr.args:
            typ = self._type_from_expr(expr.args[0], env)
        elif name == "append" and expr.args:
            typ = self.infer(expr.args[0], env)
        elif name == "recover":
            typ = ANY
        if typ is None:
            return None
        return Tuple([Var("", self.package, typ)])

    def _type_from_expr(self, expr: Expr, env: _Env) -> Optional[Type]:
        if expr.kind is ExprKind.TYPE:
            return self.type_expr(expr.type, env)
        obj = self._callee(expr, env)
        if isinstance(obj, TypeName):
            return obj.type
        return None


def identical(left: Type, right: Type) -> bool:
    """Type identity for the shapes constant arithmetic needs."""
    if left is right:
        return True
    if isinstance(left, Basic) and isinstance(right, Basic):
        return left.kind is right.kind
    if isinstance(left, Named) and isinstance(right, Named):
        if left.obj is not right.obj:
            return False
        return len(left.type_args) == len(right.type_args) and all(
            identical(a, b) for a, b in zip(left.type_args, right.type_args)
        )
    return False


def type_name_text(expr: TypeExpr) -> str:
    if expr.kind is TypeExprKind.IDENT:
        return expr.name
    if expr.kind is TypeExprKind.QUALIFIED:
        return f"{expr.package}.{expr.name}"
    return expr.kind.value


def _embedded_name(expr: TypeExpr) -> str:
    if expr.kind is TypeExprKind.IDENT or expr.kind is TypeExprKind.QUALIFIED:
        return expr.name
    if expr.kind is TypeExprKind.POINTER:
        return _embedded_name(expr.elem)
    if expr.kind is TypeExprKind.GENERIC:
        return _embedded_name(expr.base)
    return "_"


def _receiver_base_name(expr: TypeExpr) -> Optional[str]:
    if expr.kind is TypeExprKind.POINTER:
        expr = expr.elem
    if expr.kind is TypeExprKind.GENERIC:
        expr = expr.base
    if expr.kind is TypeExprKind.IDENT:
        return expr.name
    return None


def _describe(expr: Expr) -> str:
    if expr.kind is ExprKind.IDENT:
        return expr.name
    if expr.kind is ExprKind.SELECTOR:
        return f"{_describe(expr.operand)}.{expr.field}"
    if expr.kind is ExprKind.OTHER:
        return expr.text
    return f"{expr.kind.value} expression"


__all__ = ["PackageChecker", "guess_package_name", "identical"]
