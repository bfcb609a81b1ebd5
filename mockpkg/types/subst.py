"""Instantiation of generic named types."""

from __future__ import annotations

from typing import Dict, Sequence

from .model import (
    Array,
    Chan,
    Func,
    Interface,
    Map,
    Named,
    Pointer,
    Signature,
    Slice,
    Struct,
    Term,
    Tuple,
    Type,
    TypeParam,
    Union,
    Var,
)

Mapping = Dict[TypeParam, Type]


def instantiate(origin: Named, args: Sequence[Type]) -> Named:
    """Return ``origin[args...]``; the underlying type is substituted on first use."""
    mapping: Mapping = dict(zip(origin.type_params, args))
    inst = Named(origin.obj, methods=origin.methods, origin=origin, type_args=args)
    inst.set_underlying_resolver(lambda: substitute(origin.underlying, mapping))
    return inst


def substitute(typ: Type, mapping: Mapping) -> Type:
    if not mapping:
        return typ
    if isinstance(typ, TypeParam):
        return mapping.get(typ, typ)
    if isinstance(typ, Pointer):
        return Pointer(substitute(typ.elem, mapping))
    if isinstance(typ, Slice):
        return Slice(substitute(typ.elem, mapping))
    if isinstance(typ, Array):
        return Array(typ.length, substitute(typ.elem, mapping))
    if isinstance(typ, Map):
        return Map(substitute(typ.key, mapping), substitute(typ.value, mapping))
    if isinstance(typ, Chan):
        return Chan(typ.dir, substitute(typ.elem, mapping))
    if isinstance(typ, Tuple):
        return Tuple([_subst_var(var, mapping) for var in typ.vars])
    if isinstance(typ, Signature):
        params = substitute(typ.params, mapping)
        results = substitute(typ.results, mapping)
        assert isinstance(params, Tuple) and isinstance(results, Tuple)
        return Signature(params, results, typ.variadic, typ.recv, typ.type_params)
    if isinstance(typ, Struct):
        return Struct([_subst_var(field, mapping) for field in typ.fields], typ.tags)
    if isinstance(typ, Interface):
        methods = [
            Func(method.name, method.pkg, substitute(method.signature, mapping), pos=method.pos, file=method.file)
            for method in typ.explicit_methods
        ]
        embeddeds = [substitute(embedded, mapping) for embedded in typ.embeddeds]
        return Interface(methods, embeddeds, comparable=typ.comparable, implicit=typ.implicit)
    if isinstance(typ, Union):
        return Union([Term(term.tilde, substitute(term.type, mapping)) for term in typ.terms])
    if isinstance(typ, Named) and typ.type_args and typ.origin is not None:
        args = [substitute(arg, mapping) for arg in typ.type_args]
        if all(new is old for new, old in zip(args, typ.type_args)):
            return typ
        return instantiate(typ.origin, args)
    return typ


def _subst_var(var: Var, mapping: Mapping) -> Var:
    return Var(
        var.name,
        var.pkg,
        substitute(var.type, mapping),
        embedded=var.embedded,
        is_field=var.is_field,
        pos=var.pos,
        file=var.file,
    )


__all__ = ["instantiate", "substitute"]
