"""Semantic analysis: Go type model, package checker and source importer.

Only the model layer is re-exported here. ``checker``, ``importer`` and
``loader`` are imported from their modules; the loader depends on
``mockpkg.models``, which itself builds on this package.
"""

from .model import (
    Basic,
    BasicKind,
    Const,
    Func,
    Interface,
    Named,
    Object,
    Package,
    Scope,
    Signature,
    TypeName,
    Var,
)
from .typestring import object_string, relative_to, type_string
from .universe import UNIVERSE

__all__ = [
    "Basic",
    "BasicKind",
    "Const",
    "Func",
    "Interface",
    "Named",
    "Object",
    "Package",
    "Scope",
    "Signature",
    "TypeName",
    "UNIVERSE",
    "Var",
    "object_string",
    "relative_to",
    "type_string",
]
