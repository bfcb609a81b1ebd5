"""Go syntax trees: kind-tagged declaration nodes and the tree-sitter parser."""

from .nodes import DeclKind, ExprKind, FuncDecl, SyntaxFile, TypeExprKind, is_exported
from .parser import GoParser, parse_file

__all__ = [
    "DeclKind",
    "ExprKind",
    "FuncDecl",
    "GoParser",
    "SyntaxFile",
    "TypeExprKind",
    "is_exported",
    "parse_file",
]
