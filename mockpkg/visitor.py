"""Syntactic pass collecting exported free function names."""

from __future__ import annotations

from typing import Dict, Iterable, List

from .syntax.nodes import DeclKind, SyntaxFile, is_exported


class DeclarationVisitor:
    """Records exported, receiver-less function declarations in source order."""

    def __init__(self) -> None:
        self._declared: List[str] = []

    @property
    def declared_funcs(self) -> List[str]:
        return self._declared

    def visit(self, syntax: SyntaxFile) -> "DeclarationVisitor":
        for decl in syntax.decls:
            if decl.kind is not DeclKind.FUNC:
                continue
            if decl.receiver is None and is_exported(decl.name):
                self._declared.append(decl.name)
        return self


def declared_funcs(files: Iterable[SyntaxFile]) -> Dict[str, List[str]]:
    """Map each file path to the exported free functions it declares."""
    result: Dict[str, List[str]] = {}
    for syntax in files:
        result[str(syntax.path)] = DeclarationVisitor().visit(syntax).declared_funcs
    return result


__all__ = ["DeclarationVisitor", "declared_funcs"]
