"""Tests for the exported free-function declaration visitor."""

from __future__ import annotations

from pathlib import Path

from mockpkg.syntax.parser import GoParser
from mockpkg.visitor import DeclarationVisitor, declared_funcs

_SOURCE = b"""package pkg

type T struct{}

func Foo(n int) error { return nil }

func bar(n int) error { return nil }

func (T) Baz() {}

func Alpha() {}

func init() {}
"""


def test_visitor_keeps_exported_free_functions_in_source_order() -> None:
    syntax = GoParser().parse_source(Path("a.go"), _SOURCE)

    visitor = DeclarationVisitor().visit(syntax)

    assert visitor.declared_funcs == ["Foo", "Alpha"]


def test_declared_funcs_maps_each_file() -> None:
    parser = GoParser()
    first = parser.parse_source(Path("a.go"), _SOURCE)
    second = parser.parse_source(Path("b.go"), b"package pkg\n\nfunc Zed() {}\nfunc Foo2() {}\n")
    empty = parser.parse_source(Path("c.go"), b"package pkg\n\nvar X = 1\n")

    result = declared_funcs([first, second, empty])

    assert result == {"a.go": ["Foo", "Alpha"], "b.go": ["Zed", "Foo2"], "c.go": []}
    assert list(result) == ["a.go", "b.go", "c.go"]
