"""Tests for the tree-sitter backed Go declaration parser."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from mockpkg.errors import ParseError
from mockpkg.syntax.nodes import ChanDir, DeclKind, ExprKind, TypeExprKind
from mockpkg.syntax.parser import GoParser, parse_file, unquote


@pytest.fixture(scope="module")
def parser() -> GoParser:
    return GoParser()


def _parse(parser: GoParser, source: str):
    return parser.parse_source(Path("demo.go"), textwrap.dedent(source).lstrip("\n").encode("utf-8"))


def test_collects_package_imports_and_declarations(parser: GoParser) -> None:
    syntax = _parse(
        parser,
        """
        package demo

        import (
            "strings"
            str "strconv"
            _ "embed"
        )

        type T struct{}

        func Foo(n int) error { return nil }

        func (T) Baz() {}
        """,
    )

    assert syntax.package == "demo"
    assert [(spec.name, spec.path) for spec in syntax.imports] == [
        (None, "strings"),
        ("str", "strconv"),
        ("_", "embed"),
    ]
    kinds = [decl.kind for decl in syntax.decls]
    assert kinds == [DeclKind.IMPORT] * 3 + [DeclKind.TYPE, DeclKind.FUNC, DeclKind.FUNC]
    foo = syntax.decls[4]
    assert foo.name == "Foo" and foo.receiver is None and foo.has_body
    baz = syntax.decls[5]
    assert baz.receiver is not None
    assert baz.receiver.type.kind is TypeExprKind.IDENT
    assert baz.receiver.name is None


def test_function_signature_shapes(parser: GoParser) -> None:
    syntax = _parse(
        parser,
        """
        package demo

        func Join(sep string, parts ...string) (out string, err error)
        """,
    )

    decl = syntax.decls[0]
    assert not decl.has_body
    assert [param.name for param in decl.type.params] == ["sep", "parts"]
    assert decl.type.variadic
    assert [result.name for result in decl.type.results] == ["out", "err"]


def test_grouped_parameters_share_type(parser: GoParser) -> None:
    syntax = _parse(parser, "package demo\n\nfunc Add(a, b int) int { return a + b }\n")

    params = syntax.decls[0].type.params
    assert [param.name for param in params] == ["a", "b"]
    assert all(param.type.kind is TypeExprKind.IDENT for param in params)
    assert syntax.decls[0].type.results[0].name is None


def test_type_expressions(parser: GoParser) -> None:
    syntax = _parse(
        parser,
        """
        package demo

        type Shapes struct {
            Ptr   *int
            List  []string
            Fixed [4]byte
            Table map[string]int
            Recv  <-chan int
            Send  chan<- int
            Fn    func(int) bool
            Other io.Reader
            Tagged string `json:"tagged"`
            *Embedded
        }
        """,
    )

    fields = syntax.decls[0].type.fields
    kinds = [field.type.kind for field in fields]
    assert kinds == [
        TypeExprKind.POINTER,
        TypeExprKind.SLICE,
        TypeExprKind.ARRAY,
        TypeExprKind.MAP,
        TypeExprKind.CHAN,
        TypeExprKind.CHAN,
        TypeExprKind.FUNC,
        TypeExprKind.QUALIFIED,
        TypeExprKind.IDENT,
        TypeExprKind.POINTER,
    ]
    assert fields[4].type.dir is ChanDir.RECV
    assert fields[5].type.dir is ChanDir.SEND
    assert fields[7].type.package == "io"
    assert fields[8].tag == 'json:"tagged"'
    assert fields[9].embedded and fields[9].names == ()


def test_interfaces_and_generics(parser: GoParser) -> None:
    syntax = _parse(
        parser,
        """
        package demo

        type Number interface {
            ~int | ~float64
        }

        type Stringer interface {
            String() string
        }

        type List[T any] struct {
            items []T
        }

        func Map[T, U any](in []T, fn func(T) U) []U { return nil }
        """,
    )

    number, stringer, generic_list, map_func = syntax.decls
    assert number.type.kind is TypeExprKind.INTERFACE
    assert number.type.embeds[0].kind is TypeExprKind.UNION
    assert [term.kind for term in number.type.embeds[0].terms] == [TypeExprKind.NEGATED] * 2
    assert [method.name for method in stringer.type.methods] == ["String"]
    assert [param.name for param in generic_list.type_params] == ["T"]
    assert [param.name for param in map_func.type_params] == ["T", "U"]


def test_const_groups_repeat_previous_spec(parser: GoParser) -> None:
    syntax = _parse(
        parser,
        """
        package demo

        type Weekday int

        const (
            Sunday Weekday = iota
            Monday
            Tuesday
        )
        """,
    )

    consts = [decl for decl in syntax.decls if decl.kind is DeclKind.CONST]
    assert [spec.names for spec in consts] == [("Sunday",), ("Monday",), ("Tuesday",)]
    assert [spec.iota for spec in consts] == [0, 1, 2]
    assert all(spec.type is not None and spec.type.name == "Weekday" for spec in consts)
    assert consts[2].values[0].kind is ExprKind.IDENT


def test_union_constraints_are_flattened(parser: GoParser) -> None:
    syntax = _parse(
        parser,
        """
        package demo

        type Ordered interface {
            ~int | ~int8 | ~float64 | ~string
        }

        func Max[T ~int | ~float64](a, b T) T { return a }

        func Join[S ~[]E, E any](s S) E { var zero E; return zero }
        """,
    )

    ordered, max_func, join = syntax.decls
    union = ordered.type.embeds[0]
    assert union.kind is TypeExprKind.UNION
    assert len(union.terms) == 4
    assert all(term.kind is TypeExprKind.NEGATED for term in union.terms)
    constraint = max_func.type_params[0].constraint
    assert constraint.kind is TypeExprKind.UNION
    assert [term.elem.name for term in constraint.terms] == ["int", "float64"]
    assert join.type_params[0].constraint.kind is TypeExprKind.NEGATED
    assert join.type_params[0].constraint.elem.kind is TypeExprKind.SLICE


def test_multi_name_value_specs(parser: GoParser) -> None:
    syntax = _parse(
        parser,
        """
        package demo

        var A, B = 1, 2

        const (
            X, Y = iota, iota * 10
            Z, W
        )
        """,
    )

    var_spec, first, second = syntax.decls
    assert var_spec.names == ("A", "B")
    assert len(var_spec.values) == 2
    assert first.names == ("X", "Y")
    assert second.names == ("Z", "W")
    assert second.iota == 1
    assert len(second.values) == 2


def test_variable_initializers(parser: GoParser) -> None:
    syntax = _parse(
        parser,
        """
        package demo

        var (
            a = 1
            b = "two"
            d = &T{}
            e, f = g()
        )
        """,
    )

    specs = syntax.decls
    assert specs[0].values[0].kind is ExprKind.INT
    assert specs[1].values[0].kind is ExprKind.STRING
    assert specs[1].values[0].value == "two"
    assert specs[2].values[0].kind is ExprKind.UNARY
    assert specs[2].values[0].operand.kind is ExprKind.COMPOSITE
    assert specs[3].names == ("e", "f")
    assert specs[3].values[0].kind is ExprKind.CALL


def test_syntax_error_reports_position(parser: GoParser) -> None:
    with pytest.raises(ParseError) as excinfo:
        _parse(
            parser,
            """
            package demo

            func Broken( {
            }
            """,
        )

    assert excinfo.value.path == Path("demo.go")
    assert excinfo.value.line >= 3


def test_missing_package_clause_is_rejected(parser: GoParser) -> None:
    with pytest.raises(ParseError):
        _parse(parser, "func Foo() {}\n")


def test_parse_file_reads_from_disk(tmp_path: Path) -> None:
    path = tmp_path / "x.go"
    path.write_text("package x\n\nfunc X() {}\n", encoding="utf-8")

    syntax = parse_file(path)

    assert syntax.path == path
    assert syntax.decls[0].name == "X"


def test_unquote_handles_escapes() -> None:
    assert unquote('"a\\tb"') == "a\tb"
    assert unquote("`raw\\n`") == "raw\\n"
    assert unquote("'\\x41'") == "A"
    assert unquote('"\\u00e9"') == "é"
