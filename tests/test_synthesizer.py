"""Tests for interface synthesis from declared and resolved functions."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping

import pytest

from mockpkg.errors import AmbiguousUnitError, EmptyInterfaceError
from mockpkg.models import ResolvedPackage
from mockpkg.scanner import list_source_files
from mockpkg.synthesizer import InterfaceSynthesizer, interface_name, synthesize
from mockpkg.syntax.parser import GoParser
from mockpkg.types.importer import SourceImporter
from mockpkg.types.model import Func, Interface
from mockpkg.visitor import declared_funcs
from tests._fixtures.go_builder import GoPackageBuilder


def _resolve(go_builder: GoPackageBuilder, name: str, files: Mapping[str, str]):
    directory = go_builder.package(name, files)
    context = go_builder.context()
    parser = GoParser()
    syntax = [parser.parse_file(path) for path in list_source_files(directory, context)]
    package = SourceImporter(context, parser).check_unit(directory, syntax)
    resolved = ResolvedPackage(package=package, directory=directory, files=tuple(s.path for s in syntax))
    return declared_funcs(syntax), resolved


_SOURCE = """
    package pkg

    type T struct{}

    var Counter = 0

    func Zeta(s string) (int, error) { return 0, nil }

    func Alpha() {}

    func hidden() {}

    func (T) Method() {}

    func Generic[T any](v T) T { return v }
"""


def test_interface_name_capitalises_first_letter() -> None:
    assert interface_name("pkg") == "Pkg"
    assert interface_name("Already") == "Already"
    assert interface_name("") == ""


def test_wants_defaults_to_everything() -> None:
    assert InterfaceSynthesizer().wants("Anything")

    narrowed = InterfaceSynthesizer(["Foo", "Bar"])
    assert narrowed.desired == ["Bar", "Foo"]
    assert narrowed.wants("Foo")
    assert not narrowed.wants("Baz")


def test_synthesize_keeps_assembly_order_and_sorts_methods(go_builder: GoPackageBuilder) -> None:
    declared, resolved = _resolve(go_builder, "pkg", {"pkg.go": _SOURCE})

    iface = InterfaceSynthesizer().synthesize(declared, [resolved])

    assert iface.name == "Pkg"
    assert [func.name for func in iface.functions] == ["Zeta", "Alpha"]
    assert [method.name for method in iface.methods] == ["Alpha", "Zeta"]
    assert isinstance(iface.type, Interface)
    assert iface.named_type.underlying is iface.type
    assert iface.named_type.obj.pkg is resolved.package
    assert iface.package is resolved


def test_synthesize_filters_desired_names(go_builder: GoPackageBuilder) -> None:
    declared, resolved = _resolve(go_builder, "pkg", {"pkg.go": _SOURCE})

    iface = synthesize(declared, [resolved], desired=["Zeta", "Missing"])

    assert [func.name for func in iface.functions] == ["Zeta"]


def test_generic_functions_are_skipped_with_warning(
    go_builder: GoPackageBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    declared, resolved = _resolve(go_builder, "pkg", {"pkg.go": _SOURCE})

    with caplog.at_level(logging.WARNING, logger="mockpkg"):
        iface = synthesize(declared, [resolved])

    assert "Generic" not in [func.name for func in iface.functions]
    assert "skipping generic function Generic" in caplog.text


def test_names_missing_from_scope_or_not_functions_warn(
    go_builder: GoPackageBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    _, resolved = _resolve(go_builder, "pkg", {"pkg.go": _SOURCE})
    declared = {"pkg.go": ["Ghost", "Counter", "Alpha"]}

    with caplog.at_level(logging.WARNING, logger="mockpkg"):
        iface = synthesize(declared, [resolved])

    assert [func.name for func in iface.functions] == ["Alpha"]
    assert "function Ghost not found in package scope" in caplog.text
    assert "Counter is not a function" in caplog.text


def test_empty_selection_is_an_error(go_builder: GoPackageBuilder) -> None:
    declared, resolved = _resolve(go_builder, "pkg", {"pkg.go": _SOURCE})

    with pytest.raises(EmptyInterfaceError, match="no functions for interface"):
        synthesize(declared, [resolved], desired=["Missing"])


def test_requires_exactly_one_package(go_builder: GoPackageBuilder) -> None:
    declared, first = _resolve(go_builder, "one", {"one.go": "package one\n\nfunc A() {}\n"})
    _, second = _resolve(go_builder, "two", {"two.go": "package two\n\nfunc B() {}\n"})

    with pytest.raises(AmbiguousUnitError, match="too many packages"):
        synthesize(declared, [first, second])
    with pytest.raises(AmbiguousUnitError):
        synthesize(declared, [])


def test_methods_are_the_resolved_function_objects(go_builder: GoPackageBuilder) -> None:
    declared, resolved = _resolve(go_builder, "pkg", {"pkg.go": _SOURCE})

    iface = synthesize(declared, [resolved], desired=["Alpha"])

    (method,) = iface.methods
    assert isinstance(method, Func)
    assert method is resolved.lookup("Alpha")
    assert resolved.name == "pkg"
    assert resolved.files == (Path(resolved.directory / "pkg.go"),)
