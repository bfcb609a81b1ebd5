"""Tests for rendering synthesized interfaces as Go declarations."""

from __future__ import annotations

from pathlib import Path

from mockpkg.pipeline import Pipeline
from mockpkg.render import ImportEntry, ImportTracker, InterfaceDeclarationGenerator
from mockpkg.types.model import Package, Scope
from tests._fixtures.go_builder import GoPackageBuilder


def _package(path: str, name: str) -> Package:
    return Package(path=path, name=name, scope=Scope())


def test_import_tracker_aliases_name_clashes() -> None:
    current = _package("example.com/m/pkg", "pkg")
    tracker = ImportTracker(current=current)

    assert tracker(current) == ""
    assert tracker(_package("io", "io")) == "io"
    assert tracker(_package("example.com/other/io", "io")) == "io2"
    assert tracker(_package("io", "io")) == "io"
    assert tracker(_package("gopkg.in/yaml.v3", "yaml")) == "yaml"

    assert tracker.imports() == [
        ImportEntry(path="example.com/other/io", alias="io2"),
        ImportEntry(path="gopkg.in/yaml.v3", alias="yaml"),
        ImportEntry(path="io", alias=None),
    ]


def _write_sources(go_builder: GoPackageBuilder) -> Path:
    go_builder.stdlib(
        "io",
        {"io.go": "package io\n\ntype Reader interface {\n\tRead(p []byte) (n int, err error)\n}\n"},
    )
    go_builder.write(
        {
            "go.mod": "module example.com/m\n",
            "other/io/io.go": "package io\n\ntype Writer interface{}\n",
        }
    )
    return go_builder.package(
        "pkg",
        {
            "pkg.go": """
                package pkg

                import (
                    "io"

                    otherio "example.com/m/other/io"
                )

                type Thing struct{}

                func New() *Thing { return nil }

                func Copy(r io.Reader, w otherio.Writer) (int64, error) { return 0, nil }
            """
        },
    )


def test_generate_declaration_in_other_package(go_builder: GoPackageBuilder) -> None:
    directory = _write_sources(go_builder)
    iface = Pipeline(str(directory), context=go_builder.context()).run()

    source = InterfaceDeclarationGenerator().generate(iface, package="mocks")

    assert source == (
        "// Code generated by mockpkg. DO NOT EDIT.\n"
        "\n"
        "package mocks\n"
        "\n"
        "import (\n"
        '\tio2 "example.com/m/other/io"\n'
        '\t"example.com/m/pkg"\n'
        '\t"io"\n'
        ")\n"
        "\n"
        "// Pkg lists the free functions of package pkg (example.com/m/pkg).\n"
        "type Pkg interface {\n"
        "\tCopy(r io.Reader, w io2.Writer) (int64, error)\n"
        "\tNew() *pkg.Thing\n"
        "}\n"
    )


def test_generate_declaration_in_source_package(go_builder: GoPackageBuilder) -> None:
    directory = _write_sources(go_builder)
    iface = Pipeline(str(directory), ["New"], go_builder.context()).run()

    source = InterfaceDeclarationGenerator().generate(iface, package="pkg")

    assert "package pkg\n" in source
    assert "import" not in source
    assert "\tNew() *Thing\n" in source


def test_generate_uses_custom_templates(go_builder: GoPackageBuilder, tmp_path: Path) -> None:
    directory = _write_sources(go_builder)
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "interface.go.j2").write_text(
        "{{ name }}:{% for method in methods %} {{ method.name }}{% endfor %}",
        encoding="utf-8",
    )
    iface = Pipeline(str(directory), context=go_builder.context()).run()

    source = InterfaceDeclarationGenerator(templates_dir=templates).generate(iface)

    assert source == "Pkg: Copy New"
