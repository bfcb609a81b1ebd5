"""CLI parser and entrypoint behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from mockpkg.cli import _build_parser, main
from tests._fixtures.go_builder import GoPackageBuilder


def test_cli_parses_package_and_functions() -> None:
    parser = _build_parser()
    args = parser.parse_args(["./pkg", "Foo", "Bar", "--tags", "integration e2e"])
    assert args.package == "./pkg"
    assert args.functions == ["Foo", "Bar"]
    assert args.tags == "integration e2e"
    assert args.overwrite is None
    assert args.output_package is None


def test_cli_accepts_verbose_and_output_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(["-v", "pkg", "--outfile", "out.go", "--overwrite", "--package", "fakes"])
    assert args.verbose is True
    assert args.outfile == Path("out.go")
    assert args.overwrite is True
    assert args.output_package == "fakes"


def test_cli_requires_package() -> None:
    with pytest.raises(SystemExit) as excinfo:
        _build_parser().parse_args([])
    assert excinfo.value.code == 2


def _workspace(go_builder: GoPackageBuilder) -> Path:
    go_builder.write(
        {
            ".mockpkg.yml": f"""
                build:
                  goos: linux
                  goarch: amd64
                  goroot: {go_builder.goroot}
                  gopath: [{go_builder.gopath}]
                  cgo_enabled: false
            """,
        }
    )
    return go_builder.package(
        "pkg",
        {
            "pkg.go": """
                package pkg

                func Foo(n int) error { return nil }

                func Qux() string { return "" }
            """,
            "setup.go": """
                //go:build integration

                package pkg

                func Setup() {}
            """,
        },
    )


def test_main_writes_interface_to_stdout(go_builder: GoPackageBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    directory = _workspace(go_builder)

    main([str(directory), "Foo", "--config", str(go_builder.root)])

    out = capsys.readouterr().out
    assert "package mocks\n" in out
    assert "type Pkg interface {\n\tFoo(n int) error\n}\n" in out


def test_main_honours_tags_and_outfile(go_builder: GoPackageBuilder) -> None:
    directory = _workspace(go_builder)
    outfile = go_builder.root / "gen" / "pkg_iface.go"

    main(
        [
            str(directory),
            "--config",
            str(go_builder.root),
            "--tags",
            "integration",
            "--outfile",
            str(outfile),
            "--package",
            "fakes",
        ]
    )

    written = outfile.read_text(encoding="utf-8")
    assert "package fakes\n" in written
    assert "\tSetup()\n" in written
    assert "\tQux() string\n" in written


def test_main_refuses_to_replace_existing_outfile(go_builder: GoPackageBuilder) -> None:
    directory = _workspace(go_builder)
    outfile = go_builder.root / "existing.go"
    outfile.write_text("keep me\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main([str(directory), "--config", str(go_builder.root), "--outfile", str(outfile)])

    assert excinfo.value.code == 1
    assert outfile.read_text(encoding="utf-8") == "keep me\n"

    main([str(directory), "--config", str(go_builder.root), "--outfile", str(outfile), "--overwrite"])
    assert "type Pkg interface" in outfile.read_text(encoding="utf-8")


def test_main_reports_pipeline_errors(go_builder: GoPackageBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    _workspace(go_builder)

    with pytest.raises(SystemExit) as excinfo:
        main([str(go_builder.root / "missing"), "--config", str(go_builder.root)])

    assert excinfo.value.code == 1
    assert "mockpkg:" in capsys.readouterr().err


def test_main_reports_empty_interface(go_builder: GoPackageBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    directory = _workspace(go_builder)

    with pytest.raises(SystemExit) as excinfo:
        main([str(directory), "Setup", "--config", str(go_builder.root)])

    assert excinfo.value.code == 1
    assert "no functions for interface" in capsys.readouterr().err
