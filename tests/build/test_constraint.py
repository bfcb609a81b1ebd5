"""Build constraint parsing and header scanning."""

from __future__ import annotations

import pytest

from mockpkg.build.constraint import (
    ConstraintSyntaxError,
    is_go_build,
    is_plus_build,
    parse_go_build,
    parse_plus_build,
    scan_header,
)


def _tags(*names: str):
    enabled = set(names)
    return lambda name: name in enabled


@pytest.mark.parametrize(
    ("line", "tags", "expected"),
    [
        ("//go:build linux", ("linux",), True),
        ("//go:build linux", ("darwin",), False),
        ("//go:build !windows", ("linux",), True),
        ("//go:build linux && amd64", ("linux", "amd64"), True),
        ("//go:build linux && amd64", ("linux", "arm64"), False),
        ("//go:build linux || darwin", ("darwin",), True),
        ("//go:build (linux || darwin) && !cgo", ("linux", "cgo"), False),
        ("//go:build go1.18", ("go1.18",), True),
        ("//go:build integration", (), False),
    ],
)
def test_parse_go_build_evaluates_expression(line: str, tags, expected: bool) -> None:
    assert parse_go_build(line).eval(_tags(*tags)) is expected


def test_and_binds_tighter_than_or() -> None:
    expr = parse_go_build("//go:build a || b && c")

    assert expr.eval(_tags("a")) is True
    assert expr.eval(_tags("b")) is False
    assert expr.eval(_tags("b", "c")) is True


@pytest.mark.parametrize(
    "line",
    [
        "//go:build",
        "//go:build linux &&",
        "//go:build (linux",
        "//go:build linux)",
        "//go:build linux $ darwin",
    ],
)
def test_parse_go_build_rejects_malformed_lines(line: str) -> None:
    with pytest.raises(ConstraintSyntaxError):
        parse_go_build(line)


def test_plus_build_space_is_or_and_comma_is_and() -> None:
    expr = parse_plus_build("// +build linux,amd64 darwin")

    assert expr.eval(_tags("linux", "amd64")) is True
    assert expr.eval(_tags("linux", "arm64")) is False
    assert expr.eval(_tags("darwin")) is True


def test_plus_build_negation() -> None:
    expr = parse_plus_build("// +build !windows")

    assert expr.eval(_tags("linux")) is True
    assert expr.eval(_tags("windows")) is False


@pytest.mark.parametrize("line", ["// +build linux,", "// +build !!linux", "// +build"])
def test_plus_build_rejects_malformed_terms(line: str) -> None:
    with pytest.raises(ConstraintSyntaxError):
        parse_plus_build(line)


def test_directive_detection() -> None:
    assert is_go_build("//go:build linux")
    assert not is_go_build("//go:builder linux")
    assert not is_go_build("// go:build linux")
    assert is_plus_build("// +build linux")
    assert is_plus_build("//+build linux")
    assert not is_plus_build("// +builds linux")


def test_scan_header_collects_lines_before_package_clause() -> None:
    lines = [
        "// Copyright notice.\n",
        "\n",
        "//go:build linux\n",
        "// +build linux\n",
        "\n",
        "package demo\n",
        "//go:build ignored\n",
    ]

    header = scan_header(lines)

    assert header.go_build == ((3, "//go:build linux"),)
    assert header.plus_build == ((4, "// +build linux"),)


def test_scan_header_ignores_plus_build_without_trailing_blank_line() -> None:
    lines = [
        "// +build integration\n",
        "package demo\n",
    ]

    header = scan_header(lines)

    assert header.plus_build == ()


def test_scan_header_skips_block_comments() -> None:
    lines = [
        "/* licence\n",
        "   //go:build nope\n",
        "*/\n",
        "//go:build integration\n",
        "\n",
        "package demo\n",
    ]

    header = scan_header(lines)

    assert header.go_build == ((4, "//go:build integration"),)
