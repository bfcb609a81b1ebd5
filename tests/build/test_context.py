"""BuildContext tag matching, file matching and import resolution."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from mockpkg.build.context import BuildContext, release_tags
from mockpkg.errors import FilterError
from tests._fixtures.go_builder import GoPackageBuilder


def _context(**overrides) -> BuildContext:
    values = {"goos": "linux", "goarch": "amd64", "cgo_enabled": False}
    values.update(overrides)
    return BuildContext(**values)


def test_match_tag_covers_platform_compiler_and_release_tags() -> None:
    context = _context()

    assert context.match_tag("linux")
    assert context.match_tag("amd64")
    assert context.match_tag("gc")
    assert context.match_tag("unix")
    assert context.match_tag("go1.1")
    assert context.match_tag("go1.18")
    assert not context.match_tag("cgo")
    assert not context.match_tag("windows")
    assert not context.match_tag("ignore")
    assert not context.match_tag("")


def test_match_tag_honours_cgo_and_implied_os() -> None:
    assert _context(cgo_enabled=True).match_tag("cgo")
    android = _context(goos="android")
    assert android.match_tag("linux")
    assert android.match_tag("unix")
    assert not _context(goos="windows").match_tag("unix")


def test_with_tags_returns_new_context() -> None:
    context = _context()
    tagged = context.with_tags("integration", "")

    assert tagged is not context
    assert tagged.build_tags == ("integration",)
    assert context.build_tags == ()
    assert tagged.match_tag("integration")
    assert context.with_tags() is context


def test_context_is_immutable() -> None:
    context = _context()
    with pytest.raises(FrozenInstanceError):
        context.goos = "darwin"  # type: ignore[misc]


def test_release_tags_enumerate_minor_versions() -> None:
    assert release_tags(3) == ("go1.1", "go1.2", "go1.3")


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("file.go", True),
        ("file_linux.go", True),
        ("file_windows.go", False),
        ("file_amd64.go", True),
        ("file_arm64.go", False),
        ("file_linux_amd64.go", True),
        ("file_linux_arm64.go", False),
        ("file_darwin_amd64.go", False),
        ("linux.go", True),
        ("file_unknown.go", True),
    ],
)
def test_good_os_arch_file(name: str, expected: bool) -> None:
    assert _context().good_os_arch_file(name) is expected


def test_default_reads_environment() -> None:
    context = BuildContext.default(
        {
            "GOOS": "windows",
            "GOARCH": "arm64",
            "GOROOT": "/opt/go",
            "GOPATH": "/srv/a:/srv/b",
            "CGO_ENABLED": "1",
        }
    )

    assert context.goos == "windows"
    assert context.goarch == "arm64"
    assert context.goroot == Path("/opt/go")
    assert context.gopath == (Path("/srv/a"), Path("/srv/b"))
    assert context.cgo_enabled is True


def test_match_file_uses_header_constraints(go_builder: GoPackageBuilder) -> None:
    directory = go_builder.package(
        "pkg",
        {
            "plain.go": "package pkg\n",
            "tagged.go": """
                //go:build integration

                package pkg
            """,
            "legacy.go": """
                // +build linux,!cgo

                package pkg
            """,
        },
    )
    context = go_builder.context()

    assert context.match_file(directory, "plain.go")
    assert not context.match_file(directory, "tagged.go")
    assert context.with_tags("integration").match_file(directory, "tagged.go")
    assert context.match_file(directory, "legacy.go")
    assert not go_builder.context(cgo_enabled=True).match_file(directory, "legacy.go")


def test_match_file_prefers_go_build_over_plus_build(go_builder: GoPackageBuilder) -> None:
    directory = go_builder.package(
        "pkg",
        {
            "both.go": """
                //go:build linux
                // +build windows

                package pkg
            """,
        },
    )

    assert go_builder.context().match_file(directory, "both.go")


def test_match_file_skips_underscore_and_dot_files(go_builder: GoPackageBuilder) -> None:
    directory = go_builder.package("pkg", {"_hidden.go": "package pkg\n", ".dot.go": "package pkg\n"})
    context = go_builder.context()

    assert not context.match_file(directory, "_hidden.go")
    assert not context.match_file(directory, ".dot.go")


def test_match_file_reports_malformed_directive(go_builder: GoPackageBuilder) -> None:
    directory = go_builder.package(
        "pkg",
        {
            "broken.go": """
                //go:build linux &&

                package pkg
            """,
        },
    )

    with pytest.raises(FilterError) as excinfo:
        go_builder.context().match_file(directory, "broken.go")

    assert excinfo.value.line == 1
    assert excinfo.value.path == directory / "broken.go"


def test_match_file_rejects_multiple_go_build_lines(go_builder: GoPackageBuilder) -> None:
    directory = go_builder.package(
        "pkg",
        {
            "twice.go": """
                //go:build linux
                //go:build amd64

                package pkg
            """,
        },
    )

    with pytest.raises(FilterError):
        go_builder.context().match_file(directory, "twice.go")


def test_import_dir_prefers_goroot(go_builder: GoPackageBuilder) -> None:
    stdlib = go_builder.stdlib("strings", {"strings.go": "package strings\n"})
    source = go_builder.package("app", {"main.go": "package app\n"})

    assert go_builder.context().import_dir("strings", source) == stdlib


def test_import_dir_walks_up_to_vendor(go_builder: GoPackageBuilder) -> None:
    go_builder.write({"vendor/example.com/dep/dep.go": "package dep\n"})
    source = go_builder.package("app/inner", {"inner.go": "package inner\n"})

    found = go_builder.context().import_dir("example.com/dep", source)

    assert found == go_builder.root / "vendor" / "example.com" / "dep"


def test_import_dir_resolves_module_packages(go_builder: GoPackageBuilder) -> None:
    go_builder.write(
        {
            "go.mod": """
                module example.com/project

                go 1.22
            """,
            "util/util.go": "package util\n",
        }
    )
    source = go_builder.package("cmd", {"main.go": "package main\n"})

    found = go_builder.context().import_dir("example.com/project/util", source)

    assert found == go_builder.root / "util"


def test_import_dir_resolves_module_cache_requirements(go_builder: GoPackageBuilder) -> None:
    go_builder.write(
        {
            "go.mod": """
                module example.com/project

                require (
                    github.com/Acme/lib v1.2.3
                )
            """,
        }
    )
    cached = go_builder.gopath / "pkg" / "mod" / "github.com" / "!acme" / "lib@v1.2.3" / "sub"
    cached.mkdir(parents=True)
    source = go_builder.package("cmd", {"main.go": "package main\n"})

    found = go_builder.context().import_dir("github.com/Acme/lib/sub", source)

    assert found == cached


def test_import_dir_resolves_local_replace(go_builder: GoPackageBuilder) -> None:
    go_builder.write(
        {
            "go.mod": """
                module example.com/project

                replace example.com/other => ./third_party/other
            """,
            "third_party/other/other.go": "package other\n",
        }
    )
    source = go_builder.package("cmd", {"main.go": "package main\n"})

    found = go_builder.context().import_dir("example.com/other", source)

    assert found is not None
    assert found.resolve() == (go_builder.root / "third_party" / "other").resolve()


def test_import_dir_falls_back_to_gopath(go_builder: GoPackageBuilder) -> None:
    legacy = go_builder.gopath / "src" / "legacy" / "pkg"
    legacy.mkdir(parents=True)
    source = go_builder.package("app", {"main.go": "package app\n"})

    assert go_builder.context().import_dir("legacy/pkg", source) == legacy


def test_import_dir_returns_none_when_missing(go_builder: GoPackageBuilder) -> None:
    source = go_builder.package("app", {"main.go": "package app\n"})

    assert go_builder.context().import_dir("example.com/missing", source) is None


def test_import_path_for_dir(go_builder: GoPackageBuilder) -> None:
    go_builder.write({"mod/go.mod": "module example.com/mod\n"})
    inside = go_builder.package("mod/sub", {"sub.go": "package sub\n"})
    gopath_pkg = go_builder.gopath / "src" / "github.com" / "u" / "p"
    gopath_pkg.mkdir(parents=True)
    loose = go_builder.package("loose", {"loose.go": "package loose\n"})
    context = go_builder.context()

    assert context.import_path_for_dir(inside) == "example.com/mod/sub"
    assert context.import_path_for_dir(go_builder.root / "mod") == "example.com/mod"
    assert context.import_path_for_dir(gopath_pkg) == "github.com/u/p"
    assert context.import_path_for_dir(loose) == str(loose)
