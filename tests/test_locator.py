"""Tests for resolving location strings to directories."""

from __future__ import annotations

import os

import pytest

from mockpkg.errors import LocationError
from mockpkg.locator import locate
from tests._fixtures.go_builder import GoPackageBuilder


def test_existing_directory_is_resolved_absolute(go_builder: GoPackageBuilder) -> None:
    directory = go_builder.package("pkg", {"a.go": "package pkg\n"})

    found = locate("pkg", go_builder.context(), cwd=go_builder.path())

    assert found == directory.resolve()
    assert found.is_absolute()


def test_symlinks_are_resolved(go_builder: GoPackageBuilder) -> None:
    directory = go_builder.package("real", {"a.go": "package real\n"})
    link = go_builder.path() / "link"
    os.symlink(directory, link)

    assert locate(str(link), go_builder.context()) == directory.resolve()


def test_import_path_resolved_through_context(go_builder: GoPackageBuilder) -> None:
    stdlib = go_builder.stdlib("encoding/hex", {"hex.go": "package hex\n"})

    found = locate("encoding/hex", go_builder.context(), cwd=go_builder.path())

    assert found == stdlib.resolve()


def test_unknown_location_raises(go_builder: GoPackageBuilder) -> None:
    with pytest.raises(LocationError) as excinfo:
        locate("example.com/nowhere", go_builder.context(), cwd=go_builder.path())

    assert excinfo.value.location == "example.com/nowhere"


def test_empty_location_raises(go_builder: GoPackageBuilder) -> None:
    with pytest.raises(LocationError):
        locate("", go_builder.context())
