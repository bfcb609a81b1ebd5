"""Tests for mockpkg.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from mockpkg.config import BuildConfig, MockpkgConfig, OutputConfig, load_config
from mockpkg.errors import ConfigError

_ENV = {
    "GOOS": "linux",
    "GOARCH": "amd64",
    "GOROOT": "/opt/go",
    "GOPATH": "/srv/go",
    "CGO_ENABLED": "1",
}


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, MockpkgConfig)
    assert config.root == tmp_path.resolve()
    assert config.build == BuildConfig()
    assert config.output == OutputConfig()


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".mockpkg.yml"
    config_file.write_text(
        """
build:
  tags: [integration, "e2e"]
  goos: darwin
  goarch: arm64
  goroot: toolchain/go
  gopath:
    - /srv/gopath
    - vendor-path
  cgo_enabled: false
  go_version: "go1.21"
output:
  outfile: mocks/pkg.go
  overwrite: yes
  package: fakes
""",
        encoding="utf-8",
    )

    config = load_config(config_file)
    root = tmp_path.resolve()

    assert config.build.tags == ["integration", "e2e"]
    assert config.build.goos == "darwin"
    assert config.build.goarch == "arm64"
    assert config.build.goroot == root / "toolchain" / "go"
    assert config.build.gopath == [Path("/srv/gopath"), root / "vendor-path"]
    assert config.build.cgo_enabled is False
    assert config.build.go_version == 21
    assert config.output.outfile == root / "mocks" / "pkg.go"
    assert config.output.overwrite is True
    assert config.output.package == "fakes"


def test_tags_accept_space_separated_string(tmp_path: Path) -> None:
    (tmp_path / ".mockpkg.yml").write_text("build:\n  tags: 'one two'\n", encoding="utf-8")

    assert load_config(tmp_path).build.tags == ["one", "two"]


@pytest.mark.parametrize(("raw", "expected"), [("22", 22), ("'1.20'", 20), ("go1.9", 9)])
def test_go_version_forms(tmp_path: Path, raw: str, expected: int) -> None:
    (tmp_path / ".mockpkg.yml").write_text(f"build:\n  go_version: {raw}\n", encoding="utf-8")

    assert load_config(tmp_path).build.go_version == expected


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    (tmp_path / ".mockpkg.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).build == BuildConfig()


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "build: [not, a, mapping]\n",
        "build:\n  cgo_enabled: maybe\n",
        "build:\n  go_version: latest\n",
        "build:\n  tags: {a: 1}\n",
        "build: [unterminated\n",
    ],
)
def test_invalid_config_raises(tmp_path: Path, content: str) -> None:
    (tmp_path / ".mockpkg.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_build_context_applies_overrides(tmp_path: Path) -> None:
    config = MockpkgConfig(
        root=tmp_path,
        build=BuildConfig(
            tags=["integration"],
            goos="windows",
            goroot=tmp_path / "go",
            gopath=[tmp_path / "gopath"],
            cgo_enabled=False,
            go_version=3,
        ),
    )

    context = config.build_context(_ENV)

    assert context.goos == "windows"
    assert context.goarch == "amd64"
    assert context.goroot == tmp_path / "go"
    assert context.gopath == (tmp_path / "gopath",)
    assert context.cgo_enabled is False
    assert context.release_tags == ("go1.1", "go1.2", "go1.3")
    assert context.build_tags == ("integration",)


def test_build_context_defaults_follow_environment(tmp_path: Path) -> None:
    context = MockpkgConfig(root=tmp_path).build_context(_ENV)

    assert context.goos == "linux"
    assert context.goroot == Path("/opt/go")
    assert context.gopath == (Path("/srv/go"),)
    assert context.cgo_enabled is True
    assert context.build_tags == ()
