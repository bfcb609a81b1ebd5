"""Configuration loading for mockpkg (.mockpkg.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .build.context import BuildContext, release_tags
from .errors import ConfigError

CONFIG_FILENAME = ".mockpkg.yml"


@dataclass
class BuildConfig:
    """Build settings applied on top of the host defaults."""

    tags: List[str] = field(default_factory=list)
    goos: Optional[str] = None
    goarch: Optional[str] = None
    goroot: Optional[Path] = None
    gopath: List[Path] = field(default_factory=list)
    cgo_enabled: Optional[bool] = None
    go_version: Optional[int] = None


@dataclass
class OutputConfig:
    """Where and how the rendered interface is written."""

    outfile: Optional[Path] = None
    overwrite: bool = False
    package: Optional[str] = None


@dataclass
class MockpkgConfig:
    """Represents the settings defined in .mockpkg.yml."""

    root: Path
    build: BuildConfig = field(default_factory=BuildConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def build_context(self, environ: Mapping[str, str] | None = None) -> BuildContext:
        """Host defaults overridden by the ``build`` section."""
        context = BuildContext.default(os.environ if environ is None else environ)
        build = self.build
        overrides: Dict[str, Any] = {}
        if build.goos:
            overrides["goos"] = build.goos
        if build.goarch:
            overrides["goarch"] = build.goarch
        if build.goroot is not None:
            overrides["goroot"] = build.goroot
        if build.gopath:
            overrides["gopath"] = tuple(build.gopath)
        if build.cgo_enabled is not None:
            overrides["cgo_enabled"] = build.cgo_enabled
        if build.go_version is not None:
            overrides["release_tags"] = release_tags(build.go_version)
        if overrides:
            context = replace(context, **overrides)
        return context.with_tags(*build.tags)


def load_config(config_path: Path) -> MockpkgConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return MockpkgConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    build_data = _as_dict(data.get("build"))
    build = BuildConfig(
        tags=_as_str_list(build_data.get("tags")),
        goos=_as_str(build_data.get("goos")),
        goarch=_as_str(build_data.get("goarch")),
        goroot=_as_path(root, build_data.get("goroot")),
        gopath=[path for path in (_as_path(root, item) for item in _as_str_list(build_data.get("gopath"))) if path],
        cgo_enabled=_as_bool(build_data.get("cgo_enabled")),
        go_version=_as_go_version(build_data.get("go_version")),
    )

    output_data = _as_dict(data.get("output"))
    output = OutputConfig(
        outfile=_as_path(root, output_data.get("outfile")),
        overwrite=_as_bool(output_data.get("overwrite")) or False,
        package=_as_str(output_data.get("package")),
    )

    return MockpkgConfig(root=root, build=build, output=output)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Expected a mapping, got {type(value).__name__}")
    return value


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item for item in value.split() if item]
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    raise ConfigError(f"Expected a list of strings, got {type(value).__name__}")


def _as_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1", "on"}:
            return True
        if lowered in {"false", "no", "0", "off"}:
            return False
    if isinstance(value, int):
        return bool(value)
    raise ConfigError(f"Expected a boolean, got {value!r}")


def _as_path(root: Path, value: Any) -> Optional[Path]:
    text = _as_str(value)
    if text is None:
        return None
    path = Path(text).expanduser()
    return path if path.is_absolute() else root / path


def _as_go_version(value: Any) -> Optional[int]:
    """Accept ``22``, ``"1.22"`` or ``"go1.22"`` and return the minor version."""
    text = _as_str(value)
    if text is None:
        return None
    if text.startswith("go"):
        text = text[2:]
    if text.startswith("1."):
        text = text[2:]
    minor = text.split(".", 1)[0]
    if not minor.isdigit():
        raise ConfigError(f"Invalid go_version {value!r}")
    return int(minor)


__all__ = ["BuildConfig", "CONFIG_FILENAME", "MockpkgConfig", "OutputConfig", "load_config"]
