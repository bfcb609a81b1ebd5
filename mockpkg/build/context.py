"""Immutable Go build configuration: tag matching, file matching, import lookup."""

from __future__ import annotations

import os
import platform
import shutil
import subprocess
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterator, List, Mapping, Optional, Tuple

from ..errors import FilterError
from ..logging import get_logger
from .constraint import ConstraintSyntaxError, parse_go_build, parse_plus_build, scan_header
from .gomod import GoModule, escape_module_path, find_module

KNOWN_OS = frozenset(
    {
        "aix",
        "android",
        "darwin",
        "dragonfly",
        "freebsd",
        "hurd",
        "illumos",
        "ios",
        "js",
        "linux",
        "nacl",
        "netbsd",
        "openbsd",
        "plan9",
        "solaris",
        "wasip1",
        "windows",
        "zos",
    }
)

UNIX_OS = frozenset(
    {
        "aix",
        "android",
        "darwin",
        "dragonfly",
        "freebsd",
        "hurd",
        "illumos",
        "ios",
        "linux",
        "netbsd",
        "openbsd",
        "solaris",
    }
)

KNOWN_ARCH = frozenset(
    {
        "386",
        "amd64",
        "amd64p32",
        "arm",
        "armbe",
        "arm64",
        "arm64be",
        "loong64",
        "mips",
        "mipsle",
        "mips64",
        "mips64le",
        "mips64p32",
        "mips64p32le",
        "ppc",
        "ppc64",
        "ppc64le",
        "riscv",
        "riscv64",
        "s390",
        "s390x",
        "sparc",
        "sparc64",
        "wasm",
    }
)

DEFAULT_GO_MINOR = 22

_MACHINE_TO_GOARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
    "loongarch64": "loong64",
}

# GOOS values that additionally satisfy another GOOS tag.
_IMPLIED_OS = {"android": "linux", "illumos": "solaris", "ios": "darwin"}

logger = get_logger("build")


def release_tags(minor: int = DEFAULT_GO_MINOR) -> Tuple[str, ...]:
    """Return ``go1.1`` .. ``go1.<minor>``."""
    return tuple(f"go1.{index}" for index in range(1, minor + 1))


@dataclass(frozen=True)
class BuildContext:
    """Target platform and tag set shared by every pipeline stage.

    Instances never change after construction; ``with_tags`` returns a copy.
    """

    goos: str
    goarch: str
    goroot: Optional[Path] = None
    gopath: Tuple[Path, ...] = ()
    cgo_enabled: bool = True
    compiler: str = "gc"
    build_tags: Tuple[str, ...] = ()
    release_tags: Tuple[str, ...] = field(default_factory=release_tags)

    @classmethod
    def default(cls, environ: Mapping[str, str] | None = None) -> "BuildContext":
        """Context for the host platform, honoring GOOS/GOARCH/GOROOT/GOPATH/CGO_ENABLED."""
        env = os.environ if environ is None else environ
        host_os = _host_goos()
        host_arch = _host_goarch()
        goos = env.get("GOOS") or host_os
        goarch = env.get("GOARCH") or host_arch

        cgo_setting = env.get("CGO_ENABLED")
        if cgo_setting in {"0", "1"}:
            cgo_enabled = cgo_setting == "1"
        else:
            cgo_enabled = goos == host_os and goarch == host_arch

        goroot_value = env.get("GOROOT") or _go_env("GOROOT")
        goroot = Path(goroot_value) if goroot_value else None

        gopath_value = env.get("GOPATH")
        if gopath_value:
            gopath = tuple(Path(item) for item in gopath_value.split(os.pathsep) if item)
        else:
            gopath = (Path.home() / "go",)

        return cls(
            goos=goos,
            goarch=goarch,
            goroot=goroot,
            gopath=gopath,
            cgo_enabled=cgo_enabled,
        )

    def with_tags(self, *tags: str) -> "BuildContext":
        """Return a copy with extra build tags appended."""
        extra = tuple(tag for tag in tags if tag)
        if not extra:
            return self
        return replace(self, build_tags=self.build_tags + extra)

    def match_tag(self, name: str) -> bool:
        """Report whether the tag ``name`` is satisfied by this context."""
        if not name:
            return False
        if name in self.build_tags or name in self.release_tags:
            return True
        if name == "cgo":
            return self.cgo_enabled
        if name in {self.goos, self.goarch, self.compiler}:
            return True
        if name == "unix" and self.goos in UNIX_OS:
            return True
        return _IMPLIED_OS.get(self.goos) == name

    def good_os_arch_file(self, name: str) -> bool:
        """Apply the ``_GOOS``, ``_GOARCH`` and ``_GOOS_GOARCH`` file name rules."""
        stem = name.split(".", 1)[0]
        index = stem.find("_")
        if index < 0:
            return True
        parts = stem[index:].split("_")
        if parts and parts[-1] == "test":
            parts = parts[:-1]
        count = len(parts)
        if count >= 2 and parts[-2] in KNOWN_OS and parts[-1] in KNOWN_ARCH:
            return self.match_tag(parts[-2]) and self.match_tag(parts[-1])
        if count >= 1 and (parts[-1] in KNOWN_OS or parts[-1] in KNOWN_ARCH):
            return self.match_tag(parts[-1])
        return True

    def match_file(self, directory: Path, name: str) -> bool:
        """Report whether ``directory/name`` would be part of the build.

        Only the header comments before the ``package`` clause are read.
        Raises ``FilterError`` for unreadable files and malformed directives.
        """
        if name.startswith("_") or name.startswith("."):
            return False
        if not self.good_os_arch_file(name):
            return False

        path = directory / name
        lines = _read_header(path)
        header = scan_header(lines)
        try:
            if len(header.go_build) > 1:
                number = header.go_build[1][0]
                raise FilterError(path, "multiple //go:build comments", line=number)
            if header.go_build:
                number, line = header.go_build[0]
                return parse_go_build(line).eval(self.match_tag)
            for number, line in header.plus_build:
                if not parse_plus_build(line).eval(self.match_tag):
                    return False
        except ConstraintSyntaxError as exc:
            raise FilterError(path, f"invalid build constraint: {exc}", line=number) from exc
        return True

    def import_dir(self, import_path: str, src_dir: Path) -> Optional[Path]:
        """Resolve ``import_path`` as seen from ``src_dir`` to a source directory."""
        if import_path.startswith("./") or import_path.startswith("../") or import_path in {".", ".."}:
            candidate = src_dir / import_path
            return candidate if candidate.is_dir() else None

        for candidate in self._import_candidates(import_path, src_dir):
            if candidate.is_dir():
                logger.debug("Resolved import %s to %s", import_path, candidate)
                return candidate
        return None

    def _import_candidates(self, import_path: str, src_dir: Path) -> Iterator[Path]:
        if self.goroot is not None:
            yield self.goroot / "src" / import_path

        for directory in (src_dir, *src_dir.parents):
            yield directory / "vendor" / import_path

        module = find_module(src_dir)
        if module is not None:
            yield from self._module_candidates(module, import_path)

        for root in self.gopath:
            yield root / "src" / import_path

    def _module_candidates(self, module: GoModule, import_path: str) -> Iterator[Path]:
        if module.owns(import_path):
            yield module.root / import_path[len(module.path) :].lstrip("/")

        for required, target in sorted(module.replaces.items(), key=lambda item: -len(item[0])):
            if import_path == required or import_path.startswith(required + "/"):
                rest = import_path[len(required) :].lstrip("/")
                if target.startswith(".") or target.startswith("/"):
                    yield (module.root / target / rest) if rest else (module.root / target)
                else:
                    yield from self._cache_dirs(target, rest)

        for required, version in sorted(module.requires.items(), key=lambda item: -len(item[0])):
            if import_path == required or import_path.startswith(required + "/"):
                rest = import_path[len(required) :].lstrip("/")
                yield from self._cache_dirs(f"{required}@{version}", rest)

    def _cache_dirs(self, versioned: str, rest: str) -> Iterator[Path]:
        if "@" not in versioned:
            return
        module_path, version = versioned.split("@", 1)
        for root in self.gopath:
            base = root / "pkg" / "mod" / f"{escape_module_path(module_path)}@{version}"
            yield base / rest if rest else base

    def import_path_for_dir(self, directory: Path) -> str:
        """Derive the import path of ``directory``, falling back to the directory itself."""
        module = find_module(directory)
        if module is not None:
            relative = directory.relative_to(module.root).as_posix()
            return module.path if relative == "." else f"{module.path}/{relative}"

        roots: List[Path] = list(self.gopath)
        if self.goroot is not None:
            roots.insert(0, self.goroot)
        for root in roots:
            src = root / "src"
            try:
                relative = directory.relative_to(src).as_posix()
            except ValueError:
                continue
            if relative != ".":
                return relative
        return str(directory)


def _read_header(path: Path) -> List[str]:
    lines: List[str] = []
    try:
        with path.open("r", encoding="utf-8", errors="replace") as handle:
            for line in handle:
                lines.append(line)
                if line.lstrip().startswith("package"):
                    break
    except OSError as exc:
        raise FilterError(path, f"cannot read file: {exc}") from exc
    return lines


def _host_goos() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "darwin"
    if sys.platform in {"win32", "cygwin"}:
        return "windows"
    for name in ("freebsd", "openbsd", "netbsd", "dragonfly", "aix"):
        if sys.platform.startswith(name):
            return name
    return sys.platform


def _host_goarch() -> str:
    machine = platform.machine().lower()
    return _MACHINE_TO_GOARCH.get(machine, machine or "amd64")


def _go_env(name: str) -> Optional[str]:
    go = shutil.which("go")
    if go is None:
        return None
    try:
        result = subprocess.run(
            [go, "env", name],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        logger.debug("go env %s failed: %s", name, exc)
        return None
    if result.returncode != 0:
        return None
    value = result.stdout.strip()
    return value or None


__all__ = ["BuildContext", "KNOWN_ARCH", "KNOWN_OS", "UNIX_OS", "release_tags"]
