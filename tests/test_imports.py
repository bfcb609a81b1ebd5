"""Entry-point modules import cleanly in a fresh interpreter."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]


@pytest.mark.parametrize(
    "module",
    ["mockpkg.cli", "mockpkg.pipeline", "mockpkg.models", "mockpkg.types", "mockpkg.types.loader"],
)
def test_module_imports_in_fresh_interpreter(module: str) -> None:
    completed = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        cwd=_ROOT,
        capture_output=True,
        text=True,
        check=False,
    )

    assert completed.returncode == 0, completed.stderr
