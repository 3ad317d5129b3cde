"""Architecture enforcement tests for the package layering.

The credential and streaming layers (``auth``, ``base``, ``config``) are the
inner layers; the Copilot transports in ``copilot`` sit on top of them. These
static scans keep the dependency direction inward-only and fail with the
offending file and import line.

Rules validated here:
1) ``auth``, ``base`` and ``config`` never import from ``copilot``.
   The factory refers to provider classes by dotted string only.
2) ``config`` imports nothing else from the package (plain constants and
   env/file lookups only).
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, List

import pytest

_PACKAGE = "copilot_providers"


def _iter_python_files(root: Path) -> Iterable[Path]:
    """Yield all Python source files under a root directory, skipping caches."""

    for path in root.rglob("*.py"):
        if "__pycache__" in path.parts:
            continue
        yield path


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def _package_root() -> Path:
    root = Path(__file__).resolve().parent.parent / _PACKAGE
    if not root.is_dir():
        pytest.skip(f"{_PACKAGE} directory not found; skipping boundary check")
    return root


def _offending_lines(files: Iterable[Path], pattern: re.Pattern[str]) -> List[str]:
    offenders: List[str] = []
    for py in files:
        for lineno, line in enumerate(_read_text(py).splitlines(), start=1):
            if pattern.search(line):
                offenders.append(f"{py}:{lineno}: {line.strip()}")
    return offenders


def test_inner_layers_do_not_import_transports() -> None:
    """``auth``/``base``/``config`` must not import the ``copilot`` package."""

    root = _package_root()
    pattern = re.compile(r"^\s*(from\s+(\.+|copilot_providers\.)copilot\b|import\s+copilot_providers\.copilot\b)")
    files = [p for layer in ("auth", "base", "config") for p in _iter_python_files(root / layer)]

    offenders = _offending_lines(files, pattern)
    if offenders:
        pytest.fail("Inner layers must not import the copilot transports.\n" + "\n".join(offenders))


def test_config_is_a_leaf_module() -> None:
    """``config`` may only import the standard library, PyYAML and itself."""

    root = _package_root()
    pattern = re.compile(r"^\s*from\s+(\.\.|copilot_providers\.(?!config))")

    offenders = _offending_lines(_iter_python_files(root / "config"), pattern)
    if offenders:
        pytest.fail("config must not depend on other package modules.\n" + "\n".join(offenders))
