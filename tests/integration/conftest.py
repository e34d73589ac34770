"""Fixtures for integration tests."""

import sys
import textwrap
from collections.abc import Generator
from pathlib import Path
from typing import Protocol

import pytest


class WriteModuleFn(Protocol):
    """Protocol for test module creation function."""

    def __call__(self, name: str, source: str) -> Path:
        """Write an importable module and return its path."""


@pytest.fixture
def write_module(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[WriteModuleFn]:
    """Write modules into a directory on sys.path."""
    monkeypatch.syspath_prepend(str(tmp_path))
    written: list[str] = []

    def write(name: str, source: str) -> Path:
        path = tmp_path / f"{name}.py"
        path.write_text(textwrap.dedent(source))
        written.append(name)
        return path

    yield write

    for name in written:
        sys.modules.pop(name, None)
