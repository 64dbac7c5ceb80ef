#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import sys
from pathlib import Path
from textwrap import dedent

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dc_driver import DurationCheckDriver
from dc_paths import SourceRoots


@pytest.fixture
def temp_project(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def write_py_file(temp_project: Path):
    def _write(module_name: str, content: str) -> Path:
        parts = module_name.split(".")
        file_path = temp_project.joinpath(*parts).with_suffix(".py")
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(dedent(content))
        return file_path

    return _write


@pytest.fixture
def roots(temp_project: Path) -> SourceRoots:
    r = SourceRoots()
    r.add_root(temp_project)
    return r


@pytest.fixture
def analyze_source():
    """Analyze a Python module from a source string.

    Usage:
        def test_something(analyze_source):
            result = analyze_source('''
                import datetime
                d = datetime.timedelta(seconds=1)
            ''')
            assert not result.has_errors()
    """

    def _analyze(src: str, module_name: str = "main", filename: str | None = None):
        driver = DurationCheckDriver()
        return driver.analyze_source(dedent(src), filename=filename, module_name=module_name)

    return _analyze


@pytest.fixture
def check_source(analyze_source):
    """Run the duration pass over a source string and return its findings."""

    def _check(src: str):
        return analyze_source(src).findings

    return _check


def has_code(diagnostics, code: str) -> bool:
    """Check if any diagnostic contains the given code ("DRV-0020" or "[DRV-0020]")."""
    if not code.startswith("["):
        code = f"[{code}]"
    return any(code in d.message for d in diagnostics)
