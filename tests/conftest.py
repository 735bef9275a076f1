"""Shared fixtures and markers for execution service tests."""

import re
import shutil
import subprocess

import pytest

from src.config import ExecutionSettings


def _installed(*programs: str) -> bool:
    """Check that every program is on PATH."""
    return all(shutil.which(program) for program in programs)


def _tsc_version() -> tuple:
    """Installed tsc version as (major, minor), or (0, 0) when unknown."""
    if not _installed("node", "tsc"):
        return (0, 0)
    try:
        result = subprocess.run(["tsc", "--version"], capture_output=True, text=True, timeout=30)
    except (OSError, subprocess.SubprocessError):
        return (0, 0)
    match = re.search(r"(\d+)\.(\d+)", result.stdout)
    return (int(match.group(1)), int(match.group(2))) if match else (0, 0)


# Markers for tests that need a real toolchain on the host
requires_node = pytest.mark.skipif(
    not _installed("node"),
    reason="node is not installed",
)
# The TypeScript toolchain passes --noCheck, added in tsc 5.6
requires_tsc = pytest.mark.skipif(
    _tsc_version() < (5, 6),
    reason="node and tsc >= 5.6 are not installed",
)
requires_gcc = pytest.mark.skipif(
    not _installed("gcc"),
    reason="gcc is not installed",
)
requires_gxx = pytest.mark.skipif(
    not _installed("g++"),
    reason="g++ is not installed",
)
requires_java = pytest.mark.skipif(
    not _installed("javac", "java"),
    reason="a JDK is not installed",
)


@pytest.fixture
def temp_root(tmp_path):
    """Empty directory used as the workspace root, for before/after counts."""
    root = tmp_path / "workspaces"
    root.mkdir()
    return root


@pytest.fixture
def settings(temp_root):
    return ExecutionSettings(temp_root=str(temp_root), timeout_seconds=15)


@pytest.fixture
def remote_settings(temp_root):
    return ExecutionSettings(
        execution_mode="remote",
        temp_root=str(temp_root),
        remote_url="https://runner.test/api/v2/execute",
    )
