"""
Pytest bootstrap for the src/ layout.

Puts ./src first on sys.path so `import guardlog` resolves to the working
tree even when the package is not installed, and provides the shared
journal fixtures.
"""
from __future__ import annotations

import sys
from pathlib import Path

repo_root = Path(__file__).resolve().parents[1]
src = repo_root / "src"
if src.is_dir():
    src_str = str(src)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)

import pytest  # noqa: E402

from guardlog import build_logger  # noqa: E402
from guardlog.config import LogConfig  # noqa: E402


@pytest.fixture
def log_config(tmp_path: Path) -> LogConfig:
    return LogConfig(log_base_path=str(tmp_path))


@pytest.fixture
def journal(log_config: LogConfig):
    return build_logger(log_config)
