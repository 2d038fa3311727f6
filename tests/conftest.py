from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'services.csv_parser'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Set test environment knobs
    os.environ.setdefault("RUN_ENV", "test")


@pytest.fixture(autouse=True)
def _fresh_settings():
    from config.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


SAMPLE_CSV = (
    "First Name,Last Name,Company,Position\n"
    "Ana,Lee,Acme,Engineer\n"
    "Bo,Kim,Acme,Manager\n"
    "Cy,Wu,Globex,Analyst\n"
)


@pytest.fixture
def sample_csv() -> str:
    return SAMPLE_CSV


@pytest.fixture
def sample_csv_path(tmp_path) -> Path:
    path = tmp_path / "Connections.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path
