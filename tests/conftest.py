import io
import sys
from pathlib import Path

import pytest

# tests/ から見て 1 つ上 = プロジェクトルート
PROJECT_ROOT = Path(__file__).resolve().parents[1]

# プロジェクトルートを sys.path の先頭に追加
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

from core.datawriter.writer import DataWriter  # noqa: E402


@pytest.fixture
def buf():
    return io.BytesIO()


@pytest.fixture
def writer(buf):
    """デフォルト設定（, / " / LF）の DataWriter"""
    return DataWriter(buf)
