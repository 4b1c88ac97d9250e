from __future__ import annotations

import sys
from pathlib import Path

import pytest

_START = Path(__file__).resolve().parent
_repo_root = _START
while _repo_root != _repo_root.parent and not (_repo_root / "kronpoly" / "__init__.py").exists():
    _repo_root = _repo_root.parent

sys.path.insert(0, str(_repo_root))

from kronpoly import settings  # noqa: E402

INT_TYPES = ("int8", "int16", "int32", "int64")


@pytest.fixture(autouse=True)
def _restore_settings():
    yield
    settings.reset_settings()


@pytest.fixture(params=INT_TYPES)
def int_type(request):
    import numpy as np

    return getattr(np, request.param)
