# tests/conftest.py
import os
import tempfile

# must run before htmx_lab.db builds its engine
_TMP = tempfile.mkdtemp(prefix="htmx-lab-tests-")
os.environ.setdefault("HTMXLAB_DB_URL", f"sqlite+aiosqlite:///{_TMP}/test.db")
os.environ.setdefault("HTMXLAB_JOB_INTERVAL_MS", "20")
os.environ.setdefault("HTMXLAB_JOB_SWEEP_S", "0")

import pytest
from fastapi.testclient import TestClient

from htmx_lab.main import create_app

HX = {"HX-Request": "true"}

@pytest.fixture
def client():
    with TestClient(create_app()) as c:
        yield c
