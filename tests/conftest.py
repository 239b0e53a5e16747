"""
HotelOps - Test Infrastructure (conftest.py)
============================================
Provides:
  - A throwaway SQLite database per test
  - A started write scheduler
  - A hydrated HotelOpsState with short debounce windows
  - FastAPI TestClient bound to that state, plus login helpers
  - DB assertion helpers
"""

import json
import os
import sqlite3
import sys
import time

import pytest

# Ensure project root is on path
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, ROOT_DIR)

from hotelops.ops import HotelOpsState  # noqa: E402
from hotelops.persistence import WriteScheduler  # noqa: E402
from hotelops.storage import ObjectStore  # noqa: E402

# Short windows keep the timing tests fast; assertions wait well past them
DEBOUNCE = 0.05
SAVING_HOLD = 0.05


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "hotelops_test.db")


@pytest.fixture
def store(db_path):
    return ObjectStore(db_path)


@pytest.fixture
def scheduler():
    s = WriteScheduler()
    s.start()
    yield s
    s.shutdown(wait=True)


def make_state(db_path, **kwargs) -> HotelOpsState:
    kwargs.setdefault("debounce_seconds", DEBOUNCE)
    kwargs.setdefault("saving_hold_seconds", SAVING_HOLD)
    kwargs.setdefault("seed_when_empty", True)
    return HotelOpsState(db_path=db_path, **kwargs)


@pytest.fixture
def state(db_path):
    """Hydrated state container on a fresh database (seed data)."""
    st = make_state(db_path)
    assert st.start(wait=True, timeout=5)
    yield st
    st.stop()


@pytest.fixture
def client(db_path):
    """TestClient; startup hydrates the state, shutdown flushes it."""
    import main
    from starlette.testclient import TestClient

    app = main.create_app(state=make_state(db_path))
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def admin_client(client):
    login(client, "admin@hotel.com")
    return client


@pytest.fixture
def staff_client(client):
    login(client, "bob@hotel.com")
    return client


# ============================================================================
# Helpers
# ============================================================================

def login(client, email: str, password: str = "password123"):
    resp = client.post("/api/session/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()


def login_as(state, email: str, password: str = "password123"):
    return state.session.login(email, password)


def wait_for(predicate, timeout: float = 3.0, interval: float = 0.02) -> bool:
    """Poll ``predicate`` until it is truthy or the timeout passes."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return bool(predicate())


def settle(st: HotelOpsState, timeout: float = 3.0) -> bool:
    """Wait until no write-back is pending or running."""
    return wait_for(
        lambda: not any(s.has_pending_write() for s in st.all_states.values()) and not st.saving,
        timeout=timeout,
    )


def db_query(db_path: str, sql: str, params=()):
    conn = sqlite3.connect(db_path, timeout=30)
    conn.row_factory = sqlite3.Row
    try:
        return [dict(r) for r in conn.execute(sql, params).fetchall()]
    finally:
        conn.close()


def db_records(db_path: str, collection: str):
    rows = db_query(db_path, f"SELECT data FROM {collection} ORDER BY position")
    return [json.loads(r["data"]) for r in rows]


def db_count(db_path: str, collection: str) -> int:
    return db_query(db_path, f"SELECT COUNT(*) AS n FROM {collection}")[0]["n"]
