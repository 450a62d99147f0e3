"""
Unit tests for configuration helpers and identity loading.
"""

import pytest
from sqlalchemy import create_engine, insert

from hmis_access.config import get_env
from hmis_access.database import init_engine, load_identity, metadata, user_table


# ── Helpers / Fakes ──────────────────────────────────────────────────

class FakeResult:
    """Mimic SQLAlchemy Result with .mappings().first()."""
    def __init__(self, row_dict_or_none):
        self._row = row_dict_or_none

    def mappings(self):
        return self

    def first(self):
        return self._row


class FakeConn:
    def __init__(self, row_dict_or_none=None):
        self._row = row_dict_or_none

    def execute(self, stmt):
        return FakeResult(self._row)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class FakeEngine:
    """Mimic engine.connect() context manager."""
    def __init__(self, row_dict_or_none=None):
        self._row = row_dict_or_none
        self.connect_calls = 0

    def connect(self):
        self.connect_calls += 1
        return FakeConn(self._row)


def user_row(**overrides):
    row = {
        "id": "u-1", "email": "lab@hopehospital.com", "full_name": "Lab One",
        "role": "lab", "is_active": True, "hospital_type": "hope",
    }
    row.update(overrides)
    return row


# ── Tests: get_env ───────────────────────────────────────────────────

def test_get_env_ok(monkeypatch):
    monkeypatch.setenv("X", "123")
    assert get_env("X") == "123"


def test_get_env_missing_exits(monkeypatch, capsys):
    monkeypatch.delenv("MISSING_ENV", raising=False)
    with pytest.raises(SystemExit) as e:
        get_env("MISSING_ENV")
    assert e.value.code == 1
    err = capsys.readouterr().err
    assert "ERROR: env var MISSING_ENV is not set" in err


# ── Tests: init_engine ───────────────────────────────────────────────

def test_init_engine_connects(monkeypatch, capsys):
    monkeypatch.setenv("DB_URI", "sqlite://")
    engine = init_engine()
    assert engine is not None
    assert "[init] Connected to DB." in capsys.readouterr().out


# ── Tests: load_identity ─────────────────────────────────────────────

def test_load_identity_ok():
    engine = FakeEngine(user_row())
    identity = load_identity(engine, "u-1")
    assert identity.role == "lab"
    assert identity.tenant == "hope"
    assert identity.display_name == "Lab One"
    assert identity.is_active is True
    assert engine.connect_calls == 1


def test_load_identity_missing_user():
    assert load_identity(FakeEngine(None), "nobody") is None


def test_load_identity_defaults():
    identity = load_identity(
        FakeEngine(user_row(full_name=None, is_active=None, hospital_type="")), "u-1")
    assert identity.display_name == "lab"
    assert identity.is_active is True
    assert identity.tenant is None


def test_load_identity_inactive():
    identity = load_identity(FakeEngine(user_row(is_active=False)), "u-1")
    assert identity.is_active is False


def test_load_identity_from_sqlite():
    engine = create_engine("sqlite://", future=True)
    metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(insert(user_table), [
            user_row(),
            user_row(id="u-2", email="root@hopehospital.com", role="superadmin",
                     full_name="Root", hospital_type=None),
        ])

    identity = load_identity(engine, "u-2")
    assert identity.user_id == "u-2"
    assert identity.role == "superadmin"
    assert identity.tenant is None
    assert load_identity(engine, "u-3") is None
