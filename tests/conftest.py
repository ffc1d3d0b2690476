"""Shared fixtures for duo-ledger tests."""

import os
from datetime import datetime, timedelta

import pytest

from duo_ledger.config import Settings
from duo_ledger.db import Database
from duo_ledger.models import Member
from duo_ledger.service import LedgerService


class FakeClock:
    """Deterministic clock that advances one minute per call."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + timedelta(minutes=1)
        return now


@pytest.fixture
def ana():
    return Member(id="1", first_name="Ana")


@pytest.fixture
def ben():
    return Member(id="2", first_name="Ben")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep the developer's DUO_LEDGER_* variables and .env out of tests."""
    for name in list(os.environ):
        if name.upper().startswith("DUO_LEDGER_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings(tmp_path):
    """Create test settings backed by a temporary directory."""
    return Settings(_env_file=None, database_path=tmp_path / "ledger" / "test.db")


@pytest.fixture
def db(settings):
    """Create a temporary database."""
    database = Database(settings.database_path)
    yield database
    database.close()


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 12, 10, 12, 0, 0))


@pytest.fixture
def service(settings, db, clock):
    """Create a LedgerService instance."""
    return LedgerService(settings, db, clock=clock)
