import os
import sys
import pathlib
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure the project root is importable so `tests.models` resolves as an import string.
_ROOT = pathlib.Path(__file__).parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

os.environ.setdefault("TZ", "UTC")

from model_sidekick import register  # noqa: E402
from model_sidekick.config import reload_settings  # noqa: E402
from tests.models import Base, User  # noqa: E402

T1 = datetime(2024, 1, 1, 10, 0, 0)
T2 = datetime(2024, 1, 2, 12, 30, 0)


@pytest.fixture(autouse=True)
def _baseline_test_env(monkeypatch):
    """Drop any SIDEKICK_* values leaking in from the host and start from defaults."""
    for key in list(os.environ):
        if key.startswith("SIDEKICK_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(_ROOT / "tests")
    reload_settings()
    yield
    reload_settings()


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db_session(engine):
    """
    Session with session listeners registered. expire_on_commit is off so that
    committed instances keep their loaded attributes (the helpers never emit SQL).
    """
    register()
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture
def make_user(db_session):
    """Insert a user and hand back a freshly *loaded* copy (not recently created)."""

    def _make(**fields):
        values = {
            "name": "Bob",
            "email": "bob@example.com",
            "password": "hunter2",
            "created_at": T1,
            "updated_at": T1,
        }
        values.update(fields)
        user = User(**values)
        db_session.add(user)
        db_session.commit()
        user_id = user.id
        db_session.expunge_all()
        return db_session.get(User, user_id)

    return _make
