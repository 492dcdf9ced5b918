"""
Shared fixtures: an in-memory database per test and a client bound to it.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import splitbill.models  # noqa: F401
from splitbill.db.base import Base
from splitbill.db.session import get_db
from splitbill.main import app

PAYER = "0x" + "a" * 40
ALICE = "0x" + "b" * 40
BOB = "0x" + "c" * 40
CAROL = "0x" + "d" * 40


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def bill_body():
    """A valid creation request: PAYER paid 100 USDC, shared by ALICE and BOB."""
    return {
        "payer": PAYER,
        "total": 100,
        "title": "Dinner",
        "participants": [
            {"addr": ALICE, "amount": 50},
            {"addr": BOB, "amount": 50},
        ],
    }
