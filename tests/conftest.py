import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production-use")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from clientkeeper import config
from clientkeeper.auth import get_current_user
from clientkeeper.db import get_session
from clientkeeper.main import app
from clientkeeper.models import Customer, Dog


@pytest.fixture(autouse=True)
def global_scope(monkeypatch):
    monkeypatch.setattr(config, "CONFLICT_SCOPE", "global")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def current_user():
    return {"id": 1, "email": "front-desk@example.com", "name": "Front Desk", "role": "customer"}


@pytest.fixture
def anon_client(engine):
    def get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def client(anon_client, current_user):
    app.dependency_overrides[get_current_user] = lambda: current_user
    return anon_client


@pytest.fixture
def owner(session):
    customer = Customer(name="Casandra Lee", phone="555-0100", email="casandra@example.com")
    session.add(customer)
    session.commit()
    session.refresh(customer)
    return customer


@pytest.fixture
def other_owner(session):
    customer = Customer(name="Dana Ortiz", phone="555-0199")
    session.add(customer)
    session.commit()
    session.refresh(customer)
    return customer


def _dog(session, owner, name):
    dog = Dog(owner_id=owner.id, name=name, breed="Poodle")
    session.add(dog)
    session.commit()
    session.refresh(dog)
    return dog


@pytest.fixture
def dog(session, owner):
    return _dog(session, owner, "Biscuit")


@pytest.fixture
def second_dog(session, owner):
    return _dog(session, owner, "Maple")


@pytest.fixture
def other_dog(session, other_owner):
    return _dog(session, other_owner, "Rex")
