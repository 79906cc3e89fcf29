import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from standup.entities import Base
from standup.request_store import RequestStore

from tests._seed import seed


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, future=True)

    session = factory()
    try:
        seed(session)
    finally:
        session.close()

    yield factory
    engine.dispose()


@pytest.fixture
def store(session_factory) -> RequestStore:
    return RequestStore(session_factory)
