import pytest
from starlette.testclient import TestClient

from airdrophubapi.app import airdrophub
from airdrophubapi.core.config import settings
from airdrophubapi.db.dblib import get_db
from airdrophubapi.utils.database import Database
from tests.utils.helpers import FakeOracle, FixedSettlement, build_engine, build_session


@pytest.fixture
def session():
    engine = build_engine()
    session = build_session(engine)

    def override_get_db():
        yield session

    airdrophub.dependency_overrides[get_db] = override_get_db
    yield session
    airdrophub.dependency_overrides.clear()
    session.close()
    engine.dispose()


@pytest.fixture
def database(session) -> Database:
    return Database(session)


@pytest.fixture
def oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def settlement() -> FixedSettlement:
    return FixedSettlement()


@pytest.fixture
def client(session, oracle, settlement):
    # Not used as a context manager so the lifespan hook never touches the real database
    airdrophub.state.oracle = oracle
    airdrophub.state.settlement = settlement
    return TestClient(airdrophub)


@pytest.fixture
def headers():
    return {
        "accept": "application/json",
        "x-api-key": settings.ADMIN_API_KEY,
    }
