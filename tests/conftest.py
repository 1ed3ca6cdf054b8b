import httpx
import pytest
from sqlalchemy import insert

from bookstore.app import create_app
from bookstore.config import Settings
from bookstore.db import Database
from bookstore.entities import BookRecord

POWER_UP = {
    "isbn": "0691161518",
    "amazon_url": "http://a.co/eobPtX2",
    "author": "Matthew Lane",
    "language": "english",
    "pages": 264,
    "publisher": "Princeton University Press",
    "title": "Power-Up: Unlocking the Hidden Mathematics in Video Games",
    "year": 2017,
}


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def settings():
    return Settings(
        environment="test",
        test_database_url="sqlite://",
        otel_enabled=False,
        strict_security=False,
        require_https=False,
        vault_addr=None,
        vault_token=None,
    )


@pytest.fixture()
def database(settings):
    database = Database.from_settings(settings)
    database.create_all()
    yield database
    database.drop_all()
    database.dispose()


@pytest.fixture()
def db_session(database):
    session = database.session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def power_up():
    return dict(POWER_UP)


@pytest.fixture()
def seeded(db_session, power_up):
    db_session.execute(insert(BookRecord).values(**power_up))
    db_session.commit()
    return power_up


@pytest.fixture()
def app(settings, database):
    return create_app(settings, database)


@pytest.fixture()
async def client(app, anyio_backend):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
