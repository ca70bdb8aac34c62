import httpx
import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool

from main import app
from ClientApp.BookReviewClient import BookReviewClient
from Repository.BookReviewRepo import BookReviewRepo
from Repository.SqlAlchemySetup import SqlAlchemySetup

TEST_BASE_URL = "http://testserver"


@pytest_asyncio.fixture
async def database():
    """Points the repository at a fresh in-memory SQLite database."""
    SqlAlchemySetup.configure(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    sqlalchemy_setup = SqlAlchemySetup()
    await sqlalchemy_setup.create_async_tables()
    yield sqlalchemy_setup
    await sqlalchemy_setup.dispose()


@pytest_asyncio.fixture
async def api_client(database):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url=TEST_BASE_URL) as client:
        yield client


@pytest_asyncio.fixture
async def review_client(database):
    client = BookReviewClient(base_url=TEST_BASE_URL, transport=httpx.ASGITransport(app=app))
    yield client
    await client.aclose()


@pytest.fixture
def repo(database):
    return BookReviewRepo()


@pytest.fixture
def review_fields():
    def build(**overrides):
        fields = {
            "title": "Dune",
            "author": "Herbert",
            "rating": "5",
            "readDate": "2023-01-01",
            "review": "Great",
        }
        fields.update(overrides)
        return fields
    return build
