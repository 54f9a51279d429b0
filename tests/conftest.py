import os
import sys
from pathlib import Path

# Bootstrap to ensure tests can import app modules without modifying app import paths.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["DEBUG"] = "true"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["GOOGLE_API_KEY"] = "test-key"


def pytest_configure(config):
    config.pluginmanager.unregister(name="anyio")


import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from langchain_core.messages import AIMessage
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db_session, get_llm
from app.main import app
from app.models import Base, KnowledgeArticle, KnowledgeCategory, User, UserRole
from app.utils.passwords import hash_password

TEST_PASSWORD = "secret123"


class RecordingChatModel:
    """Stands in for the chat model; records every conversation it is sent."""

    def __init__(self, reply: str = "Have you tried turning it off and on again?"):
        self.reply = reply
        self.error: Exception | None = None
        self.calls: list[list] = []

    async def ainvoke(self, messages):
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.reply)


@pytest_asyncio.fixture(scope="function")
async def engine():
    """Provides an in-memory SQLite engine with the schema created."""
    db_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def llm():
    return RecordingChatModel()


@pytest_asyncio.fixture(scope="function")
async def app_overrides(session_factory, llm):
    async def _get_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = _get_db_session
    app.dependency_overrides[get_llm] = lambda: llm
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(app_overrides):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as http_client:
        yield http_client


@pytest_asyncio.fixture(scope="function")
async def make_user(session_factory):
    """Creates a user directly in the database."""

    async def _make_user(
        email: str, role: UserRole = UserRole.USER, name: str = "Test User"
    ) -> User:
        async with session_factory() as session:
            user = User(
                name=name,
                email=email,
                password_hash=hash_password(TEST_PASSWORD),
                role=role,
            )
            session.add(user)
            await session.commit()
            return user

    return _make_user


@pytest_asyncio.fixture(scope="function")
async def login_as(app_overrides, make_user):
    """Returns a factory of clients, each signed in as a fresh user."""
    clients: list[AsyncClient] = []

    async def _login_as(
        email: str, role: UserRole = UserRole.USER, name: str = "Test User"
    ) -> AsyncClient:
        await make_user(email, role=role, name=name)
        http_client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(http_client)
        response = await http_client.post(
            "/api/v1/auth/login", json={"email": email, "password": TEST_PASSWORD}
        )
        assert response.status_code == 200, response.text
        return http_client

    yield _login_as

    for http_client in clients:
        await http_client.aclose()


@pytest_asyncio.fixture(scope="function")
async def seed_articles(session_factory, make_user):
    """Adds a handful of knowledge base articles written by an admin."""

    async def _seed(articles: list[dict]) -> None:
        author = await make_user("kb-author@example.com", role=UserRole.ADMIN)
        async with session_factory() as session:
            for fields in articles:
                session.add(
                    KnowledgeArticle(
                        title=fields["title"],
                        content=fields["content"],
                        category=fields.get("category", KnowledgeCategory.GENERAL),
                        tags=fields.get("tags", []),
                        created_by_id=author.id,
                    )
                )
            await session.commit()

    return _seed
