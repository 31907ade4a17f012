"""
Test configuration and fixtures for the marketplace API.
Provides database fixtures, test data factories, and common test utilities.
"""

import os
import tempfile

# Configure the application for tests before it is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("UPLOAD_DIR", os.path.join(tempfile.gettempdir(), "marketplace-test-uploads"))

import io
import uuid
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Optional
from PIL import Image
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import Base, get_db, enable_sqlite_foreign_keys
from app.models.user import User, UserRole
from app.models.agent import Agent
from app.models.property import Property
from app.models.story import Story, MediaType
from app.repositories.user import UserRepository
from app.repositories.agent import AgentRepository
from app.repositories.property import PropertyRepository
from app.repositories.story import StoryRepository
from app.utils.auth import create_access_token
from app.utils.dependencies import Session, get_file_storage
from app.utils.file_utils import FileStorage
from app.utils.filters import Purpose


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=StaticPool,
    connect_args={"check_same_thread": False}
)
enable_sqlite_foreign_keys(test_engine)

TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# Fixed reference time for expiry tests
NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
async def setup_test_database():
    """Create a fresh schema for every test."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with TestSessionLocal() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


@pytest.fixture
def storage(tmp_path) -> FileStorage:
    """Upload storage rooted in a temporary directory."""
    return FileStorage(base_dir=tmp_path / "uploads")


@pytest.fixture
async def async_client(db_session: AsyncSession, storage: FileStorage) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database and storage overrides."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_storage] = lambda: storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def agent_repository(db_session: AsyncSession) -> AgentRepository:
    return AgentRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


@pytest.fixture
def story_repository(db_session: AsyncSession) -> StoryRepository:
    return StoryRepository(db_session)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: str = None,
        password: str = "testpassword123",
        name: str = "Test User",
        role: UserRole = UserRole.USER,
        is_active: bool = True
    ) -> dict:
        """Create user data dictionary."""
        return {
            "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "name": name,
            "role": role,
            "is_active": is_active
        }

    @staticmethod
    async def create_user(db_session: AsyncSession, **kwargs) -> User:
        """Create a test user in the database."""
        return await UserRepository(db_session).create_user(UserFactory.create_user_data(**kwargs))


class AgentFactory:
    """Factory for creating agent profiles, optionally with a login account."""

    @staticmethod
    def create_agent_data(name: str = "Sarah Johnson", **overrides) -> dict:
        data = {
            "name": name,
            "title": "Senior Real Estate Agent",
            "specialty": "Luxury Homes",
            "specialization": "Residential",
            "experience": 8,
            "rating": Decimal("4.5"),
            "reviews": 20,
            "languages": "English, Somali",
            "city": "Garowe",
            "phone": "+252 61 000 0000",
            "whatsapp": "+252 61 000 0000",
        }
        data.update(overrides)
        return data

    @staticmethod
    async def create_agent(db_session: AsyncSession, **overrides) -> Agent:
        """Create an agent profile without a user account."""
        return await AgentRepository(db_session).create(AgentFactory.create_agent_data(**overrides))

    @staticmethod
    async def create_agent_with_user(
        db_session: AsyncSession,
        email: str = None,
        password: str = "agentpass123",
        **overrides
    ) -> Agent:
        """Create an agent-role account and its linked agent profile."""
        agent_data = AgentFactory.create_agent_data(**overrides)
        agent, _ = await AgentRepository(db_session).create_with_user(
            {
                "name": agent_data["name"],
                "email": email or f"agent{uuid.uuid4().hex[:8]}@example.com",
                "password": password,
                "role": UserRole.AGENT,
            },
            agent_data
        )
        return agent


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(
        title: str = "Test Property",
        purpose: Purpose = Purpose.SALE,
        price: Decimal = Decimal("250000"),
        beds: int = 3,
        baths: int = 2,
        location: str = "Garowe",
        agent_id: Optional[int] = None,
        **overrides
    ) -> dict:
        data = {
            "title": title,
            "slug": overrides.pop("slug", None) or f"test-property-{uuid.uuid4().hex[:8]}",
            "type": "Villa",
            "purpose": purpose,
            "price": price,
            "currency": "USD",
            "beds": beds,
            "baths": baths,
            "location": location,
            "city": location,
            "amenities": [],
            "is_featured": False,
            "is_published": True,
            "agent_id": agent_id,
        }
        data.update(overrides)
        return data

    @staticmethod
    async def create_property(db_session: AsyncSession, **kwargs) -> Property:
        """Create a test property in the database."""
        return await PropertyRepository(db_session).create(PropertyFactory.create_property_data(**kwargs))


class StoryFactory:
    """Factory for creating stories at a fixed point in time."""

    @staticmethod
    async def create_story(
        db_session: AsyncSession,
        agent_id: int,
        created_at: datetime = NOW,
        ttl: timedelta = timedelta(hours=24),
        **overrides
    ) -> Story:
        data = {
            "agent_id": agent_id,
            "title": "Open house",
            "media_type": MediaType.IMAGE,
            "media_url": "https://cdn.example.com/story.jpg",
            "duration_sec": 15,
            "is_active": True,
            "created_at": created_at,
            "expires_at": created_at + ttl,
        }
        data.update(overrides)
        return await StoryRepository(db_session).create(data)


def auth_headers(user: User) -> dict:
    """Bearer header for a user."""
    token = create_access_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


def make_session(user: User) -> Session:
    """Server-side session for calling services directly."""
    return Session(user=user, token="test-token")


def png_bytes(size=(8, 8), color=(200, 30, 30)) -> bytes:
    """A small valid PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


# User and token fixtures
@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, email="admin@example.com", name="Admin", role=UserRole.ADMIN)


@pytest.fixture
async def plain_user(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, email="user@example.com", name="Plain User")


@pytest.fixture
async def agent_with_user(db_session: AsyncSession) -> Agent:
    return await AgentFactory.create_agent_with_user(db_session, email="sarah@example.com")


@pytest.fixture
async def agent_user(db_session: AsyncSession, agent_with_user: Agent) -> User:
    return await UserRepository(db_session).get_by_id(agent_with_user.user_id)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return auth_headers(admin_user)


@pytest.fixture
def agent_headers(agent_user: User) -> dict:
    return auth_headers(agent_user)


@pytest.fixture
def user_headers(plain_user: User) -> dict:
    return auth_headers(plain_user)
