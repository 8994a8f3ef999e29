"""
Pytest fixtures for testing.
"""
import os

# Settings are read at import time: configure before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import asyncio
import json
from typing import AsyncGenerator, Callable, List, Optional, Union

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Import database module BEFORE app to allow override
import hiring_platform.database
from hiring_platform.database import Base
from hiring_platform.config import settings
# Import ALL models so Base.metadata knows about all tables
from hiring_platform.models.company import Company
from hiring_platform.models.user import User, UserRole
from hiring_platform.models.job_posting import JobPosting

# Now import app (after we can override database)
from hiring_platform.main import app as fastapi_app
from hiring_platform.api.auth import AUTH_COOKIE, sign_session
from hiring_platform.api.chat import get_conversation_store
from hiring_platform.services.completion import get_completion_client
from hiring_platform.services.conversation_store import InMemoryConversationStore


# Test database URL (use in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SAMPLE_ANALYSIS = {
    "score": 82,
    "strengths": ["strong technical skills"],
    "suggestions": ["add metrics"],
    "missingKeywords": ["AWS"],
}


class FakeCompletionClient:
    """
    Stand-in for CompletionClient.

    `replies` items are returned in order (the last one repeats); an item that
    is an exception instance is raised instead. Every call's messages are kept
    in `calls`.
    """

    def __init__(self, replies: Optional[List[Union[str, Exception]]] = None, delay: float = 0.0):
        self.replies = replies or ["Happy to help!"]
        self.delay = delay
        self.calls: List[list] = []

    async def complete(self, messages, *, json_mode: bool = False) -> str:
        self.calls.append([dict(m) for m in messages])
        if self.delay:
            await asyncio.sleep(self.delay)
        index = min(len(self.calls) - 1, len(self.replies) - 1)
        reply = self.replies[index]
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database for each test.
    Ensures cleanup happens even if test fails.
    """
    # Use StaticPool to keep single connection alive and reuse it
    # This ensures all sessions see the same in-memory database
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables FIRST
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # THEN replace the app's engine and sessionmaker
    # This ensures get_db() uses sessions connected to DB with tables
    original_engine = hiring_platform.database.engine
    original_sessionmaker = hiring_platform.database.AsyncSessionLocal

    hiring_platform.database.engine = test_engine
    hiring_platform.database.AsyncSessionLocal = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    # Create session for direct test use
    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    session = async_session()

    try:
        yield session
    finally:
        try:
            await session.close()
        except Exception as e:
            print(f"Warning: Failed to close session: {e}")

        try:
            async with test_engine.begin() as conn:
                await conn.run_sync(Base.metadata.drop_all)
        except Exception as e:
            print(f"Warning: Failed to drop tables: {e}")

        try:
            await test_engine.dispose()
        except Exception as e:
            print(f"Warning: Failed to dispose engine: {e}")

        # Restore original engine
        hiring_platform.database.engine = original_engine
        hiring_platform.database.AsyncSessionLocal = original_sessionmaker


@pytest.fixture
def fake_ai() -> FakeCompletionClient:
    """Fake AI provider installed for the duration of the test."""
    client = FakeCompletionClient()
    fastapi_app.dependency_overrides[get_completion_client] = lambda: client
    yield client
    fastapi_app.dependency_overrides.pop(get_completion_client, None)


@pytest.fixture
def conversation_store() -> InMemoryConversationStore:
    """Fresh conversation store per test."""
    store = InMemoryConversationStore()
    fastapi_app.dependency_overrides[get_conversation_store] = lambda: store
    yield store
    fastapi_app.dependency_overrides.pop(get_conversation_store, None)


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Resume uploads land in a per-test temp directory."""
    directory = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_dir", str(directory))
    return directory


@pytest_asyncio.fixture
async def async_client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing endpoints.

    The db fixture already replaced the engine with the test engine,
    so all endpoints will automatically use the test database.
    """
    transport = ASGITransport(app=fastapi_app)

    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        follow_redirects=True  # Follow 307 redirects for trailing slashes
    ) as client:
        yield client


@pytest_asyncio.fixture
async def company(db: AsyncSession) -> Company:
    company = Company(name="Acme Corp", logo="https://acme.example.com/logo.png")
    db.add(company)
    await db.commit()
    await db.refresh(company)
    return company


async def _make_user(db: AsyncSession, email: str, name: str, role: UserRole, company_id=None) -> User:
    user = User(email=email, name=name, role=role, company_id=company_id)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def recruiter(db: AsyncSession, company: Company) -> User:
    return await _make_user(db, "recruiter@acme.example.com", "Rita Recruiter", UserRole.RECRUITER, company.id)


@pytest_asyncio.fixture
async def other_recruiter(db: AsyncSession, company: Company) -> User:
    return await _make_user(db, "other@acme.example.com", "Oscar Other", UserRole.RECRUITER, company.id)


@pytest_asyncio.fixture
async def admin(db: AsyncSession, company: Company) -> User:
    return await _make_user(db, "admin@acme.example.com", "Ada Admin", UserRole.ADMIN, company.id)


@pytest_asyncio.fixture
async def applicant(db: AsyncSession) -> User:
    return await _make_user(db, "applicant@example.com", "Alex Applicant", UserRole.APPLICANT)


@pytest.fixture
def login_as(async_client: AsyncClient) -> Callable[[User], AsyncClient]:
    """
    Authenticate the client as the given user.

    Sets the signed session cookie; calling again switches user.
    """
    def _login(user: User) -> AsyncClient:
        async_client.cookies.set(AUTH_COOKIE, sign_session(user.id))
        return async_client

    return _login


@pytest.fixture
def job_payload() -> dict:
    return {
        "title": "Senior Software Engineer",
        "department": "Engineering",
        "location": "San Francisco, CA",
        "type": "full-time",
        "description": "Build and scale our hiring platform.",
        "salary": "$150k - $180k",
        "experience": "5+ years",
        "requirements": ["Python", "  FastAPI  ", "", "   ", "PostgreSQL"],
    }


@pytest_asyncio.fixture
async def make_job(db: AsyncSession, company: Company):
    """Factory inserting a job posting directly in the database."""
    async def _make_job(posted_by: User, **overrides) -> JobPosting:
        fields = {
            "title": "Backend Engineer",
            "department": "Engineering",
            "location": "Remote",
            "type": "full-time",
            "status": "published",
            "description": "Work on APIs.",
            "requirements": ["Python"],
        }
        fields.update(overrides)
        job = JobPosting(posted_by_id=posted_by.id, company_id=company.id, **fields)
        db.add(job)
        await db.commit()
        await db.refresh(job)
        return job

    return _make_job


def analysis_reply(data: Optional[dict] = None) -> str:
    return json.dumps(data if data is not None else SAMPLE_ANALYSIS)
