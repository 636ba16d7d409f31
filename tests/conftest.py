"""
Pytest fixtures for OTS News tests.

Every test gets its own SQLite file, so tests never share rows.
"""

import uuid
from dataclasses import dataclass
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from otsnews.config import Settings
from otsnews.database import Database
from otsnews.kernel.identity.jwt import JWTManager
from otsnews.kernel.identity.password import PasswordHasher
from otsnews.kernel.models.section import Section, SectionEditorGrant, Subsection
from otsnews.kernel.models.user import User, UserRole

TEST_PASSWORD = "password"


@dataclass
class World:
    """Seeded users of every role plus the default section tree."""

    admin: User
    editor: User  # editor of "euc" only
    reader: User
    guest: User


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway database, with cheap password hashing."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'otsnews-test.db'}",
        secret_key="test-secret-key-that-is-long-enough-for-hs256",
        bcrypt_rounds=4,
        environment="test",
    )


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    db = Database(settings.database_url)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """A session for service tests. Changes are flushed, never committed."""
    async with database.session_maker() as session:
        yield session
        await session.rollback()


def make_user(name: str, email: str, role: UserRole, rounds: int = 4) -> User:
    return User(
        id=uuid.uuid4(),
        name=name,
        email=email,
        password_hash=PasswordHasher(rounds=rounds).hash(TEST_PASSWORD),
        role=role,
        avatar=f"https://picsum.photos/seed/{name.split()[0].lower()}/50/50",
    )


async def seed(session: AsyncSession) -> World:
    """Users of every role, sections euc/hr/general, and Eddie editing euc."""
    world = World(
        admin=make_user("Alice Admin", "alice.admin@example.com", UserRole.ADMIN),
        editor=make_user("Eddie Editor", "eddie.editor@example.com", UserRole.EDITOR),
        reader=make_user("John User", "john.user@example.com", UserRole.USER),
        guest=make_user("Guest Visitor", "guest.visitor@example.com", UserRole.GUEST),
    )
    session.add_all([world.admin, world.editor, world.reader, world.guest])

    session.add_all([
        Section(id="euc", title="EUC", position=0, subsections=[
            Subsection(id="incident-management", title="Incident Management", position=0),
            Subsection(id="field-operations", title="Field Operations", position=1),
        ]),
        Section(id="hr", title="Human Resources", position=1, subsections=[
            Subsection(id="benefits", title="Benefits", position=0),
        ]),
        Section(id="general", title="General News", position=2, subsections=[]),
    ])
    await session.flush()

    session.add(SectionEditorGrant(user_id=world.editor.id, section_id="euc"))
    await session.flush()
    return world


@pytest_asyncio.fixture
async def world(db_session: AsyncSession) -> World:
    return await seed(db_session)


# API fixtures

@pytest_asyncio.fixture
async def app(settings: Settings, database: Database):
    from otsnews.main import create_app

    return create_app(settings=settings, database=database)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """In-process HTTP client (no lifespan; the schema is created by ``database``)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def api_world(database: Database) -> World:
    """Seeded data committed so API requests can see it."""
    async with database.session() as session:
        return await seed(session)


@pytest.fixture
def auth_headers(settings: Settings):
    """Build a bearer header for a user."""
    manager = JWTManager.from_settings(settings)

    def _headers(user: User) -> dict:
        token = manager.create_access_token(user_id=user.id, role=UserRole(user.role).value)
        return {"Authorization": f"Bearer {token.access_token}"}

    return _headers
