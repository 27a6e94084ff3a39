import os
import sys
from datetime import datetime, timezone
from pathlib import Path

# Bootstrap to ensure tests can import app modules without modifying app import paths.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read at import time; every test builds its own engine below.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./.pytest-helpdesk.db")
os.environ.setdefault("JWT_SECRET", "pytest-helpdesk-signing-secret-0123456789")
os.environ.setdefault("STORAGE_BACKEND", "local")


def pytest_configure(config):
    config.pluginmanager.unregister(name="anyio")


import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from app.api.deps import get_blob_store, get_db_session
from app.config.db import build_sessionmaker
from app.main import app
from app.models import Base, Department, DepartmentCategory, User, UserRole
from app.services.actors import actor_from_user
from app.services.storage import LocalBlobStore
from app.utils.jwt_manager import create_access_token


def roll_for(code: str, student_year: int = 1, number: int = 1) -> str:
    """A roll number that is valid today for a student in the given year of study."""
    enrollment_year = datetime.now(timezone.utc).year - student_year + 1
    return f"2K{enrollment_year % 100:02d}-{code}-{number}"


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Provides a fresh file-backed SQLite database with all tables created."""
    db_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'helpdesk.db'}", echo=False
    )
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory):
    """Provides a database session for a test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(tmp_path / "uploads")


@pytest.fixture
def make_department(db_session):
    async def factory(
        name: str,
        category: DepartmentCategory = DepartmentCategory.MAIN,
        is_active: bool = True,
    ) -> Department:
        department = Department(name=name, category=category, is_active=is_active)
        db_session.add(department)
        await db_session.commit()
        return department

    return factory


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    async def factory(
        role: UserRole = UserRole.STUDENT,
        roll_number: str | None = None,
        department: Department | None = None,
        fullname: str | None = None,
        is_active: bool = True,
    ) -> User:
        counter["n"] += 1
        user = User(
            fullname=fullname or f"{role.value.title()} {counter['n']}",
            email=f"{role.value}{counter['n']}@uni.test",
            role=role,
            roll_number=roll_number,
            department_id=department.id if department else None,
            phone="0300-1234567" if role is UserRole.STUDENT else None,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return factory


@pytest.fixture
def actor_of():
    return actor_from_user


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, blob_store):
    """HTTP client bound to the app, with the test database and blob store."""

    async def override_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}
