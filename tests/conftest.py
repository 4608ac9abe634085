"""Shared pytest fixtures for the access-control tests."""

import os
import tempfile
from collections.abc import AsyncIterator, Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

# The engine is created at import time, point it at a throwaway database first
_DB_DIR = Path(tempfile.mkdtemp(prefix="ikada-access-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR / 'test.sqlite'}"
os.environ["JWT_SECRET"] = "ikada-access-test-secret-0123456789abcdef"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from ikada_access.core import config
from ikada_access.core.database.engine import AsyncSessionLocal, drop_db, init_db
from ikada_access.features.actors.models import Actor
from ikada_access.features.branches.models import Branch
from ikada_access.features.permissions import service
from ikada_access.features.permissions.models import Role
from ikada_access.features.permissions.seed import seed_defaults
from ikada_access.features.tenancy.scoper import ActorScope
from ikada_access.main import app


@pytest_asyncio.fixture(autouse=True)
async def _database() -> AsyncIterator[None]:
    """Give every test an empty schema."""

    await drop_db()
    await init_db()
    yield


@pytest_asyncio.fixture()
async def session() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as db:
        yield db


@pytest_asyncio.fixture()
async def async_client() -> AsyncIterator[AsyncClient]:
    """Provide an HTTPX async client bound to the FastAPI app."""

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


def make_token(actor_id: str, expires_in: timedelta = timedelta(minutes=5), **claims) -> str:
    payload = {config.JWT_ACTOR_CLAIM: actor_id, "exp": datetime.now(timezone.utc) + expires_in, **claims}
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def auth_headers(actor: Actor) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(actor.id)}"}


@pytest_asyncio.fixture()
async def branches(session: AsyncSession) -> dict[str, Branch]:
    """Three branches, keyed by short name."""

    created = {
        "jatim": Branch(name="Syubiyah Jawa Timur", province="Jawa Timur"),
        "jabar": Branch(name="Syubiyah Jawa Barat", province="Jawa Barat"),
        "jakarta": Branch(name="Syubiyah Jakarta", province="DKI Jakarta"),
    }
    session.add_all(created.values())
    await session.commit()
    return created


@pytest.fixture()
def create_actor(session: AsyncSession) -> Callable[..., object]:
    """Factory for actors; pass ``branch`` to make a branch-scoped actor."""

    counter = {"n": 0}

    async def _create(name: str = "Actor", branch: Branch | None = None, is_active: bool = True) -> Actor:
        counter["n"] += 1
        actor = Actor(
            name=name,
            email=f"actor{counter['n']}@example.com",
            scope=ActorScope.BRANCH if branch else ActorScope.CENTRAL,
            branch_id=branch.id if branch else None,
            is_active=is_active,
        )
        session.add(actor)
        await session.commit()
        return actor

    return _create


@pytest_asyncio.fixture()
async def default_roles(session: AsyncSession) -> dict[str, Role]:
    """The seeded permission catalog and default roles."""

    return await seed_defaults(session)


@pytest_asyncio.fixture()
async def admin(session: AsyncSession, create_actor, default_roles: dict[str, Role]) -> Actor:
    """A central actor holding Super Admin."""

    actor = await create_actor("Super Admin")
    await service.assign_role(session, actor.id, default_roles["Super Admin"].id)
    return actor


@pytest.fixture()
def token_for() -> Callable[..., str]:
    return make_token


@pytest.fixture()
def headers_for() -> Callable[[Actor], dict[str, str]]:
    return auth_headers
