import itertools
from datetime import datetime, timezone
import os
import sys
from pathlib import Path

import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Configure test environment; any DATABASE_URL already exported (e.g. Postgres) wins
os.environ.setdefault('DATABASE_URL', 'sqlite+aiosqlite:///./naath_test.db')
os.environ.setdefault('JWT_SECRET', 'test-secret')

# Ensure the package root is on sys.path when pytest changes CWD to this tests dir
HERE = Path(__file__).resolve()
PKG_ROOT = HERE.parents[2]
if str(PKG_ROOT) not in sys.path:
    sys.path.insert(0, str(PKG_ROOT))

from naath.main import app  # noqa: E402
from naath.models import AsyncSessionLocal, Base, engine  # noqa: E402
from naath.models.users import User  # noqa: E402
from naath.models.articles import Article  # noqa: E402
from naath.auth import hash_password, token_for_user  # noqa: E402

PASSWORD = 'password123'
PASSWORD_HASH = hash_password(PASSWORD)


@pytest_asyncio.fixture
async def db():
    """Fresh schema for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def client(db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url='http://test') as ac:
        yield ac


@pytest_asyncio.fixture
async def make_user(db):
    counter = itertools.count(1)

    async def _make(role='user', is_active=True):
        n = next(counter)
        async with AsyncSessionLocal() as session:
            user = User(
                username=f'{role}{n}',
                email=f'{role}{n}@example.com',
                password_hash=PASSWORD_HASH,
                first_name=role.title(),
                last_name=f'Tester{n}',
                role=role,
                is_active=is_active,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
        return {
            'id': user.id,
            'username': user.username,
            'headers': {'Authorization': f'Bearer {token_for_user(user)}'},
        }

    return _make


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user('admin')


@pytest_asyncio.fixture
async def contributor(make_user):
    return await make_user('contributor')


@pytest_asyncio.fixture
async def member(make_user):
    return await make_user('user')


@pytest_asyncio.fixture
async def other_member(make_user):
    return await make_user('user')


@pytest_asyncio.fixture
async def make_article(db):
    async def _make(author_id, title='Cattle camps of the Nile', status='published'):
        async with AsyncSessionLocal() as session:
            article = Article(
                title=title,
                slug=title.lower().replace(' ', '-'),
                content='Seasonal movement of herds along the river.',
                author_id=author_id,
                status=status,
                tags=['history'],
                published_at=datetime.now(timezone.utc) if status == 'published' else None,
            )
            session.add(article)
            await session.commit()
            await session.refresh(article)
            return article

    return _make


@pytest_asyncio.fixture
async def published_article(contributor, make_article):
    return await make_article(contributor['id'])
