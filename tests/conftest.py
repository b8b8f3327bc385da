"""
PhD Hub - Test Configuration and Fixtures
"""
import os
import base64
from datetime import datetime, timedelta
from typing import AsyncGenerator, Dict, Any, List
import httpx
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from faker import Faker
from jose import jwt

# Set testing environment
TEST_JWT_KEY = 'test-session-signing-key'
TEST_WEBHOOK_SECRET = 'whsec_' + base64.b64encode(b'test-webhook-signing-secret').decode()

os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['IDENTITY_JWT_KEY'] = TEST_JWT_KEY
os.environ['IDENTITY_JWT_ALGORITHM'] = 'HS256'
os.environ['IDENTITY_SECRET_KEY'] = 'sk_test_identity'
os.environ['WEBHOOK_SECRET'] = TEST_WEBHOOK_SECRET

from phdhub.main import app
from phdhub.core.database import Base, get_db
from phdhub.models import Community, Post, Comment
from phdhub.modules.auth.dependencies import get_identity_directory, get_storage_client
from phdhub.modules.identity import IdentityDirectory
from phdhub.utils.storage_client import StorageClient

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


class FakeIdentityDirectory(IdentityDirectory):
    """Directory backed by an in-memory user table; records each batch call"""

    def __init__(self):
        super().__init__(api_url='http://identity.test', secret_key='sk_test_identity')
        self.users: Dict[str, Dict[str, Any]] = {}
        self.calls: List[List[str]] = []
        self.unavailable = False

    def add_user(self, user_id: str, username: str = None, image_url: str = None) -> Dict[str, Any]:
        user = {
            'id': user_id,
            'username': username or fake.user_name(),
            'first_name': fake.first_name(),
            'last_name': fake.last_name(),
            'image_url': image_url or f'https://img.test/{user_id}.png',
            'email_addresses': [{'email_address': fake.email()}],
        }
        self.users[user_id] = user
        return user

    async def fetch_users(self, user_ids):
        self.calls.append(list(user_ids))
        if self.unavailable:
            raise httpx.ConnectError('identity provider unreachable')
        return [self.users[uid] for uid in user_ids if uid in self.users]


class FakeStorageClient(StorageClient):
    """Storage client that signs nothing; URLs echo the key"""

    def __init__(self):
        super().__init__(bucket_name='test-bucket')
        self.uploads: List[Dict[str, str]] = []

    def generate_upload_url(self, key, content_type, expiry=None):
        self.uploads.append({'key': key, 'content_type': content_type})
        return f'https://storage.test/upload/{key}'

    def generate_download_url(self, key, expiry=None):
        return f'https://storage.test/download/{key}'


def make_session_token(user_id: str, expires_in: timedelta = timedelta(hours=1)) -> str:
    """Session token as the identity provider would issue it"""
    return jwt.encode(
        {'sub': user_id, 'exp': datetime.utcnow() + expires_in},
        TEST_JWT_KEY,
        algorithm='HS256'
    )


def auth_headers_for(user_id: str) -> Dict[str, str]:
    return {'Authorization': f'Bearer {make_session_token(user_id)}'}


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def identity() -> FakeIdentityDirectory:
    return FakeIdentityDirectory()


@pytest.fixture
def storage() -> FakeStorageClient:
    return FakeStorageClient()


@pytest.fixture
async def client(
    db_session: AsyncSession,
    identity: FakeIdentityDirectory,
    storage: FakeStorageClient,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database, identity and storage overrides"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_directory] = lambda: identity
    app.dependency_overrides[get_storage_client] = lambda: storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def user_id(identity: FakeIdentityDirectory) -> str:
    """An authenticated caller known to the identity provider"""
    uid = f'user_{fake.uuid4()[:12]}'
    identity.add_user(uid)
    return uid


@pytest.fixture
def auth_headers(user_id: str) -> Dict[str, str]:
    return auth_headers_for(user_id)


@pytest.fixture
async def community(db_session: AsyncSession) -> Community:
    """Create a test community"""
    community = Community(
        name=fake.catch_phrase(),
        description=fake.text(max_nb_chars=200),
        hashtags=['research', 'phd'],
    )
    db_session.add(community)
    await db_session.commit()
    await db_session.refresh(community)
    return community


@pytest.fixture
async def post(db_session: AsyncSession, community: Community, user_id: str) -> Post:
    """Create a test post authored by the default caller"""
    post = Post(
        community_id=community.id,
        author_id=user_id,
        title=fake.sentence(),
        content=fake.text(max_nb_chars=300),
        created_at=datetime.utcnow() - timedelta(hours=1),
    )
    db_session.add(post)
    await db_session.commit()
    await db_session.refresh(post)
    return post


@pytest.fixture
async def comment(db_session: AsyncSession, post: Post, user_id: str) -> Comment:
    comment = Comment(
        post_id=post.id,
        author_id=user_id,
        content=fake.sentence(),
        created_at=datetime.utcnow() - timedelta(minutes=30),
    )
    db_session.add(comment)
    await db_session.commit()
    await db_session.refresh(comment)
    return comment


@pytest.fixture
def statement_counter():
    """Count SQL statements sent to the test database"""
    statements: List[str] = []

    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(test_engine.sync_engine, 'before_cursor_execute', before_cursor_execute)
    yield statements
    event.remove(test_engine.sync_engine, 'before_cursor_execute', before_cursor_execute)
