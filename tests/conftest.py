import os
import tempfile
from collections.abc import Generator
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

TEST_DATABASE_URL = os.getenv('TEST_DATABASE_URL')
if not TEST_DATABASE_URL:
    # Pinned in the environment so every import of this module shares one database.
    TEST_DATABASE_URL = 'sqlite:///' + os.path.join(tempfile.mkdtemp(prefix='evaltrack-tests-'), 'evaltrack.db')
    os.environ['TEST_DATABASE_URL'] = TEST_DATABASE_URL

os.environ.setdefault('DATABASE_URL', TEST_DATABASE_URL)
os.environ.setdefault('JWT_SECRET_KEY', 'test-access-secret-32-chars-min-0001')
os.environ.setdefault('APP_ENV', 'test')
os.environ.setdefault('CORS_ORIGINS', 'http://localhost:3001')
os.environ.setdefault('REWARD_GRANT_RETRY_BACKOFF_MS', '5')

from evaltrack.core.security import create_access_token
from evaltrack.db.base import Base
from evaltrack.db.session import build_engine, get_db
from evaltrack.main import app
from evaltrack.models.profile import Profile


engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

ALICE_ID = UUID('00000000-0000-4000-8000-00000000a11c')
BOB_ID = UUID('00000000-0000-4000-8000-000000000b0b')
# Carol has no profile row.
CAROL_ID = UUID('00000000-0000-4000-8000-0000000ca201')


@pytest.fixture(autouse=True)
def setup_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        _seed_profiles(db)
        db.commit()
    finally:
        db.close()

    yield

    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def session_factory() -> sessionmaker[Session]:
    return TestingSessionLocal


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def _override_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _override_db

    with TestClient(app) as api_client:
        yield api_client

    app.dependency_overrides.clear()


def _seed_profiles(db: Session) -> None:
    profiles = [
        (ALICE_ID, 'Alice Andrade', 'avatars/alice.png'),
        (BOB_ID, 'Bob Bernal', None),
    ]
    for user_id, display_name, avatar_ref in profiles:
        db.add(Profile(user_id=user_id, display_name=display_name, avatar_ref=avatar_ref))
    db.flush()


def auth_header(user_id: UUID) -> dict[str, str]:
    return {'Authorization': f'Bearer {create_access_token(str(user_id))}'}
