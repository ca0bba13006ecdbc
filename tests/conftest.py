import os

TEST_DB_FILE = "test_classroom.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"

# must be set before app modules build their engine
os.environ["DATABASE_URL"] = TEST_DB_URL

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.core.deps import get_db  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.seed import load_seed_data, seed  # noqa: E402
from app.db.session import make_engine  # noqa: E402
from app.main import app  # noqa: E402

engine = make_engine(TEST_DB_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def auth_header(user_id: str) -> dict:
    token = create_access_token(data={"sub": user_id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture(autouse=True)
def seed_data():
    """Reload the shipped dataset before each test through the real bootstrap."""
    db = TestingSessionLocal()
    try:
        seed(db, load_seed_data(settings.seed_data_path))
        yield
    finally:
        db.close()


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    """Test client that uses the test DB session via dependency override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def admin():
    return auth_header("user_admin")


@pytest.fixture()
def teacher():
    return auth_header("user_t1")


@pytest.fixture()
def student():
    return auth_header("user_s1")
