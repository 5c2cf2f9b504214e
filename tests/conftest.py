from contextlib import nullcontext

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from main import app
from trackshare.config import SESSION_COOKIE_NAME
from trackshare.database import get_session, get_session_factory
from trackshare.models import User
from trackshare.services.auth import create_session, hash_password

# Create in-memory database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(name="session")
def session_fixture():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        return session

    def get_session_factory_override():
        # Background tasks share the test session so their writes are visible
        return lambda: nullcontext(session)

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_session_factory] = get_session_factory_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="make_user")
def make_user_fixture(session: Session):
    """Create users directly in the database."""
    def make_user(username: str, password: str = "password123") -> User:
        user = User(username=username, password_hash=hash_password(password))
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return make_user


@pytest.fixture(name="login")
def login_fixture(session: Session, client: TestClient):
    """Point the client's session cookie at the given user."""
    def login(user: User) -> str:
        token = create_session(session, user.id).session_token
        client.cookies.set(SESSION_COOKIE_NAME, token)
        return token

    return login


@pytest.fixture(name="alice")
def alice_fixture(make_user):
    return make_user("alice")


@pytest.fixture(name="bob")
def bob_fixture(make_user):
    return make_user("bob")
