import pytest
from datetime import datetime, timedelta
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from natureestate.core.auth import AuthService, Identity
from natureestate.core.config import Settings
from natureestate.core.database import Base, get_db
from natureestate.db.models import Property, User, UserSession, utcnow
from natureestate.main import create_app

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# Password every factory-made user logs in with
TEST_PASSWORD = "correct-horse-battery"

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0)


@pytest.fixture(scope="function")
def test_settings():
    """Settings with a throwaway signing key and the default policies"""
    return Settings(
        DATABASE_URL=TEST_DATABASE_URL,
        SECRET_KEY="test-secret-key",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine"""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return engine


@pytest.fixture(scope="function")
def test_db_session(test_engine):
    """Create a test database session"""
    # Create all tables
    Base.metadata.create_all(bind=test_engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def override_get_db(test_db_session):
    """Override the get_db dependency for testing"""
    def _override_get_db():
        try:
            yield test_db_session
        finally:
            pass
    return _override_get_db


@pytest.fixture(scope="function")
def app(test_settings, test_engine, test_db_session, override_get_db):
    """Application wired to the test engine"""
    application = create_app(test_settings)
    application.state.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest.fixture(scope="function")
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(test_db_session):
    """Factory for stored users"""
    def _make_user(email, user_type="buyer", name=None, password=TEST_PASSWORD):
        user = User(
            email=email,
            hashed_password=AuthService.get_password_hash(password),
            name=name or email.split("@")[0].title(),
            user_type=user_type,
            is_verified=False,
            email_verified=False,
        )
        test_db_session.add(user)
        test_db_session.commit()
        return user
    return _make_user


@pytest.fixture
def seller(make_user):
    return make_user("seller@example.com", user_type="seller", name="Sam Seller")


@pytest.fixture
def buyer(make_user):
    return make_user("buyer@example.com", user_type="buyer", name="Bea Buyer")


@pytest.fixture
def make_property(test_db_session):
    """Factory for stored listings; created_at steps forward one minute per call"""
    counter = {"n": 0}

    def _make_property(owner, **overrides):
        counter["n"] += 1
        values = {
            "title": f"Listing {counter['n']}",
            "description": "Quiet place surrounded by nature",
            "property_type": "villa",
            "status": "active",
            "price": 250000.0,
            "currency": "USD",
            "country": "Portugal",
            "created_at": BASE_TIME + timedelta(minutes=counter["n"]),
            "updated_at": BASE_TIME + timedelta(minutes=counter["n"]),
        }
        values.update(overrides)
        db_property = Property(user_id=owner.id, **values)
        test_db_session.add(db_property)
        test_db_session.commit()
        return db_property
    return _make_property


@pytest.fixture
def auth_headers(test_db_session, test_settings):
    """Factory: bearer header backed by a live session row for the given user"""
    def _auth_headers(user):
        db_session = UserSession(
            user_id=user.id,
            refresh_token=AuthService.generate_token(),
            is_active=True,
            expires_at=utcnow() + timedelta(days=1),
        )
        test_db_session.add(db_session)
        test_db_session.commit()
        token = AuthService.create_access_token({"sub": user.id, "sid": db_session.id}, test_settings)
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers


@pytest.fixture
def identity_for():
    """Identity as the auth dependency would resolve it"""
    def _identity_for(user) -> Identity:
        return Identity(user_id=user.id, email=user.email, name=user.name, user_type=user.user_type)
    return _identity_for
