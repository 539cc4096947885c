import pytest
from fastapi.testclient import TestClient
from sqlalchemy import StaticPool, create_engine, event
from sqlalchemy.dialects.sqlite import base as sqlite_base
from sqlalchemy.orm import sessionmaker

import app.models  # noqa: F401 — register models with Base.metadata
from app.core.config import settings
from app.core.database import Base, get_db
from app.main import app as fastapi_app
from app.models import Form
from app.schemas.auth import Identity

# Enable debug mode for tests (allows non-HTTPS cookies in TestClient)
settings.DEBUG = True

# ---------------------------------------------------------------------------
# SQLite compatibility for PostgreSQL-specific types (JSONB)
# ---------------------------------------------------------------------------
sqlite_base.SQLiteTypeCompiler.visit_JSONB = lambda self, type_, **kw: self.visit_JSON(type_, **kw)

# In-memory SQLite for tests — no PostgreSQL dependency needed
TEST_DATABASE_URL = "sqlite://"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# SQLite skips foreign key checks unless asked; match PostgreSQL.
@event.listens_for(engine, "connect")
def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

OWNER_EMAIL = "owner@example.com"
STRANGER_EMAIL = "stranger@example.com"


@pytest.fixture(autouse=True)
def setup_db():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    """Provide a test database session."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    """TestClient with overridden DB dependency."""

    def _override_get_db():
        try:
            yield db
        finally:
            pass

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Identities and forms for service-level tests
# ---------------------------------------------------------------------------


def make_identity(email: str | None) -> Identity:
    return Identity(subject=f"sub-{email}", email=email)


@pytest.fixture
def owner() -> Identity:
    return make_identity(OWNER_EMAIL)


@pytest.fixture
def stranger() -> Identity:
    return make_identity(STRANGER_EMAIL)


@pytest.fixture
def form(db) -> Form:
    """A form created by OWNER_EMAIL with no fields."""
    form = Form(created_by=OWNER_EMAIL, name="Feedback", description="Tell us")
    db.add(form)
    db.commit()
    db.refresh(form)
    return form

