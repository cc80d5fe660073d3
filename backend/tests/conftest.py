import os
import sys
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from unittest.mock import patch

# Point the application at an in-memory database before it is imported
os.environ["DATABASE_URL"] = "sqlite://"

# Add the backend directory to the Python path
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, backend_dir)

from database import get_db
from models.base import Base
from config.env import settings
from services.rate_limiter import generation_rate_limiter
from main import app

# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

USER_ID = "user-1"
OTHER_USER_ID = "user-2"

SAMPLE_TEXT = (
    "Photosynthesis converts light energy into chemical energy. "
    "Plants capture sunlight using chlorophyll in their leaves. "
    "Mitochondria produce most of the cell's supply of energy. "
    "They are often described as the powerhouse of the cell. "
    "Ribosomes assemble proteins from amino acids. "
    "They read the instructions carried by messenger RNA. "
    "Enzymes speed up chemical reactions in living organisms. "
    "Each enzyme usually works on a specific substrate. "
    "Osmosis moves water across a semipermeable membrane. "
    "Water flows toward the side with more dissolved solute."
)

@pytest.fixture
def test_engine():
    # Create engine with special configuration for in-memory SQLite
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # Create all tables
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        # Drop all tables after tests
        Base.metadata.drop_all(bind=engine)
        engine.dispose()

@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

@pytest.fixture
def test_db(session_factory):
    # Create a new session for each test
    db = session_factory()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def client(session_factory, monkeypatch):
    # Each request gets its own session, like the real dependency
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    generation_rate_limiter.reset()
    monkeypatch.setattr(settings.generation, "simulate_delay", False)
    monkeypatch.setattr(settings.generation, "backend", "heuristic")

    # Background generation opens its own session through database.SessionLocal
    with patch("database.SessionLocal", session_factory), \
         patch("main.init_db"):
        with TestClient(app) as test_client:
            yield test_client

    # Clear dependency override after test
    app.dependency_overrides.clear()
    generation_rate_limiter.reset()

@pytest.fixture
def auth_headers():
    def _headers(user_id: str = USER_ID):
        return {"X-User-Id": user_id}
    return _headers

@pytest.fixture
def sample_text():
    return SAMPLE_TEXT
