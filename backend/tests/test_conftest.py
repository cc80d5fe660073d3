import pytest
from sqlalchemy.orm import Session
from sqlalchemy import text
from fastapi.testclient import TestClient

def test_test_db_fixture(test_db):
    """Test that the test_db fixture provides a working database session."""
    assert isinstance(test_db, Session)

    # Test that we can execute queries
    result = test_db.execute(text("SELECT 1")).scalar()
    assert result == 1

def test_test_db_has_application_tables(test_db):
    """The schema is created from the ORM metadata."""
    tables = {
        row[0] for row in test_db.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))
    }
    assert {"cards", "card_sets", "cards_to_sets", "generation_logs", "generation_results"} <= tables

def test_test_db_isolation(test_db):
    """Test that each test gets a fresh database."""
    test_db.execute(text("CREATE TABLE test (id INTEGER PRIMARY KEY)"))
    test_db.commit()

    result = test_db.execute(text("SELECT name FROM sqlite_master WHERE type='table' AND name='test'")).scalar()
    assert result == 'test'

def test_test_db_isolation_2(test_db):
    """Test that we get a fresh database (table from previous test should not exist)."""
    result = test_db.execute(text("SELECT name FROM sqlite_master WHERE type='table' AND name='test'")).scalar()
    assert result is None

def test_foreign_keys_enforced(test_db):
    """Links to missing cards are rejected by the database."""
    with pytest.raises(Exception):
        test_db.execute(text("INSERT INTO cards_to_sets (card_id, set_id) VALUES ('missing', 'missing')"))
        test_db.commit()
    test_db.rollback()

def test_client_fixture(client):
    """Test that the client fixture provides a working FastAPI test client."""
    assert isinstance(client, TestClient)

    response = client.get("/")
    assert response.status_code == 200

    response = client.get("/health")
    assert response.json() == {"status": "ok"}

def test_client_dependency_override(client, test_db, auth_headers):
    """Data written through the API is visible in the test database."""
    response = client.post(
        "/api/card-sets",
        json={"name": "Test Set", "description": "Test Description"},
        headers=auth_headers()
    )
    assert response.status_code == 201

    result = test_db.execute(text("SELECT name FROM card_sets")).scalar()
    assert result == "Test Set"
