"""Test configuration for the query builder."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest


def _user(name: str, email: str, role: str, age: int, day: int) -> dict:
    return {
        "name": name,
        "email": email,
        "role": role,
        "age": age,
        "createdAt": datetime(2024, 1, day),
    }


SAMPLE_USERS = [
    _user("Ann Lee", "ann@example.com", "admin", 31, 1),
    _user("Joanna Smith", "jsmith@example.com", "admin", 27, 2),
    _user("Hannah Brown", "hb@example.com", "user", 45, 3),
    _user("Bob Stone", "bob.anning@example.com", "admin", 52, 4),
    _user("Carl Diaz", "carl@example.com", "admin", 19, 5),
    _user("Dana White", "dana@example.com", "user", 38, 6),
    _user("Eve Adams", "eve@example.com", "admin", 23, 7),
    _user("Frank Ocean", "frank@example.com", "user", 60, 8),
    _user("Susanne Kay", "sk@example.com", "admin", 34, 9),
    _user("Manny Ruiz", "manny@example.com", "admin", 41, 10),
    _user("Grace Hopper", "grace@example.com", "admin", 85, 11),
    _user("Joann Fox", "jf@example.com", "admin", 29, 12),
]


@pytest.fixture
def fake_collection():
    """Collection double for tests that never hit a database."""
    collection = MagicMock()
    collection.name = "fake"
    collection.count_documents = AsyncMock(return_value=0)
    return collection


@pytest.fixture
def mock_client():
    """Create an in-memory Motor client."""
    try:
        from mongomock_motor import AsyncMongoMockClient
    except ImportError:
        pytest.skip("mongomock-motor not installed")
    return AsyncMongoMockClient(default_database_name="test_db")


@pytest.fixture
async def users_collection(mock_client):
    """Users collection seeded with SAMPLE_USERS."""
    collection = mock_client.get_database("test_db").get_collection("users")
    await collection.insert_many([dict(u) for u in SAMPLE_USERS])
    return collection
