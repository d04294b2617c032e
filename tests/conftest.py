"""Pytest configuration and fixtures for youth football MCP tests."""

import json
import os

import pytest

# Set up test environment
os.environ.setdefault("NEO4J_URI", "bolt://localhost:7687")
os.environ.setdefault("NEO4J_USER", "neo4j")
os.environ.setdefault("NEO4J_PASSWORD", "password")
os.environ.pop("GEMINI_API_KEY", None)

from youth_football_mcp.data_loader import load_sample_data
from youth_football_mcp.store import EntityStore


class MockNeo4jDatabase:
    """In-memory key-value stand-in for Neo4jDatabase.

    Values are stored JSON-encoded so that everything the store writes
    goes through the same serialization as the real backend.
    """

    def __init__(self):
        self.data: dict[str, str] = {}
        self.writes: list[str] = []
        self._connected = False

    def connect(self):
        self._connected = True

    def close(self):
        self._connected = False

    def load_collection(self, key: str, default=None):
        if key not in self.data:
            return default
        return json.loads(self.data[key])

    def save_collection(self, key: str, value) -> None:
        self.data[key] = json.dumps(value, ensure_ascii=False)
        self.writes.append(key)

    def clear_database(self) -> None:
        self.data.clear()

    def create_constraints(self) -> None:
        pass


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    """Stands in for a Gemini GenerativeModel."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    def generate_content(self, prompt, generation_config=None):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        text = self.reply if isinstance(self.reply, str) else json.dumps(self.reply)
        return FakeResponse(text)


@pytest.fixture
def mock_db():
    """Provide a mock database for testing."""
    db = MockNeo4jDatabase()
    db.connect()
    return db


@pytest.fixture
def store(mock_db):
    """Provide an empty entity store."""
    return EntityStore(mock_db).load()


@pytest.fixture
def store_with_sample_data(store):
    """Provide an entity store pre-populated with the sample season."""
    load_sample_data(store)
    return store


@pytest.fixture
def fake_model():
    return FakeModel()


@pytest.fixture
def model_factory():
    """Build fake Gemini models with a canned reply or error."""
    return FakeModel
