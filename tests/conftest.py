import mongomock
import pytest

from app import create_app
from config import TestConfig
from database import mongo
from models.entity_schemas import SCHEMAS
from models.embedded_collection import EmbeddedCollection
from models.parent_store import ParentStore
from models.user_model import create_user


@pytest.fixture
def app():
    app = create_app(TestConfig, mongo_client=mongomock.MongoClient())
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def users(app):
    return mongo.db.users


@pytest.fixture
def store(users):
    return ParentStore(users)


@pytest.fixture
def collection(store):
    """Factory: collection("expenses") -> EmbeddedCollection over the test database."""
    def make(name):
        return EmbeddedCollection(store, SCHEMAS[name])
    return make


@pytest.fixture
def parent_id(app):
    return create_user("Alice", "alice@example.com", "not-a-real-hash")["_id"]


@pytest.fixture
def registered(client):
    res = client.post("/api/users", json={
        "name": "Bob",
        "email": "bob@example.com",
        "password": "secret123",
    })
    assert res.status_code == 201
    return res.get_json()


@pytest.fixture
def auth_headers(registered):
    return {"Authorization": f"Bearer {registered['token']}"}
