import mongomock
from flask_pymongo import PyMongo

from app import create_app
from config import TestConfig
from database import mongo


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.get_json() == {"status": "ok"}


def test_database_check(client):
    res = client.get("/api/test/db")
    assert res.status_code == 200
    body = res.get_json()
    assert body["success"] is True
    assert body["databaseName"] == "finance_tracker_test"


def test_unknown_route_is_json(client):
    res = client.get("/api/nothing-here")
    assert res.status_code == 404
    assert "message" in res.get_json()


def test_unexpected_error_hides_stack_in_production():
    class ProductionConfig(TestConfig):
        APP_ENV = "production"
        TESTING = False

    app = create_app(ProductionConfig, mongo_client=mongomock.MongoClient())

    @app.get("/boom")
    def boom():
        raise RuntimeError("boom")

    res = app.test_client().get("/boom")
    assert res.status_code == 500
    assert res.get_json() == {"message": "boom"}


def test_database_handle_uses_injected_client(app):
    assert isinstance(mongo, PyMongo)
    assert isinstance(mongo.cx, mongomock.MongoClient)
    assert mongo.db.name == "finance_tracker_test"
    assert "email_1" in mongo.db.users.index_information()
