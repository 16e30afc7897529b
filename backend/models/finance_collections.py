# models/finance_collections.py
from database import mongo
from models.embedded_collection import EmbeddedCollection
from models.entity_schemas import SCHEMAS
from models.parent_store import ParentStore


def get_store():
    return ParentStore(mongo.db.users)


def get_collection(name: str) -> EmbeddedCollection:
    """Accessor for one of the seven embedded collections of the user aggregate."""
    return EmbeddedCollection(get_store(), SCHEMAS[name])
