# database.py
import logging

from flask_pymongo import PyMongo
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

mongo = PyMongo()


def init_db(app, client=None):
    """Connect `mongo` (mongo.db.users ...). `client` replaces the real MongoClient, e.g. mongomock in tests."""
    uri = app.config.get("MONGO_URI")
    logger.info("Trying to connect to MongoDB: %s", uri)

    mongo.init_app(app, serverSelectionTimeoutMS=app.config.get("MONGO_TIMEOUT_MS", 5000))
    if client is not None:
        mongo.cx = client

    name = app.config.get("MONGO_DB_NAME") or (mongo.db.name if mongo.db is not None else "finance_tracker")
    mongo.db = mongo.cx[name]

    try:
        # Ping the server to check connection
        mongo.db.command("ping")
        logger.info("MongoDB connected successfully (database %s)", mongo.db.name)
    except PyMongoError as e:
        logger.error("MongoDB connection failed: %s", e)
        return  # stop setup if connection fails

    # The embedded collections live inside each user document,
    # so the users collection is the only one that needs an index.
    mongo.db.users.create_index("email", unique=True)
    logger.info("MongoDB indexes are ready")
