import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


class Config:
    # Use MongoDB Atlas URI or local
    MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/finance_tracker")
    MONGO_DB_NAME = os.getenv("MONGO_DB_NAME")  # falls back to the database in MONGO_URI
    MONGO_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

    # JWT / Auth
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "supersecretkey-change-me")
    JWT_ALGORITHM = "HS256"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=int(os.getenv("JWT_EXPIRES_DAYS", "30")))

    # CORS (adjust for your frontend origin)
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    APP_ENV = os.getenv("APP_ENV", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Bank statement uploads (Excel import)
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024


class TestConfig(Config):
    TESTING = True
    MONGO_URI = "mongodb://localhost:27017/finance_tracker_test"
    MONGO_DB_NAME = "finance_tracker_test"
    JWT_SECRET_KEY = "test-secret"
    BCRYPT_LOG_ROUNDS = 4
    LOG_LEVEL = "WARNING"
