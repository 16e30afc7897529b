import logging
import traceback

from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from pymongo.errors import PyMongoError
from werkzeug.exceptions import HTTPException

from config import Config
from database import init_db, mongo
from routes.auth_routes import auth_bp, bcrypt
from routes.expense_routes import expense_bp
from routes.collection_routes import income_bp, liability_bp, subscription_bp
from routes.asset_routes import asset_bp
from routes.budget_routes import budget_bp
from routes.note_routes import note_bp
from routes.finance_routes import finance_bp, legacy_bps
from routes.import_routes import import_bp
from utils.auth import register_token_handlers
from utils.errors import FinanceError

logger = logging.getLogger(__name__)


def create_app(config_object=Config, mongo_client=None):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # --- Extensions ---
    jwt = JWTManager(app)
    register_token_handlers(jwt)
    bcrypt.init_app(app)
    init_db(app, mongo_client)

    # --- CORS ---
    CORS(app, resources={r"*": {"origins": [
        "file://",  # for local dev (index.html)
        app.config.get("CORS_ORIGINS", "*")
    ]}})

    # --- Blueprints ---
    app.register_blueprint(auth_bp, url_prefix="/api/users")
    for bp in (expense_bp, income_bp, asset_bp, liability_bp, subscription_bp,
               budget_bp, note_bp, finance_bp, import_bp):
        app.register_blueprint(bp)
    for bp in legacy_bps:
        app.register_blueprint(bp)

    # --- Errors ---
    @app.errorhandler(FinanceError)
    def handle_finance_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return jsonify({"message": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        logger.exception("Unhandled error: %s", err)
        body = {"message": str(err) or "Server error"}
        if app.config.get("APP_ENV") != "production":
            body["stack"] = "".join(traceback.format_exception(type(err), err, err.__traceback__))
        return jsonify(body), 500

    # --- Health check routes ---
    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.get("/api/test/db")
    def test_db():
        try:
            mongo.db.command("ping")
        except PyMongoError as e:
            logger.error("Database check failed: %s", e)
            return jsonify({
                "success": False,
                "message": "Database connection failed",
                "error": str(e),
            }), 500
        return jsonify({
            "success": True,
            "message": "Database connected",
            "databaseName": mongo.db.name,
        })

    return app


if __name__ == "__main__":
    create_app().run(debug=True)
