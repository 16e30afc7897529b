# routes/finance_routes.py
from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from models.entity_schemas import COLLECTION_NAMES
from models.user_model import find_user_by_id
from routes.collection_routes import make_collection_blueprint
from utils.errors import ParentNotFound
from utils.serializers import to_json

finance_bp = Blueprint("finance_bp", __name__)

# Old frontend: every collection also answers under /api/user-data/<collection>
legacy_bps = [make_collection_blueprint(name, legacy=True) for name in COLLECTION_NAMES]


@finance_bp.get("/api/user-data")
@jwt_required()
def get_user_data():
    user_id = get_jwt_identity()
    user = find_user_by_id(user_id, include_collections=True)
    if not user:
        raise ParentNotFound()
    return jsonify({"user": to_json(user)}), 200
