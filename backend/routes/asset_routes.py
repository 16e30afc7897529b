# routes/asset_routes.py
from flask import request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from models.finance_collections import get_collection
from routes.collection_routes import make_collection_blueprint
from utils.serializers import to_json

asset_bp = make_collection_blueprint("assets")


# ✅ Record a new value; the asset's current value follows the latest entry
@asset_bp.put("/api/assets/<asset_id>/value")
@asset_bp.put("/api/user-data/assets/<asset_id>/value")
@jwt_required()
def update_asset_value(asset_id):
    user_id = get_jwt_identity()
    data = request.get_json(force=True, silent=True)
    asset = get_collection("assets").append_to_history(user_id, asset_id, "values", data)
    return jsonify(to_json(asset)), 200


# ✅ Add a deposit
@asset_bp.post("/api/assets/<asset_id>/deposit")
@asset_bp.post("/api/user-data/assets/<asset_id>/deposit")
@jwt_required()
def add_asset_deposit(asset_id):
    user_id = get_jwt_identity()
    data = request.get_json(force=True, silent=True)
    asset = get_collection("assets").append_to_history(user_id, asset_id, "deposits", data)
    return jsonify(to_json(asset)), 201
