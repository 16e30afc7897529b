# routes/budget_routes.py
from flask import request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from models.finance_collections import get_collection
from routes.collection_routes import make_collection_blueprint
from utils.serializers import to_json

budget_bp = make_collection_blueprint("budgets")


# ✅ Track spending against a budget
@budget_bp.post("/api/budgets/<budget_id>/track")
@budget_bp.post("/api/user-data/budgets/<budget_id>/track")
@jwt_required()
def track_budget_spending(budget_id):
    user_id = get_jwt_identity()
    data = request.get_json(force=True, silent=True)
    budget = get_collection("budgets").append_to_history(user_id, budget_id, "tracking", data)
    return jsonify(to_json(budget)), 200
