from flask import jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from models.finance_collections import get_collection
from routes.collection_routes import make_collection_blueprint
from utils.serializers import to_json

note_bp = make_collection_blueprint("notes")


# ✅ Toggle note pin status
@note_bp.put("/api/notes/<note_id>/pin")
@note_bp.put("/api/user-data/notes/<note_id>/pin")
@jwt_required()
def toggle_note_pin(note_id):
    user_id = get_jwt_identity()
    note = get_collection("notes").toggle(user_id, note_id, "isPinned")
    return jsonify(to_json(note)), 200
