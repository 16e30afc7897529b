# routes/collection_routes.py
from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from models.entity_schemas import SCHEMAS
from models.finance_collections import get_collection
from utils.serializers import to_json


def _body():
    # None when the body is missing or not JSON; the schema reports it
    return request.get_json(force=True, silent=True)


def make_collection_blueprint(collection: str, legacy: bool = False):
    """
    REST resource over one embedded collection.

    Canonical routes live under /api/<collection> and answer with the affected
    item. Legacy routes (/api/user-data/<collection>) keep the shapes the old
    frontend expects: the full refreshed collection after create/update, and
    a message plus the remaining collection after delete.
    """
    schema = SCHEMAS[collection]
    base = f"/api/user-data/{collection}" if legacy else f"/api/{collection}"
    bp = Blueprint(f"{collection}_legacy" if legacy else collection, __name__)

    def _collection_response(user_id, status):
        items = get_collection(collection).list_all(user_id)
        return jsonify(to_json(items)), status

    # ✅ List all items
    @bp.get(base)
    @jwt_required()
    def list_items():
        user_id = get_jwt_identity()
        items = get_collection(collection).list_all(user_id)
        return jsonify(to_json(items)), 200

    # ✅ Get one item
    @bp.get(f"{base}/<item_id>")
    @jwt_required()
    def get_item(item_id):
        user_id = get_jwt_identity()
        item = get_collection(collection).find_by_id(user_id, item_id)
        return jsonify(to_json(item)), 200

    # ✅ Add new item
    @bp.post(base)
    @jwt_required()
    def create_item():
        user_id = get_jwt_identity()
        item = get_collection(collection).append(user_id, _body())
        if legacy:
            return _collection_response(user_id, 201)
        return jsonify(to_json(item)), 201

    # ✅ Update item (only the supplied fields)
    @bp.put(f"{base}/<item_id>")
    @jwt_required()
    def update_item(item_id):
        user_id = get_jwt_identity()
        item = get_collection(collection).update_by_id(user_id, item_id, _body())
        if legacy:
            return _collection_response(user_id, 200)
        return jsonify(to_json(item)), 200

    # ✅ Delete item
    @bp.delete(f"{base}/<item_id>")
    @jwt_required()
    def delete_item(item_id):
        user_id = get_jwt_identity()
        result = get_collection(collection).remove_by_id(user_id, item_id)
        if legacy:
            items = get_collection(collection).list_all(user_id)
            return jsonify({
                "message": f"{schema.entity} removed",
                collection: to_json(items),
            }), 200
        return jsonify(to_json(result)), 200

    return bp


income_bp = make_collection_blueprint("incomes")
liability_bp = make_collection_blueprint("liabilities")
subscription_bp = make_collection_blueprint("subscriptions")
