from flask import jsonify

from routes.collection_routes import make_collection_blueprint
from utils.validation import EXPENSE_CATEGORIES, NECESSITY_LEVELS

expense_bp = make_collection_blueprint("expenses")


# ✅ List allowed categories and necessity levels (used by the expense form)
@expense_bp.get("/api/categories")
def list_categories():
    return jsonify({
        "categories": list(EXPENSE_CATEGORIES),
        "necessityLevels": list(NECESSITY_LEVELS),
    })
