# routes/import_routes.py
import io
import logging
import zipfile

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from models.finance_collections import get_collection, get_store
from utils.errors import ParentNotFound, ValidationFailed
from utils.excel_import import ImportContext, parse_transaction_excel
from utils.serializers import to_json
from utils.validation import parse_object_id, today

logger = logging.getLogger(__name__)

import_bp = Blueprint("import_bp", __name__)

# Only used while parsing, never stored
STATEMENT_ONLY_FIELDS = ("day", "merchantFrequency")


def _expense_from_local(e):
    return {
        "name": e.get("name"),
        "amount": e.get("amount"),
        "category": e.get("category") or "Other",
        "isRecurring": bool(e.get("isRecurring", False)),
        "date": e.get("date") or today(),
        "necessityLevel": e.get("necessityLevel") or None,
        "frequency": e.get("frequency") or None,
        "notes": e.get("notes") or None,
    }


def _income_from_local(i):
    amount = i.get("amount")
    return {
        "name": i.get("name"),
        "grossAmount": i.get("grossAmount", amount),
        "netAmount": i.get("netAmount", amount),
        "taxRate": i.get("taxRate") or 0,
        "frequency": (i.get("frequency") or "monthly").lower(),
        "type": i.get("type") or "Other",
        "category": i.get("category") or "Other",
        "date": i.get("date") or today(),
        "isRecurring": bool(i.get("isRecurring", False)),
        "notes": i.get("notes") or None,
    }


def _asset_from_local(a):
    return {
        "name": a.get("name"),
        "value": a.get("value"),
        "type": a.get("type") or "Other",
        "category": a.get("category") or None,
        "notes": a.get("notes") or None,
        "purchaseDate": a.get("purchaseDate") or None,
        "initialValue": a.get("initialValue"),
        "growthRate": a.get("growthRate"),
    }


def _liability_from_local(li):
    return {
        "name": li.get("name"),
        "amount": li.get("amount"),
        "type": li.get("type") or None,
        "interestRate": li.get("interestRate"),
        "minimumPayment": li.get("minimumPayment"),
        "dueDate": li.get("dueDate") or None,
        "category": li.get("category") or None,
        "notes": li.get("notes") or None,
    }


LOCAL_MAPPERS = {
    "incomes": _income_from_local,
    "expenses": _expense_from_local,
    "assets": _asset_from_local,
    "liabilities": _liability_from_local,
}


def _drop_none(d):
    return {k: v for k, v in d.items() if v is not None}


# ✅ Import the old frontend's localStorage data
@import_bp.post("/api/import/localStorage")
@jwt_required()
def import_local_storage():
    user_id = get_jwt_identity()
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise ValidationFailed.single("body", "expected a JSON object")

    replacements = {}
    errors = []
    for name, mapper in LOCAL_MAPPERS.items():
        rows = data.get(name)
        if not rows:
            continue
        if not isinstance(rows, list):
            errors.append({"field": name, "reason": "expected a list"})
            continue
        payloads = [_drop_none(mapper(r)) if isinstance(r, dict) else r for r in rows]
        try:
            replacements[name] = get_collection(name).build_items(payloads)
        except ValidationFailed as exc:
            errors.extend(exc.errors)
    if errors:
        raise ValidationFailed(errors)

    counts = {name: len(replacements.get(name, [])) for name in LOCAL_MAPPERS}
    if replacements:
        pid = parse_object_id(user_id)
        if pid is None:
            raise ParentNotFound()
        # whole collections are replaced, never appended to
        get_store().replace_collections(pid, replacements)

    logger.info("localStorage import for %s: %s", user_id, counts)
    return jsonify({
        "success": True,
        "message": "Data imported successfully",
        "counts": counts,
    }), 200


# ✅ Import expenses from a bank statement (Excel)
@import_bp.post("/api/import/expenses")
@jwt_required()
def import_expenses():
    user_id = get_jwt_identity()
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise ValidationFailed.single("file", "No file uploaded")

    try:
        parsed = parse_transaction_excel(io.BytesIO(upload.read()), ImportContext())
    except (ValueError, zipfile.BadZipFile) as e:
        raise ValidationFailed.single("file", str(e))

    payloads = [
        {k: v for k, v in row.items() if k not in STATEMENT_ONLY_FIELDS}
        for row in parsed
    ]
    expenses = get_collection("expenses").append_many(user_id, payloads)

    logger.info("Imported %d expenses for %s", len(expenses), user_id)
    return jsonify({
        "message": f"Successfully imported {len(expenses)} expenses",
        "count": len(expenses),
        "expenses": to_json(expenses),
    }), 201
