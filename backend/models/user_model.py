from database import mongo
from models.entity_schemas import COLLECTION_NAMES, utcnow
from utils.validation import parse_object_id

# Never returned to clients
PUBLIC_PROJECTION = {"password": 0}


def create_user(name: str, email: str, password_hash: str):
    """The user document is the aggregate: every embedded collection starts empty."""
    now = utcnow()
    doc = {
        "name": name,
        "email": email,
        "password": password_hash,
        "isSetupComplete": False,
        "createdAt": now,
        "updatedAt": now,
    }
    for collection in COLLECTION_NAMES:
        doc[collection] = []
    res = mongo.db.users.insert_one(doc)
    doc["_id"] = res.inserted_id
    return doc


def find_user_by_email(email: str):
    return mongo.db.users.find_one({"email": email})


def find_user_by_id(user_id, include_collections=False):
    oid = parse_object_id(user_id)
    if oid is None:
        return None
    projection = dict(PUBLIC_PROJECTION)
    if not include_collections:
        for collection in COLLECTION_NAMES:
            projection[collection] = 0
    return mongo.db.users.find_one({"_id": oid}, projection)


def update_user(user_id, updates: dict):
    oid = parse_object_id(user_id)
    if oid is None:
        return None
    updates = {k: v for k, v in updates.items() if v is not None}
    updates["updatedAt"] = utcnow()
    res = mongo.db.users.update_one({"_id": oid}, {"$set": updates})
    if res.matched_count == 0:
        return None
    return find_user_by_id(oid)


def public_profile(user: dict):
    return {
        "_id": str(user["_id"]),
        "name": user.get("name"),
        "email": user.get("email"),
        "isSetupComplete": user.get("isSetupComplete", False),
    }
