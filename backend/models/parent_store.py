# models/parent_store.py
"""
Storage boundary for the user aggregate.

Every write is a single update_one against the users collection. Writes that
target one element of an embedded array match it with $elemMatch in the
filter and address it with the positional operator, so a concurrent write to
a sibling element or a sibling array is never overwritten.
"""
import logging
from functools import wraps

from pymongo.errors import PyMongoError

from utils.errors import ParentNotFound, StorageUnavailable

logger = logging.getLogger(__name__)


def storage_call(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except PyMongoError as exc:
            logger.error("Storage call %s failed: %s", fn.__name__, exc)
            raise StorageUnavailable() from exc
    return wrapper


class ParentStore:

    def __init__(self, users):
        # pymongo (or mongomock) collection holding one document per user
        self.users = users

    @staticmethod
    def item_filter(parent_id, collection, item_id, **match):
        return {"_id": parent_id, collection: {"$elemMatch": {"_id": item_id, **match}}}

    # ---------- Reads ----------

    @storage_call
    def exists(self, parent_id):
        return self.users.find_one({"_id": parent_id}, {"_id": 1}) is not None

    @storage_call
    def get_parent(self, parent_id, projection=None):
        doc = self.users.find_one({"_id": parent_id}, projection)
        if doc is None:
            raise ParentNotFound()
        return doc

    def list_items(self, parent_id, collection):
        doc = self.get_parent(parent_id, {collection: 1})
        return doc.get(collection) or []

    def find_item(self, parent_id, collection, item_id):
        for item in self.list_items(parent_id, collection):
            if item.get("_id") == item_id:
                return item
        return None

    # ---------- Writes ----------

    @storage_call
    def push_items(self, parent_id, collection, items):
        res = self.users.update_one(
            {"_id": parent_id},
            {"$push": {collection: {"$each": list(items)}}},
        )
        if res.matched_count == 0:
            raise ParentNotFound()

    @storage_call
    def set_item_fields(self, parent_id, collection, item_id, fields):
        res = self.users.update_one(
            self.item_filter(parent_id, collection, item_id),
            {"$set": {f"{collection}.$.{k}": v for k, v in fields.items()}},
        )
        return res.matched_count > 0

    @storage_call
    def push_history(self, parent_id, collection, item_id, field, entry, fields=None):
        """Push into a nested array of one element, setting `fields` in the same write."""
        update = {"$push": {f"{collection}.$.{field}": entry}}
        if fields:
            update["$set"] = {f"{collection}.$.{k}": v for k, v in fields.items()}
        res = self.users.update_one(self.item_filter(parent_id, collection, item_id), update)
        return res.matched_count > 0

    @storage_call
    def pull_item(self, parent_id, collection, item_id):
        res = self.users.update_one(
            self.item_filter(parent_id, collection, item_id),
            {"$pull": {collection: {"_id": item_id}}},
        )
        return res.modified_count > 0

    @storage_call
    def compare_and_set(self, parent_id, collection, item_id, field, expected, value, fields=None):
        """Set `field` only while it still holds `expected`."""
        current = expected if expected else {"$ne": True}
        update = {f"{collection}.$.{field}": value}
        for k, v in (fields or {}).items():
            update[f"{collection}.$.{k}"] = v
        res = self.users.update_one(
            self.item_filter(parent_id, collection, item_id, **{field: current}),
            {"$set": update},
        )
        return res.matched_count > 0

    @storage_call
    def replace_collections(self, parent_id, collections):
        """Overwrite whole arrays in one write (used by the import path only)."""
        res = self.users.update_one({"_id": parent_id}, {"$set": collections})
        if res.matched_count == 0:
            raise ParentNotFound()
