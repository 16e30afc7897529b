# models/embedded_collection.py
import logging

from models.entity_schemas import utcnow
from utils.errors import ItemNotFound, ParentNotFound, StorageUnavailable, ValidationFailed
from utils.validation import parse_object_id, today

logger = logging.getLogger(__name__)


class EmbeddedCollection:
    """
    CRUD over one named array inside the user aggregate.

    Payloads are validated by the entity schema before any write, and every
    mutation is one positional write through the ParentStore. Mutations return
    the affected item, read back after the write.
    """

    def __init__(self, store, schema):
        self.store = store
        self.schema = schema

    @property
    def name(self):
        return self.schema.collection

    @property
    def entity(self):
        return self.schema.entity

    # ---------- Helpers ----------

    def _parent_id(self, parent_id):
        oid = parse_object_id(parent_id)
        if oid is None:
            raise ParentNotFound()
        return oid

    def _item_id(self, item_id):
        oid = parse_object_id(item_id)
        if oid is None:
            raise ItemNotFound(self.entity, item_id)
        return oid

    def _missing(self, parent_id, item_id, removal=False):
        """Raise the right error after a write matched nothing."""
        if not self.store.exists(parent_id):
            raise ParentNotFound()
        raise ItemNotFound(self.entity, str(item_id), already_removed=removal)

    def _read_back(self, parent_id, item_id):
        item = self.store.find_item(parent_id, self.name, item_id)
        if item is None:
            # removed by a concurrent request after our write
            raise ItemNotFound(self.entity, str(item_id))
        return item

    # ---------- Reads ----------

    def list_all(self, parent_id):
        return self.store.list_items(self._parent_id(parent_id), self.name)

    def find_by_id(self, parent_id, item_id):
        pid = self._parent_id(parent_id)
        iid = self._item_id(item_id)
        item = self.store.find_item(pid, self.name, iid)
        if item is None:
            raise ItemNotFound(self.entity, str(item_id))
        return item

    # ---------- Writes ----------

    def append(self, parent_id, payload):
        item = self.schema.new_item(payload)
        self.store.push_items(self._parent_id(parent_id), self.name, [item])
        logger.debug("Appended %s %s", self.entity, item["_id"])
        return item

    def build_items(self, payloads):
        """New items for every payload; errors are reported for all rows at once."""
        items = []
        errors = []
        for index, payload in enumerate(payloads):
            try:
                items.append(self.schema.new_item(payload))
            except ValidationFailed as exc:
                errors.extend(
                    {"field": f"{self.name}.{index}.{e['field']}", "reason": e["reason"]}
                    for e in exc.errors
                )
        if errors:
            raise ValidationFailed(errors)
        return items

    def append_many(self, parent_id, payloads):
        """Validate every payload, then push them all in one write."""
        items = self.build_items(payloads)
        if items:
            self.store.push_items(self._parent_id(parent_id), self.name, items)
        return items

    def update_by_id(self, parent_id, item_id, payload):
        patch = self.schema.validate_patch(payload)
        pid = self._parent_id(parent_id)
        iid = self._item_id(item_id)
        patch["updatedAt"] = utcnow()
        mirrored = self._mirrored_history(patch)
        if mirrored is None:
            matched = self.store.set_item_fields(pid, self.name, iid, patch)
        else:
            # a new current value is also a new history entry, in the same write
            field, entry = mirrored
            matched = self.store.push_history(pid, self.name, iid, field, entry, patch)
        if not matched:
            self._missing(pid, iid)
        return self._read_back(pid, iid)

    def _mirrored_history(self, patch):
        """(history field, entry) when the patch changes a field that mirrors a history."""
        for field, spec in self.schema.history.items():
            if spec.mirror is None:
                continue
            item_field, entry_field = spec.mirror
            if item_field in patch:
                entry = self.schema.validate_history(
                    field, {"date": today(), entry_field: patch[item_field]})
                return field, entry
        return None

    def remove_by_id(self, parent_id, item_id):
        pid = self._parent_id(parent_id)
        iid = self._item_id(item_id)
        if not self.store.pull_item(pid, self.name, iid):
            self._missing(pid, iid, removal=True)
        logger.debug("Removed %s %s", self.entity, iid)
        return {"_id": iid, "success": True}

    def append_to_history(self, parent_id, item_id, field, payload):
        entry = self.schema.validate_history(field, payload)
        pid = self._parent_id(parent_id)
        iid = self._item_id(item_id)
        fields = {"updatedAt": utcnow()}
        mirror = self.schema.history[field].mirror
        if mirror is not None:
            item_field, entry_field = mirror
            fields[item_field] = entry[entry_field]
        if not self.store.push_history(pid, self.name, iid, field, entry, fields):
            self._missing(pid, iid)
        return self._read_back(pid, iid)

    def toggle(self, parent_id, item_id, flag):
        """
        Negate a boolean field. The write only applies while the field still
        holds the value read just before; if a concurrent toggle got there
        first the caller gets a retryable StorageUnavailable, never a lost
        toggle.
        """
        if flag not in self.schema.flags:
            raise ValidationFailed.single(flag, f"{self.entity} has no toggleable field {flag}")
        current = self.find_by_id(parent_id, item_id)
        pid = self._parent_id(parent_id)
        iid = current["_id"]
        expected = bool(current.get(flag, False))
        if not self.store.compare_and_set(
            pid, self.name, iid, flag, expected, not expected, {"updatedAt": utcnow()}
        ):
            if self.store.find_item(pid, self.name, iid) is None:
                raise ItemNotFound(self.entity, str(item_id))
            logger.warning("Concurrent toggle of %s.%s on %s", self.entity, flag, iid)
            raise StorageUnavailable(f"{self.entity} was modified concurrently, please retry")
        return self._read_back(pid, iid)
