# models/entity_schemas.py
"""
Per-entity validation and defaulting rules for the embedded collections.

Each entity has a create model (required fields, defaults) and a patch model
derived from it (every field optional, no defaults). History entries
(Asset.values, Asset.deposits, Budget.tracking) have their own models.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Literal, Optional, Tuple

from bson import ObjectId
from pydantic import (
    AliasChoices, BaseModel, ConfigDict, Field, ValidationError,
    create_model, field_validator,
)

from utils.errors import ValidationFailed
from utils.validation import (
    BUDGET_RECURRENCES, DEFAULT_NECESSITY_LEVEL, INCOME_FREQUENCIES,
    NECESSITY_LEVELS, today, validate_amount, validate_date_string,
    validate_percentage, validate_text,
)

NecessityLevel = Literal[NECESSITY_LEVELS]
IncomeFrequency = Literal[INCOME_FREQUENCIES]
BudgetRecurrence = Literal[BUDGET_RECURRENCES]

# Keys clients echo back that are never writable through a patch.
READ_ONLY_FIELDS = ("_id", "id", "user", "createdAt", "updatedAt")

TEXT_FIELDS = ("name", "category", "title", "content", "type", "frequency")
AMOUNT_FIELDS = ("amount", "value", "grossAmount", "netAmount",
                 "initialValue", "minimumPayment")
PERCENT_FIELDS = ("taxRate", "interestRate")
DATE_FIELDS = ("date", "billingDate", "purchaseDate", "acquisitionDate",
               "dueDate", "startDate", "endDate")


class _Entity(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, allow_inf_nan=False)

    @field_validator(*TEXT_FIELDS, mode="before", check_fields=False)
    @classmethod
    def _text(cls, v):
        return v if v is None else validate_text(v)

    @field_validator(*AMOUNT_FIELDS, mode="before", check_fields=False)
    @classmethod
    def _amount(cls, v):
        return v if v is None else validate_amount(v)

    @field_validator(*PERCENT_FIELDS, mode="before", check_fields=False)
    @classmethod
    def _percent(cls, v):
        return v if v is None else validate_percentage(v)

    @field_validator(*DATE_FIELDS, mode="before", check_fields=False)
    @classmethod
    def _date(cls, v):
        return v if v is None else validate_date_string(v)


# --- Create models ---

class ExpenseCreate(_Entity):
    name: str
    amount: float
    category: str
    date: str
    isRecurring: bool = False
    necessityLevel: NecessityLevel = DEFAULT_NECESSITY_LEVEL
    frequency: Optional[str] = None
    notes: Optional[str] = None


class IncomeCreate(_Entity):
    name: str
    grossAmount: float
    netAmount: float
    taxRate: float
    frequency: IncomeFrequency
    type: str
    date: str
    isRecurring: bool
    category: Optional[str] = None
    notes: Optional[str] = None


class AssetCreate(_Entity):
    name: str
    value: float
    type: str
    category: Optional[str] = None
    notes: Optional[str] = None
    purchaseDate: Optional[str] = None
    acquisitionDate: Optional[str] = None
    initialValue: Optional[float] = None
    growthRate: Optional[float] = None
    savingsGoalId: Optional[str] = None


class LiabilityCreate(_Entity):
    name: str
    amount: float
    type: Optional[str] = None
    interestRate: Optional[float] = None
    minimumPayment: Optional[float] = None
    dueDate: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None


class SubscriptionCreate(_Entity):
    name: str
    amount: float
    frequency: str
    category: str
    billingDate: str
    necessityLevel: NecessityLevel = DEFAULT_NECESSITY_LEVEL
    active: bool = Field(True, validation_alias=AliasChoices("active", "isActive"))
    notes: Optional[str] = None


class BudgetCreate(_Entity):
    name: str
    amount: float
    category: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    recurrence: Optional[BudgetRecurrence] = None


class NoteCreate(_Entity):
    title: str
    content: str
    tags: List[str] = Field(default_factory=list)
    isPinned: bool = False


# --- History entry models ---

class AssetValueEntry(_Entity):
    date: str
    value: float


class AssetDepositEntry(_Entity):
    date: str
    amount: float
    notes: Optional[str] = None


class BudgetTrackingEntry(_Entity):
    date: str
    amount: float
    description: str = ""


def make_patch_model(model):
    """Same fields as `model`, all optional and without defaults."""
    fields = {}
    for name, info in model.model_fields.items():
        fields[name] = (
            Optional[info.annotation],
            Field(None, validation_alias=info.validation_alias),
        )
    patch_name = model.__name__.replace("Create", "Patch")
    return create_model(patch_name, __base__=_Entity, **fields)


def _error_list(exc):
    errors = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "body"
        errors.append({"field": loc, "reason": err["msg"]})
    return errors


def _validate(model, payload):
    if not isinstance(payload, dict):
        raise ValidationFailed.single("body", "expected a JSON object")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailed(_error_list(exc)) from None


def utcnow():
    return datetime.now(timezone.utc)


def _derive_asset(item):
    # value history and deposits both start from the initial value
    if item.get("initialValue") is None:
        item["initialValue"] = item["value"]
    item.setdefault("savingsGoalId", None)
    item["values"] = [{"_id": ObjectId(), "date": today(), "value": item["value"]}]
    item["deposits"] = [{"_id": ObjectId(), "date": today(), "amount": item["value"]}]
    return item


def _derive_budget(item):
    item["tracking"] = []
    return item


@dataclass(frozen=True)
class HistorySpec:
    entry_model: type
    # (item field, entry field) kept equal to the latest entry
    mirror: Optional[Tuple[str, str]] = None


@dataclass(frozen=True)
class EntitySchema:
    entity: str
    collection: str
    create_model: type
    history: Dict[str, HistorySpec] = field(default_factory=dict)
    flags: Tuple[str, ...] = ()
    derive: Optional[Callable] = None
    patch_model: type = None

    def __post_init__(self):
        if self.patch_model is None:
            object.__setattr__(self, "patch_model", make_patch_model(self.create_model))

    def validate_create(self, payload):
        """Validated fields with defaults applied, ready to become an item."""
        return _validate(self.create_model, payload).model_dump(exclude_none=True)

    def new_item(self, payload):
        item = self.validate_create(payload)
        now = utcnow()
        item = {"_id": ObjectId(), **item, "createdAt": now, "updatedAt": now}
        if self.derive is not None:
            item = self.derive(item)
        return item

    def validate_patch(self, payload):
        """Only the supplied fields, validated; defaults are never injected."""
        if isinstance(payload, dict):
            payload = {k: v for k, v in payload.items() if k not in READ_ONLY_FIELDS}
        patch = _validate(self.patch_model, payload).model_dump(exclude_unset=True)
        required = [
            name for name, info in self.create_model.model_fields.items()
            if info.is_required() or info.default is not None
        ]
        nulls = [k for k, v in patch.items() if v is None and k in required]
        if nulls:
            raise ValidationFailed([{"field": k, "reason": "must not be null"} for k in nulls])
        if not patch:
            raise ValidationFailed.single("body", "No update fields provided")
        return patch

    def validate_history(self, field_name, payload):
        entry_spec = self.history.get(field_name)
        if entry_spec is None:
            raise ValidationFailed.single(field_name, f"{self.entity} has no history named {field_name}")
        entry = _validate(entry_spec.entry_model, payload).model_dump()
        return {"_id": ObjectId(), **entry}


EXPENSE = EntitySchema("Expense", "expenses", ExpenseCreate)
INCOME = EntitySchema("Income", "incomes", IncomeCreate)
ASSET = EntitySchema(
    "Asset", "assets", AssetCreate,
    history={
        "values": HistorySpec(AssetValueEntry, mirror=("value", "value")),
        "deposits": HistorySpec(AssetDepositEntry),
    },
    derive=_derive_asset,
)
LIABILITY = EntitySchema("Liability", "liabilities", LiabilityCreate)
SUBSCRIPTION = EntitySchema("Subscription", "subscriptions", SubscriptionCreate)
BUDGET = EntitySchema(
    "Budget", "budgets", BudgetCreate,
    history={"tracking": HistorySpec(BudgetTrackingEntry)},
    derive=_derive_budget,
)
NOTE = EntitySchema("Note", "notes", NoteCreate, flags=("isPinned",))

SCHEMAS = {s.collection: s for s in (
    EXPENSE, INCOME, ASSET, LIABILITY, SUBSCRIPTION, BUDGET, NOTE,
)}
COLLECTION_NAMES = tuple(SCHEMAS)
