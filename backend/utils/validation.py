import math
from datetime import date as _date, datetime as _datetime

from bson import ObjectId
from bson.errors import InvalidId

NECESSITY_LEVELS = ("F", "E", "D", "C", "B", "A", "A+")
DEFAULT_NECESSITY_LEVEL = "C"

INCOME_FREQUENCIES = ("monthly", "weekly", "biweekly", "daily")
BUDGET_RECURRENCES = ("daily", "weekly", "monthly", "quarterly", "yearly")

EXPENSE_CATEGORIES = (
    "Housing", "Transportation", "Food", "Lunch", "Utilities", "Healthcare",
    "Entertainment", "Personal Care", "Education", "Clothing", "Electronics",
    "Debt Payments", "Savings", "Gifts & Donations", "Travel", "Transfer",
    "Income", "Other",
)


def validate_amount(val):
    """Monetary values may be zero but never negative."""
    if isinstance(val, bool):
        raise ValueError("invalid amount")
    try:
        x = float(val)
    except (TypeError, ValueError):
        raise ValueError("invalid amount")
    if not math.isfinite(x):
        raise ValueError("must be a finite number")
    if x < 0:
        raise ValueError("must not be negative")
    return x


def validate_percentage(val):
    x = validate_amount(val)
    if x > 100:
        raise ValueError("must be between 0 and 100")
    return x


def validate_text(val):
    if not isinstance(val, str) or not val.strip():
        raise ValueError("must be a non-empty string")
    return val.strip()


def validate_date_string(val):
    """Accepts 'YYYY-MM-DD' (from <input type="date">) or a full ISO timestamp."""
    if isinstance(val, _date):
        return val.isoformat()[:10]
    if not isinstance(val, str):
        raise ValueError("invalid date, expected YYYY-MM-DD")
    text = val.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        # the whole string must parse; timestamps keep only their calendar day
        parsed = _date.fromisoformat(text) if len(text) == 10 else _datetime.fromisoformat(text).date()
    except ValueError:
        raise ValueError("invalid date, expected YYYY-MM-DD")
    return parsed.isoformat()


def today():
    return _date.today().isoformat()


def parse_object_id(value):
    """Returns an ObjectId or None when value is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None
