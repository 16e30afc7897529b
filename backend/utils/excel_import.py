# utils/excel_import.py
"""
Bank statement (Excel) parsing for the expense import.

Transactions start after the row whose first cell is "Reskontradatum";
column 2 holds the date, column 3 the text and column 4 the amount
(negative for money going out).

Recurrence detection needs every transaction of the statement before it can
decide anything, so a run keeps its merchant history in an ImportContext that
is created per import and passed along explicitly.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime

import pandas as pd

from utils.validation import DEFAULT_NECESSITY_LEVEL, validate_date_string

logger = logging.getLogger(__name__)

HEADER_MARKER = "Reskontradatum"
DATE_COL, TEXT_COL, AMOUNT_COL = 1, 2, 3

ONE_TIME = "OneTime"
MONTHLY = "Monthly"
WEEKLY = "Weekly"
YEARLY = "Yearly"

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# First matching category wins, so order matters
CATEGORY_KEYWORDS = {
    "Housing": ["hyra", "hyran", "rent", "bostad", "apartment"],
    "Transportation": ["sj", "sl", "uber", "taxi", "parking", "parkering"],
    "Food": ["ica", "coop", "willys", "hemköp", "lidl", "mat", "haojie", "supermarke"],
    "Lunch": ["lunch", "restaurang", "subway"],
    "Entertainment": ["prel", "arena", "bio", "cinema", "spotify", "netflix", "hbo"],
    "Savings": ["avanza", "nordnet", "investeringssparkonto", "fonder", "stocks"],
    "Transfer": ["revolut", "överföring", "swish", "transfer"],
    "Income": ["salary", "epic", "lön", "dividend", "utdelning"],
    "Utilities": ["electric", "vatten", "water", "gas", "tele2", "telia", "internet"],
    "Healthcare": ["läkare", "doctor", "apotek", "pharmacy", "tandläkare", "dental"],
    "Personal Care": ["frisör", "haircut", "gym", "spa"],
    "Education": ["kurs", "course", "book", "bok", "utbildning"],
    "Clothing": ["h&m", "zara", "kläder", "shoes", "skor"],
    "Electronics": ["elgiganten", "mediamarkt", "kjell", "webhallen"],
    "Debt Payments": ["loan", "lån", "mortgage", "csn"],
    "Gifts & Donations": ["present", "gift", "donation"],
    "Travel": ["hotel", "hotell", "flight", "flyg", "airbnb", "booking"],
    "Other": [],
}


@dataclass
class ImportContext:
    """Merchant history collected during one import run."""

    dates: dict = field(default_factory=dict)
    amounts: dict = field(default_factory=dict)
    merchant_counts: dict = field(default_factory=dict)

    def record(self, name, day, amount):
        self.dates.setdefault(name, []).append(day)
        self.amounts.setdefault(name, []).append(amount)
        self.merchant_counts[name] = self.merchant_counts.get(name, 0) + 1
        return self.merchant_counts[name]


def categorize_transaction(text: str) -> str:
    lower_text = text.lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in lower_text for keyword in keywords):
            return category
    return "Other"


def determine_necessity_level(text: str) -> str:
    # TODO: derive the level from category/merchant once rules exist; every
    # imported row is "C" until then.
    return DEFAULT_NECESSITY_LEVEL


def detect_recurring_pattern(context: ImportContext, name: str, amount: float):
    """Returns (is_recurring, frequency) for a merchant given the run's history."""
    days = context.dates.get(name) or []
    if len(days) < 2:
        return False, ONE_TIME

    dates = [date.fromisoformat(d) for d in days]
    amounts = context.amounts[name]
    is_recurring, frequency = False, ONE_TIME

    # same amount on the same day of month
    if all(abs(a - amount) < 0.01 for a in amounts):
        days_of_month = [d.day for d in dates]
        if all(d == days_of_month[0] for d in days_of_month):
            months = sorted(d.month for d in dates)
            if all(b - a in (0, 1) for a, b in zip(months, months[1:])):
                is_recurring, frequency = True, MONTHLY

            weekdays = [d.weekday() for d in dates]
            if all(w == weekdays[0] for w in weekdays) and abs((dates[1] - dates[0]).days) <= 8:
                is_recurring, frequency = True, WEEKLY

    return is_recurring, frequency


def _cell_text(value) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def _cell_amount(value) -> float:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return 0.0
    try:
        return float(str(value).replace(",", ".").replace(" ", "")) if isinstance(value, str) else float(value)
    except ValueError:
        return 0.0


def _cell_date(value) -> str:
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    try:
        return validate_date_string(_cell_text(value))
    except ValueError:
        return ""


def parse_transaction_excel(source, context: ImportContext = None):
    """
    Parse a bank statement into expense dicts.

    `source` is anything pandas.read_excel accepts (path or file-like).
    """
    context = context if context is not None else ImportContext()
    frame = pd.read_excel(source, header=None, engine="openpyxl")
    if frame.shape[1] <= AMOUNT_COL:
        raise ValueError("Could not find transaction header row")

    first_col = frame.iloc[:, 0].map(_cell_text)
    header_rows = list(frame.index[first_col == HEADER_MARKER])
    if not header_rows:
        raise ValueError("Could not find transaction header row")
    header = header_rows[-1]

    expenses = []
    for _, row in frame.loc[header + 1:].iterrows():
        text = _cell_text(row.iloc[TEXT_COL])
        if not text:
            continue
        day = _cell_date(row.iloc[DATE_COL])
        if not day:
            logger.warning("Skipping statement row without a date: %s", text)
            continue

        # expenses become positive, incoming money negative, stored as absolute
        amount = -_cell_amount(row.iloc[AMOUNT_COL])
        merchant_frequency = context.record(text, day, abs(amount))

        expenses.append({
            "name": text,
            "amount": abs(amount),
            "category": categorize_transaction(text),
            "isRecurring": False,
            "date": day,
            "day": WEEKDAYS[date.fromisoformat(day).weekday()],
            "frequency": ONE_TIME,
            "necessityLevel": determine_necessity_level(text),
            "merchantFrequency": merchant_frequency,
        })

    for expense in expenses:
        expense["isRecurring"], expense["frequency"] = detect_recurring_pattern(
            context, expense["name"], expense["amount"])

    logger.info("Parsed %d transactions from statement", len(expenses))
    return expenses
