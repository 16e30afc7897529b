import io

import pandas as pd
import pytest

from utils.excel_import import (
    ImportContext, categorize_transaction, detect_recurring_pattern,
    determine_necessity_level, parse_transaction_excel,
)


def statement(rows, preamble=(("Kontoutdrag", None, None, None),)):
    """Bank statement workbook: preamble rows, the header row, then transactions."""
    header = ("Reskontradatum", "Transaktionsdatum", "Text", "Belopp")
    frame = pd.DataFrame(list(preamble) + [header] + list(rows))
    buf = io.BytesIO()
    frame.to_excel(buf, header=False, index=False, engine="openpyxl")
    buf.seek(0)
    return buf


@pytest.mark.parametrize("text,category", [
    ("ICA Nara Solna", "Food"),
    ("Hyra april", "Housing"),
    ("Spotify P12345", "Entertainment"),
    ("Swish till Anna", "Transfer"),
    ("Okand butik", "Other"),
])
def test_categorize_transaction(text, category):
    assert categorize_transaction(text) == category


def test_necessity_level_is_default():
    assert determine_necessity_level("ICA Nara") == "C"


def test_parse_statement():
    buf = statement([
        ("2024-05-02", "2024-05-02", "ICA Nara", "-245.50"),
        ("2024-05-03", "2024-05-03", "Lon", "25000"),
        ("2024-05-04", "2024-05-04", "", "-10"),
    ])
    expenses = parse_transaction_excel(buf)
    assert [e["name"] for e in expenses] == ["ICA Nara", "Lon"]

    ica = expenses[0]
    assert ica["amount"] == pytest.approx(245.5)
    assert ica["category"] == "Food"
    assert ica["necessityLevel"] == "C"
    assert ica["date"] == "2024-05-02"
    assert ica["day"] == "Thursday"
    assert ica["isRecurring"] is False
    assert ica["frequency"] == "OneTime"
    assert ica["merchantFrequency"] == 1

    # incoming money is stored as an absolute amount too
    assert expenses[1]["amount"] == pytest.approx(25000)


def test_rows_without_date_are_skipped():
    buf = statement([
        ("2024-05-02", "not a date", "ICA Nara", "-100"),
        ("2024-05-02", "2024-05-03", "Coop", "-50"),
    ])
    assert [e["name"] for e in parse_transaction_excel(buf)] == ["Coop"]


def test_missing_header_raises():
    frame = pd.DataFrame([("a", "b", "c", "d")])
    buf = io.BytesIO()
    frame.to_excel(buf, header=False, index=False, engine="openpyxl")
    buf.seek(0)
    with pytest.raises(ValueError):
        parse_transaction_excel(buf)


def test_monthly_recurrence_detected():
    buf = statement([
        ("2024-03-25", "2024-03-25", "Netflix", "-129"),
        ("2024-04-25", "2024-04-25", "Netflix", "-129"),
        ("2024-04-26", "2024-04-26", "Coop", "-80"),
    ])
    context = ImportContext()
    expenses = parse_transaction_excel(buf, context)
    netflix = [e for e in expenses if e["name"] == "Netflix"]
    assert all(e["isRecurring"] and e["frequency"] == "Monthly" for e in netflix)
    assert [e["merchantFrequency"] for e in netflix] == [1, 2]
    assert context.merchant_counts == {"Netflix": 2, "Coop": 1}
    coop = next(e for e in expenses if e["name"] == "Coop")
    assert coop["frequency"] == "OneTime"


def test_weekly_recurrence_detected():
    context = ImportContext()
    context.record("Gym", "2024-05-06", 99.0)
    context.record("Gym", "2024-05-13", 99.0)
    # a week apart but on different days of the month
    assert detect_recurring_pattern(context, "Gym", 99.0) == (False, "OneTime")

    context = ImportContext()
    context.record("Gym", "2024-05-06", 99.0)
    context.record("Gym", "2024-05-06", 99.0)
    assert detect_recurring_pattern(context, "Gym", 99.0) == (True, "Weekly")


def test_different_amounts_are_not_recurring():
    context = ImportContext()
    context.record("Shell", "2024-03-10", 400.0)
    context.record("Shell", "2024-04-10", 520.0)
    assert detect_recurring_pattern(context, "Shell", 400.0) == (False, "OneTime")


def test_contexts_are_independent():
    first, second = ImportContext(), ImportContext()
    first.record("Netflix", "2024-03-25", 129.0)
    first.record("Netflix", "2024-04-25", 129.0)
    assert detect_recurring_pattern(second, "Netflix", 129.0) == (False, "OneTime")
