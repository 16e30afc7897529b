import io

import pandas as pd


def _statement_file():
    frame = pd.DataFrame([
        ("Reskontradatum", "Transaktionsdatum", "Text", "Belopp"),
        ("2024-05-02", "2024-05-02", "ICA Nara", "-245.50"),
        ("2024-05-03", "2024-05-03", "SL Access", "-970"),
    ])
    buf = io.BytesIO()
    frame.to_excel(buf, header=False, index=False, engine="openpyxl")
    buf.seek(0)
    return buf


def test_import_local_storage(client, auth_headers):
    body = {
        "expenses": [{"name": "Rent", "amount": 1200}],
        "incomes": [{"name": "Salary", "amount": 30000, "frequency": "Monthly"}],
        "assets": [{"name": "Savings", "value": 1000}],
    }
    res = client.post("/api/import/localStorage", json=body, headers=auth_headers)
    assert res.status_code == 200
    assert res.get_json()["counts"] == {"incomes": 1, "expenses": 1, "assets": 1, "liabilities": 0}

    user = client.get("/api/user-data", headers=auth_headers).get_json()["user"]
    expense = user["expenses"][0]
    assert expense["category"] == "Other"
    assert expense["isRecurring"] is False
    assert expense["necessityLevel"] == "C"
    income = user["incomes"][0]
    assert income["grossAmount"] == income["netAmount"] == 30000
    assert income["frequency"] == "monthly"
    assert income["taxRate"] == 0
    assert user["assets"][0]["type"] == "Other"
    assert user["assets"][0]["values"][0]["value"] == 1000


def test_import_local_storage_replaces(client, auth_headers):
    body = {"expenses": [{"name": "Rent", "amount": 1200}]}
    client.post("/api/import/localStorage", json=body, headers=auth_headers)
    client.post("/api/import/localStorage", json=body, headers=auth_headers)
    assert len(client.get("/api/expenses", headers=auth_headers).get_json()) == 1


def test_import_local_storage_is_all_or_nothing(client, auth_headers):
    body = {
        "expenses": [{"name": "Rent", "amount": 1200}],
        "liabilities": [{"name": "Loan", "amount": -5}],
    }
    res = client.post("/api/import/localStorage", json=body, headers=auth_headers)
    assert res.status_code == 400
    assert res.get_json()["errors"][0]["field"] == "liabilities.0.amount"
    assert client.get("/api/expenses", headers=auth_headers).get_json() == []


def test_import_expenses_from_statement(client, auth_headers):
    res = client.post(
        "/api/import/expenses",
        data={"file": (_statement_file(), "statement.xlsx")},
        headers=auth_headers,
        content_type="multipart/form-data",
    )
    assert res.status_code == 201
    body = res.get_json()
    assert body["count"] == 2
    assert [e["category"] for e in body["expenses"]] == ["Food", "Transportation"]
    assert all("day" not in e and "merchantFrequency" not in e for e in body["expenses"])

    stored = client.get("/api/expenses", headers=auth_headers).get_json()
    assert [e["amount"] for e in stored] == [245.5, 970]


def test_import_expenses_requires_file(client, auth_headers):
    res = client.post("/api/import/expenses", data={}, headers=auth_headers,
                      content_type="multipart/form-data")
    assert res.status_code == 400
    assert res.get_json()["errors"][0]["field"] == "file"


def test_import_expenses_rejects_non_excel(client, auth_headers):
    res = client.post(
        "/api/import/expenses",
        data={"file": (io.BytesIO(b"hello"), "notes.txt")},
        headers=auth_headers,
        content_type="multipart/form-data",
    )
    assert res.status_code == 400
