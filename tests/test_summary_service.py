"""Domain tests for summary service."""

from decimal import Decimal

import pytest

from envelopes.domain.errors import ValidationError


def test_kpis(imported_sample, summary_service):
    """Month KPIs over the sample import."""
    kpis = summary_service.kpis("2024-03")

    assert kpis["month"] == "2024-03"
    assert kpis["currency_code"] == "USD"
    assert kpis["income"] == Decimal("2500.00")
    assert kpis["expense"] == Decimal("1305.05")
    assert kpis["net"] == Decimal("1194.95")
    assert kpis["uncategorized_count"] == 1
    assert kpis["transaction_count"] == 5
    assert kpis["total_transaction_count"] == 5


def test_kpis_default_to_current_month(imported_sample, summary_service):
    """Without a month the current month is used."""
    assert summary_service.kpis()["month"] == "2024-03"


def test_kpis_empty_month(imported_sample, summary_service):
    """A month without transactions has zero totals."""
    kpis = summary_service.kpis("2024-04")
    assert kpis["income"] == 0
    assert kpis["expense"] == 0
    assert kpis["transaction_count"] == 0
    assert kpis["total_transaction_count"] == 5


def test_invalid_month(summary_service):
    """Malformed months raise ValidationError."""
    with pytest.raises(ValidationError):
        summary_service.kpis("2024-3")


def test_envelope_summary(imported_sample, summary_service, budget_service):
    """Expense envelopes with budgeted, spent and remaining, highest spent first."""
    budget_service.set_envelope_budget("2024-03", "Groceries", Decimal("300"))
    budget_service.set_envelope_budget("2024-03", "Utilities", Decimal("90"))
    budget_service.set_envelope_budget("2024-04", "Housing", Decimal("1200"))

    summary = summary_service.envelope_summary("2024-03")

    assert summary["uncategorized_count"] == 1
    items = {item["category_name"]: item for item in summary["items"]}
    assert set(items) == {"Groceries", "Housing", "Eating Out", "Utilities"}
    assert [item["category_name"] for item in summary["items"]][:3] == [
        "Housing",
        "Groceries",
        "Eating Out",
    ]
    assert items["Groceries"]["budgeted"] == Decimal("300")
    assert items["Groceries"]["spent"] == Decimal("54.20")
    assert items["Groceries"]["remaining"] == Decimal("245.80")
    assert items["Housing"]["budgeted"] == 0
    assert items["Housing"]["remaining"] == Decimal("-1200.00")
    assert items["Utilities"]["spent"] == 0
    assert items["Utilities"]["remaining"] == Decimal("90")


def test_envelope_summary_uncategorized_counts(imported_sample, summary_service):
    """The total uncategorized count spans all months, the month count does not."""
    march = summary_service.envelope_summary("2024-03")
    february = summary_service.envelope_summary("2024-02")

    assert march["uncategorized_count"] == 1
    assert march["month_uncategorized_count"] == 1
    assert february["uncategorized_count"] == 1
    assert february["month_uncategorized_count"] == 0


def test_uncategorized_transactions(imported_sample, summary_service, budget_service):
    """Uncategorized transactions are listed newest first with display fields."""
    result = summary_service.uncategorized_transactions("2024-03")
    rows = result["transactions"]

    assert len(rows) == 1
    assert rows[0]["date"] == "2024-03-12"
    assert rows[0]["account"] == "Visa Card"
    assert rows[0]["merchant"] == ""
    assert rows[0]["description"] == "Fuel"
    assert rows[0]["amount"] == Decimal("-32.10")
    assert rows[0]["currency_code"] == "USD"

    budget_service.categorize_transaction(rows[0]["transaction_id"], "Transport")
    assert summary_service.uncategorized_transactions("2024-03")["transactions"] == []


def test_uncategorized_limit_and_order(import_service, summary_service):
    """Newest transactions come first and the limit applies."""
    text = "Date,Account,Amount\n" + "".join(
        f"2024-03-{day:02d},Checking,-{day}\n" for day in range(1, 8)
    )
    import_service.commit_csv_import(
        csv_text=text, mapping={"date": "Date", "account": "Account", "amount": "Amount"}
    )

    rows = summary_service.uncategorized_transactions("2024-03", limit=3)["transactions"]
    assert [row["date"] for row in rows] == ["2024-03-07", "2024-03-06", "2024-03-05"]


def test_list_transactions(imported_sample, summary_service):
    """Transactions are listed newest first with their envelope."""
    rows = summary_service.list_transactions("2024-03")["transactions"]

    assert [row["date"] for row in rows] == [
        "2024-03-12",
        "2024-03-09",
        "2024-03-05",
        "2024-03-02",
        "2024-03-01",
    ]
    by_description = {row["description"]: row for row in rows}
    assert by_description["Weekly shop"]["category_name"] == "Groceries"
    assert by_description["Weekly shop"]["merchant"] == "FreshMart"
    assert by_description["Weekly shop"]["amount"] == Decimal("-54.20")
    assert by_description["Weekly shop"]["currency_code"] == "USD"
    assert by_description["Fuel"]["category_name"] == ""
    assert by_description["Fuel"]["category_id"] is None


def test_list_transactions_month_filter(imported_sample, import_service, summary_service):
    """Only the requested month is listed; the default is the current month."""
    import_service.commit_csv_import(
        csv_text="Date,Account,Amount\n2024-02-10,Checking,-5\n",
        mapping={"date": "Date", "account": "Account", "amount": "Amount"},
    )

    february = summary_service.list_transactions("2024-02")
    assert february["month"] == "2024-02"
    assert [row["date"] for row in february["transactions"]] == ["2024-02-10"]
    assert len(summary_service.list_transactions()["transactions"]) == 5


def test_list_transactions_query(imported_sample, summary_service):
    """The query matches account, merchant or description, ignoring case."""

    def descriptions(query):
        rows = summary_service.list_transactions("2024-03", query=query)["transactions"]
        return sorted(row["description"] for row in rows)

    assert descriptions("  FRESH ") == ["Weekly shop"]
    assert descriptions("visa") == ["Fuel", "Pizza, large"]
    assert descriptions("rent") == ["Rent"]
    assert descriptions("") == sorted(
        ["March salary", "Weekly shop", "Rent", "Pizza, large", "Fuel"]
    )
    assert descriptions("nothing like this") == []


def test_list_transactions_uncategorized_and_limit(imported_sample, summary_service):
    """Uncategorized-only listing and the row limit."""
    rows = summary_service.list_transactions("2024-03", only_uncategorized=True)
    assert [row["description"] for row in rows["transactions"]] == ["Fuel"]

    rows = summary_service.list_transactions("2024-03", limit=2)["transactions"]
    assert [row["date"] for row in rows] == ["2024-03-12", "2024-03-09"]


def test_list_transactions_invalid_month(summary_service):
    """Malformed months raise ValidationError."""
    with pytest.raises(ValidationError):
        summary_service.list_transactions("March")


def test_spending_by_category(imported_sample, summary_service):
    """Expense splits are totalled per category, highest first."""
    rows = summary_service.spending_by_category("2024-03")["rows"]

    assert [(row["category_name"], row["total"]) for row in rows] == [
        ("Housing", Decimal("1200.00")),
        ("Groceries", Decimal("54.20")),
        ("Eating Out", Decimal("18.75")),
    ]


def test_spending_by_category_top_n(imported_sample, summary_service):
    """Only the top categories are returned."""
    rows = summary_service.spending_by_category("2024-03", top_n=1)["rows"]
    assert [row["category_name"] for row in rows] == ["Housing"]


def test_spending_trend(imported_sample, summary_service):
    """Daily totals in ascending day order."""
    rows = summary_service.spending_trend("2024-03")["rows"]

    assert [row["day"] for row in rows] == [
        "2024-03-01",
        "2024-03-02",
        "2024-03-05",
        "2024-03-09",
        "2024-03-12",
    ]
    assert rows[0]["income"] == Decimal("2500.00")
    assert rows[0]["expense"] == 0
    assert rows[2]["expense"] == Decimal("1200.00")


def test_list_available_months(import_service, summary_service):
    """Months span the earliest to the latest transaction."""
    assert summary_service.list_available_months() == []

    text = "Date,Account,Amount\n2023-11-30,Checking,-1\n2024-02-01,Checking,-2\n"
    import_service.commit_csv_import(
        csv_text=text, mapping={"date": "Date", "account": "Account", "amount": "Amount"}
    )

    assert summary_service.list_available_months() == [
        "2023-11",
        "2023-12",
        "2024-01",
        "2024-02",
    ]
